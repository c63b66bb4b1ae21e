"""Persistence services and exceptions."""

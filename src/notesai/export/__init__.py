"""Document export formats."""

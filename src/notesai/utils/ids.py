"""Identifier generation for blocks and documents."""

import uuid


def generate_block_id() -> str:
    """
    Generate a random identifier for a new block.

    Block ids are opaque to the engine; UUID v4 keeps them unique across
    documents so blocks can be copied between documents without clashes.

    Returns:
        UUID string in standard format

    Example:
        >>> generate_block_id()
        "f47ac10b-58cc-4372-a567-0e02b2c3d479"
    """
    return str(uuid.uuid4())


def generate_document_id() -> str:
    """Generate a random identifier for a new document."""
    return str(uuid.uuid4())

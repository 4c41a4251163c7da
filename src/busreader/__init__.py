"""Bus route number reader: detection fusion and announcement consensus."""

__version__ = "0.1.0"

"""Remote log store client operations."""

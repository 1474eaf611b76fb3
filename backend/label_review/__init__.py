"""Label review comparison and adjudication service."""

__version__ = "1.0.0"

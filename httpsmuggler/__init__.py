"""HTTP request smuggling detector."""

__version__ = "1.0.0"

"""catgen: reconcile discovered schemas and APIs into a file-based catalog."""

__version__ = "0.1.0"

"""IP Registry Tools - operator tasks for the IP asset registry protocol."""

__version__ = "0.1.0"

"""Member portal retention and compliance backend."""

__version__ = "0.1.0"

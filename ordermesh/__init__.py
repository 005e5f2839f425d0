"""Order, stock and payment services built from command and query handlers."""

__version__ = "0.1.0"
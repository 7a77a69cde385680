"""UniFind: campus lost-and-found item and claim workflow."""

__version__ = "1.0.0"

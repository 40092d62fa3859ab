"""Terminal movie explorer: top rated list, title search and a detail overlay."""

__version__ = "0.1.0"

"""Task inbox: free-text requests to Notion tasks with fuzzy directory matching."""

__version__ = "0.1.0"

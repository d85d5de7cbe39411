"""Approximate entity resolution for article imports and receipt review"""

__version__ = "0.1.0"

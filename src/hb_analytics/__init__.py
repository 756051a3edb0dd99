"""Header bidding analytics reporter."""

__version__ = "1.0.0"

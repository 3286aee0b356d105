"""Admin service for a product catalog backed by a hosted data store."""

__version__ = "0.1.0"

"""Database models and connection handling."""

"""Activity definitions, persistence and data sources."""

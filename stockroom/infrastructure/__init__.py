"""Infrastructure layer - SQLite persistence and change notifications."""

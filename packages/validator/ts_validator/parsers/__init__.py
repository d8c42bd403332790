"""Source parsing."""

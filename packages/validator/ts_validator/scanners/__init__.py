"""Source file discovery."""

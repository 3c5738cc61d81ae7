"""In-game menu layer: forms, command templates and usage tracking."""

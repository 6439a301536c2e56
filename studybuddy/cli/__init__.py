"""Command-line interface for Study Buddy."""

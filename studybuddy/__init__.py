"""Study Buddy: notes, AI summaries and summary-derived study aids."""

__version__ = "1.0.0"

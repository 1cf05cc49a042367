"""Real-time draw coordination for event lucky draws."""

__version__ = "0.1.0"

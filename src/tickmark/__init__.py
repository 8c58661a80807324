"""tickmark — task-status transaction pipeline for Markdown checklists."""

__version__ = "0.1.0"

"""Workflow frameworks, rate limiting, models, and recall and knowledge-graph handlers."""

__version__ = "2.0.0"
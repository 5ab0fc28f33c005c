"""Conversation practice feedback: scoring, progress and badges."""

__version__ = "0.1.0"

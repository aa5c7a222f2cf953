"""Kindred: a social networking API with AI-assisted content moderation."""

__version__ = "0.1.0"

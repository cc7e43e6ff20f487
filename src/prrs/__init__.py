"""Prompt-based Recursive Repo Summarizer."""

__version__ = "0.1.0"

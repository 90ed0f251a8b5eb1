"""Core library for CinePrompt."""

"""CinePrompt command-line interface."""

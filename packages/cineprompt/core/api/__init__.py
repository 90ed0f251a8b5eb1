"""Network clients for CinePrompt."""

"""CinePrompt: video prompt generation with the Gemini API."""

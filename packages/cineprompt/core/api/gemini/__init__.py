from cineprompt.core.api.gemini.client import DEFAULT_BASE_URL, GeminiClient, gemini_error_message

__all__ = ["DEFAULT_BASE_URL", "GeminiClient", "gemini_error_message"]

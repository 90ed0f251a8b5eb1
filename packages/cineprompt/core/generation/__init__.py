from cineprompt.core.generation.service import (
    MISSING_API_KEY_MESSAGE,
    MISSING_CONCEPT_MESSAGE,
    SUPERSEDED_MESSAGE,
    GenerationSession,
    PromptGenerationService,
)

__all__ = [
    "GenerationSession",
    "MISSING_API_KEY_MESSAGE",
    "MISSING_CONCEPT_MESSAGE",
    "PromptGenerationService",
    "SUPERSEDED_MESSAGE",
]

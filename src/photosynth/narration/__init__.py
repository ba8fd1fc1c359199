from .botanist import (
    BotanistNarrator,
    NarrationResult,
    build_prompt,
    MISSING_KEY_MESSAGE,
    UNAVAILABLE_MESSAGE,
    THINKING_MESSAGE,
)

__all__ = [
    "BotanistNarrator",
    "NarrationResult",
    "build_prompt",
    "MISSING_KEY_MESSAGE",
    "UNAVAILABLE_MESSAGE",
    "THINKING_MESSAGE",
]

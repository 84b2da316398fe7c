from .llm_gemini import GeminiClient
from .llm_openrouter import OpenRouterClient

__all__ = ["GeminiClient", "OpenRouterClient"]

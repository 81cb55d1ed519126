from .chains import EntityExtractor, ParagraphGenerator, QueryAnswerer, TextGenerator
from .ollama import LLMError, OllamaChatClient, OllamaConfig

__all__ = [
    "EntityExtractor",
    "ParagraphGenerator",
    "QueryAnswerer",
    "TextGenerator",
    "LLMError",
    "OllamaChatClient",
    "OllamaConfig",
]

"""Provider identifiers understood by the context layer."""

from enum import Enum


class Provider(str, Enum):
    """LLM providers whose payload conventions affect context handling."""

    ANTHROPIC = "anthropic"
    BEDROCK = "bedrock"
    OPENAI = "openai"
    AZURE = "azureopenai"
    GOOGLE = "google"
    VERTEXAI = "vertexai"
    MISTRALAI = "mistralai"
    DEEPSEEK = "deepseek"
    OPENROUTER = "openrouter"
    XAI = "xai"


def cache_dialect_for(provider) -> str:
    """Prompt-cache marker dialect (``bedrock`` or ``anthropic``) for a provider."""
    if Provider(provider) == Provider.BEDROCK:
        return "bedrock"
    return "anthropic"

"""Services for external integrations."""

from studyhub.services.content_generator import (
    AnthropicContentGenerator,
    ContentGenerator,
    DemoContentGenerator,
    GenerationError,
    get_content_generator,
)

__all__ = [
    "AnthropicContentGenerator",
    "ContentGenerator",
    "DemoContentGenerator",
    "GenerationError",
    "get_content_generator",
]

"""API routes package."""

from studyhub.api.routes import (
    ai,
    auth,
    channels,
    messages,
    progress,
    workspaces,
)

__all__ = [
    "ai",
    "auth",
    "channels",
    "messages",
    "progress",
    "workspaces",
]

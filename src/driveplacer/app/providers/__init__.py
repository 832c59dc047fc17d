"""
External Provider adapters.

- Completion: Anthropic (모델명은 설정만 SSOT)
- Storage: Google Drive v3
"""

from .anthropic import ClaudeProvider
from .base import ChatMessage, CompletionError, CompletionProvider, ProviderError
from .google_drive import DriveClient

__all__ = [
    "ChatMessage",
    "CompletionError",
    "CompletionProvider",
    "ProviderError",
    "ClaudeProvider",
    "DriveClient",
]

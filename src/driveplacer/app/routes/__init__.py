"""
FastAPI Routes.

auth(OAuth/세션) + folders + files(upload/move/search/latest) + chat
"""

from . import auth, chat, files, folders

__all__ = ["auth", "chat", "files", "folders"]

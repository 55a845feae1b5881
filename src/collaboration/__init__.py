"""Task collaboration: comments, attachments and the activity feed."""

from .engine import CollaborationEngine, FileUpload
from .mentions import extract_mentions

__all__ = ["CollaborationEngine", "FileUpload", "extract_mentions"]

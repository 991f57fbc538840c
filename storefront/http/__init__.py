"""HTTP package: backend client facade and token storage."""
from .client import ApiClient, extract_error_message, path_segment
from .tokens import TokenStore, MemoryTokenStore, FileTokenStore

__all__ = [
    "ApiClient",
    "extract_error_message",
    "path_segment",
    "TokenStore",
    "MemoryTokenStore",
    "FileTokenStore",
]

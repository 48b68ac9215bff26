# Infrastructure Adapters Package
from .directory_client import DirectoryCache, DirectoryClient

__all__ = ["DirectoryClient", "DirectoryCache"]

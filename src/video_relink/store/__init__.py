from video_relink.store.http import HttpDocumentStore, HttpMediaLibrary
from video_relink.store.memory import InMemoryDocumentStore, InMemoryMediaLibrary

__all__ = [
    "HttpDocumentStore",
    "HttpMediaLibrary",
    "InMemoryDocumentStore",
    "InMemoryMediaLibrary",
]

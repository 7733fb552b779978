"""Exception hierarchy shared by the core and the store adapters."""


class VideoRelinkError(Exception):
    """Base class for all errors raised by video-relink."""


class ConfigurationError(VideoRelinkError):
    """Raised when store settings are missing or invalid."""


class StoreError(VideoRelinkError):
    """Raised when the content store or media library cannot serve a request."""


class StoreQueryError(StoreError):
    """Raised when a query against the content store or a media library fails."""


class StoreMutationError(StoreError):
    """Raised when a patch or link request is rejected or cannot be delivered."""

    def __init__(self, message: str, document_id: str | None = None) -> None:
        super().__init__(message)
        self.document_id = document_id

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Document = dict[str, Any]


class _StoreModel(BaseModel):
    """Base for models read from or written to the store (underscore-prefixed system fields)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_store(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Reference(_StoreModel):
    type: str = Field(default="reference", alias="_type")
    ref: str = Field(alias="_ref")
    weak: bool | None = Field(default=None, alias="_weak")


class GlobalDocumentReference(_StoreModel):
    type: Literal["globalDocumentReference"] = Field(default="globalDocumentReference", alias="_type")
    ref: str = Field(alias="_ref")
    weak: bool = Field(default=True, alias="_weak")


class VideoAsset(_StoreModel):
    """A legacy ``sanity.videoAsset`` record backed by a locally uploaded file."""

    id: str = Field(alias="_id")
    type: str = Field(default="sanity.videoAsset", alias="_type")
    rev: str | None = Field(default=None, alias="_rev")
    upload_id: str | None = Field(default=None, alias="uploadId")
    original_filename: str | None = Field(default=None, alias="originalFilename")
    size: int | None = None
    media: Reference | str | dict[str, Any] | None = Field(default=None, union_mode="left_to_right")

    @property
    def media_token(self) -> str | None:
        """The raw media library token, whatever shape the ``media`` field was stored in."""
        if isinstance(self.media, Reference):
            return self.media.ref
        if isinstance(self.media, dict):
            ref = self.media.get("_ref")
            return ref if isinstance(ref, str) else None
        return self.media


class ContainerRef(_StoreModel):
    id: str = Field(alias="_id")
    type: str = Field(default="sanity.asset", alias="_type")


class MediaLibraryAsset(_StoreModel):
    id: str = Field(alias="_id")
    container: ContainerRef | None = None
    current_version: Reference | None = Field(default=None, alias="currentVersion")


class LegacyVideoPost(_StoreModel):
    """A published post still carrying the pre-media-library ``OldVideo`` field."""

    id: str = Field(alias="_id")
    title: str | None = None
    filename: str | None = None


class MediaLibraryLink(_StoreModel):
    """Dataset link document created for a media library asset."""

    id: str = Field(alias="_id")
    media: Reference

"""Pydantic schemas for video retention tracking.

This module defines the video retention records and results:
- VideoRecord: One tracked video file, persisted in the metadata file
- VideoDownloadResult: Outcome of recording a download
- VideoRetentionInfo: Computed retention status for a document
- VideoCleanupResult: Counts from one cleanup sweep

Field aliases are camelCase because the metadata file and the portal front
end both use camelCase keys.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class RequiredDownloaderType(str, Enum):
    """Role that must download a video before its retention countdown starts."""
    ADMIN = "admin"
    USER = "user"

    @classmethod
    def opposite_of(cls, uploaded_by_admin: bool) -> "RequiredDownloaderType":
        """Required downloader for an upload: the role opposite the uploader's."""
        return cls.USER if uploaded_by_admin else cls.ADMIN

    def matches(self, is_admin: bool) -> bool:
        """Whether an actor with the given role satisfies this requirement."""
        return (self is RequiredDownloaderType.ADMIN and is_admin) or (
            self is RequiredDownloaderType.USER and not is_admin
        )


class VideoRetentionStatus(str, Enum):
    """Retention status values reported for a document.

    State flow: AWAITING_DOWNLOAD -> RETENTION_COUNTDOWN -> (record deleted)
    """
    AWAITING_DOWNLOAD = "awaiting_download"
    RETENTION_COUNTDOWN = "retention_countdown"
    NOT_TRACKED = "not_tracked"


class VideoRecord(BaseModel):
    """A video file tracked for timed deletion.

    Invariant: downloaded_at is set if and only if downloaded_by_required_party
    is True. Once set, neither is ever reset.
    """

    file_path: str = Field(alias="filePath", description="Path of the video file on disk")
    file_name: str = Field(alias="fileName", description="Original uploaded filename")
    uploaded_at: datetime = Field(alias="uploadedAt", description="Upload timestamp (UTC)")
    uploaded_by_user_id: str = Field(alias="uploadedByUserId")
    uploaded_by_admin: bool = Field(alias="uploadedByAdmin")
    document_id: int = Field(alias="documentId", description="Owning document record id")
    organisation_id: Optional[int] = Field(default=None, alias="organisationId")
    case_id: Optional[int] = Field(default=None, alias="caseId")
    downloaded_by_required_party: bool = Field(default=False, alias="downloadedByRequiredParty")
    downloaded_at: Optional[datetime] = Field(default=None, alias="downloadedAt")
    required_downloader_type: RequiredDownloaderType = Field(alias="requiredDownloaderType")

    class Config:
        populate_by_name = True

    @field_validator("uploaded_at", "downloaded_at")
    @classmethod
    def ensure_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Treat naive timestamps as UTC so expiry arithmetic stays comparable."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @model_validator(mode="after")
    def check_download_fields(self) -> "VideoRecord":
        """Ensure the download flag and timestamp are set together."""
        if self.downloaded_by_required_party != (self.downloaded_at is not None):
            raise ValueError(
                "downloadedAt must be set if and only if downloadedByRequiredParty is true"
            )
        return self


class VideoDownloadResult(BaseModel):
    """Outcome of recording a video download."""

    was_required_download: bool = Field(default=False, alias="wasRequiredDownload")
    retention_started: bool = Field(default=False, alias="retentionStarted")

    class Config:
        populate_by_name = True


class VideoRetentionInfo(BaseModel):
    """Retention status of a document, computed against the current time."""

    is_tracked: bool = Field(alias="isTracked")
    days_remaining: Optional[int] = Field(
        default=None,
        ge=0,
        alias="daysRemaining",
        description="Whole days until deletion, rounded up; None when not tracked"
    )
    status: VideoRetentionStatus
    required_downloader_type: Optional[RequiredDownloaderType] = Field(
        default=None,
        alias="requiredDownloaderType"
    )

    class Config:
        populate_by_name = True


class VideoCleanupResult(BaseModel):
    """Counts from one cleanup sweep."""

    deleted: int = Field(default=0, ge=0, description="Videos deleted successfully")
    errors: int = Field(default=0, ge=0, description="Videos that failed and stay tracked")

    @property
    def has_errors(self) -> bool:
        """Whether any video failed to clean up."""
        return self.errors > 0

"""Document API request/response schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ..retention.schemas import VideoRetentionInfo


class DocumentResponse(BaseModel):
    """Response for a single document"""
    id: int = Field(..., description="Document id")
    case_id: int = Field(..., description="Owning case id")
    organisation_id: int = Field(..., description="Owning organisation id")
    file_name: str = Field(..., description="Original filename")
    file_size: Optional[int] = Field(None, description="File size in bytes")
    file_type: Optional[str] = Field(None, description="MIME type reported by the client")
    uploaded_by: Optional[str] = Field(None, description="Uploader user id")
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UploadResponse(BaseModel):
    """Response for the upload endpoint"""
    document: DocumentResponse
    is_video: bool = Field(..., description="Whether the upload is tracked for video retention")
    retention: Optional[VideoRetentionInfo] = Field(
        None,
        description="Retention status for video uploads"
    )

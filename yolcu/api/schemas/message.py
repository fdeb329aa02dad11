"""Message API request/response schemas."""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class AttachmentIn(BaseModel):
    """A file already uploaded to object storage."""

    file_path: str = Field(..., min_length=1, description="Storage path of the file")
    file_name: str = Field(..., min_length=1)
    file_type: Optional[str] = Field(None, description="MIME type")
    file_size: Optional[int] = Field(None, ge=0, description="Size in bytes")


class SendMessageRequest(BaseModel):
    """Request model for sending a message."""

    content: str = Field("", max_length=4000, description="Message text")
    attachment: Optional[AttachmentIn] = None

    @model_validator(mode="after")
    def validate_content_or_attachment(self):
        """A message needs text, a file, or both."""
        if not self.content.strip() and self.attachment is None:
            raise ValueError("Message content cannot be empty without an attachment")
        return self


class MessageResponse(BaseModel):
    """Message information."""

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    room_id: uuid.UUID
    user_id: uuid.UUID
    content: str
    created_at: datetime
    file_path: Optional[str] = None
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = None


class MessageHistoryResponse(BaseModel):
    """A page of room history in ascending order."""

    messages: List[MessageResponse]
    has_more: bool = Field(..., description="Whether the page was filled to the limit")

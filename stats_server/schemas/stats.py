from typing import Any, Dict, Optional
from pydantic import BaseModel, Field


class SubmissionRequest(BaseModel):
    unique_id: str = Field(..., min_length=1, max_length=40)
    php_version: str = Field(..., min_length=1, max_length=15)
    cms_version: str = Field(..., min_length=1, max_length=15)
    db_type: Optional[str] = Field(None, max_length=50)
    db_version: Optional[str] = Field(None, max_length=50)
    server_os: Optional[str] = Field(None, max_length=255)


class MessageData(BaseModel):
    message: str


class SubmissionResponse(BaseModel):
    data: MessageData


class StatsResponse(BaseModel):
    data: Dict[str, Any]

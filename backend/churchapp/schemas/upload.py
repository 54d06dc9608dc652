"""Upload response body."""

from pydantic import BaseModel, Field


class UploadResponse(BaseModel):
    url: str = Field(description="Relative URL of the stored file, e.g. /uploads/avatars/<name>")

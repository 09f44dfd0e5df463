from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from src.app.models.enums import HttpMethod


class TrackEventRequest(BaseModel):
    """A page view reported by the frontend router."""

    path: str = Field(min_length=1, max_length=500)
    session_id: str = Field(min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_-]+$")
    method: HttpMethod = HttpMethod.GET
    referer: str | None = Field(None, max_length=500)
    user_agent: str | None = Field(None, max_length=500)
    occurred_at: datetime | None = None

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith("/"):
            raise ValueError("Path must start with '/'")
        return v


class TrackEventResponse(BaseModel):
    success: bool = True
    message: str = "Analytics event tracked"

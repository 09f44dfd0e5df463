from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from src.app.models.enums import ContactStatus


class ContactCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    subject: str = Field(min_length=3, max_length=200)
    message: str = Field(min_length=10, max_length=2000)


class ContactRead(BaseModel):
    id: UUID
    name: str
    email: EmailStr
    subject: str
    message: str
    status: ContactStatus
    email_sent: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ContactSubmitResponse(BaseModel):
    id: UUID
    message: str = "Thank you for your message. We'll get back to you soon."


class ContactStatusUpdate(BaseModel):
    status: ContactStatus

"""
Pydantic models for messages left through the public contact form.
"""

from typing import List, Optional

from pydantic import Field

from .base import CamelModel


class ContactCreate(CamelModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: Optional[str] = None
    subject: Optional[str] = None
    event_date: Optional[str] = None
    message: str = Field(..., min_length=1)


class ContactUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    email: Optional[str] = Field(default=None, min_length=3)
    phone: Optional[str] = None
    subject: Optional[str] = None
    event_date: Optional[str] = None
    message: Optional[str] = Field(default=None, min_length=1)
    read: Optional[bool] = None


class ContactPatch(CamelModel):
    """Body of ``PATCH /contact``: the message id and the fields to change."""

    id: str
    updates: ContactUpdate


class ContactRead(ContactCreate):
    id: str
    read: bool = False
    created_at: str


class ContactEnvelope(CamelModel):
    message: ContactRead


class ContactList(CamelModel):
    messages: List[ContactRead]

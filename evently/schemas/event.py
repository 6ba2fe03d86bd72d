from pydantic import BaseModel, Field, field_validator
from typing import List, Optional


def _unique_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    if tags is None:
        return None
    seen = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class EventBase(BaseModel):
    title: str
    description: str
    date: str
    time: str
    location: str
    maxAttendees: int = Field(ge=0)
    price: float = Field(ge=0)
    image: str
    category: str
    organizer: str
    tags: List[str] = []

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, value):
        return _unique_tags(value)


class EventCreate(EventBase):
    pass


class EventUpdate(BaseModel):
    """Partial update; currentAttendees is owned by the registration flow"""

    title: Optional[str] = None
    description: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None
    maxAttendees: Optional[int] = Field(default=None, ge=0)
    price: Optional[float] = Field(default=None, ge=0)
    image: Optional[str] = None
    category: Optional[str] = None
    organizer: Optional[str] = None
    tags: Optional[List[str]] = None

    @field_validator("tags")
    @classmethod
    def dedupe_tags(cls, value):
        return _unique_tags(value)


class EventOut(EventBase):
    id: str
    currentAttendees: int = 0
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None

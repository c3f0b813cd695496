from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import datetime


class BackendModel(BaseModel):
    """Records exchanged with the microservices use camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# Schemas for the Users Service

class Member(BackendModel):
    uid: str
    is_active: bool = True
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    login: Optional[str] = None
    email: Optional[str] = None
    title: Optional[str] = None
    avatar_url: Optional[str] = None

    @property
    def display_name(self) -> str:
        name = " ".join(part for part in (self.first_name, self.last_name) if part)
        return name or self.login or self.uid


# Schemas shared by announcements and events

class PosterRef(BackendModel):
    uid: str
    url: Optional[str] = None


class Announcement(BackendModel):
    uid: str
    title: str = ""
    details: str = ""
    poster: Optional[PosterRef] = None
    is_published: bool = False


class Event(BackendModel):
    uid: str
    name: str = ""
    date: Optional[datetime] = None
    meeting_name: str = ""
    meeting_time: Optional[datetime] = None
    meeting_location: str = ""
    details: str = ""
    is_major: bool = False
    poster: Optional[PosterRef] = None
    is_open: bool = False


# Request bodies

class SearchFilters(BackendModel):
    search: str = ""


class SearchRequest(BackendModel):
    filters: SearchFilters = Field(default_factory=SearchFilters)
    limit: int = 100


class StatusUpdate(BackendModel):
    uids: List[str]

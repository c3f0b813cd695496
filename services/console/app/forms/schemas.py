import re
from datetime import datetime
from typing import Annotated, Any, Dict, Optional, Tuple, Type

from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, ValidationError, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from .poster import NoChange, PosterValue, coerce_poster

REQUIRED = "Required"

_TAG_RE = re.compile(r"<[^>]*>")


def _required(value: Any) -> Any:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise PydanticCustomError("required", REQUIRED)
    return value


def _required_rich_text(value: Any) -> Any:
    # The editor emits markup such as "<p><br></p>" for an empty document
    if value is None:
        raise PydanticCustomError("required", REQUIRED)
    text = _TAG_RE.sub("", str(value)).replace("&nbsp;", " ")
    if not text.strip():
        raise PydanticCustomError("required", REQUIRED)
    return value


def _required_datetime(value: Any) -> Any:
    value = _required(value)
    if isinstance(value, str):
        # date inputs post "YYYY-MM-DD", datetime-local inputs "YYYY-MM-DDTHH:MM"
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return value
    return value


RequiredText = Annotated[str, BeforeValidator(_required)]
RichText = Annotated[str, BeforeValidator(_required_rich_text)]
RequiredDateTime = Annotated[datetime, BeforeValidator(_required_datetime)]


class DrawerForm(BaseModel):
    """Base for the values a drawer submits to a microservice."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json", exclude={"poster"})


class PosterForm(DrawerForm):
    poster: PosterValue = NoChange()

    @field_validator("poster", mode="before")
    @classmethod
    def check_poster(cls, value: Any) -> Any:
        return coerce_poster(value)


class AnnouncementForm(PosterForm):
    title: RequiredText
    details: RichText
    is_published: Optional[bool] = False


class EventForm(PosterForm):
    name: RequiredText
    date: RequiredDateTime
    meeting_name: RequiredText
    meeting_time: RequiredDateTime
    meeting_location: RequiredText
    details: RichText
    is_major: Optional[bool] = False
    is_open: Optional[bool] = False


class MemberForm(DrawerForm):
    first_name: RequiredText
    last_name: RequiredText
    login: RequiredText
    email: Annotated[EmailStr, BeforeValidator(_required)]
    title: Optional[str] = None


def validate_form(form_cls: Type[DrawerForm], values: Dict[str, Any]) -> Tuple[Optional[DrawerForm], Dict[str, str]]:
    """
    Validate working values against a form schema.

    Returns the parsed form and an empty error map, or ``None`` and one
    message per offending field.
    """
    try:
        return form_cls.model_validate(values), {}
    except ValidationError as e:
        # error locations carry the camelCase alias
        names = {info.alias or name: name for name, info in form_cls.model_fields.items()}
        errors: Dict[str, str] = {}
        for err in e.errors():
            if not err["loc"]:
                continue
            field = names.get(str(err["loc"][0]), str(err["loc"][0]))
            if field in errors:
                continue
            errors[field] = REQUIRED if err["type"] == "missing" else err["msg"]
        return None, errors

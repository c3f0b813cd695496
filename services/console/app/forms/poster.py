import base64
from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic_core import PydanticCustomError


class NoChange(BaseModel):
    """No poster selected, or the existing one left untouched."""

    kind: Literal["no_change"] = "no_change"

    model_config = ConfigDict(frozen=True)


class ExistingReference(BaseModel):
    """A poster already stored by the backend, referenced by its uid."""

    kind: Literal["existing"] = "existing"
    uid: str

    model_config = ConfigDict(frozen=True)


class NewFile(BaseModel):
    """A file picked in the drawer that has not been uploaded yet."""

    kind: Literal["new_file"] = "new_file"
    filename: str = "poster"
    content_type: str = "application/octet-stream"
    content: bytes = b""

    model_config = ConfigDict(frozen=True)

    @property
    def is_image(self) -> bool:
        return self.content_type.startswith("image/")


PosterValue = Annotated[
    Union[NoChange, ExistingReference, NewFile],
    Field(discriminator="kind"),
]


def coerce_poster(value: Any) -> Union[NoChange, ExistingReference, NewFile]:
    """
    Map a raw poster value onto the poster variants.

    Empty or missing values mean "no change", strings are references to a
    stored poster, and objects (mappings, uploaded files) are new files.
    Anything else is rejected.
    """
    if isinstance(value, (NoChange, ExistingReference, NewFile)):
        return value
    if value is None or value == "":
        return NoChange()
    if isinstance(value, str):
        return ExistingReference(uid=value)
    if isinstance(value, Mapping):
        if "uid" in value and "content" not in value:
            return ExistingReference(uid=str(value["uid"]))
        return NewFile(**{k: value[k] for k in ("filename", "content_type", "content") if k in value})
    if hasattr(value, "filename") and hasattr(value, "file"):
        # starlette's UploadFile; its spooled file can be read synchronously
        value.file.seek(0)
        return NewFile(
            filename=value.filename or "poster",
            content_type=value.content_type or "application/octet-stream",
            content=value.file.read(),
        )
    raise PydanticCustomError("poster", "Invalid poster")


def preview_url(poster: Union[NoChange, ExistingReference, NewFile]) -> str:
    """Local preview for a freshly selected image; empty for anything else."""
    if not isinstance(poster, NewFile) or not poster.is_image:
        return ""
    encoded = base64.b64encode(poster.content).decode("ascii")
    return f"data:{poster.content_type};base64,{encoded}"


def poster_reference(poster: Any) -> str:
    """Reduce a backend poster record ({uid, url}) to just its uid."""
    if poster is None:
        return ""
    if isinstance(poster, Mapping):
        return str(poster.get("uid") or "")
    return str(getattr(poster, "uid", poster) or "")

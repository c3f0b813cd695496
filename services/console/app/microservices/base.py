import json
from typing import Any, Dict, Union

from ..forms.poster import ExistingReference, NewFile, NoChange, coerce_poster
from ..schemas import SearchFilters, SearchRequest


def search_body(filters: Union[SearchFilters, Dict[str, Any], None], limit: int) -> Dict[str, Any]:
    if filters is None:
        filters = SearchFilters()
    elif isinstance(filters, dict):
        # accept both {"search": ...} and the page's {"filters": {"search": ...}} shape
        filters = SearchFilters.model_validate(filters.get("filters", filters))
    return SearchRequest(filters=filters, limit=limit).model_dump(by_alias=True)


def write_body(values: Dict[str, Any]) -> Dict[str, Any]:
    """
    Request keyword arguments for a create/update call.

    Values travel as JSON unless the poster is a freshly selected file, in
    which case the values go in a ``payload`` form field next to the file part.
    """
    values = dict(values)
    poster = coerce_poster(values.pop("poster", None))
    if isinstance(poster, NewFile):
        return {
            "data": {"payload": json.dumps(values, default=str)},
            "files": {"poster": (poster.filename, poster.content, poster.content_type)},
        }
    if isinstance(poster, ExistingReference):
        values["poster"] = poster.uid
    elif isinstance(poster, NoChange):
        values.pop("poster", None)
    return {"json": values}

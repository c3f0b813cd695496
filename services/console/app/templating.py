from datetime import datetime
from pathlib import Path

from fastapi.templating import Jinja2Templates

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))


def input_datetime(value) -> str:
    """Format a value for an ``<input type="datetime-local">``."""
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%dT%H:%M")
    return value or ""


def input_date(value) -> str:
    if isinstance(value, datetime):
        return value.strftime("%Y-%m-%d")
    return (value or "")[:10]


templates.env.filters["input_datetime"] = input_datetime
templates.env.filters["input_date"] = input_date

import logging
from enum import Enum
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel

from ..forms.poster import NewFile, poster_reference, preview_url
from ..forms.schemas import DrawerForm, validate_form
from ..forms.state import FormState
from ..query.client import QueryClient
from ..utils.http_client import MicroserviceClient, MicroserviceError

logger = logging.getLogger(__name__)


class DrawerStatus(str, Enum):
    CLOSED = "closed"
    LOADING = "loading"
    READY = "ready"
    SUBMITTING = "submitting"


class DrawerStateError(RuntimeError):
    """An operation was attempted in a drawer state that does not allow it."""


class EntityDrawer:
    """
    Slide-out form for creating or editing one record.

    Lifecycle: closed -> open(create|edit) -> [loading if edit] -> ready ->
    submitting -> closed. Working values live only in ``state`` and are reset
    whenever the drawer closes.
    """

    entity: str = ""
    path: str = ""
    label: str = ""
    form_cls: Type[DrawerForm] = DrawerForm
    record_cls: Type[BaseModel] = BaseModel
    has_poster: bool = False

    def __init__(self, client: MicroserviceClient, query_client: QueryClient, token: str):
        self.client = client
        self.query_client = query_client
        self.token = token
        self.status = DrawerStatus.CLOSED
        self.uid = ""
        self.is_edit_mode = False
        self.preview = ""
        self.load_error: Optional[str] = None
        self.state = FormState.initial(self.defaults())
        # bumped on every open/close so late fetch results can't leak into a new session
        self._generation = 0

    # Hooks for each entity

    def defaults(self) -> Dict[str, Any]:
        raise NotImplementedError

    async def fetch(self, uid: str) -> Dict[str, Any]:
        raise NotImplementedError

    async def create(self, values: Dict[str, Any]) -> Any:
        raise NotImplementedError

    async def update(self, uid: str, values: Dict[str, Any]) -> Any:
        raise NotImplementedError

    # Keys in the shared query cache

    @property
    def list_namespace(self) -> str:
        return f"{self.entity}:search"

    def detail_key(self, uid: str) -> tuple:
        return (f"{self.entity}:{uid}",)

    @property
    def is_open(self) -> bool:
        return self.status != DrawerStatus.CLOSED

    @property
    def title(self) -> str:
        return f"{'Edit' if self.is_edit_mode else 'Add'} {self.label}"

    def _require(self, *allowed: DrawerStatus) -> None:
        if self.status not in allowed:
            raise DrawerStateError(f"{self.label} drawer is {self.status.value}")

    def open(self, uid: str = "", is_edit_mode: bool = False) -> None:
        self._require(DrawerStatus.CLOSED)
        if is_edit_mode and not uid:
            raise ValueError("Editing requires a uid")
        self._generation += 1
        self.uid = uid if is_edit_mode else ""
        self.is_edit_mode = bool(is_edit_mode)
        self.preview = ""
        self.load_error = None
        self.state = FormState.initial(self.defaults())
        self.status = DrawerStatus.LOADING if self.is_edit_mode else DrawerStatus.READY
        logger.debug(f"Opened {self.entity} drawer ({'edit ' + uid if self.is_edit_mode else 'create'})")

    async def load(self) -> None:
        """Fetch the record being edited and seed the form from it."""
        self._require(DrawerStatus.LOADING)
        generation = self._generation
        key = self.detail_key(self.uid)
        uid = self.uid
        try:
            response = await self.query_client.fetch_query(key, lambda: self.fetch(uid), force=True)
            # another fetch of the record may have started meanwhile; seed from the last one
            while self.query_client.get_query_state(key).is_fetching:
                if generation != self._generation:
                    break
                response = await self.query_client.wait_for_query(key)
        except MicroserviceError as e:
            if generation == self._generation:
                self.load_error = e.message
            raise

        if generation != self._generation:
            logger.debug(f"Dropped {self.entity}:{uid} result for a closed drawer")
            return

        self.state = FormState.initial({**self.defaults(), **self.seed(response)})
        self.status = DrawerStatus.READY

    async def start(self, uid: str = "", is_edit_mode: bool = False) -> None:
        if self.is_open:
            self.close()
        self.open(uid, is_edit_mode)
        if self.is_edit_mode:
            await self.load()

    def seed(self, response: Any) -> Dict[str, Any]:
        """Working values from a ``{"data": record}`` response."""
        payload = response.get("data", response) if isinstance(response, dict) else response
        record = self.record_cls.model_validate(payload)
        fields = self.defaults().keys()
        values = {name: getattr(record, name) for name in fields if hasattr(record, name)}
        if self.has_poster:
            values["poster"] = poster_reference(getattr(record, "poster", None))
        return {k: v for k, v in values.items() if v is not None}

    def set_field(self, name: str, value: Any) -> FormState:
        self._require(DrawerStatus.READY)
        self.state = self.state.set_field(name, value)
        return self.state

    def select_poster(self, poster: NewFile) -> str:
        """Keep a picked file for submit and return its local preview URL."""
        self._require(DrawerStatus.READY)
        if not self.has_poster:
            raise DrawerStateError(f"{self.label} has no poster")
        self.state = self.state.set_field("poster", poster)
        self.preview = preview_url(poster)
        return self.preview

    async def submit(self, changes: Optional[Dict[str, Any]] = None) -> bool:
        """
        Validate and send the working values.

        Returns ``True`` once the backend accepted them and the drawer closed.
        Validation errors and backend failures leave the drawer open.
        """
        self._require(DrawerStatus.READY)
        if changes:
            self.state = self.state.set_fields(changes)

        form, errors = validate_form(self.form_cls, self.state.values)
        if errors:
            self.state = self.state.touch_all().with_errors(errors)
            return False

        values = form.to_payload()
        if self.has_poster:
            values["poster"] = form.poster

        self.status = DrawerStatus.SUBMITTING
        self.state = self.state.with_errors({}).with_submit_error(None)
        uid = self.uid
        try:
            if self.is_edit_mode:
                await self.query_client.mutate(self.update, uid, values, on_success=lambda _: self._invalidate(uid))
            else:
                await self.query_client.mutate(self.create, values, on_success=lambda _: self._invalidate())
        except MicroserviceError as e:
            logger.error(f"Saving {self.entity} {uid or '(new)'} failed: {e}")
            self.status = DrawerStatus.READY
            self.state = self.state.with_submit_error(f"Could not save: {e.message}")
            return False

        self.close()
        return True

    def _invalidate(self, uid: str = "") -> None:
        self.query_client.invalidate_queries(self.list_namespace)
        if uid:
            self.query_client.invalidate_queries(self.detail_key(uid)[0])

    def close(self) -> None:
        self._generation += 1
        self.status = DrawerStatus.CLOSED
        self.uid = ""
        self.is_edit_mode = False
        self.preview = ""
        self.load_error = None
        self.state = FormState.initial(self.defaults())

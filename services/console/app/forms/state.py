from typing import Any, Dict, FrozenSet, Optional

from pydantic import BaseModel, ConfigDict, Field


class UnknownFieldError(KeyError):
    """A transition named a field the form does not have."""


class FormState(BaseModel):
    """
    Immutable working state of a drawer form.

    Every change produces a new state; nothing mutates ``values`` in place.
    """

    values: Dict[str, Any] = Field(default_factory=dict)
    errors: Dict[str, str] = Field(default_factory=dict)
    touched: FrozenSet[str] = frozenset()
    submit_error: Optional[str] = None

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @classmethod
    def initial(cls, defaults: Dict[str, Any]) -> "FormState":
        return cls(values=dict(defaults))

    def set_field(self, name: str, value: Any) -> "FormState":
        if name not in self.values:
            raise UnknownFieldError(name)
        values = {**self.values, name: value}
        errors = {k: v for k, v in self.errors.items() if k != name}
        return self.model_copy(update={"values": values, "errors": errors, "touched": self.touched | {name}})

    def set_fields(self, changes: Dict[str, Any]) -> "FormState":
        state = self
        for name, value in changes.items():
            state = state.set_field(name, value)
        return state

    def touch(self, name: str) -> "FormState":
        if name not in self.values:
            raise UnknownFieldError(name)
        return self.model_copy(update={"touched": self.touched | {name}})

    def touch_all(self) -> "FormState":
        return self.model_copy(update={"touched": frozenset(self.values)})

    def with_errors(self, errors: Dict[str, str]) -> "FormState":
        return self.model_copy(update={"errors": dict(errors)})

    def with_submit_error(self, message: Optional[str]) -> "FormState":
        return self.model_copy(update={"submit_error": message})

    def error_for(self, name: str) -> str:
        """Inline message for a field, shown only once the field was touched."""
        if name in self.touched:
            return self.errors.get(name, "")
        return ""

    @property
    def is_valid(self) -> bool:
        return not self.errors

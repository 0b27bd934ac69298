from typing import TYPE_CHECKING, Any, Callable

from pydantic import BaseModel, ConfigDict, Field

from lazystore.domain.enums import Lifetime

if TYPE_CHECKING:
    from lazystore.domain.interfaces import IStore


class Binding(BaseModel):
    """Value object representing a name-to-factory registration.

    Attributes:
        name: The name the value is resolved by.
        factory: Function that receives the store and returns the value.
        lifetime: Whether the value is memoized (singleton) or rebuilt on every lookup.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., min_length=1, description="The name the binding is registered under.")
    factory: Callable[["IStore"], Any] = Field(
        ..., description="The factory function invoked with the resolving store."
    )
    lifetime: Lifetime = Field(default=Lifetime.SINGLETON, description="The lifetime of the bound value.")

    @property
    def is_transient(self) -> bool:
        return self.lifetime == Lifetime.TRANSIENT

    def with_factory(self, factory: Callable[["IStore"], Any]) -> "Binding":
        """Return a copy of this binding that builds its value with ``factory``."""
        return self.model_copy(update={"factory": factory})


class ResolvedValue(BaseModel):
    """Memo entry for an asynchronous singleton that settled successfully.

    Replaces the pending future so later lookups can hand out the value again
    without re-running the factory or awaiting the original computation.

    Attributes:
        value: The value the asynchronous factory produced.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    value: Any = Field(..., description="The settled value of the asynchronous factory.")

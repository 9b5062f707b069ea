"""Save handler contract and base class for save providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, TypeAlias, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Callable

JSONValue: TypeAlias = "dict[str, JSONValue] | list[JSONValue] | str | int | float | bool | None"
"""Opaque snapshot value. The save core never looks inside it."""


@runtime_checkable
class SaveHandler(Protocol):
    """Anything that can contribute a slice of the save file.

    get_snapshot() must be pure. apply_snapshot() receives the slice saved
    under the handler's name, or None when the save has no such slice (new
    subsystem, fresh game). It must tolerate missing, partial and extra fields
    and fall back to sane defaults instead of raising.
    """

    def get_snapshot(self) -> JSONValue:
        """Return the JSON-serializable state to save."""
        ...

    def apply_snapshot(self, snapshot: JSONValue | None) -> None:
        """Restore state from a previously saved snapshot (or None)."""
        ...


def is_save_handler(handler: object) -> bool:
    """Return True if handler exposes callable get_snapshot and apply_snapshot."""
    return callable(getattr(handler, "get_snapshot", None)) and callable(getattr(handler, "apply_snapshot", None))


class BaseSaveProvider(ABC):
    """Abstract base class for save providers.

    Save providers own one named slice of the save file. They are the
    class-based way to implement SaveHandler and can be listed in the
    INSTALLED_SAVES setting so SaveLoader registers them automatically.

    Class Attributes:
        name: Unique key of this provider's slice in the save data.

    Example:
        class PrestigeSaveProvider(BaseSaveProvider):
            name: ClassVar[str] = "prestige"

            def __init__(self) -> None:
                self.points = Decimal.zero()

            def get_snapshot(self) -> dict[str, Any]:
                return {"points": self.points.serialize()}

            def apply_snapshot(self, snapshot: dict[str, Any] | None) -> None:
                snapshot = snapshot or {}
                self.points = Decimal.deserialize(snapshot.get("points"))
    """

    name: ClassVar[str]

    @abstractmethod
    def get_snapshot(self) -> JSONValue:
        """Return the provider's state as a JSON-serializable value."""

    @abstractmethod
    def apply_snapshot(self, snapshot: JSONValue | None) -> None:
        """Restore the provider's state.

        Args:
            snapshot: Value previously returned by get_snapshot(), or None.
        """

    def reset(self) -> None:  # noqa: B027
        """Return to new-game defaults. Override if the provider keeps state."""


class CallbackSaveProvider:
    """Adapts a pair of plain callables to the SaveHandler contract.

    Example:
        service.register_subsystem(
            "statistics",
            CallbackSaveProvider(stats.to_dict, stats.from_dict),
        )
    """

    def __init__(
        self,
        get_snapshot: Callable[[], Any],
        apply_snapshot: Callable[[Any], None],
    ) -> None:
        """Initialize with the snapshot getter and applier."""
        self._get = get_snapshot
        self._apply = apply_snapshot

    def get_snapshot(self) -> JSONValue:
        """Call the wrapped getter."""
        return self._get()

    def apply_snapshot(self, snapshot: JSONValue | None) -> None:
        """Call the wrapped applier."""
        self._apply(snapshot)

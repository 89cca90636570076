from __future__ import annotations

from collections.abc import Callable, MutableMapping

UI_MODES = ("light", "dark")
DEFAULT_UI_MODE = "light"
STORAGE_KEY = "ui_mode"


def _valid(mode: str | None) -> str | None:
    value = (mode or "").strip().lower()
    return value if value in UI_MODES else None


class UiModeState:
    """Light/dark preference of the app chrome.

    The initial mode comes from ``storage`` when it holds a valid value, then
    from ``system_default`` and finally ``DEFAULT_UI_MODE``. Subscribers are
    called with the new mode after each change.
    """

    def __init__(
        self,
        storage: MutableMapping | None = None,
        system_default: str | None = None,
        storage_key: str = STORAGE_KEY,
    ):
        self._storage = storage if storage is not None else {}
        self._storage_key = storage_key
        self._subscribers: list[Callable[[str], None]] = []
        self._mode = (
            _valid(self._storage.get(storage_key))
            or _valid(system_default)
            or DEFAULT_UI_MODE
        )

    @property
    def mode(self) -> str:
        return self._mode

    def subscribe(self, callback: Callable[[str], None]) -> Callable[[], None]:
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def set(self, mode: str) -> str:
        value = _valid(mode)
        if value is None:
            raise ValueError(f"unknown UI mode: {mode}")
        self._storage[self._storage_key] = value
        if value != self._mode:
            self._mode = value
            for callback in list(self._subscribers):
                callback(value)
        return self._mode

    def toggle(self) -> str:
        return self.set("dark" if self._mode == "light" else "light")

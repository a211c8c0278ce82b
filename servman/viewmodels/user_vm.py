from __future__ import annotations

from typing import Callable, Optional


class UserVM:
    """User name display, edit field and update-button state."""

    def __init__(
        self,
        *,
        on_update_user: Optional[Callable[[str], None]] = None,
        on_change: Optional[Callable[["UserVM"], None]] = None,
    ) -> None:
        self.on_update_user = on_update_user
        self.on_change = on_change
        self.user_name: str = ""
        self.name_input: str = ""
        self.update_enabled: bool = True

    def set_user_name(self, name: str) -> None:
        self.user_name = name
        self._notify()

    def set_update_enabled(self, enabled: bool) -> None:
        self.update_enabled = bool(enabled)
        self._notify()

    def set_name_input(self, text: str) -> None:
        self.name_input = text

    def cmd_update_user(self) -> None:
        if not self.update_enabled:
            return
        if self.on_update_user:
            self.on_update_user(self.name_input)

    def _notify(self) -> None:
        if self.on_change:
            self.on_change(self)

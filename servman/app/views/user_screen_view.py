"""
UserScreenView
--------------
Tkinter frame for the server/user screen. Pure View: a server status line with
Update/Start/Stop buttons, the stored user name, and an entry plus button to
change it. No HTTP or storage here; every action goes out through the
constructor callbacks and state comes in through the public setters.
"""
from __future__ import annotations

import tkinter as tk
from tkinter import ttk
from typing import Callable, Optional


class UserScreenView(ttk.Frame):
    """Server controls and user-name editor."""

    OnVoid = Optional[Callable[[], None]]

    def __init__(
        self,
        parent: tk.Widget,
        *,
        on_refresh: OnVoid = None,
        on_start: OnVoid = None,
        on_stop: OnVoid = None,
        on_name_input: Optional[Callable[[str], None]] = None,
        on_update_user: OnVoid = None,
    ) -> None:
        super().__init__(parent)
        self._on_refresh = on_refresh
        self._on_start = on_start
        self._on_stop = on_stop
        self._on_name_input = on_name_input
        self._on_update_user = on_update_user

        self.columnconfigure(0, weight=1)
        self._build_server_box()
        self._build_user_box()

    # ------------------------------------------------------------------
    def _build_server_box(self) -> None:
        box = ttk.Labelframe(self, text="Server")
        box.grid(row=0, column=0, sticky="ew", padx=8, pady=(8, 4))
        box.columnconfigure(0, weight=1)

        self._status_var = tk.StringVar(value="")
        ttk.Label(box, textvariable=self._status_var, wraplength=420, justify="left").grid(
            row=0, column=0, columnspan=3, sticky="w", padx=6, pady=(6, 4)
        )

        buttons = ttk.Frame(box)
        buttons.grid(row=1, column=0, sticky="w", padx=6, pady=(0, 6))
        ttk.Button(buttons, text="Update", command=lambda: self._fire(self._on_refresh)).pack(side="left")
        ttk.Button(buttons, text="Start", command=lambda: self._fire(self._on_start)).pack(side="left", padx=(6, 0))
        ttk.Button(buttons, text="Stop", command=lambda: self._fire(self._on_stop)).pack(side="left", padx=(6, 0))

    def _build_user_box(self) -> None:
        box = ttk.Labelframe(self, text="User")
        box.grid(row=1, column=0, sticky="ew", padx=8, pady=(4, 8))
        box.columnconfigure(1, weight=1)

        self._user_var = tk.StringVar(value="")
        ttk.Label(box, text="Name:").grid(row=0, column=0, sticky="w", padx=6, pady=(6, 2))
        ttk.Label(box, textvariable=self._user_var).grid(row=0, column=1, sticky="w", padx=6, pady=(6, 2))

        self._input_var = tk.StringVar(value="")
        self._input_var.trace_add("write", lambda *_: self._emit_input())
        entry = ttk.Entry(box, textvariable=self._input_var)
        entry.grid(row=1, column=0, columnspan=2, sticky="ew", padx=6, pady=(2, 6))
        entry.bind("<Return>", lambda e: self._fire(self._on_update_user))

        self._update_btn = ttk.Button(box, text="Update name", command=lambda: self._fire(self._on_update_user))
        self._update_btn.grid(row=1, column=2, sticky="e", padx=6, pady=(2, 6))

    # ------------------------------------------------------------------
    def set_status(self, text: str) -> None:
        self._status_var.set(text)

    def set_user_name(self, name: str) -> None:
        self._user_var.set(name)

    def set_update_enabled(self, enabled: bool) -> None:
        self._update_btn.state(["!disabled"] if enabled else ["disabled"])

    # ------------------------------------------------------------------
    def _emit_input(self) -> None:
        if self._on_name_input:
            self._on_name_input(self._input_var.get())

    @staticmethod
    def _fire(callback: OnVoid) -> None:
        if callback:
            callback()


if __name__ == "__main__":
    root = tk.Tk()
    v = UserScreenView(root)
    v.pack(fill="both", expand=True)
    v.set_status("Server is running")
    v.set_user_name("Ada")
    root.mainloop()

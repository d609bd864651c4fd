# -----------------------------------------------------------------------------
# Navigation Controller
# Exactly one section is active. Switching is a visibility toggle only: it never
# touches the store and never cancels in-flight requests.
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Callable, List, Tuple

SECTIONS: Tuple[str, ...] = ("calculator", "formulas", "evaluate")

Listener = Callable[[str], None]


class Navigator:
    def __init__(self, sections: Tuple[str, ...] = SECTIONS, initial: str | None = None):
        if not sections:
            raise ValueError("At least one section is required")
        self.sections = tuple(sections)
        self._active = initial or self.sections[0]
        if self._active not in self.sections:
            raise ValueError(f"Unknown section: {self._active}")
        self._listeners: List[Listener] = []

    @property
    def active(self) -> str:
        return self._active

    def is_active(self, section: str) -> bool:
        return section == self._active

    def switch(self, section: str) -> None:
        if section not in self.sections:
            raise ValueError(f"Unknown section: {section}")
        if section == self._active:
            return
        self._active = section
        for listener in list(self._listeners):
            listener(section)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

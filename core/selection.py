"""Selection sources providing photo uids and a session token."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Protocol

from core.errors import SelectionError


@dataclass
class Selection:
    """Selected photo uids plus the token used to act on them."""

    uids: List[str] = field(default_factory=list)
    token: str = ""


class SelectionSource(Protocol):
    """Anything able to report the current photo selection."""

    def fetch(self) -> Selection:
        """Return the selection or raise SelectionError."""


class StaticSelectionSource:
    """Selection supplied up front, e.g. from command-line arguments."""

    def __init__(self, uids: List[str], token: str | None) -> None:
        self.uids = list(uids)
        self.token = token or ""

    def fetch(self) -> Selection:
        if not self.token:
            raise SelectionError(
                SelectionError.NO_AUTH_TOKEN,
                "Authentication token not found. Please log in to PhotoPrism.",
            )
        return Selection(uids=list(self.uids), token=self.token)

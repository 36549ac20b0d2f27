# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Time-bounded memo of semantic match verdicts."""
from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import replace
from threading import Lock
from typing import Callable, Optional, Tuple

from backline.engine.config import ENGINE_CONFIG

from .base import MatchVerdict


def normalize_command(command: str) -> str:
    """Return the cache key for ``command``.

    Parameters
    ----------
    command : str
        Raw command text.

    Returns
    -------
    str
        Lower-case text with runs of whitespace collapsed.
    """
    return " ".join(command.lower().split())


class TacticMatchCache:
    """Bounded, expiring memo of collaborator verdicts keyed by command.

    Only collaborator answers are stored; fallbacks and failures are not, so a
    later call can still reach the collaborator. The owner must call
    :meth:`invalidate` whenever the saved-tactic library changes.

    Parameters
    ----------
    ttl : Optional[float]
        Lifetime of an entry in seconds; defaults to the configured value.
    max_entries : Optional[int]
        Capacity; the least recently used entry is evicted first.
    clock : Callable[[], float]
        Monotonic time source, injectable for tests.
    """

    def __init__(
        self,
        ttl: Optional[float] = None,
        max_entries: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Create an empty cache.

        Parameters
        ----------
        ttl : Optional[float]
            Lifetime of an entry in seconds.
        max_entries : Optional[int]
            Maximum number of entries.
        clock : Callable[[], float]
            Monotonic time source.
        """
        cfg = ENGINE_CONFIG.matching
        self.ttl = cfg.cache_ttl if ttl is None else ttl
        self.max_entries = cfg.cache_max_entries if max_entries is None else max_entries
        self._clock = clock
        self._lock = Lock()
        self._entries: "OrderedDict[str, Tuple[float, MatchVerdict]]" = OrderedDict()

    def get(self, command: str) -> Optional[MatchVerdict]:
        """Return the live verdict stored for ``command``.

        Parameters
        ----------
        command : str
            Raw command text.

        Returns
        -------
        Optional[MatchVerdict]
            Cached verdict marked with source ``"cache"``, or ``None`` when
            missing or expired.
        """
        key = normalize_command(command)
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, verdict = entry
            if now - stored_at >= self.ttl:
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
        return replace(verdict, source="cache")

    def put(self, command: str, verdict: MatchVerdict) -> None:
        """Store ``verdict`` for ``command``.

        Parameters
        ----------
        command : str
            Raw command text.
        verdict : MatchVerdict
            Collaborator answer to remember.
        """
        if self.max_entries <= 0:
            return
        key = normalize_command(command)
        with self._lock:
            self._entries[key] = (self._clock(), verdict)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)

    def invalidate(self) -> None:
        """Forget every stored verdict."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        """Return the number of stored entries, expired ones included.

        Returns
        -------
        int
            Entry count.
        """
        with self._lock:
            return len(self._entries)

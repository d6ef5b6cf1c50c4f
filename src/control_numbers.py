"""
Control number allocation for outbound interchanges.

Partners reconcile on ISA13/GS06/ST02, so a number must never be handed out
twice within one trading relationship. The allocator serializes access with
a lock and writes every change through to its store, so a durable store keeps
sequences across restarts.
"""
import json
import logging
import threading
from pathlib import Path
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)

CONTROL_NUMBER_KINDS = ('interchange', 'group', 'transaction')
CONTROL_NUMBER_WIDTH = 9
MAX_CONTROL_NUMBER = 10 ** CONTROL_NUMBER_WIDTH - 1


class ControlNumberOverflowError(Exception):
    """Raised when a counter would need more than nine digits."""


def _initial_counters() -> Dict[str, int]:
    return {kind: 1 for kind in CONTROL_NUMBER_KINDS}


def _check_counters(counters: Mapping[str, int]) -> None:
    for kind, value in counters.items():
        if kind not in CONTROL_NUMBER_KINDS:
            raise ValueError(f"Unknown control number kind: {kind}")
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValueError(f"Control number for '{kind}' must be a positive integer, got {value!r}")
        if value > MAX_CONTROL_NUMBER:
            raise ControlNumberOverflowError(f"Control number for '{kind}' exceeds {MAX_CONTROL_NUMBER}")


class ControlNumberStore:
    """Persistence hook for the next-value counters."""

    def load(self) -> Dict[str, int]:
        raise NotImplementedError

    def save(self, counters: Mapping[str, int]) -> None:
        raise NotImplementedError


class InMemoryControlNumberStore(ControlNumberStore):
    def __init__(self, counters: Optional[Mapping[str, int]] = None):
        self._counters = dict(counters or {})

    def load(self) -> Dict[str, int]:
        return dict(self._counters)

    def save(self, counters: Mapping[str, int]) -> None:
        self._counters = dict(counters)


class JsonFileControlNumberStore(ControlNumberStore):
    """Keeps counters in a small JSON document on disk."""

    def __init__(self, path: str):
        self.path = Path(path)

    def load(self) -> Dict[str, int]:
        if not self.path.exists():
            logger.info(f"Control number file {self.path} does not exist yet; starting new sequences.")
            return {}
        with open(self.path, 'r') as f:
            return json.load(f)

    def save(self, counters: Mapping[str, int]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + '.tmp')
        with open(tmp_path, 'w') as f:
            json.dump(dict(counters), f, indent=2)
        tmp_path.replace(self.path)


class ControlNumberAllocator:
    """Three independent, monotonically increasing counters."""

    def __init__(self, store: Optional[ControlNumberStore] = None):
        self._store = store or InMemoryControlNumberStore()
        self._lock = threading.Lock()
        self._counters = _initial_counters()
        stored = self._store.load()
        if stored:
            _check_counters(stored)
            self._counters.update(stored)
            logger.info(f"Resumed control numbers: {self._counters}")

    def allocate(self, kind: str) -> str:
        """Return the current value for `kind` as 9 zero-padded digits and advance it."""
        if kind not in CONTROL_NUMBER_KINDS:
            raise ValueError(f"Unknown control number kind: {kind}")
        with self._lock:
            number = self._counters[kind]
            if number > MAX_CONTROL_NUMBER:
                raise ControlNumberOverflowError(f"'{kind}' control numbers are exhausted")
            self._counters[kind] = number + 1
            self._store.save(self._counters)
        logger.debug(f"Allocated {kind} control number {number}")
        return str(number).zfill(CONTROL_NUMBER_WIDTH)

    def set_counters(self, counters: Mapping[str, int]) -> None:
        """Merge caller-supplied next values, e.g. to resume a sequence."""
        _check_counters(counters)
        with self._lock:
            self._counters.update(counters)
            self._store.save(self._counters)
        logger.info(f"Control numbers set to {self._counters}")

    def reset(self) -> None:
        with self._lock:
            self._counters = _initial_counters()
            self._store.save(self._counters)
        logger.warning("Control numbers reset to 1; partners may see repeated numbers.")

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counters)

"""Storage seam between the cycle engine and the persistence/sync layer.

The engine never touches storage.  ``CycleService`` loads a user's data
through a ``CycleStore``, runs the engine, and writes derived cycles back.
The user is passed explicitly on every call; there is no process-wide
"active user".

``InMemoryCycleStore`` is the reference implementation used by tests and
local runs.  Remote backends implement the same ABC; conflict handling
between devices is theirs (last write wins here).
"""

from __future__ import annotations

import copy
import logging
import threading
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable

from src.cycles.tracker import CycleSummary, CycleTracker
from src.models.tracking import Cycle, DailyLog, UserSettings

logger = logging.getLogger("flowindex.cycles.store")


@dataclass
class UserData:
    """Snapshot of everything the engine needs for one user."""

    logs: list[DailyLog] = field(default_factory=list)
    cycles: list[Cycle] = field(default_factory=list)
    settings: UserSettings = field(default_factory=UserSettings)


ChangeCallback = Callable[[UserData], None]


class CycleStore(ABC):
    """Abstract persistence backend for logs, cycles and settings."""

    @abstractmethod
    def load(self, user_id: str) -> UserData:
        """Return the user's data; defaults for an unknown user."""

    @abstractmethod
    def save_logs(self, user_id: str, logs: list[DailyLog]) -> list[DailyLog]:
        """Replace the user's logs."""

    @abstractmethod
    def save_cycles(self, user_id: str, cycles: list[Cycle]) -> list[Cycle]:
        """Replace the user's cycles; returns them newest first."""

    @abstractmethod
    def save_settings(self, user_id: str, settings: UserSettings) -> UserSettings:
        """Replace the user's settings."""

    @abstractmethod
    def subscribe(self, user_id: str, callback: ChangeCallback) -> Callable[[], None]:
        """Call ``callback`` with a fresh snapshot after every change.

        Returns:
            A function that removes the subscription.
        """


class InMemoryCycleStore(CycleStore):
    """Thread-safe in-process store.  Last write wins."""

    def __init__(self) -> None:
        self._data: dict[str, UserData] = {}
        self._subscribers: dict[str, list[ChangeCallback]] = defaultdict(list)
        self._lock = threading.Lock()

    def _snapshot(self, user_id: str) -> UserData:
        return copy.deepcopy(self._data.get(user_id) or UserData())

    def _notify(self, user_id: str) -> None:
        with self._lock:
            callbacks = list(self._subscribers.get(user_id, []))
            snapshot = self._snapshot(user_id)
        for callback in callbacks:
            callback(snapshot)

    def load(self, user_id: str) -> UserData:
        with self._lock:
            return self._snapshot(user_id)

    def save_logs(self, user_id: str, logs: list[DailyLog]) -> list[DailyLog]:
        with self._lock:
            self._data.setdefault(user_id, UserData()).logs = list(logs)
        self._notify(user_id)
        return list(logs)

    def save_cycles(self, user_id: str, cycles: list[Cycle]) -> list[Cycle]:
        ordered = sorted(cycles, key=lambda c: c.start_date, reverse=True)
        with self._lock:
            self._data.setdefault(user_id, UserData()).cycles = ordered
        self._notify(user_id)
        return list(ordered)

    def save_settings(self, user_id: str, settings: UserSettings) -> UserSettings:
        with self._lock:
            self._data.setdefault(user_id, UserData()).settings = settings
        self._notify(user_id)
        return settings

    def subscribe(self, user_id: str, callback: ChangeCallback) -> Callable[[], None]:
        with self._lock:
            self._subscribers[user_id].append(callback)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers.get(user_id, []):
                    self._subscribers[user_id].remove(callback)

        return unsubscribe

    def clear(self, user_id: str) -> None:
        with self._lock:
            self._data.pop(user_id, None)
        self._notify(user_id)


class CycleService:
    """Keep a user's stored cycles in step with their logs and settings."""

    def __init__(self, store: CycleStore, tracker: CycleTracker | None = None) -> None:
        self._store = store
        self._tracker = tracker or CycleTracker()

    def save_log(self, user_id: str, log: DailyLog) -> UserData:
        """Insert or replace the log for ``log.date`` and refresh cycles.

        Cycles are re-derived when either the saved log or the log it
        replaces carries flow; other edits cannot move a period boundary.
        """
        data = self._store.load(user_id)
        previous = next((entry for entry in data.logs if entry.date == log.date), None)
        logs = [existing for existing in data.logs if existing.date != log.date]
        logs.append(log)
        logs.sort(key=lambda entry: entry.date)
        data.logs = self._store.save_logs(user_id, logs)

        if log.flow is not None or (previous is not None and previous.flow is not None):
            refreshed = self._tracker.refresh_cycles(data.logs, data.settings, data.cycles)
            if refreshed is not None:
                data.cycles = self._store.save_cycles(user_id, refreshed)
        return data

    def delete_log(self, user_id: str, day: date) -> UserData:
        """Remove the log for ``day`` (if any) and refresh cycles."""
        data = self._store.load(user_id)
        remaining = [entry for entry in data.logs if entry.date != day]
        if len(remaining) == len(data.logs):
            return data
        data.logs = self._store.save_logs(user_id, remaining)
        refreshed = self._tracker.refresh_cycles(data.logs, data.settings, data.cycles)
        if refreshed is not None:
            data.cycles = self._store.save_cycles(user_id, refreshed)
        return data

    def update_settings(self, user_id: str, settings: UserSettings) -> UserData:
        """Save settings; re-segment so the open cycle picks up a new default length."""
        data = self._store.load(user_id)
        data.settings = self._store.save_settings(user_id, settings)
        if data.logs:
            refreshed = self._tracker.segment(data.logs, settings.avg_cycle_length)
            if refreshed:
                data.cycles = self._store.save_cycles(user_id, refreshed)
        return data

    def summary(self, user_id: str, today: date | datetime) -> CycleSummary:
        data = self._store.load(user_id)
        return self._tracker.analyze(data.logs, data.settings, today, cycles=data.cycles)

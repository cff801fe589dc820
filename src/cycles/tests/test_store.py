"""Tests for the in-memory store and CycleService."""

from __future__ import annotations

from datetime import date

import pytest

from src.cycles.phase import CyclePhase
from src.cycles.store import CycleService, InMemoryCycleStore, UserData
from src.cycles.tests.conftest import TEST_USER_ID, flow_log
from src.cycles.tracker import CycleTracker
from src.models.tracking import Cycle, DailyLog, FlowIntensity, Mood, UserSettings


@pytest.fixture
def store() -> InMemoryCycleStore:
    return InMemoryCycleStore()


@pytest.fixture
def service(store: InMemoryCycleStore, tracker: CycleTracker) -> CycleService:
    return CycleService(store, tracker)


class TestInMemoryCycleStore:
    def test_unknown_user_gets_defaults(self, store: InMemoryCycleStore) -> None:
        data = store.load("nobody")
        assert data == UserData()
        assert data.settings.avg_cycle_length == 28
        assert data.settings.avg_period_length == 5

    def test_save_cycles_sorts_newest_first(self, store: InMemoryCycleStore) -> None:
        saved = store.save_cycles(
            TEST_USER_ID,
            [
                Cycle(start_date=date(2023, 12, 1), length=31),
                Cycle(start_date=date(2024, 1, 1), length=28),
            ],
        )
        assert [c.start_date for c in saved] == [date(2024, 1, 1), date(2023, 12, 1)]
        assert store.load(TEST_USER_ID).cycles == saved

    def test_users_are_isolated(self, store: InMemoryCycleStore) -> None:
        store.save_logs("a", [flow_log("2024-01-01")])
        assert store.load("b").logs == []

    def test_load_returns_a_copy(self, store: InMemoryCycleStore) -> None:
        store.save_logs(TEST_USER_ID, [flow_log("2024-01-01")])
        store.load(TEST_USER_ID).logs.clear()
        assert len(store.load(TEST_USER_ID).logs) == 1

    def test_subscribers_notified_until_unsubscribed(self, store: InMemoryCycleStore) -> None:
        seen: list[UserData] = []
        unsubscribe = store.subscribe(TEST_USER_ID, seen.append)
        store.save_settings(TEST_USER_ID, UserSettings(avg_cycle_length=30))
        assert seen[-1].settings.avg_cycle_length == 30
        unsubscribe()
        store.save_settings(TEST_USER_ID, UserSettings(avg_cycle_length=31))
        assert len(seen) == 1

    def test_clear(self, store: InMemoryCycleStore) -> None:
        store.save_logs(TEST_USER_ID, [flow_log("2024-01-01")])
        store.clear(TEST_USER_ID)
        assert store.load(TEST_USER_ID) == UserData()


class TestCycleService:
    def test_saving_flow_log_creates_cycle(self, service: CycleService) -> None:
        data = service.save_log(TEST_USER_ID, flow_log("2024-01-01"))
        assert data.cycles == [Cycle(start_date=date(2024, 1, 1), length=28)]

    def test_log_for_same_date_replaced(
        self, service: CycleService, store: InMemoryCycleStore
    ) -> None:
        service.save_log(TEST_USER_ID, DailyLog(date="2024-01-05", moods=[Mood.sad]))
        service.save_log(TEST_USER_ID, DailyLog(date="2024-01-05", moods=[Mood.happy]))
        logs = store.load(TEST_USER_ID).logs
        assert len(logs) == 1
        assert logs[0].moods == [Mood.happy]

    def test_new_period_closes_previous_cycle(self, service: CycleService) -> None:
        service.save_log(TEST_USER_ID, flow_log("2024-01-01"))
        data = service.save_log(TEST_USER_ID, flow_log("2024-01-29"))
        assert [(c.start_date, c.length) for c in data.cycles] == [
            (date(2024, 1, 29), 28),
            (date(2024, 1, 1), 28),
        ]

    def test_non_flow_log_does_not_touch_cycles(
        self, service: CycleService, store: InMemoryCycleStore
    ) -> None:
        stale = [Cycle(start_date=date(2023, 6, 1), length=28)]
        store.save_cycles(TEST_USER_ID, stale)
        service.save_log(TEST_USER_ID, DailyLog(date="2024-01-05", sleep=7.5))
        assert store.load(TEST_USER_ID).cycles == stale

    def test_replacing_only_period_log_with_spotting_clears_cycles(
        self, service: CycleService
    ) -> None:
        service.save_log(TEST_USER_ID, flow_log("2024-01-01"))
        data = service.save_log(
            TEST_USER_ID, flow_log("2024-01-01", flow=FlowIntensity.spotting)
        )
        assert data.cycles == []

    def test_clearing_flow_on_period_start_drops_that_cycle(
        self, service: CycleService, store: InMemoryCycleStore
    ) -> None:
        service.save_log(TEST_USER_ID, flow_log("2024-01-01"))
        service.save_log(TEST_USER_ID, flow_log("2024-01-29"))
        data = service.save_log(TEST_USER_ID, DailyLog(date="2024-01-29"))
        assert [(c.start_date, c.length) for c in data.cycles] == [(date(2024, 1, 1), 28)]
        assert store.load(TEST_USER_ID).cycles == data.cycles

    def test_clearing_flow_on_only_period_log_clears_cycles(
        self, service: CycleService, store: InMemoryCycleStore
    ) -> None:
        service.save_log(TEST_USER_ID, flow_log("2024-01-01"))
        data = service.save_log(TEST_USER_ID, DailyLog(date="2024-01-01", notes="mistake"))
        assert data.cycles == []
        assert store.load(TEST_USER_ID).cycles == []

    def test_delete_last_period_log_clears_cycles(self, service: CycleService) -> None:
        service.save_log(TEST_USER_ID, flow_log("2024-01-01"))
        data = service.delete_log(TEST_USER_ID, date(2024, 1, 1))
        assert data.logs == []
        assert data.cycles == []

    def test_delete_missing_log_is_noop(self, service: CycleService) -> None:
        service.save_log(TEST_USER_ID, flow_log("2024-01-01"))
        data = service.delete_log(TEST_USER_ID, date(2024, 2, 1))
        assert len(data.cycles) == 1

    def test_settings_change_updates_open_cycle_length(self, service: CycleService) -> None:
        service.save_log(TEST_USER_ID, flow_log("2024-01-01"))
        data = service.update_settings(TEST_USER_ID, UserSettings(avg_cycle_length=33))
        assert data.cycles[0].length == 33

    def test_summary(self, service: CycleService) -> None:
        service.save_log(TEST_USER_ID, flow_log("2024-01-01"))
        summary = service.summary(TEST_USER_ID, date(2024, 1, 3))
        assert summary.status.cycle_day == 3
        assert summary.status.phase is CyclePhase.menstruation

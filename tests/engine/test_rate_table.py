#!filepath: tests/engine/test_rate_table.py
import pytest

from tycoon.config.simulation_config import default_rate_table
from tycoon.engine.rate_table import RateEntry, RateTable
from tycoon.utils.errors import ScheduleConfigError


@pytest.fixture
def table() -> RateTable:
    return RateTable.from_config(default_rate_table())


def test_default_table_is_valid(table):
    assert len(table) == 11
    assert table.entry("automation_collect") == RateEntry("automation_collect", 5, 3)


@pytest.mark.parametrize(
    "tick, expected",
    [
        (1, ["research_timer"]),
        (2, ["research_timer"]),
        (3, ["research_timer", "automation_collect"]),
        (8, ["research_timer", "automation_collect"]),
        (30, ["research_timer", "delivery_check", "autosave", "automation_assign"]),
        (90, ["research_timer", "delivery_check", "autosave", "automation_assign"]),
        (100, ["research_timer", "delivery_check", "network_score"]),
        (
            300,
            ["research_timer", "delivery_check", "autosave", "order_refresh", "event_check"],
        ),
    ],
)
def test_due_names_per_tick(table, tick, expected):
    assert table.due(tick) == expected


def test_same_interval_same_offset_collides():
    with pytest.raises(ScheduleConfigError):
        RateTable([RateEntry("a", 60, 0), RateEntry("b", 60, 0)])


def test_different_interval_same_offset_is_allowed():
    table = RateTable([RateEntry("a", 60, 0), RateEntry("b", 30, 0)])
    assert table.due(60) == ["a", "b"]


@pytest.mark.parametrize(
    "entries",
    [
        [RateEntry("a", 0, 0)],
        [RateEntry("a", 5, 5)],
        [RateEntry("a", 5, 1), RateEntry("a", 10, 1)],
    ],
)
def test_invalid_entries_raise(entries):
    with pytest.raises(ScheduleConfigError):
        RateTable(entries)


def test_unknown_entry_raises_key_error(table):
    with pytest.raises(KeyError):
        table.entry("nope")

import datetime

import pytest

from appointments.services.reminders import (
    DEFAULT_TIERS,
    due_tiers,
    minutes_since_midnight,
    minutes_until,
)


def _now(h, m, s=0):
    return datetime.datetime(2026, 3, 2, h, m, s)


def test_minutes_since_midnight_drops_seconds():
    assert minutes_since_midnight(datetime.time(0, 0)) == 0
    assert minutes_since_midnight(datetime.time(14, 30, 59)) == 14 * 60 + 30


def test_minutes_until_is_negative_after_start():
    assert minutes_until(datetime.time(14, 30), _now(13, 30)) == 60
    assert minutes_until(datetime.time(14, 30), _now(13, 30, 30)) == 60
    assert minutes_until(datetime.time(14, 30), _now(14, 45)) == -15


@pytest.mark.parametrize("offset", [59, 60, 61])
def test_sixty_minute_tier_due_within_tolerance(offset):
    assert due_tiers(offset) == [60]


@pytest.mark.parametrize("offset", [58, 62, 45, 5, 0])
def test_sixty_minute_tier_not_due_outside_tolerance(offset):
    assert 60 not in due_tiers(offset)


def test_every_tier_has_its_own_window():
    assert due_tiers(30) == [30]
    assert due_tiers(11) == [10]
    assert due_tiers(9) == [10]
    assert due_tiers(20) == []


@pytest.mark.parametrize("m", [-1, -10, -30, -60, -600])
def test_past_appointments_never_match(m):
    assert due_tiers(m) == []


def test_custom_tiers_and_tolerance():
    assert due_tiers(3, tiers=(5, 2), tolerance=0) == []
    assert due_tiers(3, tiers=(5, 2), tolerance=1) == [2]
    assert due_tiers(4, tiers=(5, 3), tolerance=1) == [5, 3]


def test_default_tiers():
    assert tuple(DEFAULT_TIERS) == (60, 30, 10)

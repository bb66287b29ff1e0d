"""Tests for duration labels, badges, expiry text and the player summary."""

from datetime import datetime, timedelta, timezone

import pytest
from hypothesis import given, settings, strategies as st

from modpanel.modules.punishment.catalog import KICK_ORDINAL, MANUAL_BAN_ORDINAL
from modpanel.modules.punishment.models import (
    ModificationEvent,
    ModificationType,
    PunishmentRecord,
    StatusLevel,
)
from modpanel.modules.punishment.presentation import (
    DAY_MS,
    HOUR_MS,
    MINUTE_MS,
    PlayerStatusLabel,
    PunishmentBadge,
    expiry_text,
    format_duration,
    format_time_difference,
    player_punishment_summary,
    punishment_badge,
    status_badge_tone,
)


NOW = datetime(2026, 4, 10, 12, 0, tzinfo=timezone.utc)


def make_record(**overrides) -> PunishmentRecord:
    values = dict(
        id="p1",
        type_ordinal=8,
        issued_at=NOW - timedelta(days=1),
        started_at=NOW - timedelta(days=1),
        expires_at=NOW + timedelta(days=2),
        duration=3 * DAY_MS,
    )
    values.update(overrides)
    return PunishmentRecord(**values)


class TestFormatDuration:

    @pytest.mark.parametrize("duration,expected", [
        (3 * DAY_MS + 4 * HOUR_MS, "3d 4h"),
        (3 * DAY_MS + 59 * MINUTE_MS, "3d"),
        (90 * MINUTE_MS, "1h 30m"),
        (2 * HOUR_MS, "2h"),
        (61_000, "1m 1s"),
        (45_000, "45s"),
        (500, "0s"),
        (0, "Permanent"),
        (-1, "Permanent"),
        (None, "Permanent"),
    ])
    def test_labels(self, duration, expected):
        assert format_duration(duration) == expected

    @settings(max_examples=100)
    @given(duration=st.integers(min_value=1, max_value=10 ** 13))
    def test_at_most_two_units(self, duration: int):
        """Property: a finite duration shows one or two units."""
        label = format_duration(duration)

        assert label != "Permanent"
        assert 1 <= len(label.split()) <= 2


class TestFormatTimeDifference:

    @pytest.mark.parametrize("delta,expected", [
        (-(2 * HOUR_MS + 5 * MINUTE_MS), "2h 5m"),
        (DAY_MS, "1d"),
        (30_000, "0m"),
        (26 * HOUR_MS, "1d 2h"),
    ])
    def test_magnitude(self, delta, expected):
        assert format_time_difference(delta) == expected


class TestPunishmentBadge:

    def test_kicks_have_no_badge(self):
        assert punishment_badge(make_record(type_ordinal=KICK_ORDINAL), now=NOW) is None

    def test_unstarted_is_checked_first(self):
        record = make_record(
            started_at=None,
            modifications=(ModificationEvent(ModificationType.MANUAL_PARDON, NOW),),
        )
        assert punishment_badge(record, now=NOW) == PunishmentBadge.UNSTARTED

    def test_pardoned(self):
        record = make_record(
            modifications=(ModificationEvent(ModificationType.APPEAL_ACCEPT, NOW - timedelta(hours=2)),),
        )
        assert punishment_badge(record, now=NOW) == PunishmentBadge.PARDONED

    def test_active_and_inactive(self):
        record = make_record()
        assert punishment_badge(record, now=NOW) == PunishmentBadge.ACTIVE
        assert punishment_badge(record, now=NOW + timedelta(days=3)) == PunishmentBadge.INACTIVE


class TestExpiryText:

    def test_future_expiry(self):
        assert expiry_text(make_record(), now=NOW) == "expires in 2d (2026-04-12 12:00 UTC)"

    def test_past_expiry(self):
        record = make_record(expires_at=NOW - timedelta(hours=3, minutes=15))
        assert expiry_text(record, now=NOW) == "expired 3h 15m ago (2026-04-10 08:45 UTC)"

    def test_timed_pardon(self):
        record = make_record(
            modifications=(ModificationEvent(ModificationType.MANUAL_PARDON, NOW - timedelta(hours=2)),),
        )
        assert expiry_text(record, now=NOW) == "expired 2h ago (2026-04-10 10:00 UTC)"

    def test_untimed_pardon(self):
        record = make_record(modifications=(ModificationEvent(ModificationType.MANUAL_PARDON, None),))
        assert expiry_text(record, now=NOW) == "expired (pardoned)"

    def test_modified_expiry_is_shown(self):
        record = make_record(modifications=(
            ModificationEvent(
                ModificationType.MANUAL_DURATION_CHANGE,
                NOW - timedelta(hours=1),
                effective_duration=5 * DAY_MS,
            ),
        ))
        assert expiry_text(record, now=NOW) == "expires in 4d (2026-04-14 12:00 UTC)"

    def test_change_to_permanent_reads_permanent(self):
        record = make_record(modifications=(
            ModificationEvent(
                ModificationType.MANUAL_DURATION_CHANGE,
                NOW - timedelta(hours=1),
                effective_duration=0,
            ),
        ))
        assert expiry_text(record, now=NOW) == "Permanent"

    def test_unstarted_shows_duration(self):
        record = make_record(started_at=None, expires_at=None, duration=7 * DAY_MS)
        assert expiry_text(record, now=NOW) == "Duration: 7d"

    def test_permanent_record(self):
        record = make_record(type_ordinal=MANUAL_BAN_ORDINAL, expires_at=None, duration=-1)
        assert expiry_text(record, now=NOW) == "Permanent"


class TestPlayerSummary:

    def test_clean_record_is_active(self):
        summary = player_punishment_summary([], NOW)

        assert summary.label == PlayerStatusLabel.ACTIVE.value
        assert summary.currently_punished is False

    def test_permanent_ban_is_banned(self):
        ban = make_record(id="ban", type_ordinal=MANUAL_BAN_ORDINAL, expires_at=None, duration=-1)
        mute = make_record(id="mute")

        summary = player_punishment_summary([mute, ban], NOW)

        assert summary.label == "Banned"
        assert summary.currently_punished is True
        assert summary.active_punishment_ids == ("mute", "ban")

    def test_temporary_punishment_is_restricted(self):
        summary = player_punishment_summary([make_record()], NOW)

        assert summary.label == "Restricted"

    def test_kicks_and_unstarted_never_count(self):
        kick = make_record(id="kick", type_ordinal=KICK_ORDINAL, expires_at=None, duration=-1)
        queued = make_record(id="queued", started_at=None, expires_at=None, duration=DAY_MS)

        summary = player_punishment_summary([kick, queued], NOW)

        assert summary.label == "Active"
        assert summary.currently_punished is False
        assert summary.active_punishment_ids == ()

    def test_pardoned_ban_does_not_count(self):
        ban = make_record(
            type_ordinal=MANUAL_BAN_ORDINAL,
            expires_at=None,
            duration=-1,
            modifications=(ModificationEvent(ModificationType.APPEAL_ACCEPT, NOW - timedelta(days=1)),),
        )

        assert player_punishment_summary([ban], NOW).label == "Active"


@pytest.mark.parametrize("level,tone", [
    (StatusLevel.LOW, "success"),
    (StatusLevel.MEDIUM, "warning"),
    (StatusLevel.HABITUAL, "destructive"),
])
def test_status_badge_tone(level, tone):
    assert status_badge_tone(level) == tone

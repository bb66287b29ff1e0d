"""Property-based tests for pardon finality.

**Feature: punishment-engine, Property 2: Pardon Is Terminal**

*For any* punishment carrying a MANUAL_PARDON or APPEAL_ACCEPT event, the
punishment SHALL be inactive at every point in time, regardless of duration
changes issued before or after the pardon.
"""

from datetime import datetime, timedelta, timezone

from hypothesis import given, settings, strategies as st

from modpanel.modules.punishment.activity import is_punishment_active
from modpanel.modules.punishment.models import (
    ModificationEvent,
    ModificationType,
    PunishmentRecord,
)
from modpanel.modules.punishment.replay import replay_modifications


T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
DAY_MS = 24 * 60 * 60 * 1000


offset_strategy = st.integers(min_value=0, max_value=60 * 24 * 60)

duration_change_strategy = st.builds(
    lambda offset, duration, mod_type: ModificationEvent(
        type=mod_type,
        issued_at=T0 + timedelta(minutes=offset),
        issuer_name="staff",
        effective_duration=duration,
    ),
    offset_strategy,
    st.one_of(
        st.sampled_from([0, -1, -100]),
        st.integers(min_value=1, max_value=365 * DAY_MS),
    ),
    st.sampled_from([
        ModificationType.MANUAL_DURATION_CHANGE,
        ModificationType.APPEAL_DURATION_CHANGE,
    ]),
)

pardon_strategy = st.builds(
    lambda offset, mod_type, timed: ModificationEvent(
        type=mod_type,
        issued_at=T0 + timedelta(minutes=offset) if timed else None,
        issuer_name="staff",
    ),
    offset_strategy,
    st.sampled_from([ModificationType.MANUAL_PARDON, ModificationType.APPEAL_ACCEPT]),
    st.booleans(),
)


@st.composite
def pardoned_punishment_strategy(draw):
    """Generate a pardoned punishment with surrounding duration changes."""
    changes = draw(st.lists(duration_change_strategy, max_size=6))
    pardon = draw(pardon_strategy)
    modifications = draw(st.permutations(changes + [pardon]))
    permanent = draw(st.booleans())
    return PunishmentRecord(
        id="pardoned",
        type_ordinal=draw(st.integers(min_value=0, max_value=12)),
        issued_at=T0,
        started_at=T0,
        expires_at=None if permanent else T0 + timedelta(days=draw(st.integers(1, 400))),
        duration=-1 if permanent else DAY_MS,
        active=True,
        modifications=tuple(modifications),
    )


class TestPardonIsTerminal:
    """Property tests for pardon finality."""

    @settings(max_examples=100)
    @given(
        record=pardoned_punishment_strategy(),
        now_offset_days=st.integers(min_value=-30, max_value=800),
    )
    def test_pardoned_punishment_is_never_active(self, record: PunishmentRecord, now_offset_days: int):
        """Property: a pardoned punishment is inactive at any reference time."""
        now = T0 + timedelta(days=now_offset_days)
        state = replay_modifications(record)

        assert is_punishment_active(record, state, now) is False

    @settings(max_examples=100)
    @given(record=pardoned_punishment_strategy())
    def test_timed_pardon_clears_replayed_active_flag(self, record: PunishmentRecord):
        """Property: once a timed pardon is replayed the effective flag stays false."""
        timed_pardons = [
            mod for mod in record.modifications
            if mod.type.is_pardon and mod.issued_at is not None
        ]
        state = replay_modifications(record)

        if timed_pardons:
            assert state.active is False
            assert state.expires_at == timed_pardons[0].issued_at

    def test_pardon_before_extension_still_wins(self):
        """A duration change issued after the pardon does not revive it."""
        record = PunishmentRecord(
            id="p1",
            type_ordinal=8,
            issued_at=T0,
            started_at=T0,
            expires_at=T0 + timedelta(days=1),
            duration=DAY_MS,
            modifications=(
                ModificationEvent(
                    ModificationType.MANUAL_DURATION_CHANGE,
                    T0 + timedelta(hours=3),
                    effective_duration=-1,
                ),
                ModificationEvent(ModificationType.MANUAL_PARDON, T0 + timedelta(hours=2)),
            ),
        )

        assert is_punishment_active(record, now=T0 + timedelta(hours=4)) is False

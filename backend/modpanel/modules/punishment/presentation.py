"""Presentation helpers for punishment state.

Turns effective state and status levels into the strings and flags the
player views render: status badges, duration labels and expiry text.
"""

from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from modpanel.modules.punishment.activity import governing_expiry, is_punishment_active, resolve_now
from modpanel.modules.punishment.catalog import KICK_ORDINAL
from modpanel.modules.punishment.models import (
    EffectiveState,
    PlayerPunishmentSummary,
    PunishmentRecord,
    StatusLevel,
    is_permanent_duration,
)
from modpanel.modules.punishment.replay import replay_modifications


SECOND_MS = 1000
MINUTE_MS = 60 * SECOND_MS
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS

PERMANENT_LABEL = "Permanent"


class PunishmentBadge(str, Enum):
    """Per-punishment status badge."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"
    PARDONED = "Pardoned"
    UNSTARTED = "Unstarted"


class PlayerStatusLabel(str, Enum):
    """Overall label shown in a player's header."""

    BANNED = "Banned"
    RESTRICTED = "Restricted"
    ACTIVE = "Active"


def format_duration(duration_ms: Optional[float]) -> str:
    """Format a duration such as ``3d 4h`` or ``Permanent``.

    Only the two most significant units are shown, and the second one only
    when it is non-zero.
    """
    if is_permanent_duration(duration_ms):
        return PERMANENT_LABEL

    duration_ms = int(duration_ms)
    days = duration_ms // DAY_MS
    hours = (duration_ms % DAY_MS) // HOUR_MS
    minutes = (duration_ms % HOUR_MS) // MINUTE_MS
    seconds = (duration_ms % MINUTE_MS) // SECOND_MS

    if days > 0:
        return f"{days}d {hours}h" if hours > 0 else f"{days}d"
    if hours > 0:
        return f"{hours}h {minutes}m" if minutes > 0 else f"{hours}h"
    if minutes > 0:
        return f"{minutes}m {seconds}s" if seconds > 0 else f"{minutes}m"
    return f"{seconds}s"


def format_time_difference(delta_ms: float) -> str:
    """Format the magnitude of a time difference down to minutes."""
    delta_ms = abs(int(delta_ms))
    days = delta_ms // DAY_MS
    hours = (delta_ms % DAY_MS) // HOUR_MS
    minutes = (delta_ms % HOUR_MS) // MINUTE_MS

    if days > 0:
        return f"{days}d {hours}h" if hours > 0 else f"{days}d"
    if hours > 0:
        return f"{hours}h {minutes}m" if minutes > 0 else f"{hours}h"
    return f"{minutes}m"


def format_timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M UTC")


def _millis_between(later: datetime, earlier: datetime) -> float:
    return (later - earlier).total_seconds() * 1000


def _relative_expiry(expires_at: datetime, now: datetime) -> str:
    delta = _millis_between(expires_at, now)
    stamp = format_timestamp(expires_at)
    if delta > 0:
        return f"expires in {format_time_difference(delta)} ({stamp})"
    return f"expired {format_time_difference(delta)} ago ({stamp})"


def punishment_badge(
    record: PunishmentRecord,
    state: Optional[EffectiveState] = None,
    now: Optional[datetime] = None,
) -> Optional[PunishmentBadge]:
    """Status badge for a punishment, or None for kicks.

    The unstarted check runs before the activity classifier.
    """
    if record.type_ordinal == KICK_ORDINAL:
        return None
    if not record.is_started:
        return PunishmentBadge.UNSTARTED
    if record.is_pardoned:
        return PunishmentBadge.PARDONED

    if is_punishment_active(record, state, now):
        return PunishmentBadge.ACTIVE
    return PunishmentBadge.INACTIVE


def expiry_text(
    record: PunishmentRecord,
    state: Optional[EffectiveState] = None,
    now: Optional[datetime] = None,
) -> str:
    """Human readable expiry line for a punishment.

    Args:
        record: The punishment
        state: Its replayed state; computed when omitted
        now: Reference time; current UTC time when omitted

    Returns:
        Text such as ``expires in 2d 3h (...)``, ``expired 5m ago (...)``,
        ``Duration: 7d`` or ``Permanent``
    """
    if state is None:
        state = replay_modifications(record)
    now = resolve_now(now)

    pardon = next((mod for mod in state.modifications if mod.type.is_pardon), None)
    if pardon is not None:
        if pardon.issued_at is not None:
            delta = _millis_between(now, pardon.issued_at)
            return f"expired {format_time_difference(delta)} ago ({format_timestamp(pardon.issued_at)})"
        return "expired (pardoned)"

    active = is_punishment_active(record, state, now)
    if not active and record.expires_at is not None and record.expires_at < now:
        return _relative_expiry(record.expires_at, now)

    if state.has_modifications:
        if state.expires_at is not None:
            return _relative_expiry(state.expires_at, now)
        if is_permanent_duration(state.duration):
            # a change to permanent is shown even if an original expiry exists
            return PERMANENT_LABEL
        return f"Duration: {format_duration(state.duration)}"

    if record.expires_at is not None:
        return _relative_expiry(record.expires_at, now)

    if not record.is_started and not is_permanent_duration(record.duration):
        return f"Duration: {format_duration(record.duration)}"

    return PERMANENT_LABEL


def player_punishment_summary(
    punishments: Iterable[PunishmentRecord],
    now: Optional[datetime] = None,
) -> PlayerPunishmentSummary:
    """Overall player label and the "Currently Punished" flag.

    Kicks and unstarted punishments never count. Any active punishment with
    no governing expiry makes the player Banned; any other active punishment
    makes them Restricted.
    """
    now = resolve_now(now)

    active_ids: list[str] = []
    open_ended = False
    for record in punishments:
        if record.type_ordinal == KICK_ORDINAL or not record.is_started:
            continue
        state = replay_modifications(record)
        if not is_punishment_active(record, state, now):
            continue
        active_ids.append(record.id)
        if governing_expiry(record, state) is None:
            open_ended = True

    if open_ended:
        label = PlayerStatusLabel.BANNED
    elif active_ids:
        label = PlayerStatusLabel.RESTRICTED
    else:
        label = PlayerStatusLabel.ACTIVE

    return PlayerPunishmentSummary(
        label=label.value,
        currently_punished=bool(active_ids),
        active_punishment_ids=tuple(active_ids),
    )


def status_badge_tone(level: StatusLevel) -> str:
    """Badge tone for a category status level."""
    return {
        StatusLevel.LOW: "success",
        StatusLevel.MEDIUM: "warning",
        StatusLevel.HABITUAL: "destructive",
    }[level]

"""Activity classification for punishments.

Answers only "active or not" at a point in time. Whether a punishment has
been started at all is a separate question the caller must ask first.
"""

from datetime import datetime, timezone
from typing import Optional

from modpanel.modules.punishment.models import EffectiveState, PunishmentRecord, as_utc
from modpanel.modules.punishment.replay import replay_modifications


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def resolve_now(now: Optional[datetime] = None) -> datetime:
    """Reference time as aware UTC; the current time when omitted."""
    return utcnow() if now is None else as_utc(now)


def governing_expiry(record: PunishmentRecord, state: EffectiveState) -> Optional[datetime]:
    """The expiry that decides activity, or None for an open-ended punishment.

    A replayed expiry takes precedence when the log is non-empty; otherwise
    the original expiry applies. A modification without temporal effect
    (a flag toggle, or a change to permanent) leaves the original in charge.
    """
    if state.has_modifications and state.expires_at is not None:
        return state.expires_at
    return record.expires_at


def is_punishment_active(
    record: PunishmentRecord,
    state: Optional[EffectiveState] = None,
    now: Optional[datetime] = None,
) -> bool:
    """Decide whether a punishment is in force at ``now``.

    A pardon anywhere in the log wins outright. Otherwise the replayed expiry
    is used when modifications produced one, then the original expiry, and a
    punishment with no expiry at all falls back to the replayed active flag.

    Args:
        record: The punishment
        state: Its replayed state; computed when omitted
        now: Reference time; current UTC time when omitted

    Returns:
        True if the punishment is currently in force
    """
    if record.is_pardoned:
        return False

    if state is None:
        state = replay_modifications(record)
    now = resolve_now(now)

    expires_at = governing_expiry(record, state)
    if expires_at is not None:
        return expires_at > now

    return state.active

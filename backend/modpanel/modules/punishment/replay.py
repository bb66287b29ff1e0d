"""Modification replay engine.

Folds a punishment's modification log, in issue order, into the effective
active flag, expiry and duration. Replay never looks at the wall clock, so
the same record always yields the same EffectiveState.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from modpanel.core.logging import log_warning
from modpanel.modules.punishment.models import (
    PERMANENT_DURATION,
    EffectiveState,
    ModificationEvent,
    ModificationType,
    PunishmentRecord,
    is_permanent_duration,
)

logger = logging.getLogger(__name__)


@dataclass
class _ReplayState:
    """Running state threaded through the fold."""

    active: bool
    expires_at: Optional[datetime]
    duration: int
    alt_blocking: bool
    stat_wiping: bool
    pardoned: bool = False


def _apply_pardon(state: _ReplayState, event: ModificationEvent, record: PunishmentRecord) -> None:
    state.active = False
    state.expires_at = event.issued_at
    state.pardoned = True


def _apply_duration_change(state: _ReplayState, event: ModificationEvent, record: PunishmentRecord) -> None:
    if event.effective_duration is None:
        return
    if is_permanent_duration(event.effective_duration):
        state.duration = event.effective_duration
        state.expires_at = None
        return

    try:
        # anchored on the original start, never on the change itself
        expires_at = record.enforcement_start + timedelta(
            milliseconds=event.effective_duration
        )
    except OverflowError:
        log_warning(
            logger,
            "Duration change runs past the representable calendar; treating as permanent",
            punishment_id=record.id,
            effective_duration=event.effective_duration,
        )
        state.duration = PERMANENT_DURATION
        state.expires_at = None
        return

    state.duration = event.effective_duration
    state.expires_at = expires_at


def _apply_alt_blocking(value: bool) -> Callable[..., None]:
    def apply(state: _ReplayState, event: ModificationEvent, record: PunishmentRecord) -> None:
        state.alt_blocking = value
    return apply


def _apply_wiping(value: bool) -> Callable[..., None]:
    def apply(state: _ReplayState, event: ModificationEvent, record: PunishmentRecord) -> None:
        state.stat_wiping = value
    return apply


def _apply_nothing(state: _ReplayState, event: ModificationEvent, record: PunishmentRecord) -> None:
    return None


MODIFICATION_HANDLERS: dict[ModificationType, Callable[[_ReplayState, ModificationEvent, PunishmentRecord], None]] = {
    ModificationType.MANUAL_PARDON: _apply_pardon,
    ModificationType.APPEAL_ACCEPT: _apply_pardon,
    ModificationType.APPEAL_REJECT: _apply_nothing,
    ModificationType.MANUAL_DURATION_CHANGE: _apply_duration_change,
    ModificationType.APPEAL_DURATION_CHANGE: _apply_duration_change,
    ModificationType.SET_ALT_BLOCKING_TRUE: _apply_alt_blocking(True),
    ModificationType.SET_ALT_BLOCKING_FALSE: _apply_alt_blocking(False),
    ModificationType.SET_WIPING_TRUE: _apply_wiping(True),
    ModificationType.SET_WIPING_FALSE: _apply_wiping(False),
}


def sort_modifications(
    modifications: tuple[ModificationEvent, ...],
) -> tuple[list[ModificationEvent], list[ModificationEvent]]:
    """Split modifications into a chronological replay list and the untimed rest.

    Args:
        modifications: Raw modification log in any order

    Returns:
        Tuple of (timed events sorted by issued_at, events without issued_at)
    """
    timed = [mod for mod in modifications if mod.issued_at is not None]
    untimed = [mod for mod in modifications if mod.issued_at is None]
    timed.sort(key=lambda mod: (mod.issued_at, _content_key(mod)))
    untimed.sort(key=_content_key)
    return timed, untimed


def _content_key(mod: ModificationEvent) -> tuple:
    # ties on issued_at are broken by content so input order never matters
    return (
        mod.type.value,
        mod.effective_duration is None,
        mod.effective_duration or 0,
        mod.issuer_name or "",
        mod.reason or "",
        mod.appeal_ticket_id or "",
    )


def replay_modifications(record: PunishmentRecord) -> EffectiveState:
    """Replay a punishment's modification log into its effective state.

    Args:
        record: The punishment, including its raw modification log

    Returns:
        EffectiveState after applying every timed modification in order
    """
    state = _ReplayState(
        active=record.active,
        expires_at=record.expires_at,
        duration=record.duration,
        alt_blocking=record.alt_blocking,
        stat_wiping=record.stat_wiping,
    )

    timed, untimed = sort_modifications(record.modifications)
    if untimed:
        log_warning(
            logger,
            "Modifications without a timestamp are listed but not replayed",
            punishment_id=record.id,
            untimed_count=len(untimed),
        )

    for event in timed:
        if state.pardoned and not _is_flag_toggle(event.type):
            continue
        MODIFICATION_HANDLERS[event.type](state, event, record)

    return EffectiveState(
        active=state.active,
        expires_at=state.expires_at,
        duration=state.duration,
        has_modifications=len(record.modifications) > 0,
        original_active=record.active,
        original_expires_at=record.expires_at,
        original_duration=record.duration,
        modifications=tuple(timed) + tuple(untimed),
        alt_blocking=state.alt_blocking,
        stat_wiping=state.stat_wiping,
    )


def _is_flag_toggle(modification_type: ModificationType) -> bool:
    return modification_type in (
        ModificationType.SET_ALT_BLOCKING_TRUE,
        ModificationType.SET_ALT_BLOCKING_FALSE,
        ModificationType.SET_WIPING_TRUE,
        ModificationType.SET_WIPING_FALSE,
    )

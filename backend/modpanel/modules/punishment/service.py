"""Per-player evaluation built on the punishment engine.

Views call these functions on every render or refresh with the records and
settings they already fetched; nothing is cached between calls.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterable, Optional

from modpanel.core.logging import evaluation_context, log_info
from modpanel.modules.punishment.activity import is_punishment_active, resolve_now
from modpanel.modules.punishment.catalog import PunishmentCatalog, build_catalog
from modpanel.modules.punishment.models import (
    EffectiveState,
    PlayerPunishmentSummary,
    PlayerStatus,
    PunishmentRecord,
    StatusThresholds,
)
from modpanel.modules.punishment.presentation import (
    PunishmentBadge,
    expiry_text,
    player_punishment_summary,
    punishment_badge,
)
from modpanel.modules.punishment.replay import replay_modifications
from modpanel.modules.punishment.schemas import (
    parse_punishment_types,
    parse_punishments,
    parse_status_thresholds,
)
from modpanel.modules.punishment.scoring import calculate_player_status, points_for

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PunishmentEvaluation:
    """Everything a punishment row needs to render."""

    record: PunishmentRecord
    state: EffectiveState
    is_active: bool
    badge: Optional[PunishmentBadge]
    type_name: str
    points: int
    expiry_text: str


@dataclass(frozen=True)
class PlayerModerationReport:
    """Evaluations, category status and header summary for one player."""

    evaluations: tuple[PunishmentEvaluation, ...]
    status: PlayerStatus
    summary: PlayerPunishmentSummary


def evaluate_punishment(
    record: PunishmentRecord,
    catalog: PunishmentCatalog,
    now: Optional[datetime] = None,
) -> PunishmentEvaluation:
    """Evaluate a single punishment.

    Points are reported for active, non-administrative punishments only, the
    same rule the status scorer applies.
    """
    now = resolve_now(now)

    state = replay_modifications(record)
    active = is_punishment_active(record, state, now)
    punishment_type = catalog.get(record.type_ordinal)

    points = 0
    if active and punishment_type is not None and not punishment_type.is_administrative:
        points = points_for(punishment_type, record.severity)

    return PunishmentEvaluation(
        record=record,
        state=state,
        is_active=active,
        badge=punishment_badge(record, state, now),
        type_name=catalog.name_for(record.type_ordinal),
        points=points,
        expiry_text=expiry_text(record, state, now),
    )


def evaluate_player(
    punishments: Iterable[PunishmentRecord],
    catalog: PunishmentCatalog,
    thresholds: Optional[StatusThresholds] = None,
    now: Optional[datetime] = None,
) -> PlayerModerationReport:
    """Evaluate every punishment of a player and classify their status.

    Args:
        punishments: The player's punishments
        catalog: Punishment type catalog
        thresholds: Status thresholds; defaults apply when omitted
        now: Reference time shared by every evaluation

    Returns:
        PlayerModerationReport
    """
    now = resolve_now(now)
    if thresholds is None:
        thresholds = parse_status_thresholds(None)

    records = list(punishments)
    evaluations = tuple(evaluate_punishment(record, catalog, now) for record in records)
    status = calculate_player_status(records, catalog, thresholds, now)

    return PlayerModerationReport(
        evaluations=evaluations,
        status=status,
        summary=player_punishment_summary(records, now),
    )


def evaluate_player_payload(
    raw_punishments: Optional[Iterable[dict[str, Any]]],
    raw_punishment_types: Optional[Iterable[dict[str, Any]]] = None,
    raw_thresholds: Any = None,
    now: Optional[datetime] = None,
    correlation_id: Optional[str] = None,
) -> PlayerModerationReport:
    """Evaluate a player straight from fetched payloads.

    Every record logged during the evaluation carries ``correlation_id``, or a
    fresh one when it is omitted.

    Raises:
        PunishmentDataError: If a punishment payload is malformed
        SettingsFormatError: If the thresholds setting is malformed
    """
    with evaluation_context(correlation_id):
        records = parse_punishments(raw_punishments)
        catalog = build_catalog(parse_punishment_types(raw_punishment_types))
        thresholds = parse_status_thresholds(raw_thresholds)

        report = evaluate_player(records, catalog, thresholds, now)
        log_info(
            logger,
            "Evaluated player punishments",
            punishment_count=len(records),
            social=report.status.social.value,
            gameplay=report.status.gameplay.value,
        )
    return report

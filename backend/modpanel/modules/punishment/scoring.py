"""Category status scoring.

Sums weighted points over a player's active, non-administrative punishments
and classifies each category against the operator's thresholds. Also derives
the offense level and configured duration the creation form proposes for the
next punishment.
"""

import logging
import math
from datetime import datetime
from typing import Iterable, Optional

from modpanel.modules.punishment.activity import is_punishment_active, resolve_now
from modpanel.modules.punishment.catalog import PunishmentCatalog
from modpanel.modules.punishment.models import (
    PERMANENT_DURATION,
    CategoryThresholds,
    DurationConfig,
    OffenseLevel,
    PlayerStatus,
    PunishmentCategory,
    PunishmentRecord,
    PunishmentType,
    SeverityTier,
    StatusLevel,
    StatusThresholds,
)
from modpanel.modules.punishment.replay import replay_modifications

logger = logging.getLogger(__name__)


SEVERITY_SYNONYMS: dict[str, SeverityTier] = {
    "low": SeverityTier.LOW,
    "lenient": SeverityTier.LOW,
    "regular": SeverityTier.REGULAR,
    "medium": SeverityTier.REGULAR,
    "severe": SeverityTier.SEVERE,
    "aggravated": SeverityTier.SEVERE,
    "high": SeverityTier.SEVERE,
}

OFFENSE_LEVEL_BY_STATUS: dict[StatusLevel, OffenseLevel] = {
    StatusLevel.LOW: OffenseLevel.FIRST,
    StatusLevel.MEDIUM: OffenseLevel.MEDIUM,
    StatusLevel.HABITUAL: OffenseLevel.HABITUAL,
}

DURATION_UNIT_MS: dict[str, int] = {
    "seconds": 1000,
    "minutes": 60 * 1000,
    "hours": 60 * 60 * 1000,
    "days": 24 * 60 * 60 * 1000,
    "weeks": 7 * 24 * 60 * 60 * 1000,
    "months": 30 * 24 * 60 * 60 * 1000,
}


def normalize_severity(severity: Optional[str]) -> Optional[SeverityTier]:
    """Map a severity label or one of its synonyms onto a tier.

    Matching is case-insensitive; unknown labels give None.
    """
    if not severity:
        return None
    return SEVERITY_SYNONYMS.get(severity.strip().lower())


def points_for(punishment_type: PunishmentType, severity: Optional[str]) -> int:
    """Points a single punishment of this type contributes.

    Args:
        punishment_type: The resolved catalog entry
        severity: The punishment's severity label, if any

    Returns:
        Point value; 0 when the severity is missing or unrecognized
    """
    if punishment_type.custom_points is not None:
        return punishment_type.custom_points
    if punishment_type.single_severity_points is not None:
        return punishment_type.single_severity_points
    if punishment_type.points is None:
        return 0

    tier = normalize_severity(severity)
    if tier is None:
        return 0
    return punishment_type.points.for_tier(tier)


def classify_points(points: int, thresholds: CategoryThresholds) -> StatusLevel:
    """Classify a category total.

    Habitual is checked before Medium; the thresholds are not assumed to be
    ordered.
    """
    if points >= thresholds.habitual:
        return StatusLevel.HABITUAL
    if points >= thresholds.medium:
        return StatusLevel.MEDIUM
    return StatusLevel.LOW


def calculate_player_status(
    punishments: Iterable[PunishmentRecord],
    catalog: PunishmentCatalog,
    thresholds: StatusThresholds,
    now: Optional[datetime] = None,
) -> PlayerStatus:
    """Calculate a player's social and gameplay status.

    Args:
        punishments: Every punishment on the player's record
        catalog: Punishment type catalog
        thresholds: Operator-configured status thresholds
        now: Reference time; current UTC time when omitted

    Returns:
        PlayerStatus with both levels and both point totals
    """
    now = resolve_now(now)

    totals = {
        PunishmentCategory.SOCIAL: 0,
        PunishmentCategory.GAMEPLAY: 0,
    }

    for record in punishments:
        state = replay_modifications(record)
        if not is_punishment_active(record, state, now):
            continue

        punishment_type = catalog.get(record.type_ordinal)
        if punishment_type is None:
            logger.debug(
                "Punishment %s has unknown type ordinal %s; scoring 0",
                record.id,
                record.type_ordinal,
            )
            continue
        if punishment_type.category not in totals:
            continue

        totals[punishment_type.category] += points_for(punishment_type, record.severity)

    social_points = totals[PunishmentCategory.SOCIAL]
    gameplay_points = totals[PunishmentCategory.GAMEPLAY]

    return PlayerStatus(
        social=classify_points(social_points, thresholds.social),
        gameplay=classify_points(gameplay_points, thresholds.gameplay),
        social_points=social_points,
        gameplay_points=gameplay_points,
    )


def offense_level_for_status(level: StatusLevel) -> OffenseLevel:
    return OFFENSE_LEVEL_BY_STATUS[level]


def relevant_status(status: PlayerStatus, category: PunishmentCategory) -> StatusLevel:
    return status.level_for(category)


def available_severities(punishment_type: PunishmentType) -> list[SeverityTier]:
    """Severity tiers the creation form may offer for a type."""
    if punishment_type.is_administrative or punishment_type.custom_points is not None:
        return []
    if punishment_type.is_single_severity:
        return []
    if punishment_type.points is None and not punishment_type.durations:
        return []
    return [SeverityTier.LOW, SeverityTier.REGULAR, SeverityTier.SEVERE]


def duration_config_to_ms(config: DurationConfig) -> Optional[int]:
    """Convert a configured duration into milliseconds.

    Returns PERMANENT_DURATION for permanent configs and None when the value
    or unit cannot be used.
    """
    if config.is_permanent:
        return PERMANENT_DURATION
    multiplier = DURATION_UNIT_MS.get((config.unit or "").lower())
    if multiplier is None or config.value is None:
        return None
    if not math.isfinite(config.value) or config.value <= 0:
        return None
    return int(config.value * multiplier)


def recommend_duration(
    punishment_type: PunishmentType,
    status: PlayerStatus,
    severity: Optional[str] = None,
    offense_level: Optional[str] = None,
) -> Optional[int]:
    """Configured duration for the next punishment of a type.

    The offense level defaults to the one implied by the player's status in
    the type's category, and the severity to ``regular``. If the exact offense
    level is not configured the ``first`` offense duration is used.

    Args:
        punishment_type: Type about to be issued
        status: The player's current status
        severity: Selected severity label, if any
        offense_level: Explicit offense level override

    Returns:
        Duration in milliseconds, PERMANENT_DURATION, or None when the type
        carries no usable duration configuration
    """
    if offense_level is None:
        level = offense_level_for_status(relevant_status(status, punishment_type.category))
        offense_key = level.value
    else:
        offense_key = offense_level.strip().lower()

    if punishment_type.single_severity_durations:
        table = punishment_type.single_severity_durations
    elif punishment_type.durations:
        tier = normalize_severity(severity) or SeverityTier.REGULAR
        table = punishment_type.durations.get(tier.value)
        if not table:
            return None
    else:
        return None

    config = table.get(offense_key)
    if config is not None:
        duration = duration_config_to_ms(config)
        if duration is not None:
            return duration

    fallback = table.get(OffenseLevel.FIRST.value)
    if fallback is None:
        return None
    return duration_config_to_ms(fallback)

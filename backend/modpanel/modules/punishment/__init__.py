"""Punishment module for the lifecycle and moderation-status engine."""

from modpanel.modules.punishment.models import (
    PERMANENT_DURATION,
    CategoryThresholds,
    DurationConfig,
    EffectiveState,
    ModificationEvent,
    ModificationType,
    OffenseLevel,
    PlayerPunishmentSummary,
    PlayerStatus,
    PunishmentCategory,
    PunishmentRecord,
    PunishmentType,
    SeverityPoints,
    SeverityTier,
    StatusLevel,
    StatusThresholds,
    is_permanent_duration,
    normalize_duration,
)
from modpanel.modules.punishment.catalog import (
    BUILTIN_PUNISHMENT_TYPES,
    PunishmentCatalog,
    build_catalog,
)
from modpanel.modules.punishment.replay import replay_modifications
from modpanel.modules.punishment.activity import governing_expiry, is_punishment_active
from modpanel.modules.punishment.scoring import (
    available_severities,
    calculate_player_status,
    classify_points,
    points_for,
    recommend_duration,
)
from modpanel.modules.punishment.presentation import (
    PlayerStatusLabel,
    PunishmentBadge,
    expiry_text,
    format_duration,
    format_time_difference,
    player_punishment_summary,
    punishment_badge,
    status_badge_tone,
)
from modpanel.modules.punishment.schemas import (
    PunishmentDataError,
    PunishmentEngineError,
    SettingsFormatError,
    parse_punishment_types,
    parse_punishments,
    parse_status_thresholds,
)
from modpanel.modules.punishment.service import (
    PlayerModerationReport,
    PunishmentEvaluation,
    evaluate_player,
    evaluate_player_payload,
    evaluate_punishment,
)

__all__ = [
    # Models
    "PERMANENT_DURATION",
    "CategoryThresholds",
    "DurationConfig",
    "EffectiveState",
    "ModificationEvent",
    "ModificationType",
    "OffenseLevel",
    "PlayerPunishmentSummary",
    "PlayerStatus",
    "PunishmentCategory",
    "PunishmentRecord",
    "PunishmentType",
    "SeverityPoints",
    "SeverityTier",
    "StatusLevel",
    "StatusThresholds",
    "is_permanent_duration",
    "normalize_duration",
    # Catalog
    "BUILTIN_PUNISHMENT_TYPES",
    "PunishmentCatalog",
    "build_catalog",
    # Engine
    "replay_modifications",
    "governing_expiry",
    "is_punishment_active",
    "available_severities",
    "calculate_player_status",
    "classify_points",
    "points_for",
    "recommend_duration",
    # Presentation
    "PlayerStatusLabel",
    "PunishmentBadge",
    "expiry_text",
    "format_duration",
    "format_time_difference",
    "player_punishment_summary",
    "punishment_badge",
    "status_badge_tone",
    # Schemas
    "PunishmentDataError",
    "PunishmentEngineError",
    "SettingsFormatError",
    "parse_punishment_types",
    "parse_punishments",
    "parse_status_thresholds",
    # Service
    "PlayerModerationReport",
    "PunishmentEvaluation",
    "evaluate_player",
    "evaluate_player_payload",
    "evaluate_punishment",
]

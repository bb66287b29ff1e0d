"""Domain models for punishments, their modification log and the type catalog.

All records are immutable snapshots. A punishment is issued once and only
ever amended by appending ModificationEvents; the engine derives everything
else from these values.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


# Canonical permanent duration; 0 and any negative duration mean the same
PERMANENT_DURATION = -1


class PunishmentCategory(str, Enum):
    """Category of a punishment type."""

    ADMINISTRATIVE = "Administrative"
    SOCIAL = "Social"
    GAMEPLAY = "Gameplay"


class ModificationType(str, Enum):
    """Type of amendment appended to a punishment."""

    MANUAL_PARDON = "MANUAL_PARDON"
    APPEAL_ACCEPT = "APPEAL_ACCEPT"
    APPEAL_REJECT = "APPEAL_REJECT"
    MANUAL_DURATION_CHANGE = "MANUAL_DURATION_CHANGE"
    APPEAL_DURATION_CHANGE = "APPEAL_DURATION_CHANGE"
    SET_ALT_BLOCKING_TRUE = "SET_ALT_BLOCKING_TRUE"
    SET_ALT_BLOCKING_FALSE = "SET_ALT_BLOCKING_FALSE"
    SET_WIPING_TRUE = "SET_WIPING_TRUE"
    SET_WIPING_FALSE = "SET_WIPING_FALSE"

    @property
    def is_pardon(self) -> bool:
        return self in PARDON_TYPES

    @property
    def is_duration_change(self) -> bool:
        return self in DURATION_CHANGE_TYPES


PARDON_TYPES = frozenset({
    ModificationType.MANUAL_PARDON,
    ModificationType.APPEAL_ACCEPT,
})

DURATION_CHANGE_TYPES = frozenset({
    ModificationType.MANUAL_DURATION_CHANGE,
    ModificationType.APPEAL_DURATION_CHANGE,
})


class StatusLevel(str, Enum):
    """Moderation risk level of a player within one category."""

    LOW = "Low"
    MEDIUM = "Medium"
    HABITUAL = "Habitual"

    @property
    def rank(self) -> int:
        return _STATUS_RANKS[self]


_STATUS_RANKS = {
    StatusLevel.LOW: 1,
    StatusLevel.MEDIUM: 2,
    StatusLevel.HABITUAL: 3,
}


class SeverityTier(str, Enum):
    """Severity bucket selecting a point weight and duration."""

    LOW = "low"
    REGULAR = "regular"
    SEVERE = "severe"


class OffenseLevel(str, Enum):
    """Offense level selecting a duration within a severity tier."""

    FIRST = "first"
    MEDIUM = "medium"
    HABITUAL = "habitual"


def is_permanent_duration(duration: Optional[float]) -> bool:
    """Check whether a duration encodes a permanent punishment.

    0, -1 and every other negative value are permanent. Missing and
    non-finite durations are treated the same way.
    """
    if duration is None:
        return True
    if isinstance(duration, float) and not math.isfinite(duration):
        return True
    return duration <= 0


def normalize_duration(duration: Optional[float]) -> int:
    """Collapse every permanent encoding onto PERMANENT_DURATION."""
    if is_permanent_duration(duration):
        return PERMANENT_DURATION
    return int(duration)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return an aware UTC datetime; naive values are taken as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class ModificationEvent:
    """An immutable amendment to a punishment.

    issued_at is None when the upstream timestamp was missing or malformed;
    such events are still listed for staff but do not take part in replay.
    """

    type: ModificationType
    issued_at: Optional[datetime]
    issuer_name: str = ""
    reason: Optional[str] = None
    effective_duration: Optional[int] = None
    appeal_ticket_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "issued_at", as_utc(self.issued_at))


@dataclass(frozen=True)
class PunishmentRecord:
    """An issued disciplinary action."""

    id: str
    type_ordinal: int
    issued_at: datetime
    started_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    duration: int = PERMANENT_DURATION
    severity: Optional[str] = None
    offense_level: Optional[str] = None
    active: bool = True
    issuer_name: str = ""
    alt_blocking: bool = False
    stat_wiping: bool = False
    modifications: tuple[ModificationEvent, ...] = ()
    evidence: tuple = ()
    notes: tuple = ()
    attached_ticket_ids: tuple[str, ...] = ()

    def __post_init__(self):
        # all timestamps compare against an aware UTC "now"
        for name in ("issued_at", "started_at", "expires_at"):
            object.__setattr__(self, name, as_utc(getattr(self, name)))

    @property
    def is_started(self) -> bool:
        return self.started_at is not None

    @property
    def is_pardoned(self) -> bool:
        return any(mod.type.is_pardon for mod in self.modifications)

    @property
    def enforcement_start(self) -> datetime:
        """Anchor used when recomputing expiry after a duration change."""
        return self.started_at if self.started_at is not None else self.issued_at


@dataclass(frozen=True)
class EffectiveState:
    """Result of replaying a punishment's modification log."""

    active: bool
    expires_at: Optional[datetime]
    duration: int
    has_modifications: bool
    original_active: bool
    original_expires_at: Optional[datetime]
    original_duration: int
    modifications: tuple[ModificationEvent, ...] = ()
    alt_blocking: bool = False
    stat_wiping: bool = False

    @property
    def is_permanent(self) -> bool:
        return self.expires_at is None and is_permanent_duration(self.duration)


@dataclass(frozen=True)
class SeverityPoints:
    low: int = 0
    regular: int = 0
    severe: int = 0

    def for_tier(self, tier: SeverityTier) -> int:
        return getattr(self, tier.value)


@dataclass(frozen=True)
class DurationConfig:
    """A configured punishment length such as ``3 days mute``."""

    value: float
    unit: str
    type: str = ""

    @property
    def is_permanent(self) -> bool:
        return "permanent" in (self.type or "").lower()


@dataclass(frozen=True)
class PunishmentType:
    """Catalog entry describing how a punishment is scored and sized.

    Exactly one scoring mode is expected to be populated: points,
    single_severity_points or custom_points.
    """

    ordinal: int
    name: str
    category: PunishmentCategory
    points: Optional[SeverityPoints] = None
    single_severity_points: Optional[int] = None
    custom_points: Optional[int] = None
    durations: Optional[dict[str, dict[str, DurationConfig]]] = None
    single_severity_durations: Optional[dict[str, DurationConfig]] = None
    is_customizable: bool = True
    can_be_alt_blocking: bool = False
    can_be_stat_wiping: bool = False
    is_appealable: bool = True
    staff_description: str = ""
    player_description: str = ""

    @property
    def is_administrative(self) -> bool:
        return self.category == PunishmentCategory.ADMINISTRATIVE

    @property
    def is_single_severity(self) -> bool:
        return self.single_severity_points is not None or bool(self.single_severity_durations)


@dataclass(frozen=True)
class CategoryThresholds:
    medium: int
    habitual: int


@dataclass(frozen=True)
class StatusThresholds:
    """Operator-configured point values at which risk levels step up."""

    social: CategoryThresholds
    gameplay: CategoryThresholds

    def for_category(self, category: PunishmentCategory) -> Optional[CategoryThresholds]:
        if category == PunishmentCategory.SOCIAL:
            return self.social
        if category == PunishmentCategory.GAMEPLAY:
            return self.gameplay
        return None


@dataclass(frozen=True)
class PlayerStatus:
    social: StatusLevel
    gameplay: StatusLevel
    social_points: int
    gameplay_points: int

    def level_for(self, category: PunishmentCategory) -> StatusLevel:
        """Level that governs a punishment of the given category.

        Administrative punishments use the higher of the two levels.
        """
        if category == PunishmentCategory.SOCIAL:
            return self.social
        if category == PunishmentCategory.GAMEPLAY:
            return self.gameplay
        return self.social if self.social.rank >= self.gameplay.rank else self.gameplay


@dataclass(frozen=True)
class PlayerPunishmentSummary:
    """Overall badge data for a player's header."""

    label: str  # "Banned" | "Restricted" | "Active"
    currently_punished: bool
    active_punishment_ids: tuple[str, ...] = field(default_factory=tuple)

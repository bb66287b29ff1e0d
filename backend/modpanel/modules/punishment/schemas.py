"""Pydantic schemas for the punishment module.

Raw player and settings payloads are validated here once and turned into
the immutable domain types the engine works on. The engine itself never
branches on payload shape.
"""

import json
import logging
import math
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from pydantic import AliasChoices, BaseModel, Field, ValidationError, field_validator, model_validator

from modpanel.core.config import settings
from modpanel.core.logging import log_error
from modpanel.modules.punishment.models import (
    PERMANENT_DURATION,
    CategoryThresholds,
    DurationConfig,
    ModificationEvent,
    ModificationType,
    PunishmentCategory,
    PunishmentRecord,
    PunishmentType,
    SeverityPoints,
    StatusThresholds,
    as_utc,
    normalize_duration,
)

logger = logging.getLogger(__name__)


class PunishmentEngineError(Exception):
    """Base exception for punishment engine boundary errors."""
    pass


class PunishmentDataError(PunishmentEngineError):
    """Exception raised when a player payload cannot be normalized."""
    pass


class SettingsFormatError(PunishmentEngineError):
    """Exception raised when operator settings cannot be parsed."""
    pass


# ============================================
# Field coercion helpers
# ============================================

def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an upstream timestamp leniently.

    Accepts datetimes, ISO-8601 strings and epoch milliseconds. Naive values
    are taken as UTC. Anything unparseable gives None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    try:
        return as_utc(parsed)
    except OverflowError:
        return None


def coerce_duration(value: Any) -> int:
    """Coerce a raw duration to milliseconds, mapping junk to permanent."""
    if value is None or isinstance(value, bool):
        return PERMANENT_DURATION
    if isinstance(value, str):
        try:
            value = float(value)
        except ValueError:
            return PERMANENT_DURATION
    if not isinstance(value, (int, float)):
        return PERMANENT_DURATION
    return normalize_duration(value)


# ============================================
# Player record schemas
# ============================================

class ModificationSchema(BaseModel):
    """Schema for a raw modification event."""

    type: ModificationType
    issued_at: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("issuedAt", "issued", "issued_at")
    )
    issuer_name: str = Field(
        "", validation_alias=AliasChoices("issuerName", "issuer_name")
    )
    reason: Optional[str] = None
    effective_duration: Optional[int] = Field(
        None, validation_alias=AliasChoices("effectiveDuration", "effective_duration")
    )
    appeal_ticket_id: Optional[str] = Field(
        None, validation_alias=AliasChoices("appealTicketId", "appeal_ticket_id")
    )

    class Config:
        extra = "ignore"

    @model_validator(mode="before")
    @classmethod
    def lift_data_fields(cls, values: Any) -> Any:
        # older records keep effectiveDuration inside a nested data map
        if isinstance(values, dict) and isinstance(values.get("data"), dict):
            merged = dict(values["data"])
            merged.update({k: v for k, v in values.items() if k != "data" and v is not None})
            return merged
        return values

    @field_validator("issued_at", mode="before")
    @classmethod
    def lenient_timestamp(cls, value: Any) -> Optional[datetime]:
        return parse_timestamp(value)

    @field_validator("issuer_name", mode="before")
    @classmethod
    def default_issuer(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("effective_duration", mode="before")
    @classmethod
    def normalize_effective_duration(cls, value: Any) -> Optional[int]:
        if value is None:
            return None
        return coerce_duration(value)

    def to_event(self) -> ModificationEvent:
        return ModificationEvent(
            type=self.type,
            issued_at=self.issued_at,
            issuer_name=self.issuer_name,
            reason=self.reason,
            effective_duration=self.effective_duration,
            appeal_ticket_id=self.appeal_ticket_id,
        )


class PunishmentRecordSchema(BaseModel):
    """Schema for a punishment as returned by the player record fetch."""

    id: str
    type_ordinal: int = Field(
        ..., validation_alias=AliasChoices("typeOrdinal", "type_ordinal")
    )
    issued_at: datetime = Field(
        ..., validation_alias=AliasChoices("issuedAt", "issued", "issued_at", "date")
    )
    started_at: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("startedAt", "started", "started_at")
    )
    expires_at: Optional[datetime] = Field(
        None, validation_alias=AliasChoices("expiresAt", "expires", "expires_at")
    )
    duration: int = PERMANENT_DURATION
    severity: Optional[str] = None
    offense_level: Optional[str] = Field(
        None, validation_alias=AliasChoices("offenseLevel", "offense_level", "status")
    )
    active: bool = True
    issuer_name: str = Field(
        "", validation_alias=AliasChoices("issuerName", "issuer_name")
    )
    alt_blocking: bool = Field(
        False, validation_alias=AliasChoices("altBlocking", "alt_blocking")
    )
    stat_wiping: bool = Field(
        False,
        validation_alias=AliasChoices("wipeAfterExpiry", "wiping", "statWiping", "stat_wiping"),
    )
    modifications: list[dict[str, Any]] = Field(default_factory=list)
    evidence: list[Any] = Field(default_factory=list)
    notes: list[Any] = Field(default_factory=list)
    attached_ticket_ids: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("attachedTicketIds", "attached_ticket_ids"),
    )

    class Config:
        extra = "ignore"

    @model_validator(mode="before")
    @classmethod
    def lift_data_fields(cls, values: Any) -> Any:
        # fields stored in the record's data map fill in missing top-level keys
        if isinstance(values, dict) and isinstance(values.get("data"), dict):
            merged = dict(values["data"])
            merged.update({k: v for k, v in values.items() if k != "data" and v is not None})
            return merged
        return values

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, value: Any) -> Any:
        return str(value) if isinstance(value, (int, float)) else value

    @field_validator("issued_at", mode="before")
    @classmethod
    def strict_issued(cls, value: Any) -> datetime:
        parsed = parse_timestamp(value)
        if parsed is None:
            raise ValueError("issued timestamp is missing or malformed")
        return parsed

    @field_validator("started_at", "expires_at", mode="before")
    @classmethod
    def lenient_timestamp(cls, value: Any) -> Optional[datetime]:
        return parse_timestamp(value)

    @field_validator("duration", mode="before")
    @classmethod
    def normalize_duration_value(cls, value: Any) -> int:
        return coerce_duration(value)

    @field_validator("active", "alt_blocking", "stat_wiping", mode="before")
    @classmethod
    def default_flag(cls, value: Any, info) -> Any:
        if value is None:
            return info.field_name == "active"
        return value

    @field_validator("severity", "offense_level", mode="before")
    @classmethod
    def blank_labels(cls, value: Any) -> Optional[str]:
        if value is None or value == 0:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("issuer_name", mode="before")
    @classmethod
    def default_issuer(cls, value: Any) -> str:
        return "" if value is None else str(value)

    def to_record(self) -> PunishmentRecord:
        """Build the immutable domain record.

        Modifications of an unknown type are dropped with a warning; all
        others are kept, including those with an unusable timestamp.
        """
        events: list[ModificationEvent] = []
        for raw in self.modifications:
            try:
                events.append(ModificationSchema.model_validate(raw).to_event())
            except ValidationError as e:
                logger.warning(
                    "Dropping unreadable modification on punishment %s: %s",
                    self.id,
                    e.errors()[0].get("msg") if e.errors() else e,
                )

        return PunishmentRecord(
            id=self.id,
            type_ordinal=self.type_ordinal,
            issued_at=self.issued_at,
            started_at=self.started_at,
            expires_at=self.expires_at,
            duration=self.duration,
            severity=self.severity,
            offense_level=self.offense_level,
            active=self.active,
            issuer_name=self.issuer_name,
            alt_blocking=self.alt_blocking,
            stat_wiping=self.stat_wiping,
            modifications=tuple(events),
            evidence=tuple(self.evidence),
            notes=tuple(self.notes),
            attached_ticket_ids=tuple(self.attached_ticket_ids),
        )


def parse_punishments(raw_punishments: Optional[Iterable[dict[str, Any]]]) -> list[PunishmentRecord]:
    """Normalize a player's raw punishments.

    Args:
        raw_punishments: Punishment payloads from the player record fetch

    Returns:
        List of PunishmentRecord

    Raises:
        PunishmentDataError: If any payload does not have a punishment's shape
    """
    records: list[PunishmentRecord] = []
    for raw in raw_punishments or ():
        try:
            records.append(PunishmentRecordSchema.model_validate(raw).to_record())
        except ValidationError as e:
            punishment_id = raw.get("id") if isinstance(raw, dict) else None
            log_error(logger, "Invalid punishment payload", e, punishment_id=punishment_id)
            raise PunishmentDataError(f"Invalid punishment payload: {e}") from e
    return records


# ============================================
# Settings schemas
# ============================================

class SeverityPointsSchema(BaseModel):
    low: int = 0
    regular: int = 0
    severe: int = 0


class DurationConfigSchema(BaseModel):
    value: float = 0
    unit: str = "hours"
    type: str = ""


class PunishmentTypeSchema(BaseModel):
    """Schema for a configured punishment type."""

    ordinal: int
    name: str = Field(..., min_length=1)
    category: PunishmentCategory
    points: Optional[SeverityPointsSchema] = None
    single_severity_points: Optional[int] = Field(
        None, validation_alias=AliasChoices("singleSeverityPoints", "single_severity_points")
    )
    custom_points: Optional[int] = Field(
        None, validation_alias=AliasChoices("customPoints", "custom_points")
    )
    durations: Optional[dict[str, dict[str, DurationConfigSchema]]] = None
    single_severity_durations: Optional[dict[str, DurationConfigSchema]] = Field(
        None,
        validation_alias=AliasChoices("singleSeverityDurations", "single_severity_durations"),
    )
    is_customizable: bool = Field(
        True, validation_alias=AliasChoices("isCustomizable", "is_customizable")
    )
    can_be_alt_blocking: bool = Field(
        False, validation_alias=AliasChoices("canBeAltBlocking", "can_be_alt_blocking")
    )
    can_be_stat_wiping: bool = Field(
        False, validation_alias=AliasChoices("canBeStatWiping", "can_be_stat_wiping")
    )
    is_appealable: bool = Field(
        True, validation_alias=AliasChoices("isAppealable", "is_appealable")
    )
    staff_description: str = Field(
        "", validation_alias=AliasChoices("staffDescription", "staff_description")
    )
    player_description: str = Field(
        "", validation_alias=AliasChoices("playerDescription", "player_description")
    )

    class Config:
        extra = "ignore"

    @field_validator("category", mode="before")
    @classmethod
    def title_case_category(cls, value: Any) -> Any:
        return value.strip().title() if isinstance(value, str) else value

    def to_type(self) -> PunishmentType:
        durations = None
        if self.durations:
            durations = {
                severity.lower(): {
                    level.lower(): DurationConfig(value=c.value, unit=c.unit, type=c.type)
                    for level, c in levels.items()
                }
                for severity, levels in self.durations.items()
            }
        single_durations = None
        if self.single_severity_durations:
            single_durations = {
                level.lower(): DurationConfig(value=c.value, unit=c.unit, type=c.type)
                for level, c in self.single_severity_durations.items()
            }

        return PunishmentType(
            ordinal=self.ordinal,
            name=self.name,
            category=self.category,
            points=(
                SeverityPoints(
                    low=self.points.low,
                    regular=self.points.regular,
                    severe=self.points.severe,
                )
                if self.points is not None
                else None
            ),
            single_severity_points=self.single_severity_points,
            custom_points=self.custom_points,
            durations=durations,
            single_severity_durations=single_durations,
            is_customizable=self.is_customizable,
            can_be_alt_blocking=self.can_be_alt_blocking,
            can_be_stat_wiping=self.can_be_stat_wiping,
            is_appealable=self.is_appealable,
            staff_description=self.staff_description,
            player_description=self.player_description,
        )


def parse_punishment_types(raw_types: Optional[Iterable[dict[str, Any]]]) -> list[PunishmentType]:
    """Parse configured punishment types, skipping entries that do not validate."""
    types: list[PunishmentType] = []
    for raw in raw_types or ():
        try:
            types.append(PunishmentTypeSchema.model_validate(raw).to_type())
        except ValidationError as e:
            name = raw.get("name") if isinstance(raw, dict) else None
            logger.warning("Skipping invalid punishment type %r: %s", name, e)
    return types


class CategoryThresholdsSchema(BaseModel):
    medium: int = Field(..., ge=0)
    habitual: int = Field(..., ge=0)

    def to_thresholds(self) -> CategoryThresholds:
        return CategoryThresholds(medium=self.medium, habitual=self.habitual)


class StatusThresholdsSchema(BaseModel):
    """Schema for operator-configured status thresholds."""

    social: Optional[CategoryThresholdsSchema] = None
    gameplay: Optional[CategoryThresholdsSchema] = None

    class Config:
        extra = "ignore"


def default_status_thresholds() -> StatusThresholds:
    return StatusThresholds(
        social=CategoryThresholds(
            medium=settings.DEFAULT_SOCIAL_MEDIUM_THRESHOLD,
            habitual=settings.DEFAULT_SOCIAL_HABITUAL_THRESHOLD,
        ),
        gameplay=CategoryThresholds(
            medium=settings.DEFAULT_GAMEPLAY_MEDIUM_THRESHOLD,
            habitual=settings.DEFAULT_GAMEPLAY_HABITUAL_THRESHOLD,
        ),
    )


def parse_status_thresholds(raw: Any = None) -> StatusThresholds:
    """Parse operator thresholds, falling back to defaults where absent.

    Args:
        raw: None, a mapping, or a JSON string as stored in settings

    Returns:
        StatusThresholds with any missing category filled from defaults

    Raises:
        SettingsFormatError: If the value is present but not parseable
    """
    defaults = default_status_thresholds()

    if isinstance(raw, str):
        if not raw.strip():
            raw = None
        else:
            try:
                raw = json.loads(raw)
            except json.JSONDecodeError as e:
                raise SettingsFormatError(f"statusThresholds is not valid JSON: {e}") from e

    if raw is None or raw == {}:
        logger.info("No status thresholds configured; using defaults")
        return defaults

    try:
        parsed = StatusThresholdsSchema.model_validate(raw)
    except ValidationError as e:
        raise SettingsFormatError(f"Invalid statusThresholds: {e}") from e

    if parsed.social is None and parsed.gameplay is None:
        logger.info("Status thresholds carry no categories; using defaults")
        return defaults

    return StatusThresholds(
        social=parsed.social.to_thresholds() if parsed.social else defaults.social,
        gameplay=parsed.gameplay.to_thresholds() if parsed.gameplay else defaults.gameplay,
    )

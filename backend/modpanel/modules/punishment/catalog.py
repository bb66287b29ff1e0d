"""PunishmentType catalog resolution.

The six administrative types are fixed and always present. Social and
Gameplay types come entirely from operator configuration.
"""

import logging
from typing import Iterable, Optional

from modpanel.modules.punishment.models import PunishmentCategory, PunishmentType

logger = logging.getLogger(__name__)


KICK_ORDINAL = 0
MANUAL_MUTE_ORDINAL = 1
MANUAL_BAN_ORDINAL = 2
SECURITY_BAN_ORDINAL = 3
LINKED_BAN_ORDINAL = 4
BLACKLIST_ORDINAL = 5


BUILTIN_PUNISHMENT_TYPES: tuple[PunishmentType, ...] = (
    PunishmentType(
        ordinal=KICK_ORDINAL,
        name="Kick",
        category=PunishmentCategory.ADMINISTRATIVE,
        is_customizable=False,
        is_appealable=False,
        staff_description="Kick a player.",
        player_description="BOOT!",
    ),
    PunishmentType(
        ordinal=MANUAL_MUTE_ORDINAL,
        name="Manual Mute",
        category=PunishmentCategory.ADMINISTRATIVE,
        is_customizable=False,
        staff_description="Manually mute a player.",
        player_description="You have been silenced.",
    ),
    PunishmentType(
        ordinal=MANUAL_BAN_ORDINAL,
        name="Manual Ban",
        category=PunishmentCategory.ADMINISTRATIVE,
        is_customizable=False,
        can_be_alt_blocking=True,
        can_be_stat_wiping=True,
        staff_description="Manually ban a player.",
        player_description="The ban hammer has spoken.",
    ),
    PunishmentType(
        ordinal=SECURITY_BAN_ORDINAL,
        name="Security Ban",
        category=PunishmentCategory.ADMINISTRATIVE,
        is_customizable=False,
        staff_description="Compromised or potentially compromised account.",
        player_description=(
            "Suspicious activity has been detected on your account. "
            "Please secure your account and appeal this ban."
        ),
    ),
    PunishmentType(
        ordinal=LINKED_BAN_ORDINAL,
        name="Linked Ban",
        category=PunishmentCategory.ADMINISTRATIVE,
        is_customizable=False,
        staff_description="Usually automatically applied due to ban evasion.",
        player_description=(
            "Evading bans through the use of alternate accounts or sharing "
            "your account is strictly prohibited."
        ),
    ),
    PunishmentType(
        ordinal=BLACKLIST_ORDINAL,
        name="Blacklist",
        category=PunishmentCategory.ADMINISTRATIVE,
        is_customizable=False,
        is_appealable=False,
        can_be_alt_blocking=True,
        can_be_stat_wiping=True,
        staff_description="Remove a player (unappealable).",
        player_description="You are blacklisted from the server.",
    ),
)

_BUILTIN_NAMES = frozenset(t.name for t in BUILTIN_PUNISHMENT_TYPES)
_BUILTIN_ORDINALS = frozenset(t.ordinal for t in BUILTIN_PUNISHMENT_TYPES)


def unknown_punishment_name(ordinal: int) -> str:
    return f"Unknown Punishment {ordinal}"


class PunishmentCatalog:
    """Read-only lookup of punishment types by ordinal."""

    def __init__(self, types: Iterable[PunishmentType]):
        ordered = sorted(types, key=lambda t: t.ordinal)
        self._types: tuple[PunishmentType, ...] = tuple(ordered)
        self._by_ordinal: dict[int, PunishmentType] = {}
        for punishment_type in self._types:
            # first entry wins on duplicate ordinals
            self._by_ordinal.setdefault(punishment_type.ordinal, punishment_type)

    def __iter__(self):
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def __contains__(self, ordinal: object) -> bool:
        return ordinal in self._by_ordinal

    def get(self, ordinal: int) -> Optional[PunishmentType]:
        """Resolve an ordinal, returning None on a miss."""
        return self._by_ordinal.get(ordinal)

    def name_for(self, ordinal: int) -> str:
        """Display name for an ordinal; never raises."""
        punishment_type = self._by_ordinal.get(ordinal)
        if punishment_type is None:
            logger.debug("No punishment type for ordinal %s", ordinal)
            return unknown_punishment_name(ordinal)
        return punishment_type.name

    def by_category(self, category: PunishmentCategory) -> list[PunishmentType]:
        return [t for t in self._types if t.category == category]

    @property
    def administrative(self) -> list[PunishmentType]:
        return self.by_category(PunishmentCategory.ADMINISTRATIVE)

    @property
    def social(self) -> list[PunishmentType]:
        return self.by_category(PunishmentCategory.SOCIAL)

    @property
    def gameplay(self) -> list[PunishmentType]:
        return self.by_category(PunishmentCategory.GAMEPLAY)


def build_catalog(configured: Optional[Iterable[PunishmentType]] = None) -> PunishmentCatalog:
    """Merge operator-configured types with the built-in administrative set.

    Configured administrative entries named like a built-in are discarded,
    as is any configured entry reusing a built-in ordinal.

    Args:
        configured: Punishment types from the operator's settings

    Returns:
        PunishmentCatalog containing the built-ins plus accepted entries
    """
    merged: list[PunishmentType] = list(BUILTIN_PUNISHMENT_TYPES)
    seen_ordinals = set(_BUILTIN_ORDINALS)

    for punishment_type in configured or ():
        if punishment_type.is_administrative and punishment_type.name in _BUILTIN_NAMES:
            logger.debug(
                "Ignoring configured override of built-in type %r", punishment_type.name
            )
            continue
        if punishment_type.ordinal in seen_ordinals:
            logger.warning(
                "Ignoring punishment type %r: ordinal %s already in use",
                punishment_type.name,
                punishment_type.ordinal,
            )
            continue
        seen_ordinals.add(punishment_type.ordinal)
        merged.append(punishment_type)

    return PunishmentCatalog(merged)

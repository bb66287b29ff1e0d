"""Unit tests for the punishment type catalog."""

import pytest
from hypothesis import given, settings, strategies as st

from modpanel.modules.punishment.catalog import (
    BUILTIN_PUNISHMENT_TYPES,
    PunishmentCatalog,
    build_catalog,
)
from modpanel.modules.punishment.models import PunishmentCategory, PunishmentType


def configured(ordinal: int, name: str, category=PunishmentCategory.SOCIAL, **kwargs) -> PunishmentType:
    return PunishmentType(ordinal=ordinal, name=name, category=category, **kwargs)


class TestBuiltins:

    def test_six_administrative_types_always_present(self):
        catalog = build_catalog()

        names = [t.name for t in catalog.administrative]
        assert names == [
            "Kick", "Manual Mute", "Manual Ban", "Security Ban", "Linked Ban", "Blacklist",
        ]
        assert [t.ordinal for t in catalog.administrative] == [0, 1, 2, 3, 4, 5]

    def test_builtins_are_not_customizable(self):
        assert all(not t.is_customizable for t in BUILTIN_PUNISHMENT_TYPES)
        assert all(t.is_administrative for t in BUILTIN_PUNISHMENT_TYPES)

    def test_builtin_override_by_name_is_discarded(self):
        override = configured(
            42, "Manual Ban", PunishmentCategory.ADMINISTRATIVE, custom_points=99
        )

        catalog = build_catalog([override])

        assert catalog.get(42) is None
        assert catalog.get(2).name == "Manual Ban"
        assert catalog.get(2).custom_points is None

    def test_builtin_name_match_is_case_sensitive(self):
        lookalike = configured(43, "manual ban", PunishmentCategory.ADMINISTRATIVE)

        catalog = build_catalog([lookalike])

        assert catalog.get(43) == lookalike
        assert catalog.get(2).name == "Manual Ban"

    def test_non_colliding_administrative_entry_is_kept(self):
        extra = configured(20, "Warning", PunishmentCategory.ADMINISTRATIVE)

        catalog = build_catalog([extra])

        assert catalog.get(20) == extra

    def test_configured_type_cannot_reuse_builtin_ordinal(self):
        clash = configured(3, "Chat Abuse")

        catalog = build_catalog([clash])

        assert catalog.get(3).name == "Security Ban"


class TestConfiguredTypes:

    def test_social_and_gameplay_sorted_by_ordinal(self):
        catalog = build_catalog([
            configured(9, "Spam"),
            configured(12, "Cheating", PunishmentCategory.GAMEPLAY),
            configured(6, "Chat Abuse"),
            configured(10, "Griefing", PunishmentCategory.GAMEPLAY),
        ])

        assert [t.name for t in catalog.social] == ["Chat Abuse", "Spam"]
        assert [t.name for t in catalog.gameplay] == ["Griefing", "Cheating"]
        assert len(catalog) == 10

    def test_duplicate_configured_ordinal_keeps_first(self):
        catalog = build_catalog([configured(7, "First"), configured(7, "Second")])

        assert catalog.name_for(7) == "First"

    def test_iteration_is_ordinal_ordered(self):
        catalog = PunishmentCatalog([configured(8, "B"), configured(6, "A")])

        assert [t.ordinal for t in catalog] == [6, 8]
        assert 6 in catalog
        assert 7 not in catalog


class TestNameResolution:

    @settings(max_examples=100)
    @given(ordinal=st.integers(min_value=-1000, max_value=1000))
    def test_name_for_never_raises(self, ordinal: int):
        """Property: every ordinal resolves to a display name."""
        catalog = build_catalog([configured(6, "Chat Abuse")])

        name = catalog.name_for(ordinal)

        if ordinal in catalog:
            assert name == catalog.get(ordinal).name
        else:
            assert name == f"Unknown Punishment {ordinal}"

    @pytest.mark.parametrize("ordinal,expected", [
        (0, "Kick"), (5, "Blacklist"), (77, "Unknown Punishment 77"),
    ])
    def test_known_and_unknown_names(self, ordinal: int, expected: str):
        assert build_catalog().name_for(ordinal) == expected

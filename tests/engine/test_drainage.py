"""Tests for soil drainage dry times."""

import pytest

from trailcast.engine.drainage import (
    BASE_DRY_HOURS,
    DEFAULT_DRY_HOURS,
    base_dry_hours,
    dry_hours_for_label,
    normalize_drainage_class,
    resolve_base_dry_hours,
)
from trailcast.engine.models import DrainageClass


class TestBaseDryHours:
    """Tests for base_dry_hours."""

    @pytest.mark.parametrize(
        "drainage_class,expected",
        [
            (DrainageClass.EXCESSIVELY_DRAINED, 6),
            (DrainageClass.WELL_DRAINED, 24),
            (DrainageClass.MODERATELY_WELL_DRAINED, 48),
            (DrainageClass.SOMEWHAT_POORLY_DRAINED, 72),
            (DrainageClass.POORLY_DRAINED, 120),
            (DrainageClass.VERY_POORLY_DRAINED, 168),
        ],
    )
    def test_table(self, drainage_class, expected):
        """Each drainage class maps to its tabled dry time."""
        assert base_dry_hours(drainage_class) == expected

    def test_table_covers_every_class(self):
        """Every DrainageClass has an entry."""
        assert set(BASE_DRY_HOURS) == set(DrainageClass)

    def test_missing_class_defaults(self):
        """None falls back to the moderate default."""
        assert base_dry_hours(None) == DEFAULT_DRY_HOURS == 48

    def test_unknown_label_defaults(self):
        """Unrecognised labels fall back to the default."""
        assert base_dry_hours("Mostly sand") == 48

    def test_accepts_label_string(self):
        """Canonical label strings work like the enum."""
        assert base_dry_hours("Poorly drained") == 120


class TestResolveBaseDryHours:
    """Tests for resolve_base_dry_hours."""

    def test_precomputed_wins(self):
        """Precomputed hours override the soil table."""
        assert resolve_base_dry_hours(36, DrainageClass.POORLY_DRAINED) == 36

    def test_precomputed_zero_is_honoured(self):
        """Zero is a real value, not a missing one."""
        assert resolve_base_dry_hours(0, DrainageClass.POORLY_DRAINED) == 0

    def test_falls_back_to_soil(self):
        """Without a precomputed value the soil class decides."""
        assert resolve_base_dry_hours(None, DrainageClass.POORLY_DRAINED) == 120

    def test_nothing_known(self):
        """No precomputed value and no soil gives the default."""
        assert resolve_base_dry_hours(None, None) == 48


class TestNormalizeDrainageClass:
    """Tests for SSURGO label normalization."""

    def test_exact_match(self):
        """Canonical labels match exactly."""
        assert normalize_drainage_class("Very poorly drained") == DrainageClass.VERY_POORLY_DRAINED

    def test_exact_match_with_whitespace(self):
        """Surrounding whitespace is ignored."""
        assert normalize_drainage_class(" Moderately well drained ") == DrainageClass.MODERATELY_WELL_DRAINED

    def test_lowercase_label(self):
        """Case differences fall through to substring rules."""
        assert normalize_drainage_class("well drained") == DrainageClass.WELL_DRAINED

    def test_somewhat_excessively(self):
        """Somewhat excessively drained maps to excessively drained."""
        assert normalize_drainage_class("Somewhat excessively drained") == DrainageClass.EXCESSIVELY_DRAINED

    def test_somewhat_poorly_before_poorly(self):
        """The more specific 'somewhat poorly' rule wins."""
        assert normalize_drainage_class("somewhat poorly drained") == DrainageClass.SOMEWHAT_POORLY_DRAINED

    def test_very_poorly_before_poorly(self):
        """The more specific 'very poorly' rule wins."""
        assert normalize_drainage_class("VERY POORLY DRAINED") == DrainageClass.VERY_POORLY_DRAINED

    @pytest.mark.parametrize("label", [None, "", "Subaqueous"])
    def test_unrecognised(self, label):
        """Empty or unknown labels give None."""
        assert normalize_drainage_class(label) is None


class TestDryHoursForLabel:
    """Tests for dry_hours_for_label."""

    def test_somewhat_excessively_has_own_value(self):
        """Somewhat excessively drained dries in 12 hours."""
        assert dry_hours_for_label("Somewhat excessively drained") == 12

    def test_canonical_label(self):
        """Canonical labels use the table."""
        assert dry_hours_for_label("Poorly drained") == 120

    def test_missing_label(self):
        """No label gives the default."""
        assert dry_hours_for_label(None) == 48

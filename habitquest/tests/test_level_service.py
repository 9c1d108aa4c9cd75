"""
Tests for level resolution and level progress.
"""
import pytest

from habitquest.services.level_service import resolve_level, progress_to_next, LEVELS


class TestResolveLevel:
    """Tests for resolve_level"""

    @pytest.mark.parametrize("lifetime_points,expected_level", [
        (0, 1),
        (99, 1),
        (100, 2),
        (249, 2),
        (250, 3),
        (500, 4),
        (999, 4),
        (1000, 5),
        (2500, 6),
        (5000, 7),
        (10000, 8),
        (25000, 9),
        (50000, 10),
        (100000, 11),
        (249999, 11),
        (250000, 12),
        (10_000_000, 12),
    ])
    def test_threshold_boundaries(self, lifetime_points, expected_level):
        """Exactly at a threshold belongs to the new tier"""
        assert resolve_level(lifetime_points).level == expected_level

    def test_negative_points_resolve_to_first_tier(self):
        assert resolve_level(-50).level == 1

    def test_tier_carries_multipliers(self):
        tier = resolve_level(600)

        assert tier.name == "Rising"
        assert tier.xp_multiplier == 1.15
        assert tier.daily_bonus_multiplier == 1.15
        assert tier.ad_reward == 70

    def test_monotonic_in_lifetime_points(self):
        """More lifetime points never means a lower level or multiplier"""
        previous = resolve_level(0)
        for points in range(0, 300001, 250):
            tier = resolve_level(points)
            assert tier.level >= previous.level
            assert tier.xp_multiplier >= previous.xp_multiplier
            previous = tier

    def test_twelve_tiers(self):
        assert len(LEVELS) == 12
        assert [t.level for t in LEVELS] == list(range(1, 13))


class TestProgressToNext:
    """Tests for progress_to_next"""

    def test_start_of_game(self):
        progress = progress_to_next(0)

        assert progress.current == 0
        assert progress.required == 100
        assert progress.percent == 0

    def test_halfway_through_tier(self):
        # Tier 4 spans 500..1000
        progress = progress_to_next(750)

        assert progress.current == 250
        assert progress.required == 500
        assert progress.percent == 50

    def test_final_tier_clamped(self):
        progress = progress_to_next(1_000_000)

        assert progress.percent == 100
        assert progress.required == 0

"""Tests for modules/billing/policy.py."""

from decimal import Decimal

import pytest

from modules.billing.exceptions import FeatureNotAvailableError
from modules.billing.models import (
    Allow,
    ApproachingLimit,
    Deny,
    Feature,
    ResourceKind,
    SubscriptionTier,
)
from modules.billing.policy import TIER_LIMITS, TierPolicyEngine


@pytest.fixture
def engine():
    return TierPolicyEngine()


class TestTierTable:
    @pytest.mark.parametrize("tier, groups, members, expenses, price", [
        (SubscriptionTier.FREE, 1, 1, 100, "0.00"),
        (SubscriptionTier.PERSONAL, 1, 2, 1000, "4.99"),
        (SubscriptionTier.FAMILY, 3, 10, 5000, "9.99"),
        (SubscriptionTier.TEAM, 10, 50, 25000, "19.99"),
    ])
    def test_bounded_tiers(self, engine, tier, groups, members, expenses, price):
        assert engine.ceiling(tier, ResourceKind.GROUPS) == groups
        assert engine.ceiling(tier, ResourceKind.MEMBERS_PER_GROUP) == members
        assert engine.ceiling(tier, ResourceKind.EXPENSES_PER_PERIOD) == expenses
        assert engine.limits(tier).price_usd == Decimal(price)

    def test_enterprise_is_unbounded(self, engine):
        for kind in ResourceKind:
            assert engine.ceiling(SubscriptionTier.ENTERPRISE, kind) is None

    def test_every_tier_has_limits(self):
        assert set(TIER_LIMITS) == set(SubscriptionTier)

    def test_prices_increase_with_tier(self):
        prices = [TIER_LIMITS[t].price_usd for t in SubscriptionTier]
        assert prices == sorted(prices)


class TestEvaluate:
    def test_allow_well_under_limit(self, engine):
        decision = engine.evaluate(SubscriptionTier.FREE, ResourceKind.EXPENSES_PER_PERIOD, current=10)
        assert isinstance(decision, Allow)
        assert decision.limit == 100

    def test_just_under_eighty_percent_allows(self, engine):
        decision = engine.evaluate(SubscriptionTier.FREE, ResourceKind.EXPENSES_PER_PERIOD, current=79)
        assert isinstance(decision, Allow)

    def test_approaching_at_eighty_percent(self, engine):
        decision = engine.evaluate(SubscriptionTier.FREE, ResourceKind.EXPENSES_PER_PERIOD, current=80)
        assert isinstance(decision, ApproachingLimit)
        assert decision.suggested_tier == SubscriptionTier.PERSONAL
        assert decision.suggested_price_usd == Decimal("4.99")

    def test_last_unit_is_allowed(self, engine):
        decision = engine.evaluate(SubscriptionTier.FREE, ResourceKind.EXPENSES_PER_PERIOD, current=99)
        assert isinstance(decision, ApproachingLimit)

    def test_deny_past_limit(self, engine):
        decision = engine.evaluate(SubscriptionTier.FREE, ResourceKind.EXPENSES_PER_PERIOD, current=100)
        assert isinstance(decision, Deny)
        assert decision.current == 100
        assert decision.limit == 100

    def test_increment_counts_toward_projection(self, engine):
        decision = engine.evaluate(
            SubscriptionTier.FREE, ResourceKind.EXPENSES_PER_PERIOD, current=95, requested_increment=10
        )
        assert isinstance(decision, Deny)

    def test_agrees_with_near_limit_flag(self, engine):
        for current in (0, 79, 80, 99):
            decision = engine.evaluate(SubscriptionTier.FREE, ResourceKind.EXPENSES_PER_PERIOD, current=current)
            near = engine.is_near_limit(SubscriptionTier.FREE, ResourceKind.EXPENSES_PER_PERIOD, current)
            assert isinstance(decision, ApproachingLimit) == near

    def test_unbounded_always_allows(self, engine):
        decision = engine.evaluate(SubscriptionTier.ENTERPRISE, ResourceKind.GROUPS, current=10_000)
        assert isinstance(decision, Allow)
        assert decision.limit is None

    def test_custom_ratio(self):
        engine = TierPolicyEngine(approaching_ratio=0.5)
        below = engine.evaluate(SubscriptionTier.FREE, ResourceKind.EXPENSES_PER_PERIOD, current=49)
        at = engine.evaluate(SubscriptionTier.FREE, ResourceKind.EXPENSES_PER_PERIOD, current=50)
        assert isinstance(below, Allow)
        assert isinstance(at, ApproachingLimit)

    def test_decisions_serialize_with_discriminator(self, engine):
        decision = engine.evaluate(SubscriptionTier.FREE, ResourceKind.GROUPS, current=1)
        assert decision.model_dump(mode="json")["decision"] == "deny"


class TestSuggestUpgrade:
    def test_skips_tiers_without_more_room(self, engine):
        """Personal has the same group ceiling as free, so family is suggested."""
        assert engine.suggest_upgrade(SubscriptionTier.FREE, ResourceKind.GROUPS) == SubscriptionTier.FAMILY

    def test_next_tier_when_larger(self, engine):
        assert (
            engine.suggest_upgrade(SubscriptionTier.FAMILY, ResourceKind.MEMBERS_PER_GROUP)
            == SubscriptionTier.TEAM
        )

    def test_enterprise_after_team(self, engine):
        assert engine.suggest_upgrade(SubscriptionTier.TEAM, ResourceKind.GROUPS) == SubscriptionTier.ENTERPRISE

    def test_nothing_above_unbounded(self, engine):
        assert engine.suggest_upgrade(SubscriptionTier.ENTERPRISE, ResourceKind.GROUPS) is None


class TestNearLimit:
    def test_flags(self, engine):
        assert engine.is_near_limit(SubscriptionTier.FREE, ResourceKind.EXPENSES_PER_PERIOD, 80)
        assert not engine.is_near_limit(SubscriptionTier.FREE, ResourceKind.EXPENSES_PER_PERIOD, 79)
        assert not engine.is_near_limit(SubscriptionTier.ENTERPRISE, ResourceKind.GROUPS, 10**6)

    def test_standing_classifies_counted_usage(self, engine):
        assert isinstance(engine.standing(SubscriptionTier.FREE, ResourceKind.GROUPS, 0), Allow)
        full = engine.standing(SubscriptionTier.FREE, ResourceKind.GROUPS, 1)
        assert isinstance(full, ApproachingLimit)
        assert full.current == 1
        assert full.suggested_tier == SubscriptionTier.FAMILY


class TestCheckFeature:
    def test_included_feature(self, engine):
        engine.check_feature(SubscriptionTier.PERSONAL, Feature.EXPORT_DATA)

    def test_missing_feature_names_required_tier(self, engine):
        with pytest.raises(FeatureNotAvailableError) as exc_info:
            engine.check_feature(SubscriptionTier.FREE, Feature.ADVANCED_REPORTS)
        assert exc_info.value.details["required_tier"] == "family"

    def test_priority_support_needs_team(self, engine):
        with pytest.raises(FeatureNotAvailableError) as exc_info:
            engine.check_feature(SubscriptionTier.FAMILY, Feature.PRIORITY_SUPPORT)
        assert exc_info.value.details["required_tier"] == "team"

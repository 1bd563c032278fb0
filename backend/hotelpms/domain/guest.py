"""
hotelpms/domain/guest.py

Guest ledger - statistics and loyalty recomputed at stay completion.
"""
from datetime import datetime
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from typing import Optional
import logging

from hotelpms.domain.errors import InvalidAmount
from hotelpms.domain.money import Numeric, to_money
from hotelpms.models.ontology import Guest, GuestTier

logger = logging.getLogger(__name__)

# Highest qualifying threshold wins
TIER_THRESHOLDS = [
    (10000, GuestTier.PLATINUM),
    (5000, GuestTier.GOLD),
    (2000, GuestTier.SILVER),
]

TIER_RANK = {
    GuestTier.BRONZE: 0,
    GuestTier.SILVER: 1,
    GuestTier.GOLD: 2,
    GuestTier.PLATINUM: 3,
}

AVERAGE_PRECISION = Decimal("0.01")


def tier_for_points(points: int) -> Optional[GuestTier]:
    """Tier earned by a points balance, None below the first threshold"""
    for threshold, tier in TIER_THRESHOLDS:
        if points >= threshold:
            return tier
    return None


def record_completed_stay(guest: Guest, revenue: Numeric, stay_duration_nights: int, now: datetime) -> None:
    """
    Fold one finished stay into the guest's statistics

    The average is a running mean from the previous average and count, not
    from the full stay history.
    """
    amount = to_money(revenue)
    if amount < 0:
        raise InvalidAmount(f"Revenue cannot be negative: {revenue}")
    if stay_duration_nights < 0:
        raise InvalidAmount(f"Stay duration cannot be negative: {stay_duration_nights}")

    previous_average = Decimal(str(guest.average_stay_duration or 0))
    guest.total_bookings = (guest.total_bookings or 0) + 1
    guest.total_revenue = to_money((guest.total_revenue or 0) + amount)
    guest.last_stay_date = now

    total_stay_days = previous_average * (guest.total_bookings - 1) + stay_duration_nights
    guest.average_stay_duration = (total_stay_days / guest.total_bookings).quantize(
        AVERAGE_PRECISION, rounding=ROUND_HALF_UP
    )
    logger.info(
        f"Guest {guest.id} stay recorded: bookings={guest.total_bookings}, "
        f"revenue={guest.total_revenue}, avg_stay={guest.average_stay_duration}"
    )


def add_loyalty_points(guest: Guest, points: int) -> Optional[GuestTier]:
    """
    Add points and upgrade the tier if a threshold is crossed

    The tier never downgrades automatically.

    Returns:
        the new tier when it changed, otherwise None
    """
    if points < 0:
        raise InvalidAmount(f"Loyalty points cannot be negative: {points}")
    guest.loyalty_points = (guest.loyalty_points or 0) + int(points)

    current = GuestTier(guest.tier) if guest.tier is not None else GuestTier.BRONZE
    earned = tier_for_points(guest.loyalty_points)
    if earned is not None and TIER_RANK[earned] > TIER_RANK[current]:
        guest.tier = earned
        logger.info(f"Guest {guest.id} tier upgraded {current.value} -> {earned.value}")
        return earned
    guest.tier = current
    return None


def points_for_revenue(revenue: Numeric, spend_per_point: Numeric) -> int:
    """Whole points earned for an amount of realized revenue"""
    per_point = Decimal(str(spend_per_point))
    if per_point <= 0:
        raise InvalidAmount(f"Spend per point must be positive: {spend_per_point}")
    amount = to_money(revenue)
    if amount <= 0:
        return 0
    return int((amount / per_point).to_integral_value(rounding=ROUND_DOWN))


__all__ = [
    "TIER_THRESHOLDS",
    "tier_for_points",
    "record_completed_stay",
    "add_loyalty_points",
    "points_for_revenue",
]

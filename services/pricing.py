# services/pricing.py
"""
Tier based pricing for console bookings.

A tier table is nested as
    {cafe_id: {console_type_value: {quantity: {duration_minutes: price}}}}
and is built from ConsolePricing rows with build_tier_table().
"""

import logging
import math

from models.consoleType import ConsoleType

logger = logging.getLogger(__name__)

TIER_DURATIONS = (30, 60)
BOOKABLE_DURATIONS = (30, 60, 90)


def _console_key(console_type):
    parsed = ConsoleType.parse(console_type)
    if parsed is not None:
        return parsed.value
    return str(console_type).strip().lower()


def round_half_up(value):
    return int(math.floor(value + 0.5))


def _field(row, name):
    if isinstance(row, dict):
        return row.get(name)
    return getattr(row, name)


def build_tier_table(rows):
    """Fold ConsolePricing rows (models or dicts) into a nested tier table."""
    table = {}
    for row in rows:
        price = _field(row, 'price')
        if price is None:
            continue
        by_console = table.setdefault(_field(row, 'cafe_id'), {})
        by_quantity = by_console.setdefault(_console_key(_field(row, 'console_type')), {})
        by_duration = by_quantity.setdefault(int(_field(row, 'quantity')), {})
        by_duration[int(_field(row, 'duration_minutes'))] = price
    return table


def lookup_tier(tier_table, cafe_id, console_type, quantity, duration_minutes):
    try:
        return tier_table[cafe_id][_console_key(console_type)][int(quantity)][int(duration_minutes)]
    except (KeyError, TypeError):
        return None


def resolve_price(cafe_id, console_type, quantity, duration_minutes, tier_table, fallback_hourly_rate):
    """
    Price for `quantity` units of `console_type` for `duration_minutes`.

    30/60 minutes use the café's tier when present; 90 minutes is the
    60-minute tier plus the 30-minute tier when both exist. Anything else
    falls back to the hourly rate scaled by quantity and duration.
    """
    tier_table = tier_table or {}

    if duration_minutes in TIER_DURATIONS:
        tier_price = lookup_tier(tier_table, cafe_id, console_type, quantity, duration_minutes)
        if tier_price is not None:
            return tier_price

    elif duration_minutes == 90:
        price_60 = lookup_tier(tier_table, cafe_id, console_type, quantity, 60)
        price_30 = lookup_tier(tier_table, cafe_id, console_type, quantity, 30)
        if price_60 is not None and price_30 is not None:
            return price_60 + price_30

    fallback = round_half_up((fallback_hourly_rate or 0) * quantity * duration_minutes / 60)
    logger.debug(f"💰 [{console_type}] qty={quantity} {duration_minutes}min has no tier, fallback={fallback}")
    return fallback


def max_quantity(console_type):
    """Largest number of units/controllers bookable at once for a console type."""
    console_type = ConsoleType.parse(console_type)
    if console_type in (ConsoleType.pool, ConsoleType.snooker, ConsoleType.xbox):
        return 2
    if console_type in (ConsoleType.pc, ConsoleType.vr, ConsoleType.steering, ConsoleType.racing_sim):
        return 1
    return 4


def _duration_text(duration_minutes):
    if duration_minutes == 30:
        return "30 minutes"
    if duration_minutes == 60:
        return "1 hour"
    return f"{duration_minutes / 60:g} hours"


def generate_tickets(cafe_id, console_type, duration_minutes, tier_table, fallback_hourly_rate):
    """Bookable ticket options (one per quantity) for a console type."""
    console_type = ConsoleType.parse(console_type)
    if console_type is None:
        return []

    tickets = []
    label = console_type.label
    for qty in range(1, max_quantity(console_type) + 1):
        plural = 's' if qty > 1 else ''
        tickets.append({
            'id': f"{console_type.value}_{qty}",
            'console': console_type.value,
            'title': f"{label} | {qty} Console{plural}",
            'players': qty,
            'price': resolve_price(cafe_id, console_type, qty, duration_minutes, tier_table, fallback_hourly_rate),
            'description': f"{qty} {label} console{plural} for {_duration_text(duration_minutes)}.",
        })
    return tickets

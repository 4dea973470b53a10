# services/dashboard_stats.py
"""
Owner dashboard summary figures.

Everything here is a pure fold over booking rows (the dicts produced by
Booking.to_dict or received from the change feed), so the numbers can be
recomputed after any local insert/update/delete without a reload.
"""

from datetime import date, datetime, timedelta

RECENT_WINDOW = 20

INSERT = 'INSERT'
UPDATE = 'UPDATE'
DELETE = 'DELETE'


def _row_date(row):
    value = row.get('booking_date')
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        return None
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def _amount(row):
    return row.get('total_amount') or 0


def _sum_amounts(rows):
    return sum(_amount(row) for row in rows)


def week_start(today):
    """Sunday on or before `today`."""
    return today - timedelta(days=(today.weekday() + 1) % 7)


def quarter_start(today):
    return date(today.year, (today.month - 1) // 3 * 3 + 1, 1)


def compute_stats(bookings, now, cafes_count=0):
    today = now.date() if isinstance(now, datetime) else now
    start_of_week = week_start(today)
    start_of_month = today.replace(day=1)
    start_of_quarter = quarter_start(today)

    active = [row for row in bookings if row.get('status') != 'cancelled']
    dated = [(row, _row_date(row)) for row in active]

    todays = [row for row, day in dated if day == today]
    recent = sorted(active, key=lambda row: row.get('created_at') or '', reverse=True)[:RECENT_WINDOW]

    return {
        'cafes_count': cafes_count,
        'bookings_today': len(todays),
        'pending_bookings': sum(1 for row in bookings if (row.get('status') or '').lower() == 'pending'),
        'recent_bookings': len(recent),
        'recent_revenue': _sum_amounts(recent),
        'today_revenue': _sum_amounts(todays),
        'week_revenue': _sum_amounts(row for row, day in dated if day and day >= start_of_week),
        'month_revenue': _sum_amounts(row for row, day in dated if day and day >= start_of_month),
        'quarter_revenue': _sum_amounts(row for row, day in dated if day and day >= start_of_quarter),
        'total_revenue': _sum_amounts(active),
        'total_bookings': len(bookings),
    }


def apply_booking_delta(bookings, event_type, new_row=None, old_row=None):
    """
    Reconcile a booking list with one change event.

    INSERT and UPDATE upsert by id (replace in place, or prepend when the
    row is new); DELETE removes by id. Re-applying the same event leaves
    the list unchanged. Returns a new list.
    """
    event_type = (event_type or '').upper()

    if event_type == DELETE:
        target_id = (old_row or new_row or {}).get('id')
        return [row for row in bookings if row.get('id') != target_id]

    if event_type not in (INSERT, UPDATE) or not new_row or new_row.get('id') is None:
        return list(bookings)

    updated = []
    replaced = False
    for row in bookings:
        if row.get('id') == new_row['id']:
            updated.append({**row, **new_row})
            replaced = True
        else:
            updated.append(row)

    if not replaced:
        updated.insert(0, dict(new_row))
    return updated

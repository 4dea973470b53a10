# services/dashboard_service.py

from flask import current_app

from services.booking_service import BookingService
from services.booking_sweep import BookingSweepService
from services.cafe_service import CafeService
from services.dashboard_stats import compute_stats
from services.membership_service import MembershipService
from services.pricing_service import PricingService, tier_table_to_json


class DashboardService:

    @staticmethod
    def load_owner_dashboard(owner_id, now):
        """
        Everything the owner dashboard renders in one payload. Ended sessions
        are swept to completed first so the tables and stats agree.
        """
        cafes = CafeService.owner_cafes(owner_id)
        cafe_ids = [cafe.id for cafe in cafes]

        completed = BookingSweepService.sweep(cafe_ids, now=now)
        if completed:
            current_app.logger.info(f"Dashboard load for owner {owner_id} completed {len(completed)} booking(s)")

        bookings = BookingService.owner_bookings(cafes)
        plans = MembershipService.plans_for_cafes(cafe_ids)

        return {
            'cafes': [cafe.to_dict() for cafe in cafes],
            'bookings': bookings,
            'console_pricing': tier_table_to_json(PricingService.tier_table(cafe_ids)),
            'station_pricing': PricingService.station_pricing_map(cafe_ids),
            'membership_plans': [plan.to_dict() for plan in plans],
            'stats': compute_stats(bookings, now, cafes_count=len(cafes)),
            'auto_completed': len(completed),
            'refresh_seconds': current_app.config.get('DASHBOARD_REFRESH_SECONDS', 10),
        }

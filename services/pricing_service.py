# services/pricing_service.py

from flask import current_app

from db.extensions import db
from models.consolePricing import ConsolePricing
from models.stationPricing import StationPricing
from models.consoleType import ConsoleType
from services.errors import BookingValidationError
from services.pricing import build_tier_table, generate_tickets, max_quantity, TIER_DURATIONS, BOOKABLE_DURATIONS
from services.stations import parse_station_name, station_names


def _optional_price(value, field):
    if value is None or value == '':
        return None
    try:
        price = int(value)
    except (TypeError, ValueError):
        raise BookingValidationError(f"{field} must be a whole number")
    if price < 0:
        raise BookingValidationError(f"{field} cannot be negative")
    return price


def tier_table_to_json(tier_table):
    """{cafe: {console: {"qty2_60min": price}}} for dashboard clients."""
    return {
        cafe_id: {
            console: {
                f"qty{qty}_{duration}min": price
                for qty, durations in quantities.items()
                for duration, price in durations.items()
            }
            for console, quantities in consoles.items()
        }
        for cafe_id, consoles in tier_table.items()
    }


class PricingService:

    @staticmethod
    def tier_table(cafe_ids):
        if not cafe_ids:
            return {}
        rows = ConsolePricing.query.filter(ConsolePricing.cafe_id.in_(cafe_ids)).all()
        return build_tier_table(rows)

    @staticmethod
    def upsert_console_pricing(cafe, entries):
        """
        Save tier prices for a café. An entry with a null price removes the
        tier so the resolver falls back to the hourly rate.
        """
        existing = {
            (row.console_type, row.quantity, row.duration_minutes): row
            for row in ConsolePricing.query.filter_by(cafe_id=cafe.id).all()
        }

        try:
            for entry in entries:
                console_type = ConsoleType.parse(entry.get('console_type'))
                if console_type is None:
                    raise BookingValidationError(f"Unknown console type '{entry.get('console_type')}'")

                try:
                    quantity = int(entry.get('quantity'))
                    duration = int(entry.get('duration_minutes'))
                except (TypeError, ValueError):
                    raise BookingValidationError("quantity and duration_minutes must be numbers")
                if duration not in TIER_DURATIONS:
                    raise BookingValidationError("duration_minutes must be 30 or 60")
                if not 1 <= quantity <= max_quantity(console_type):
                    raise BookingValidationError(
                        f"quantity for {console_type.label} must be between 1 and {max_quantity(console_type)}"
                    )

                price = _optional_price(entry.get('price'), 'price')
                key = (console_type, quantity, duration)
                row = existing.get(key)

                if price is None:
                    if row is not None:
                        db.session.delete(row)
                        existing.pop(key)
                elif row is not None:
                    row.price = price
                else:
                    row = ConsolePricing(cafe_id=cafe.id, console_type=console_type, quantity=quantity,
                                         duration_minutes=duration, price=price)
                    db.session.add(row)
                    existing[key] = row

            db.session.commit()
        except BookingValidationError:
            db.session.rollback()
            raise
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"❌ Failed to save console pricing for café {cafe.id}: {str(e)}")
            raise

        current_app.logger.info(f"Saved {len(entries)} console pricing tier(s) for café {cafe.id}")
        return PricingService.tier_table([cafe.id])

    @staticmethod
    def _station_record(cafe, data):
        name = (data.get('station_name') or '').upper()
        parsed = parse_station_name(name)
        if parsed is None:
            raise BookingValidationError(f"Invalid station name '{data.get('station_name')}'")
        if name not in station_names(cafe.inventory):
            raise BookingValidationError(f"Station {name} does not exist in this café's inventory")

        console_type, number = parsed
        rates = {field: _optional_price(data.get(field), field) for field in StationPricing.RATE_FIELDS}
        if console_type.is_gaming_console and rates['controller_1_full_hour'] is None:
            raise BookingValidationError(f"{name}: controller_1_full_hour is required for gaming consoles")
        return name, console_type, number, rates

    @staticmethod
    def upsert_station_pricing(cafe, records, apply_to_all=False):
        """
        Save per-station overrides keyed by (café, station name). With
        apply_to_all the first record is copied to every station of its type.
        """
        if not records:
            raise BookingValidationError("No station pricing supplied")

        if apply_to_all:
            template = records[0]
            parsed = parse_station_name((template.get('station_name') or '').upper())
            if parsed is None:
                raise BookingValidationError(f"Invalid station name '{template.get('station_name')}'")
            prefix = parsed[0].station_prefix + '-'
            records = [
                {**template, 'station_name': name}
                for name in station_names(cafe.inventory) if name.startswith(prefix)
            ]

        existing = {row.station_name: row for row in StationPricing.query.filter_by(cafe_id=cafe.id).all()}
        saved = []
        try:
            for data in records:
                name, console_type, number, rates = PricingService._station_record(cafe, data)
                row = existing.get(name)
                if row is None:
                    row = StationPricing(cafe_id=cafe.id, station_name=name)
                    db.session.add(row)
                    existing[name] = row
                row.station_type = console_type.value
                row.station_number = number
                row.is_active = bool(data.get('is_active', True))
                for field, value in rates.items():
                    setattr(row, field, value)
                saved.append(row)

            db.session.commit()
        except BookingValidationError:
            db.session.rollback()
            raise
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"❌ Failed to save station pricing for café {cafe.id}: {str(e)}")
            raise

        current_app.logger.info(f"Saved pricing for {len(saved)} station(s) at café {cafe.id}")
        return saved

    @staticmethod
    def station_pricing_map(cafe_ids):
        if not cafe_ids:
            return {}
        rows = (
            StationPricing.query
            .filter(StationPricing.cafe_id.in_(cafe_ids), StationPricing.is_active.is_(True))
            .order_by(StationPricing.station_number)
            .all()
        )
        return {row.station_name: row.to_dict() for row in rows}

    @staticmethod
    def tickets(cafe, duration_minutes):
        if duration_minutes not in BOOKABLE_DURATIONS:
            raise BookingValidationError("duration must be 30, 60 or 90 minutes")

        tier_table = PricingService.tier_table([cafe.id])
        tickets = []
        for console_type in ConsoleType:
            if cafe.inventory.get(console_type):
                tickets.extend(generate_tickets(cafe.id, console_type, duration_minutes,
                                                tier_table, cafe.hourly_price))
        return tickets

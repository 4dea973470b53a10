# services/membership_service.py

from flask import current_app

from db.extensions import db
from models.consoleType import ConsoleType
from models.membershipPlan import MembershipPlan, PLAN_TYPES, PLAYER_COUNTS
from services.errors import BookingNotFound, BookingValidationError


def _positive_int(value, field, required=True):
    if value is None or value == '':
        if required:
            raise BookingValidationError(f"{field} is required")
        return None
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise BookingValidationError(f"{field} must be a whole number")
    if number <= 0:
        raise BookingValidationError(f"{field} must be greater than zero")
    return number


def validate_plan(data):
    """Normalise a membership plan payload; raises BookingValidationError."""
    name = (data.get('name') or '').strip()
    if not name:
        raise BookingValidationError("Plan name is required")

    plan_type = data.get('plan_type')
    if plan_type not in PLAN_TYPES:
        raise BookingValidationError(f"plan_type must be one of {', '.join(PLAN_TYPES)}")

    console_type = ConsoleType.parse(data.get('console_type'))
    if console_type is None:
        raise BookingValidationError(f"Unknown console type '{data.get('console_type')}'")

    player_count = data.get('player_count') or 'single'
    if player_count not in PLAYER_COUNTS:
        raise BookingValidationError(f"player_count must be one of {', '.join(PLAYER_COUNTS)}")

    hours = _positive_int(data.get('hours'), 'hours', required=plan_type == 'hourly_package')

    return {
        'name': name,
        'plan_type': plan_type,
        'console_type': console_type.value,
        'player_count': player_count,
        'price': _positive_int(data.get('price'), 'price'),
        'hours': hours if plan_type == 'hourly_package' else None,
        'validity_days': _positive_int(data.get('validity_days') or 30, 'validity_days'),
        'description': data.get('description'),
    }


class MembershipService:

    @staticmethod
    def active_plans(cafe_id):
        return (
            MembershipPlan.query
            .filter_by(cafe_id=cafe_id, is_active=True)
            .order_by(MembershipPlan.price)
            .all()
        )

    @staticmethod
    def plans_for_cafes(cafe_ids):
        if not cafe_ids:
            return []
        return (
            MembershipPlan.query
            .filter(MembershipPlan.cafe_id.in_(cafe_ids), MembershipPlan.is_active.is_(True))
            .order_by(MembershipPlan.cafe_id, MembershipPlan.price)
            .all()
        )

    @staticmethod
    def save_plan(cafe, data):
        """Create a plan, or update it in place when the payload carries an id."""
        fields = validate_plan(data)

        if data.get('id'):
            plan = MembershipPlan.query.filter_by(id=data['id'], cafe_id=cafe.id).first()
            if not plan:
                raise BookingNotFound("Membership plan not found")
        else:
            plan = MembershipPlan(cafe_id=cafe.id)
            db.session.add(plan)

        for field, value in fields.items():
            setattr(plan, field, value)
        plan.is_active = True

        try:
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"❌ Failed to save membership plan for café {cafe.id}: {str(e)}")
            raise

        current_app.logger.info(f"Membership plan {plan.id} saved for café {cafe.id}")
        return plan

    @staticmethod
    def deactivate_plan(plan_id, cafe_ids):
        """Soft delete: the row stays for existing members but leaves listings."""
        plan = MembershipPlan.query.get(plan_id)
        if not plan or plan.cafe_id not in cafe_ids:
            raise BookingNotFound("Membership plan not found")

        plan.is_active = False
        try:
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            current_app.logger.error(f"❌ Failed to deactivate membership plan {plan_id}: {str(e)}")
            raise

        current_app.logger.info(f"Membership plan {plan_id} deactivated")
        return plan

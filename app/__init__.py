# app/__init__.py

import logging
import os
import time
from flask import Flask, request, jsonify
from flask_cors import CORS
from sqlalchemy import text
from werkzeug.exceptions import HTTPException

from .config import Config
from db.extensions import db, migrate, mail, init_redis, check_redis_health, warm_redis_pool
from controllers.owner_controller import owner_bp
from controllers.cafe_controller import cafe_bp
from controllers.pricing_controller import pricing_bp
from controllers.membership_controller import membership_bp
from controllers.booking_controller import booking_bp, cron_bp
from services.booking_events import BookingEventPublisher
from services.errors import BookingError
from services.owner_session import RedisSessionStore


def create_app(config_class=Config, session_store=None, event_publisher=None):
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config_class)

    # CORS with credentials support for the owner dashboard
    CORS(app,
         origins=app.config.get('CORS_ORIGINS'),
         methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
         allow_headers=['Content-Type', 'Authorization', 'X-Cron-Secret'],
         supports_credentials=True,
         expose_headers=['Content-Type', 'Authorization'],
         max_age=3600
    )

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    mail.init_app(app)
    redis_client = init_redis(app)

    app.extensions['owner_sessions'] = session_store or RedisSessionStore(
        redis_client, ttl_seconds=app.config['OWNER_SESSION_TTL_SECONDS']
    )
    app.extensions['booking_events'] = event_publisher or BookingEventPublisher(
        redis_client, webhook_url=app.config.get('BOOKING_EVENTS_WEBHOOK_URL')
    )

    if not app.config.get('TESTING'):
        warm_redis_pool(redis_client)

    # Register blueprints
    app.register_blueprint(owner_bp, url_prefix='/api')
    app.register_blueprint(cafe_bp, url_prefix='/api')
    app.register_blueprint(pricing_bp, url_prefix='/api')
    app.register_blueprint(membership_bp, url_prefix='/api')
    app.register_blueprint(booking_bp, url_prefix='/api')
    app.register_blueprint(cron_bp, url_prefix='/api')

    # Configure logging
    debug_mode = os.getenv("DEBUG_MODE", "false").lower() == "true"
    log_level = logging.DEBUG if debug_mode else logging.INFO
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    app.logger.setLevel(log_level)

    # Request timing middleware for performance monitoring
    @app.before_request
    def before_request():
        request.start_time = time.time()
        if debug_mode:
            app.logger.debug(f"🚀 Started {request.method} {request.path}")

    @app.after_request
    def after_request(response):
        if hasattr(request, 'start_time'):
            elapsed = (time.time() - request.start_time) * 1000

            # Log slow requests (over 500ms)
            if elapsed > 500:
                app.logger.warning(
                    f"⚠️  SLOW REQUEST: {request.method} {request.path} "
                    f"took {elapsed:.2f}ms - Status: {response.status_code}"
                )
            elif debug_mode:
                app.logger.info(
                    f"✅ {request.method} {request.path} "
                    f"took {elapsed:.2f}ms - Status: {response.status_code}"
                )

        return response

    @app.errorhandler(BookingError)
    def handle_booking_error(e):
        app.logger.info(f"{type(e).__name__} on {request.method} {request.path}: {e.message}")
        return jsonify({'success': False, 'message': e.message}), e.status_code

    # Global error handler
    @app.errorhandler(Exception)
    def handle_exception(e):
        if isinstance(e, HTTPException):
            return jsonify({'success': False, 'message': e.description}), e.code

        db.session.rollback()
        app.logger.error(f"❌ Unhandled exception: {str(e)}", exc_info=True)
        return jsonify({
            'success': False,
            'message': 'Internal server error. Please try again.'
        }), 500

    # Health check endpoint
    @app.route('/api/health', methods=['GET'])
    def health_check():
        """Health check endpoint for monitoring"""
        try:
            db.session.execute(text('SELECT 1'))
        except Exception as e:
            app.logger.error(f"❌ Health check failed: {str(e)}")
            return {
                'status': 'error',
                'message': str(e),
                'timestamp': time.time()
            }, 500

        redis_ok = check_redis_health(redis_client)
        return {
            'status': 'ok' if redis_ok else 'degraded',
            'database': 'connected',
            'redis': 'connected' if redis_ok else 'unavailable',
            'timestamp': time.time()
        }, 200

    return app

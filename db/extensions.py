# db/extensions.py

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from flask_mail import Mail
import redis
from redis.connection import ConnectionPool, SSLConnection
import urllib.parse
import logging

db = SQLAlchemy()
migrate = Migrate()
mail = Mail()

logger = logging.getLogger(__name__)


def create_redis_pool(redis_url=None, use_tls=False, host='localhost', port=6379, db_index=0):
    """
    Build one shared connection pool so session lookups and booking
    notifications reuse connections instead of re-handshaking.
    """
    if redis_url:
        parsed = urllib.parse.urlparse(redis_url)

        pool_kwargs = {
            'host': parsed.hostname,
            'port': parsed.port or 6379,
            'username': parsed.username,
            'password': parsed.password,
            'decode_responses': True,
            'socket_connect_timeout': 10,
            'socket_timeout': 5,
            'socket_keepalive': True,
            'retry_on_timeout': True,
            'retry_on_error': [
                redis.exceptions.ConnectionError,
                redis.exceptions.TimeoutError
            ],
            'health_check_interval': 30,
            'max_connections': 50,
        }

        if use_tls or parsed.scheme == 'rediss':
            pool_kwargs.update({
                'connection_class': SSLConnection,
                'ssl_cert_reqs': None,
                'ssl_check_hostname': False,
            })
            logger.info("✅ Redis pool with SSL/TLS enabled")

        pool = ConnectionPool(**pool_kwargs)
        logger.info(f"✅ Redis connection pool created: {parsed.hostname}")
        return pool

    logger.info("🔧 Local Redis pool")
    return ConnectionPool(
        host=host,
        port=port,
        db=db_index,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        retry_on_timeout=True,
        max_connections=20,
    )


def init_redis(app):
    """Attach a pooled Redis client to the app as app.extensions['redis']."""
    pool = create_redis_pool(
        redis_url=app.config.get('REDIS_URL'),
        use_tls=app.config.get('REDIS_TLS_ENABLED', False),
        host=app.config.get('REDIS_HOST', 'localhost'),
        port=app.config.get('REDIS_PORT', 6379),
        db_index=app.config.get('REDIS_DB', 0),
    )
    client = redis.Redis(connection_pool=pool)
    app.extensions['redis'] = client
    return client


def check_redis_health(client):
    """Check Redis connection health"""
    try:
        client.ping()
        return True
    except Exception as e:
        logger.error(f"❌ Redis health check failed: {str(e)}")
        return False


def warm_redis_pool(client):
    try:
        logger.info("🔄 Pre-warming Redis connection pool...")
        client.ping()
        logger.info("✅ Redis connection pool ready")
    except redis.exceptions.RedisError as e:
        logger.warning(f"⚠️  Redis pre-warm failed (will retry on first request): {str(e)}")

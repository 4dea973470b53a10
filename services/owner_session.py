# services/owner_session.py
"""
Owner dashboard sessions.

A session token maps to {owner_id, username, issued_at}. Every protected
request re-checks the fixed validity window; an expired session is cleared
and the owner has to log in again.
"""

import json
import time
import uuid
import logging
from functools import wraps

from flask import current_app, request, jsonify, g

logger = logging.getLogger(__name__)

SESSION_KEY_PREFIX = 'owner_session:'
DEFAULT_TTL_SECONDS = 24 * 60 * 60


class RedisSessionStore:
    """Session store backed by the shared Redis client."""

    def __init__(self, client, ttl_seconds=DEFAULT_TTL_SECONDS):
        self.client = client
        self.ttl_seconds = ttl_seconds

    def get(self, token):
        raw = self.client.get(f'{SESSION_KEY_PREFIX}{token}')
        return json.loads(raw) if raw else None

    def set(self, token, session):
        self.client.setex(f'{SESSION_KEY_PREFIX}{token}', self.ttl_seconds, json.dumps(session))

    def clear(self, token):
        self.client.delete(f'{SESSION_KEY_PREFIX}{token}')


class MemorySessionStore:
    """Process-local session store for single-process development and tests."""

    def __init__(self):
        self._sessions = {}

    def get(self, token):
        return self._sessions.get(token)

    def set(self, token, session):
        self._sessions[token] = dict(session)

    def clear(self, token):
        self._sessions.pop(token, None)


def get_session_store():
    return current_app.extensions['owner_sessions']


def issue_session(store, owner_id, username, now=None):
    token = uuid.uuid4().hex
    store.set(token, {
        'owner_id': owner_id,
        'username': username or 'Owner',
        'issued_at': now if now is not None else time.time(),
    })
    return token


def load_session(store, token, ttl_seconds=DEFAULT_TTL_SECONDS, now=None):
    """Return the session for `token`, or None if missing or expired."""
    if not token:
        return None

    session = store.get(token)
    if not session:
        return None

    now = now if now is not None else time.time()
    try:
        expired = now - float(session['issued_at']) > ttl_seconds
    except (KeyError, TypeError, ValueError):
        expired = True

    if expired:
        store.clear(token)
        logger.info(f"Owner session for {session.get('owner_id')} expired")
        return None
    return session


def bearer_token():
    header = request.headers.get('Authorization', '')
    if header.lower().startswith('bearer '):
        return header[7:].strip()
    return None


def owner_required(view):
    """Reject the request with 401 unless it carries a live owner session."""

    @wraps(view)
    def wrapped(*args, **kwargs):
        session = load_session(
            get_session_store(),
            bearer_token(),
            ttl_seconds=current_app.config.get('OWNER_SESSION_TTL_SECONDS', DEFAULT_TTL_SECONDS),
        )
        if not session:
            return jsonify({'success': False, 'message': 'Session expired. Please log in again.'}), 401

        g.owner_id = session['owner_id']
        g.owner_username = session.get('username', 'Owner')
        return view(*args, **kwargs)

    return wrapped

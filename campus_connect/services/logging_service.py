# campus_connect/services/logging_service.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple
import logging
import os

from flask import current_app, has_app_context
from google.cloud import firestore

logger = logging.getLogger(__name__)

_clients: Dict[Tuple[Optional[str], Optional[str]], firestore.Client] = {}


def firestore_client() -> firestore.Client:
    """One cached client per (project, database) pair from the app config."""
    project = current_app.config.get("FIRESTORE_PROJECT") or None
    database = current_app.config.get("FIRESTORE_DB") or None

    key = (project, database)
    if key not in _clients:
        kwargs = {name: value for name, value in (("project", project), ("database", database)) if value}
        _clients[key] = firestore.Client(**kwargs)
    return _clients[key]


def _testing() -> bool:
    if os.environ.get("TESTING") == "1":
        return True
    return has_app_context() and bool(current_app.config.get("TESTING"))


def log_event(action: str, user_id: Optional[int] = None, meta: Optional[Dict[str, Any]] = None) -> None:
    """Append an audit record to the Firestore ``logs`` collection."""
    logger.info("audit action=%s user_id=%s meta=%s", action, user_id, meta or {})

    # Disable external writes during unit tests
    if _testing() or not has_app_context():
        return

    doc = {
        "action": action,
        "user_id": user_id,
        "meta": meta or {},
        "created_at": datetime.now(timezone.utc).isoformat(),
    }

    try:
        firestore_client().collection("logs").add(doc)
    except Exception:
        logger.exception("Firestore logging failed for action %s", action)

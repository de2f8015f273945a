from datetime import datetime, timezone
from flask import Blueprint, jsonify, request
from flask_login import current_user
from sqlalchemy import func, or_, select
from ..constants import (
    APPROVAL_STATUSES,
    STATUS_APPROVED,
    STATUS_PENDING,
    STATUS_REJECTED,
)
from ..errors import bad_request, not_found, validation_failed
from ..extensions import db
from ..models import Club, Event, User
from ..pagination import paginate
from ..security import admin_required
from ..serializers import club_to_dict, event_to_dict, user_to_dict
from ..services import email_service
from ..services.logging_service import log_event
from ..validation import validate_rejection, validate_role


admin_bp = Blueprint("admin", __name__, url_prefix="/admin")


@admin_bp.before_request
@admin_required
def require_admin():
    """All admin routes need an authenticated admin."""


def _count(stmt) -> int:
    return db.session.scalar(stmt) or 0


def _now():
    return datetime.now(timezone.utc)


@admin_bp.get("/stats")
def stats():
    total_users = _count(select(func.count(User.id)))
    total_events = _count(select(func.count(Event.id)))
    by_status = {
        status: _count(select(func.count(Event.id)).where(Event.status == status))
        for status in APPROVAL_STATUSES
    }
    total_clubs = _count(select(func.count(Club.id)).where(Club.is_active.is_(True)))
    pending_clubs = _count(
        select(func.count(Club.id)).where(Club.is_active.is_(True), Club.status == STATUS_PENDING)
    )

    events_by_status = {
        "totalEvents": total_events,
        "pendingEvents": by_status[STATUS_PENDING],
        "approvedEvents": by_status[STATUS_APPROVED],
        "rejectedEvents": by_status[STATUS_REJECTED],
    }
    return jsonify({
        "totalUsers": total_users,
        **events_by_status,
        "totalClubs": total_clubs,
        "pendingClubs": pending_clubs,
        "eventsByStatus": events_by_status,
    }), 200


# --- Event moderation ---

@admin_bp.get("/events")
def list_events():
    stmt = select(Event)

    status = request.args.get("status")
    if status and status != "all":
        stmt = stmt.where(Event.status == status)

    search = (request.args.get("search") or "").strip()
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(
            Event.title.ilike(pattern),
            Event.description.ilike(pattern),
            Event.location.ilike(pattern),
        ))

    events, meta = paginate(stmt.order_by(Event.created_at.desc(), Event.id.desc()))
    return jsonify({"events": [event_to_dict(e) for e in events], **meta}), 200


@admin_bp.patch("/events/<int:event_id>/approve")
def approve_event(event_id: int):
    event = db.session.get(Event, event_id)
    if not event:
        return not_found("Event not found")
    if event.status == STATUS_APPROVED:
        return bad_request("Event is already approved.")

    event.status = STATUS_APPROVED
    event.admin_approval_date = _now()
    event.admin_approval_message = "Approved by admin."
    db.session.commit()

    if event.organizer and event.organizer.email:
        email_service.send_event_status_update_email(event.organizer.email, event, STATUS_APPROVED)
    log_event("event_approved", user_id=current_user.id, meta={"event_id": event.id})

    return jsonify({"message": "Event approved successfully", "event": event_to_dict(event)}), 200


@admin_bp.patch("/events/<int:event_id>/reject")
def reject_event(event_id: int):
    data = request.get_json(silent=True) or {}
    errors = validate_rejection(data)
    if errors:
        return validation_failed(errors)

    event = db.session.get(Event, event_id)
    if not event:
        return not_found("Event not found")
    if event.status == STATUS_REJECTED:
        return bad_request("Event is already rejected.")

    event.status = STATUS_REJECTED
    event.admin_approval_date = _now()
    event.admin_approval_message = data["reason"].strip()
    db.session.commit()

    if event.organizer and event.organizer.email:
        email_service.send_event_status_update_email(
            event.organizer.email, event, STATUS_REJECTED, event.admin_approval_message
        )
    log_event("event_rejected", user_id=current_user.id, meta={"event_id": event.id})

    return jsonify({"message": "Event rejected successfully", "event": event_to_dict(event)}), 200


# --- Club moderation ---

@admin_bp.get("/clubs/pending")
def pending_clubs():
    stmt = (
        select(Club)
        .where(Club.is_active.is_(True), Club.status == STATUS_PENDING)
        .order_by(Club.created_at.desc(), Club.id.desc())
    )
    clubs = db.session.scalars(stmt).all()
    return jsonify({"clubs": [club_to_dict(c) for c in clubs]}), 200


@admin_bp.route("/clubs/<int:club_id>/approve", methods=["PUT", "PATCH"])
def approve_club(club_id: int):
    club = db.session.get(Club, club_id)
    if not club or not club.is_active:
        return not_found("Club not found")
    if club.status == STATUS_APPROVED:
        return bad_request("Club is already approved.")

    club.status = STATUS_APPROVED
    club.admin_approval_date = _now()
    club.admin_approval_message = "Approved by admin."
    db.session.commit()

    if club.organizer and club.organizer.email:
        email_service.send_club_status_update_email(club.organizer.email, club, STATUS_APPROVED)
    log_event("club_approved", user_id=current_user.id, meta={"club_id": club.id})

    return jsonify({"message": "Club approved successfully", "club": club_to_dict(club)}), 200


@admin_bp.route("/clubs/<int:club_id>/reject", methods=["PUT", "PATCH"])
def reject_club(club_id: int):
    data = request.get_json(silent=True) or {}
    errors = validate_rejection(data)
    if errors:
        return validation_failed(errors)

    club = db.session.get(Club, club_id)
    if not club or not club.is_active:
        return not_found("Club not found")
    if club.status == STATUS_REJECTED:
        return bad_request("Club is already rejected.")

    club.status = STATUS_REJECTED
    club.admin_approval_date = _now()
    club.admin_approval_message = data["reason"].strip()
    db.session.commit()

    if club.organizer and club.organizer.email:
        email_service.send_club_status_update_email(
            club.organizer.email, club, STATUS_REJECTED, club.admin_approval_message
        )
    log_event("club_rejected", user_id=current_user.id, meta={"club_id": club.id})

    return jsonify({"message": "Club rejected successfully", "club": club_to_dict(club)}), 200


# --- User management ---

@admin_bp.get("/users")
def list_users():
    stmt = select(User)

    role = request.args.get("role")
    if role and role != "all":
        stmt = stmt.where(User.role == role)

    search = (request.args.get("search") or "").strip()
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(
            User.first_name.ilike(pattern),
            User.last_name.ilike(pattern),
            User.email.ilike(pattern),
            User.department.ilike(pattern),
        ))

    users, meta = paginate(stmt.order_by(User.created_at.desc(), User.id.desc()), default_limit=20)
    return jsonify({"users": [user_to_dict(u) for u in users], **meta}), 200


@admin_bp.put("/users/<int:user_id>/role")
def update_user_role(user_id: int):
    data = request.get_json(silent=True) or {}
    errors = validate_role(data)
    if errors:
        return validation_failed(errors)

    role = data["role"]
    if user_id == current_user.id and role != "admin":
        return bad_request("You cannot change your own role via this endpoint.")

    user = db.session.get(User, user_id)
    if not user:
        return not_found("User not found")

    user.role = role
    db.session.commit()

    log_event("user_role_changed", user_id=current_user.id, meta={"target_user_id": user.id, "role": role})
    return jsonify({"message": "User role updated successfully", "user": user_to_dict(user)}), 200

from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required
from sqlalchemy import and_, or_, select
from ..constants import STATUS_APPROVED, STATUS_PENDING
from ..errors import bad_request, forbidden, not_found, validation_failed
from ..extensions import db
from ..models import Club, Event, User
from ..pagination import paginate
from ..security import is_admin
from ..serializers import event_to_dict
from ..services import email_service
from ..services.logging_service import log_event
from ..validation import parse_iso_date, validate_event


events_bp = Blueprint("events", __name__, url_prefix="/events")

REAPPROVAL_MESSAGE = "Event edited by organizer, awaiting re-approval."


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def _resolve_club(raw):
    """Map the optional ``club`` field to an active club, or raise ValueError."""
    if raw in (None, ""):
        return None
    try:
        club = db.session.get(Club, int(raw))
    except (TypeError, ValueError):
        club = None
    if club is None or not club.is_active:
        raise ValueError("Club not found or is inactive")
    return club


def _apply_event_fields(event: Event, data: dict) -> None:
    for key, attr in (("title", "title"), ("description", "description"),
                      ("time", "time"), ("location", "location"), ("category", "category")):
        if key in data:
            value = data[key]
            setattr(event, attr, value.strip() if isinstance(value, str) else value)

    if "date" in data:
        event.date = parse_iso_date(data["date"])
    if "maxAttendees" in data:
        event.max_attendees = int(data["maxAttendees"])
    if "image" in data:
        event.image = data["image"] or ""
    if "requirements" in data:
        event.requirements = [r.strip() for r in (data["requirements"] or []) if r.strip()]
    if "contactInfo" in data:
        event.contact_info = data["contactInfo"]
    if "isOnline" in data:
        event.is_online = _as_bool(data["isOnline"])


def _notify_admin_pending(event: Event) -> None:
    admin_email = current_app.config.get("ADMIN_EMAIL")
    if admin_email and event.organizer:
        email_service.send_event_approval_email(admin_email, event, event.organizer)


@events_bp.get("")
def list_events():
    stmt = select(Event).where(Event.status == STATUS_APPROVED, Event.is_active.is_(True))

    category = request.args.get("category")
    if category and category != "all":
        stmt = stmt.where(Event.category == category)

    search = (request.args.get("search") or "").strip()
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(
            Event.title.ilike(pattern),
            Event.description.ilike(pattern),
            Event.location.ilike(pattern),
        ))

    events, meta = paginate(stmt.order_by(Event.date.asc()))
    return jsonify({"events": [event_to_dict(e) for e in events], **meta}), 200


@events_bp.get("/<int:event_id>")
@login_required
def event_detail(event_id: int):
    event = db.session.get(Event, event_id)
    if not event or not event.is_active:
        return not_found("Event not found")

    # Pending/rejected events are only visible to their organizer and admins
    if event.status != STATUS_APPROVED and not event.is_organized_by(current_user) and not is_admin():
        return not_found("Event not found or not approved yet.")

    return jsonify({"event": event_to_dict(event, with_attendees=True)}), 200


@events_bp.post("")
@login_required
def create_event():
    data = request.get_json(silent=True) or {}
    errors = validate_event(data)
    if errors:
        return validation_failed(errors)

    try:
        club = _resolve_club(data.get("club"))
    except ValueError as e:
        return bad_request(str(e))

    event = Event(
        organizer=current_user._get_current_object(),
        club=club,
        status=STATUS_PENDING,
    )
    _apply_event_fields(event, data)

    db.session.add(event)
    db.session.commit()

    _notify_admin_pending(event)
    log_event("event_created", user_id=current_user.id, meta={"event_id": event.id, "title": event.title})

    return jsonify({
        "event": event_to_dict(event),
        "message": "Event created successfully, awaiting admin approval.",
    }), 201


@events_bp.put("/<int:event_id>")
@login_required
def update_event(event_id: int):
    event = db.session.get(Event, event_id)
    if not event or not event.is_active:
        return not_found("Event not found")

    if not event.is_organized_by(current_user):
        return forbidden("Not authorized to update this event")

    data = request.get_json(silent=True) or {}
    errors = validate_event(data, partial=True)
    if errors:
        return validation_failed(errors)

    if "maxAttendees" in data and int(data["maxAttendees"]) < event.current_attendees:
        return bad_request("Maximum attendees cannot be lower than the current number of attendees")

    if "club" in data:
        try:
            event.club = _resolve_club(data["club"])
        except ValueError as e:
            return bad_request(str(e))

    _apply_event_fields(event, data)

    sent_back = event.status == STATUS_APPROVED
    if sent_back:
        event.status = STATUS_PENDING
        event.admin_approval_date = None
        event.admin_approval_message = REAPPROVAL_MESSAGE

    db.session.commit()

    if sent_back:
        _notify_admin_pending(event)
    log_event("event_updated", user_id=current_user.id, meta={"event_id": event.id, "reapproval": sent_back})

    return jsonify({
        "event": event_to_dict(event),
        "message": "Event updated and sent for re-approval." if sent_back else "Event updated successfully.",
    }), 200


@events_bp.delete("/<int:event_id>")
@login_required
def delete_event(event_id: int):
    event = db.session.get(Event, event_id)
    if not event:
        return not_found("Event not found")

    if not event.is_organized_by(current_user) and not is_admin():
        return forbidden("Not authorized to delete this event")

    event.is_active = False
    db.session.commit()

    log_event("event_deleted", user_id=current_user.id, meta={"event_id": event.id})
    return jsonify({"message": "Event deleted successfully (soft deleted)."}), 200


@events_bp.post("/<int:event_id>/join")
@login_required
def join_event(event_id: int):
    event = db.session.get(Event, event_id)
    if not event or not event.is_active or event.status != STATUS_APPROVED:
        return not_found("Event not found or not approved yet.")

    me = current_user._get_current_object()
    if me in event.attendees:
        return bad_request("Already joined this event")

    if event.is_full():
        return bad_request("Event is full")

    event.attendees.append(me)
    event.current_attendees += 1
    db.session.commit()

    email_service.send_rsvp_confirmation_email(me.email, event, me.full_name)
    log_event("event_joined", user_id=me.id, meta={"event_id": event.id})

    return jsonify({"message": "Successfully joined event"}), 200


@events_bp.post("/<int:event_id>/leave")
@login_required
def leave_event(event_id: int):
    event = db.session.get(Event, event_id)
    if not event or not event.is_active:
        return not_found("Event not found")

    me = current_user._get_current_object()
    if me not in event.attendees:
        return bad_request("You have not joined this event")

    event.attendees.remove(me)
    event.current_attendees = max(event.current_attendees - 1, 0)
    db.session.commit()

    email_service.send_rsvp_cancelled_email(me.email, event, me.full_name)
    log_event("event_left", user_id=me.id, meta={"event_id": event.id})

    return jsonify({"message": "Successfully left event"}), 200


@events_bp.get("/user/events")
@login_required
def my_events():
    # Organized events in any state, attended events only once approved
    stmt = (
        select(Event)
        .where(
            Event.is_active.is_(True),
            or_(
                Event.organizer_id == current_user.id,
                and_(
                    Event.attendees.any(User.id == current_user.id),
                    Event.status == STATUS_APPROVED,
                ),
            ),
        )
        .order_by(Event.date.asc())
    )
    events = db.session.scalars(stmt).all()
    return jsonify({"events": [event_to_dict(e, with_attendees=True) for e in events]}), 200

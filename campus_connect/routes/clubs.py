from flask import Blueprint, current_app, jsonify, request
from flask_login import current_user, login_required
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from ..constants import STATUS_APPROVED, STATUS_PENDING
from ..errors import bad_request, forbidden, not_found, validation_failed
from ..extensions import db
from ..models import Club, User
from ..pagination import paginate
from ..security import is_admin
from ..serializers import club_to_dict
from ..services import email_service
from ..services.logging_service import log_event
from ..validation import validate_club


clubs_bp = Blueprint("clubs", __name__, url_prefix="/clubs")

SOCIAL_FIELDS = ("website", "instagram", "discord", "facebook")


@clubs_bp.before_request
@login_required
def require_login():
    """Every club route needs an authenticated user."""


def _apply_club_fields(club: Club, data: dict) -> None:
    for key in ("name", "description", "category"):
        if key in data and isinstance(data[key], str):
            setattr(club, key, data[key].strip())

    if data.get("imageUrl"):
        club.image_url = data["imageUrl"]

    social = data.get("socialLinks") if isinstance(data.get("socialLinks"), dict) else {}
    for name in SOCIAL_FIELDS:
        if name in social and social[name] is not None:
            setattr(club, name, str(social[name]).strip())


def _name_taken(name: str, exclude_id=None) -> bool:
    stmt = select(Club.id).where(Club.name == name.strip())
    if exclude_id is not None:
        stmt = stmt.where(Club.id != exclude_id)
    return db.session.scalar(stmt) is not None


def _active_club(club_id: int):
    club = db.session.get(Club, club_id)
    if not club or not club.is_active:
        return None
    return club


@clubs_bp.post("")
def create_club():
    data = request.get_json(silent=True) or {}
    errors = validate_club(data)
    if errors:
        return validation_failed(errors)

    if _name_taken(data["name"]):
        return bad_request("A club with this name already exists")

    me = current_user._get_current_object()
    club = Club(organizer=me, status=STATUS_PENDING)
    _apply_club_fields(club, data)
    # The creator is the first member
    club.members.append(me)

    db.session.add(club)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return bad_request("A club with this name already exists")

    admin_email = current_app.config.get("ADMIN_EMAIL")
    if admin_email:
        email_service.send_club_approval_email(admin_email, club, me)
    log_event("club_created", user_id=me.id, meta={"club_id": club.id, "name": club.name})

    return jsonify({"message": "Club created successfully", "club": club_to_dict(club)}), 201


@clubs_bp.get("")
def list_clubs():
    stmt = select(Club).where(Club.is_active.is_(True), Club.status == STATUS_APPROVED)

    search = (request.args.get("search") or "").strip()
    if search:
        pattern = f"%{search}%"
        stmt = stmt.where(or_(Club.name.ilike(pattern), Club.description.ilike(pattern)))

    category = request.args.get("category")
    if category and category != "all":
        stmt = stmt.where(Club.category == category)

    clubs, meta = paginate(stmt.order_by(Club.name.asc()))
    return jsonify({"clubs": [club_to_dict(c) for c in clubs], **meta}), 200


@clubs_bp.get("/<int:club_id>")
def club_detail(club_id: int):
    club = _active_club(club_id)
    if not club:
        return not_found("Club not found or is inactive")

    if club.status != STATUS_APPROVED and not club.is_organized_by(current_user) and not is_admin():
        return not_found("Club not found or not approved yet.")

    return jsonify({"club": club_to_dict(club, with_events=True)}), 200


@clubs_bp.put("/<int:club_id>")
def update_club(club_id: int):
    club = _active_club(club_id)
    if not club:
        return not_found("Club not found or is inactive")

    if not club.is_organized_by(current_user):
        return forbidden("Not authorized to update this club")

    data = request.get_json(silent=True) or {}
    errors = validate_club(data, partial=True)
    if errors:
        return validation_failed(errors)

    if "name" in data and _name_taken(data["name"], exclude_id=club.id):
        return bad_request("A club with this name already exists")

    _apply_club_fields(club, data)
    db.session.commit()

    return jsonify({"message": "Club updated successfully", "club": club_to_dict(club)}), 200


@clubs_bp.delete("/<int:club_id>")
def delete_club(club_id: int):
    club = db.session.get(Club, club_id)
    if not club:
        return not_found("Club not found")

    if not club.is_organized_by(current_user) and not is_admin():
        return forbidden("Not authorized to delete this club")

    club.is_active = False
    db.session.commit()

    log_event("club_deleted", user_id=current_user.id, meta={"club_id": club.id})
    return jsonify({"message": "Club deleted successfully"}), 200


@clubs_bp.post("/<int:club_id>/join")
def join_club(club_id: int):
    club = _active_club(club_id)
    if not club or club.status != STATUS_APPROVED:
        return not_found("Club not found or is inactive")

    me = current_user._get_current_object()
    if me in club.members:
        return bad_request("Already a member of this club")

    club.members.append(me)
    db.session.commit()

    if club.organizer and club.organizer.email:
        email_service.send_club_joined_email(club.organizer.email, club.name, me.full_name)
    log_event("club_joined", user_id=me.id, meta={"club_id": club.id})

    return jsonify({"message": "Successfully joined club"}), 200


@clubs_bp.post("/<int:club_id>/leave")
def leave_club(club_id: int):
    club = db.session.get(Club, club_id)
    if not club:
        return not_found("Club not found")

    me = current_user._get_current_object()
    if me not in club.members:
        return bad_request("Not a member of this club")

    if club.is_organized_by(me):
        return bad_request("The club organizer cannot leave the club")

    club.members.remove(me)
    db.session.commit()

    log_event("club_left", user_id=me.id, meta={"club_id": club.id})
    return jsonify({"message": "Successfully left club"}), 200


@clubs_bp.get("/user/<int:user_id>")
def user_clubs(user_id: int):
    stmt = (
        select(Club)
        .where(
            Club.is_active.is_(True),
            or_(Club.organizer_id == user_id, Club.members.any(User.id == user_id)),
        )
        .order_by(Club.created_at.desc(), Club.id.desc())
    )
    clubs = db.session.scalars(stmt).all()
    return jsonify({"clubs": [club_to_dict(c, with_events=True) for c in clubs]}), 200

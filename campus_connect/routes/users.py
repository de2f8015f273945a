from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required
from sqlalchemy import select
from ..errors import bad_request, not_found, validation_failed
from ..extensions import db
from ..models import User
from ..security import (
    clear_auth_cookie,
    generate_auth_token,
    revoke_token,
    set_auth_cookie,
    token_from_request,
)
from ..serializers import user_summary, user_to_dict
from ..services.logging_service import log_event
from ..validation import validate_login, validate_profile_update, validate_registration


users_bp = Blueprint("users", __name__, url_prefix="/users")

SOCIAL_FIELDS = ("linkedin", "github", "twitter")

# request key -> model attribute
PROFILE_FIELDS = {
    "bio": "bio",
    "contactInfo": "contact_info",
    "department": "department",
    "academicYear": "academic_year",
    "studentID": "student_id",
    "firstname": "first_name",
    "lastname": "last_name",
}


def _auth_response(user: User, message: str, status: int):
    token = generate_auth_token(user)
    resp = jsonify({"token": token, "user": user_to_dict(user), "message": message})
    resp.status_code = status
    return set_auth_cookie(resp, token)


def _me() -> User:
    return current_user._get_current_object()


@users_bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}
    errors = validate_registration(data)
    if errors:
        return validation_failed(errors)

    email = data["email"].strip().lower()
    existing = db.session.scalar(select(User).where(User.email == email))
    if existing:
        return bad_request("User already exist with this email")

    fullname = data["fullname"]
    user = User(
        first_name=fullname["firstname"].strip(),
        last_name=fullname["lastname"].strip(),
        email=email,
        department=data["department"],
        academic_year=data["academicYear"],
        student_id=(data.get("studentID") or "").strip(),
        interests=list(data["interests"]),
    )
    user.set_password(data["password"])

    db.session.add(user)
    db.session.commit()

    log_event("user_registered", user_id=user.id, meta={"email": user.email})
    return _auth_response(user, "Registration successful!", 201)


@users_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    errors = validate_login(data)
    if errors:
        return validation_failed(errors)

    email = data["email"].strip().lower()
    user = db.session.scalar(select(User).where(User.email == email))
    if not user or not user.check_password(data["password"]):
        return jsonify({"message": "Invalid email or password", "errors": []}), 401

    log_event("user_login", user_id=user.id)
    return _auth_response(user, "Login successful!", 200)


@users_bp.get("/profile")
@login_required
def profile():
    return jsonify({"user": user_to_dict(_me())}), 200


@users_bp.get("/logout")
@login_required
def logout():
    user_id = current_user.id
    token = token_from_request()
    if token:
        revoke_token(token)

    log_event("user_logout", user_id=user_id)
    resp = jsonify({"message": "Logged out successfully"})
    return clear_auth_cookie(resp)


@users_bp.put("/profile")
@login_required
def update_profile():
    data = request.get_json(silent=True) or {}
    errors = validate_profile_update(data)
    if errors:
        return validation_failed(errors)

    user = _me()
    for key, attr in PROFILE_FIELDS.items():
        if key in data and data[key] is not None:
            value = data[key]
            setattr(user, attr, value.strip() if isinstance(value, str) else value)

    social = data.get("socialLinks") if isinstance(data.get("socialLinks"), dict) else {}
    for name in SOCIAL_FIELDS:
        value = data.get(f"socialLinks.{name}", social.get(name))
        if value is not None:
            setattr(user, name, str(value).strip())

    if isinstance(data.get("interests"), list):
        user.interests = list(data["interests"])

    db.session.commit()
    return jsonify({"user": user_to_dict(user), "message": "Profile updated successfully!"}), 200


@users_bp.put("/profile/avatar")
@login_required
def update_avatar():
    data = request.get_json(silent=True) or {}
    url = data.get("url")
    url = url.strip() if isinstance(url, str) else ""
    if not url:
        return bad_request("Image URL is required")

    user = _me()
    user.avatar = url
    db.session.commit()
    return jsonify({"user": user_to_dict(user), "message": "Avatar updated successfully!"}), 200


def _target_user(raw_id):
    if isinstance(raw_id, bool) or (isinstance(raw_id, float) and not raw_id.is_integer()):
        return None
    try:
        target_id = int(raw_id)
    except (TypeError, ValueError):
        return None
    return db.session.get(User, target_id)


@users_bp.post("/connections/send")
@login_required
def send_connection_request():
    data = request.get_json(silent=True) or {}
    raw_id = data.get("targetUserId")
    if raw_id in (None, ""):
        return bad_request("Target user ID is required")

    target = _target_user(raw_id)
    if target is not None and target.id == current_user.id:
        return bad_request("Cannot send connection request to yourself.")
    if not target:
        return not_found("Target user not found")

    me = _me()
    if me.is_connected_to(target):
        return bad_request("Already connected with this user.")

    # Connections are mutual
    me.connections.append(target)
    target.connections.append(me)
    db.session.commit()

    log_event("connection_added", user_id=me.id, meta={"target_user_id": target.id})
    return jsonify({"message": "Connection established successfully!"}), 200


@users_bp.delete("/connections/remove/<int:target_user_id>")
@login_required
def remove_connection(target_user_id: int):
    if target_user_id == current_user.id:
        return bad_request("Cannot remove yourself as a connection.")

    target = db.session.get(User, target_user_id)
    if not target:
        return not_found("Target user not found")

    me = _me()
    if not me.is_connected_to(target):
        return bad_request("Not connected with this user.")

    me.connections.remove(target)
    if me in target.connections:
        target.connections.remove(me)
    db.session.commit()

    log_event("connection_removed", user_id=me.id, meta={"target_user_id": target.id})
    return jsonify({"message": "Connection removed successfully!"}), 200


@users_bp.get("/connections")
@login_required
def list_connections():
    return jsonify({"connections": [user_summary(u) for u in _me().connections]}), 200

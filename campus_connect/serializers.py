from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, Optional
from .constants import STATUS_APPROVED
from .models import Club, Event, User


def iso(dt: Any) -> Optional[str]:
    if dt is None:
        return None
    if isinstance(dt, datetime):
        return dt.isoformat()
    return str(dt)


def user_summary(user: Optional[User]) -> Optional[Dict[str, Any]]:
    if user is None:
        return None
    return {
        "_id": user.id,
        "fullname": {"firstname": user.first_name, "lastname": user.last_name},
        "email": user.email,
        "avatar": user.avatar,
    }


def user_to_dict(user: User) -> Dict[str, Any]:
    return {
        **user_summary(user),
        "department": user.department,
        "academicYear": user.academic_year,
        "studentID": user.student_id,
        "interests": list(user.interests or []),
        "bio": user.bio,
        "contactInfo": user.contact_info,
        "socialLinks": {
            "linkedin": user.linkedin,
            "github": user.github,
            "twitter": user.twitter,
        },
        "achievements": list(user.achievements or []),
        "role": user.role,
        "connections": [c.id for c in user.connections],
        "createdAt": iso(user.created_at),
        "updatedAt": iso(user.updated_at),
    }


def _organizer_details(user: User) -> Dict[str, Any]:
    return {
        **user_summary(user),
        "department": user.department,
        "academicYear": user.academic_year,
    }


def event_to_dict(event: Event, with_attendees: bool = False) -> Dict[str, Any]:
    data = {
        "_id": event.id,
        "title": event.title,
        "description": event.description,
        "date": iso(event.date),
        "time": event.time,
        "location": event.location,
        "category": event.category,
        "maxAttendees": event.max_attendees,
        "currentAttendees": event.current_attendees,
        "organizer": _organizer_details(event.organizer) if event.organizer else None,
        "attendees": [a.id for a in event.attendees],
        "image": event.image,
        "isActive": event.is_active,
        "status": event.status,
        "adminApprovalDate": iso(event.admin_approval_date),
        "adminApprovalMessage": event.admin_approval_message,
        "requirements": list(event.requirements or []),
        "contactInfo": event.contact_info,
        "isOnline": event.is_online,
        "club": event.club_id,
        "createdAt": iso(event.created_at),
        "updatedAt": iso(event.updated_at),
    }
    if with_attendees:
        data["attendees"] = [user_summary(a) for a in event.attendees]
    return data


def club_event_summary(event: Event) -> Dict[str, Any]:
    return {
        "_id": event.id,
        "title": event.title,
        "description": event.description,
        "date": iso(event.date),
        "time": event.time,
        "location": event.location,
        "image": event.image,
        "category": event.category,
    }


def club_to_dict(club: Club, with_events: bool = False) -> Dict[str, Any]:
    data = {
        "_id": club.id,
        "name": club.name,
        "description": club.description,
        "imageUrl": club.image_url,
        "organizer": user_summary(club.organizer),
        "members": [user_summary(m) for m in club.members],
        "category": club.category,
        "socialLinks": {
            "website": club.website,
            "instagram": club.instagram,
            "discord": club.discord,
            "facebook": club.facebook,
        },
        "isActive": club.is_active,
        "status": club.status,
        "adminApprovalDate": iso(club.admin_approval_date),
        "adminApprovalMessage": club.admin_approval_message,
        "createdAt": iso(club.created_at),
        "updatedAt": iso(club.updated_at),
    }
    if with_events:
        data["events"] = [
            club_event_summary(e)
            for e in club.events
            if e.is_active and e.status == STATUS_APPROVED
        ]
    return data

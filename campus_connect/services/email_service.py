"""Transactional email over SMTP.

Every ``send_*`` helper builds one HTML message and hands it to
:func:`send_email`. Delivery problems are logged and swallowed so a mail
outage never fails the request that triggered it.
"""
from __future__ import annotations

import logging
import smtplib
from email.message import EmailMessage
from html import escape
from typing import Optional

from flask import current_app

from ..models import Club, Event, User

logger = logging.getLogger(__name__)

SIGNATURE = "<p>Thank you,</p><p>The Campus Connect Team</p>"


def _frontend(path: str) -> str:
    return f"{current_app.config['FRONTEND_ORIGIN'].rstrip('/')}{path}"


def _event_when(event: Event) -> str:
    return f"{event.date.strftime('%Y-%m-%d')} at {escape(event.time)}"


def build_message(to_email: str, subject: str, html: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = current_app.config["EMAIL_FROM"]
    msg["To"] = to_email
    msg["Subject"] = subject
    msg.set_content("This message requires an HTML capable email client.")
    msg.add_alternative(html, subtype="html")
    return msg


def send_email(to_email: str, subject: str, html: str) -> bool:
    """Send one message. Returns True when the SMTP server accepted it."""
    cfg = current_app.config
    host = cfg.get("EMAIL_HOST")
    if not host:
        logger.warning("SMTP not configured, skipping email '%s' to %s", subject, to_email)
        return False
    if not to_email:
        logger.warning("No recipient for email '%s'", subject)
        return False

    msg = build_message(to_email, subject, html)
    port = int(cfg.get("EMAIL_PORT") or 587)

    try:
        if port == 465:
            smtp = smtplib.SMTP_SSL(host, port, timeout=10)
        else:
            smtp = smtplib.SMTP(host, port, timeout=10)
        with smtp:
            if port != 465:
                smtp.starttls()
            if cfg.get("EMAIL_USER"):
                smtp.login(cfg["EMAIL_USER"], cfg.get("EMAIL_PASS", ""))
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        logger.error("Failed to send email '%s' to %s: %s", subject, to_email, e)
        return False

    logger.info("Email '%s' sent to %s", subject, to_email)
    return True


def send_event_approval_email(admin_email: str, event: Event, organizer: User) -> bool:
    title = escape(event.title)
    who = f"{escape(organizer.full_name)} ({escape(organizer.email)})"
    html = f"""
        <p>Dear Admin,</p>
        <p>A new event titled "<strong>{title}</strong>" has been created by {who} and is awaiting your approval.</p>
        <p><strong>Event Details:</strong></p>
        <ul>
            <li><strong>Title:</strong> {title}</li>
            <li><strong>Description:</strong> {escape(event.description)}</li>
            <li><strong>Date:</strong> {_event_when(event)}</li>
            <li><strong>Location:</strong> {escape(event.location)}</li>
            <li><strong>Category:</strong> {escape(event.category)}</li>
            <li><strong>Organizer:</strong> {who}</li>
        </ul>
        <p>Please log in to the <a href="{_frontend('/admin/events')}">admin panel</a> to review and approve/reject this event.</p>
        {SIGNATURE}
    """
    subject = f"[ADMIN ACTION REQUIRED] New Event Pending Approval: {event.title}"
    return send_email(admin_email, subject, html)


def send_event_status_update_email(user_email: str, event: Event, new_status: str, reason: str = "") -> bool:
    title = escape(event.title)
    name = escape(event.organizer.first_name) if event.organizer else "User"
    link = _frontend(f"/events/{event.id}")

    if new_status == "approved":
        subject = f'[APPROVED] Your Event "{event.title}" Is Now Live!'
        body = f"""
            <p>Dear {name},</p>
            <p>Great news! Your event "<strong>{title}</strong>" has been <strong>approved</strong> by our admin team and is now live on Campus Connect!</p>
            <p>Attendees can now RSVP. You can view your event details here: <a href="{link}">View Event</a>.</p>
        """
    else:
        subject = f'[REJECTED] Update on Your Event "{event.title}"'
        reason_html = f"<p><strong>Reason for Rejection:</strong> {escape(reason)}</p>" if reason else ""
        body = f"""
            <p>Dear {name},</p>
            <p>We regret to inform you that your event "<strong>{title}</strong>" has been <strong>rejected</strong> by our admin team.</p>
            {reason_html}
            <p>Please review the event details and consider revising it, or contact our support team if you have any questions.</p>
        """
    return send_email(user_email, subject, body + SIGNATURE)


def send_rsvp_confirmation_email(user_email: str, event: Event, user_name: Optional[str]) -> bool:
    title = escape(event.title)
    html = f"""
        <p>Dear {escape(user_name or 'Attendee')},</p>
        <p>You have successfully RSVP'd for "<strong>{title}</strong>". We're excited to see you there!</p>
        <p><strong>Event Details:</strong></p>
        <ul>
            <li><strong>Title:</strong> {title}</li>
            <li><strong>Date:</strong> {_event_when(event)}</li>
            <li><strong>Location:</strong> {escape(event.location)}</li>
        </ul>
        <p>You can view event details here: <a href="{_frontend(f'/events/{event.id}')}">View Event</a>.</p>
        <p>See you soon,</p>
        <p>The Campus Connect Team</p>
    """
    return send_email(user_email, f'[RSVP CONFIRMED] You\'re Attending "{event.title}"!', html)


def send_rsvp_cancelled_email(user_email: str, event: Event, user_name: Optional[str]) -> bool:
    html = f"""
        <p>Dear {escape(user_name or 'User')},</p>
        <p>You have successfully cancelled your RSVP for "<strong>{escape(event.title)}</strong>".</p>
        <p>If this was a mistake, you can always RSVP again through the event page: <a href="{_frontend(f'/events/{event.id}')}">View Event</a>.</p>
        {SIGNATURE}
    """
    return send_email(user_email, f'[RSVP CANCELLED] Event "{event.title}"', html)


def send_club_joined_email(organizer_email: str, club_name: str, member_name: str) -> bool:
    html = f"""
        <p>Dear Club Organizer,</p>
        <p><strong>{escape(member_name)}</strong> has joined your club: "<strong>{escape(club_name)}</strong>".</p>
        <p>Welcome your new member and continue fostering your community!</p>
        <p>The Campus Connect Team</p>
    """
    return send_email(organizer_email, f"New Member Joined Your Club: {club_name}", html)


def send_club_approval_email(admin_email: str, club: Club, organizer: User) -> bool:
    html = f"""
        <p>Dear Admin,</p>
        <p>A new club "<strong>{escape(club.name)}</strong>" ({escape(club.category)}) was created by
        {escape(organizer.full_name)} ({escape(organizer.email)}) and is awaiting your approval.</p>
        <p>{escape(club.description)}</p>
        <p>Please review it in the <a href="{_frontend('/admin')}">admin panel</a>.</p>
        {SIGNATURE}
    """
    return send_email(admin_email, f"[ADMIN ACTION REQUIRED] New Club Pending Approval: {club.name}", html)


def send_club_status_update_email(user_email: str, club: Club, new_status: str, reason: str = "") -> bool:
    name = escape(club.name)
    link = _frontend(f"/clubs/{club.id}")
    if new_status == "approved":
        subject = f'[APPROVED] Your Club "{club.name}" Is Now Live!'
        body = f"<p>Your club \"<strong>{name}</strong>\" has been <strong>approved</strong>. Students can now join it: <a href=\"{link}\">View Club</a>.</p>"
    else:
        subject = f'[REJECTED] Update on Your Club "{club.name}"'
        body = f"<p>Your club \"<strong>{name}</strong>\" has been <strong>rejected</strong> by our admin team.</p>"
        if reason:
            body += f"<p><strong>Reason for Rejection:</strong> {escape(reason)}</p>"
    return send_email(user_email, subject, body + SIGNATURE)

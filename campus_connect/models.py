from datetime import datetime, timezone
from werkzeug.security import generate_password_hash, check_password_hash
from flask_login import UserMixin
from .constants import CLUB_PLACEHOLDER_IMAGE, STATUS_PENDING
from .extensions import db

def utcnow():
    return datetime.now(timezone.utc)

user_connections = db.Table(
    "user_connections",
    db.Column("user_id", db.Integer, db.ForeignKey("users.id"), primary_key=True),
    db.Column("connection_id", db.Integer, db.ForeignKey("users.id"), primary_key=True),
)

event_attendees = db.Table(
    "event_attendees",
    db.Column("event_id", db.Integer, db.ForeignKey("events.id"), primary_key=True),
    db.Column("user_id", db.Integer, db.ForeignKey("users.id"), primary_key=True, index=True),
)

club_members = db.Table(
    "club_members",
    db.Column("club_id", db.Integer, db.ForeignKey("clubs.id"), primary_key=True),
    db.Column("user_id", db.Integer, db.ForeignKey("users.id"), primary_key=True, index=True),
)

class User(db.Model, UserMixin):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    department = db.Column(db.String(100), nullable=False)
    academic_year = db.Column(db.String(50), nullable=False)
    student_id = db.Column(db.String(50), nullable=False, default="")
    interests = db.Column(db.JSON, nullable=False, default=list)
    avatar = db.Column(db.String(500), nullable=False, default="")
    bio = db.Column(db.Text, nullable=False, default="")
    contact_info = db.Column(db.String(255), nullable=False, default="")
    linkedin = db.Column(db.String(255), nullable=False, default="")
    github = db.Column(db.String(255), nullable=False, default="")
    twitter = db.Column(db.String(255), nullable=False, default="")
    # [{title, description, icon, earnedDate, color}]
    achievements = db.Column(db.JSON, nullable=False, default=list)
    role = db.Column(db.String(50), nullable=False, default="user")
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    connections = db.relationship(
        "User",
        secondary=user_connections,
        primaryjoin=id == user_connections.c.user_id,
        secondaryjoin=id == user_connections.c.connection_id,
    )

    organized_events = db.relationship("Event", back_populates="organizer")
    organized_clubs = db.relationship("Club", back_populates="organizer")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def is_connected_to(self, other: "User") -> bool:
        return other in self.connections

class Event(db.Model):
    __tablename__ = "events"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    date = db.Column(db.DateTime, nullable=False, index=True)
    time = db.Column(db.String(20), nullable=False)
    location = db.Column(db.String(200), nullable=False)
    category = db.Column(db.String(50), nullable=False, index=True)
    max_attendees = db.Column(db.Integer, nullable=False)
    current_attendees = db.Column(db.Integer, nullable=False, default=0)
    image = db.Column(db.String(500), nullable=False, default="")
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    status = db.Column(db.String(20), nullable=False, default=STATUS_PENDING, index=True)
    admin_approval_date = db.Column(db.DateTime, nullable=True)
    admin_approval_message = db.Column(db.Text, nullable=False, default="")

    requirements = db.Column(db.JSON, nullable=False, default=list)
    contact_info = db.Column(db.String(255), nullable=True)
    is_online = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    organizer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    organizer = db.relationship("User", back_populates="organized_events")

    club_id = db.Column(db.Integer, db.ForeignKey("clubs.id"), nullable=True, index=True)
    club = db.relationship("Club", back_populates="events")

    attendees = db.relationship("User", secondary=event_attendees)

    def is_full(self) -> bool:
        return self.current_attendees >= self.max_attendees

    def is_organized_by(self, user) -> bool:
        return user is not None and self.organizer_id == user.id

class Club(db.Model):
    __tablename__ = "clubs"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), unique=True, nullable=False, index=True)
    description = db.Column(db.Text, nullable=False)
    image_url = db.Column(db.String(500), nullable=False, default=CLUB_PLACEHOLDER_IMAGE)
    category = db.Column(db.String(50), nullable=False, default="Other")

    website = db.Column(db.String(255), nullable=False, default="")
    instagram = db.Column(db.String(255), nullable=False, default="")
    discord = db.Column(db.String(255), nullable=False, default="")
    facebook = db.Column(db.String(255), nullable=False, default="")

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    status = db.Column(db.String(20), nullable=False, default=STATUS_PENDING, index=True)
    admin_approval_date = db.Column(db.DateTime, nullable=True)
    admin_approval_message = db.Column(db.Text, nullable=False, default="")

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    organizer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    organizer = db.relationship("User", back_populates="organized_clubs")

    members = db.relationship("User", secondary=club_members)
    events = db.relationship("Event", back_populates="club", order_by="Event.date")

    def is_organized_by(self, user) -> bool:
        return user is not None and self.organizer_id == user.id

class RevokedToken(db.Model):
    __tablename__ = "revoked_tokens"

    id = db.Column(db.Integer, primary_key=True)
    token = db.Column(db.String(1024), unique=True, nullable=False, index=True)
    expires_at = db.Column(db.DateTime, nullable=False, index=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

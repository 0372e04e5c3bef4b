# models/account.py
import enum
from datetime import datetime, timezone

from extensions import db


def utcnow():
    return datetime.now(timezone.utc)


class Role(str, enum.Enum):
    STUDENT = "student"
    CONTROLLER = "controller"

    @classmethod
    def parse(cls, value, default=None):
        """Accepts 'student', 'controller' or the legacy 'primary' alias."""
        if value is not None and not isinstance(value, str):
            return None
        raw = (value or "").strip().lower()
        if not raw and default is not None:
            return default
        if raw == "primary":
            raw = "controller"
        for role in cls:
            if role.value == raw:
                return role
        return None


class AccountMixin:
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False, index=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)
    qr_token = db.Column(db.String(64), unique=True, nullable=False, index=True)
    qr_code_image = db.Column(db.Text, nullable=True)
    name = db.Column(db.String(120), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)
    last_login = db.Column(db.DateTime, nullable=True)

    role = None
    # camelCase request keys a holder of this account may change on themselves
    EDITABLE_FIELDS = {}

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "isActive": self.is_active,
            "lastLogin": self.last_login.isoformat() if self.last_login else None,
        }

    def __repr__(self):
        return f"<{type(self).__name__} {self.username}>"


class Student(AccountMixin, db.Model):
    __tablename__ = "students"

    class_name = db.Column("class", db.String(20), nullable=False)
    division = db.Column(db.String(20), nullable=False)
    parent_name = db.Column(db.String(120), nullable=False)
    place = db.Column(db.String(120), nullable=False)
    roll_number = db.Column(db.String(40), nullable=False, default="")
    phone = db.Column(db.String(40), nullable=False, default="")
    bio = db.Column(db.Text, nullable=True)
    mission = db.Column(db.Text, nullable=True)
    skills = db.Column(db.JSON, nullable=False, default=list)
    interests = db.Column(db.JSON, nullable=False, default=list)
    academic_goals = db.Column(db.JSON, nullable=False, default=list)
    favorite_subjects = db.Column(db.JSON, nullable=False, default=list)
    total_points = db.Column(db.Integer, nullable=False, default=0)
    email_sent = db.Column(db.Boolean, nullable=False, default=False)

    certificates = db.relationship(
        "Certificate", back_populates="student", cascade="all, delete-orphan"
    )

    role = Role.STUDENT
    EDITABLE_FIELDS = {
        "bio": "bio",
        "mission": "mission",
        "skills": "skills",
        "interests": "interests",
        "academicGoals": "academic_goals",
        "favoriteSubjects": "favorite_subjects",
        "phone": "phone",
        "place": "place",
    }

    def to_dict(self):
        data = super().to_dict()
        data.update({
            "class": self.class_name,
            "division": self.division,
            "parentName": self.parent_name,
            "place": self.place,
            "rollNumber": self.roll_number,
            "phone": self.phone,
            "bio": self.bio,
            "mission": self.mission,
            "skills": self.skills or [],
            "interests": self.interests or [],
            "academicGoals": self.academic_goals or [],
            "favoriteSubjects": self.favorite_subjects or [],
            "totalPoints": self.total_points,
        })
        return data


class Controller(AccountMixin, db.Model):
    __tablename__ = "controllers"

    role = Role.CONTROLLER
    EDITABLE_FIELDS = {"name": "name"}


MODELS = {Role.STUDENT: Student, Role.CONTROLLER: Controller}

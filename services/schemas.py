# services/schemas.py
"""Request payload validation.

Each profile record is built from a raw JSON payload with ``from_payload``,
which raises ``ValidationError`` listing every bad field at once.
"""
import re
from dataclasses import dataclass

from errors import ValidationError

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$")
MIN_PASSWORD_LENGTH = 8
# profile columns that may be edited but never blanked
REQUIRED_COLUMNS = {"name", "place"}


def _text(data, key, errors, required=True, max_length=120):
    value = data.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        if required:
            errors[key] = "This field is required."
        return ""
    if not isinstance(value, (str, int)):
        errors[key] = "Must be a string."
        return ""
    value = str(value).strip()
    if len(value) > max_length:
        errors[key] = f"Must be at most {max_length} characters."
    return value


def _email(data, errors, key="email"):
    value = _text(data, key, errors, max_length=255).lower()
    if value and not EMAIL_RE.match(value):
        errors[key] = "Enter a valid email address."
    return value


def _payload(data):
    if not isinstance(data, dict):
        raise ValidationError({"body": "Expected a JSON object."}, "Invalid JSON payload")
    return data


@dataclass(frozen=True)
class StudentProfile:
    name: str
    email: str
    class_name: str
    division: str
    parent_name: str
    place: str
    roll_number: str = ""
    phone: str = ""

    @classmethod
    def from_payload(cls, data):
        data = _payload(data)
        errors = {}
        profile = cls(
            name=_text(data, "name", errors),
            email=_email(data, errors),
            class_name=_text(data, "class", errors, max_length=20),
            division=_text(data, "division", errors, max_length=20),
            parent_name=_text(data, "parentName", errors),
            place=_text(data, "place", errors),
            roll_number=_text(data, "rollNumber", errors, required=False, max_length=40),
            phone=_text(data, "phone", errors, required=False, max_length=40),
        )
        if errors:
            raise ValidationError(errors)
        return profile

    def model_fields(self):
        return {
            "name": self.name,
            "email": self.email,
            "class_name": self.class_name,
            "division": self.division,
            "parent_name": self.parent_name,
            "place": self.place,
            "roll_number": self.roll_number,
            "phone": self.phone,
            "bio": (
                f"Hi! I'm {self.name}, a class {self.class_name} student. "
                "I'm passionate about learning and exploring new opportunities."
            ),
            "mission": "To excel in my studies, develop strong character, and contribute positively to my school and community.",
            "skills": ["Learning", "Curious", "Team Player"],
            "interests": ["Reading", "Sports", "Technology"],
        }


@dataclass(frozen=True)
class ControllerProfile:
    name: str
    email: str
    username: str = ""
    password: str = ""

    @classmethod
    def from_payload(cls, data):
        data = _payload(data)
        errors = {}
        profile = cls(
            name=_text(data, "name", errors),
            email=_email(data, errors),
            username=_text(data, "username", errors, required=False, max_length=80).lower(),
            password=data.get("password") or "",
        )
        if profile.username and not re.fullmatch(r"[a-z0-9._-]+", profile.username):
            errors["username"] = "Use letters, digits, dots, dashes or underscores."
        if not isinstance(profile.password, str):
            errors["password"] = "Must be a string."
        elif profile.password and len(profile.password) < MIN_PASSWORD_LENGTH:
            errors["password"] = f"Must be at least {MIN_PASSWORD_LENGTH} characters."
        if errors:
            raise ValidationError(errors)
        return profile

    def model_fields(self):
        return {"name": self.name, "email": self.email}


def profile_update(model, data):
    """Map camelCase payload keys onto the model's editable columns."""
    data = _payload(data)
    errors = {}
    changes = {}
    editable = model.EDITABLE_FIELDS
    for key, value in data.items():
        if key not in editable:
            errors[key] = "This field cannot be changed."
            continue
        column = editable[key]
        list_column = column in {"skills", "interests", "academic_goals", "favorite_subjects"}
        if list_column:
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                errors[key] = "Must be a list of strings."
                continue
            changes[column] = [v.strip() for v in value if v.strip()]
        elif value is not None and not isinstance(value, str):
            errors[key] = "Must be a string."
        elif column in REQUIRED_COLUMNS and not (value or "").strip():
            errors[key] = "This field is required."
        else:
            changes[column] = (value or "").strip()
    if errors:
        raise ValidationError(errors)
    return changes


def new_password(data):
    data = _payload(data)
    password = data.get("password")
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError({"password": f"Must be at least {MIN_PASSWORD_LENGTH} characters."})
    return password


def certificate_payload(data, categories, partial=False):
    data = _payload(data)
    errors = {}
    fields = {}
    if not partial or "title" in data:
        fields["title"] = _text(data, "title", errors, max_length=200)
    if "description" in data:
        fields["description"] = _text(data, "description", errors, required=False, max_length=2000)
    if not partial or "category" in data:
        category = (data.get("category") or "other")
        if category not in categories:
            errors["category"] = f"Must be one of: {', '.join(categories)}."
        fields["category"] = category
    if not partial or "points" in data:
        points = data.get("points", 0)
        if isinstance(points, bool) or not isinstance(points, int) or points < 0:
            errors["points"] = "Must be a non-negative integer."
        fields["points"] = points
    if "isActive" in data:
        if not isinstance(data["isActive"], bool):
            errors["isActive"] = "Must be true or false."
        fields["is_active"] = data["isActive"]
    if not partial:
        student_id = data.get("student")
        if isinstance(student_id, bool) or not isinstance(student_id, int):
            errors["student"] = "Must be a student id."
        fields["student_id"] = student_id
    if errors:
        raise ValidationError(errors)
    return fields


TIME_RE = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


def classroom_payload(data, days, partial=False):
    """Class fields; ``schedule`` is a nested object of day, times and room."""
    data = _payload(data)
    errors = {}
    fields = {}
    for key, column, max_length in (
        ("name", "name", 100),
        ("description", "description", 500),
        ("subject", "subject", 100),
        ("grade", "grade", 20),
    ):
        if not partial or key in data:
            fields[column] = _text(data, key, errors, max_length=max_length)
    if not partial or "maxStudents" in data:
        size = data.get("maxStudents")
        if isinstance(size, bool) or not isinstance(size, int) or not 1 <= size <= 100:
            errors["maxStudents"] = "Must be an integer between 1 and 100."
        fields["max_students"] = size
    if not partial or "schedule" in data:
        schedule = data.get("schedule")
        if not isinstance(schedule, dict):
            errors["schedule"] = "Must be an object with day, startTime, endTime and room."
        else:
            if schedule.get("day") not in days:
                errors["schedule.day"] = f"Must be one of: {', '.join(days)}."
            for key, column in (("startTime", "start_time"), ("endTime", "end_time")):
                value = schedule.get(key)
                if not isinstance(value, str) or not TIME_RE.match(value):
                    errors[f"schedule.{key}"] = "Please enter a valid time format (HH:MM)."
                fields[column] = value
            fields["day"] = schedule.get("day")
            fields["room"] = _text(schedule, "room", errors, max_length=50)
            if "room" in errors:
                errors["schedule.room"] = errors.pop("room")
    if "teacher" in data:
        teacher_id = data["teacher"]
        if isinstance(teacher_id, bool) or not isinstance(teacher_id, int):
            errors["teacher"] = "Must be a controller id."
        fields["teacher_id"] = teacher_id
    if "isActive" in data:
        if not isinstance(data["isActive"], bool):
            errors["isActive"] = "Must be true or false."
        fields["is_active"] = data["isActive"]
    if errors:
        raise ValidationError(errors)
    return fields

# models/classroom.py
from extensions import db
from models.account import utcnow

DAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

enrollments = db.Table(
    "class_enrollments",
    db.Column("class_id", db.Integer, db.ForeignKey("class_rooms.id"), primary_key=True),
    db.Column("student_id", db.Integer, db.ForeignKey("students.id"), primary_key=True),
)


class ClassRoom(db.Model):
    """A timetabled class with a controller in charge and a student roster."""

    __tablename__ = "class_rooms"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(500), nullable=False)
    subject = db.Column(db.String(100), nullable=False, index=True)
    grade = db.Column(db.String(20), nullable=False, index=True)
    teacher_id = db.Column(db.Integer, db.ForeignKey("controllers.id"), nullable=False, index=True)
    day = db.Column(db.String(10), nullable=False)
    start_time = db.Column(db.String(5), nullable=False)
    end_time = db.Column(db.String(5), nullable=False)
    room = db.Column(db.String(50), nullable=False)
    max_students = db.Column(db.Integer, nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    teacher = db.relationship("Controller")
    students = db.relationship("Student", secondary=enrollments, order_by="Student.name")

    @property
    def available_spots(self):
        return self.max_students - len(self.students)

    @property
    def is_full(self):
        return len(self.students) >= self.max_students

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "subject": self.subject,
            "grade": self.grade,
            "teacher": {"id": self.teacher.id, "name": self.teacher.name, "email": self.teacher.email},
            "students": [{"id": s.id, "name": s.name, "email": s.email} for s in self.students],
            "schedule": {
                "day": self.day,
                "startTime": self.start_time,
                "endTime": self.end_time,
                "room": self.room,
            },
            "maxStudents": self.max_students,
            "availableSpots": self.available_spots,
            "isFull": self.is_full,
            "isActive": self.is_active,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<ClassRoom {self.name} ({self.grade})>"

# services/classes.py
import logging

from errors import ConflictError, NotFoundError
from models.account import Controller, Student
from models.classroom import DAYS, ClassRoom
from services.schemas import classroom_payload

log = logging.getLogger(__name__)


class ClassService:
    """Class rosters: timetable details plus enrolment capped at ``max_students``."""

    def __init__(self, session):
        self.session = session

    def get(self, class_id):
        classroom = self.session.get(ClassRoom, class_id)
        if classroom is None:
            raise NotFoundError("Class not found")
        return classroom

    def _teacher(self, teacher_id):
        teacher = self.session.get(Controller, teacher_id)
        if teacher is None:
            raise NotFoundError("Teacher not found")
        return teacher

    def _student(self, student_id):
        student = self.session.get(Student, student_id)
        if student is None:
            raise NotFoundError("Student not found")
        return student

    def list(self, page=1, limit=10, subject=None, grade=None, teacher_id=None, student_id=None, active=None):
        q = self.session.query(ClassRoom)
        if subject:
            q = q.filter(ClassRoom.subject == subject)
        if grade:
            q = q.filter(ClassRoom.grade == grade)
        if teacher_id is not None:
            q = q.filter(ClassRoom.teacher_id == teacher_id)
        if student_id is not None:
            q = q.filter(ClassRoom.students.any(Student.id == student_id))
        if active is not None:
            q = q.filter(ClassRoom.is_active == active)
        total = q.count()
        items = (
            q.order_by(ClassRoom.created_at.desc(), ClassRoom.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    def create(self, data, created_by):
        fields = classroom_payload(data, DAYS)
        # the creating controller is in charge unless another one is named
        teacher = self._teacher(fields.pop("teacher_id")) if "teacher_id" in fields else created_by
        fields.setdefault("is_active", True)
        classroom = ClassRoom(teacher=teacher, **fields)
        self.session.add(classroom)
        self.session.commit()
        log.info("Class %r created for %s", classroom.name, teacher.username)
        return classroom

    def update(self, class_id, data):
        classroom = self.get(class_id)
        fields = classroom_payload(data, DAYS, partial=True)
        if "teacher_id" in fields:
            classroom.teacher = self._teacher(fields.pop("teacher_id"))
        if fields.get("max_students", classroom.max_students) < len(classroom.students):
            raise ConflictError("Class already has more students than that", retryable=False)
        for key, value in fields.items():
            setattr(classroom, key, value)
        self.session.commit()
        return classroom

    def delete(self, class_id):
        classroom = self.get(class_id)
        self.session.delete(classroom)
        self.session.commit()
        log.info("Class %s deleted", class_id)

    def enroll(self, class_id, student_id):
        classroom = self.get(class_id)
        student = self._student(student_id)
        if student in classroom.students:
            raise ConflictError("Student is already enrolled in this class", retryable=False)
        if classroom.is_full:
            raise ConflictError("Class is full", retryable=False)
        classroom.students.append(student)
        self.session.commit()
        log.info("Student %s enrolled in class %s", student.username, class_id)
        return classroom

    def unenroll(self, class_id, student_id):
        classroom = self.get(class_id)
        student = self._student(student_id)
        if student not in classroom.students:
            raise NotFoundError("Student is not enrolled in this class")
        classroom.students.remove(student)
        self.session.commit()
        log.info("Student %s removed from class %s", student.username, class_id)
        return classroom

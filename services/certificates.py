# services/certificates.py
import logging

from sqlalchemy import func

from models.account import Student
from models.certificate import CATEGORIES, Certificate
from errors import NotFoundError
from services.schemas import certificate_payload

log = logging.getLogger(__name__)


def _awarded(certificate):
    return certificate.points if certificate.is_active else 0


class CertificateService:
    """Certificates and the point totals they feed.

    A student's ``total_points`` always equals the points of their active
    certificates; every mutation adjusts it in the same commit.
    """

    def __init__(self, session):
        self.session = session

    def get(self, certificate_id):
        certificate = self.session.get(Certificate, certificate_id)
        if certificate is None:
            raise NotFoundError("Certificate not found")
        return certificate

    def list(self, page=1, limit=10, student_id=None, category=None, active=None):
        q = self.session.query(Certificate)
        if student_id is not None:
            q = q.filter(Certificate.student_id == student_id)
        if category:
            q = q.filter(Certificate.category == category)
        if active is not None:
            q = q.filter(Certificate.is_active == active)
        total = q.count()
        items = (
            q.order_by(Certificate.issued_at.desc(), Certificate.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total

    def create(self, data, awarded_by):
        fields = certificate_payload(data, CATEGORIES)
        student = self.session.get(Student, fields["student_id"])
        if student is None:
            raise NotFoundError("Student not found")
        fields.setdefault("is_active", True)
        certificate = Certificate(awarded_by=awarded_by, **fields)
        student.total_points += _awarded(certificate)
        self.session.add(certificate)
        self.session.commit()
        log.info("Certificate %r awarded to %s (+%s points)", certificate.title, student.username, certificate.points)
        return certificate

    def update(self, certificate_id, data):
        certificate = self.get(certificate_id)
        fields = certificate_payload(data, CATEGORIES, partial=True)
        before = _awarded(certificate)
        for key, value in fields.items():
            setattr(certificate, key, value)
        certificate.student.total_points += _awarded(certificate) - before
        self.session.commit()
        return certificate

    def delete(self, certificate_id):
        certificate = self.get(certificate_id)
        certificate.student.total_points -= _awarded(certificate)
        self.session.delete(certificate)
        self.session.commit()
        log.info("Certificate %s deleted", certificate_id)

    def leaderboard(self, limit=10, class_name=None):
        students = self.session.query(Student).filter(Student.is_active.is_(True))
        if class_name:
            students = students.filter(Student.class_name == class_name)
        top = students.order_by(Student.total_points.desc(), Student.name.asc()).limit(limit).all()

        def stats(q):
            count, average = q.with_entities(func.count(Student.id), func.avg(Student.total_points)).one()
            return {"totalStudents": count, "averagePoints": round(float(average or 0), 2)}

        overall = stats(self.session.query(Student).filter(Student.is_active.is_(True)))
        return {
            "leaderboard": [
                {
                    "rank": rank,
                    "id": s.id,
                    "name": s.name,
                    "points": s.total_points,
                    "class": s.class_name,
                    "division": s.division,
                }
                for rank, s in enumerate(top, start=1)
            ],
            "statistics": dict(overall, classStats=stats(students) if class_name else None),
            "filters": {"limit": limit, "class": class_name or "all"},
        }

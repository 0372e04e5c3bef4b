# models/certificate.py
from extensions import db
from models.account import utcnow

CATEGORIES = ("academic", "sports", "arts", "leadership", "other")


class Certificate(db.Model):
    __tablename__ = "certificates"
    id = db.Column(db.Integer, primary_key=True)
    student_id = db.Column(db.Integer, db.ForeignKey("students.id"), nullable=False, index=True)
    awarded_by_id = db.Column(db.Integer, db.ForeignKey("controllers.id"), nullable=True)
    title = db.Column(db.String(200), nullable=False)
    category = db.Column(db.String(20), nullable=False, default="other")
    description = db.Column(db.Text, nullable=True)
    points = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    issued_at = db.Column(db.DateTime, default=utcnow)

    student = db.relationship("Student", back_populates="certificates")
    awarded_by = db.relationship("Controller")

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category,
            "description": self.description,
            "points": self.points,
            "isActive": self.is_active,
            "issuedAt": self.issued_at.isoformat() if self.issued_at else None,
            "student": {
                "id": self.student.id,
                "name": self.student.name,
                "class": self.student.class_name,
                "division": self.student.division,
            },
            "awardedBy": {"id": self.awarded_by.id, "name": self.awarded_by.name} if self.awarded_by else None,
        }

    def __repr__(self):
        return f"<Certificate {self.title} -> {self.student_id}>"

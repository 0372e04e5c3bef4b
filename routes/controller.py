# routes/controller.py
from flask import Blueprint, current_app, g, jsonify, request

from errors import NotFoundError
from models.account import Role
from routes.decorators import bool_arg, controller_required, json_body, page_meta, pagination
from services import get_services
from services.schemas import ControllerProfile, StudentProfile

controller_bp = Blueprint('controller', __name__)


def _credentials(issued, email_sent):
    account = issued.account
    return {
        "id": account.id,
        "username": account.username,
        "password": issued.password,  # plaintext, returned only here
        "email": account.email,
        "name": account.name,
        "qrToken": account.qr_token,
        "qrCodeImage": account.qr_code_image,
        "emailSent": email_sent,
    }


def _student_or_404(student_id):
    student = get_services().store.students.get(student_id)
    if student is None:
        raise NotFoundError("Student not found")
    return student


def _welcome(services, issued):
    sent = services.mailer.send_welcome(issued.account, issued.password, issued.qr_png)
    if not sent:
        current_app.logger.warning("Welcome email not delivered to %s", issued.account.email)
    return sent


@controller_bp.route("/register", methods=["POST"])
@controller_required
def register():
    services = get_services()
    profile = StudentProfile.from_payload(json_body())
    issued = services.issuer.issue(Role.STUDENT, profile)
    sent = _welcome(services, issued)
    if sent:
        issued.account.email_sent = True
        services.store.students.save(issued.account)
    current_app.logger.info("Student %s registered by controller %s", issued.account.username, g.session.username)
    return jsonify({
        "success": True,
        "message": "Student registered successfully",
        "student": _credentials(issued, sent),
    }), 201


@controller_bp.route("/controllers", methods=["POST"])
@controller_required
def create_controller():
    services = get_services()
    profile = ControllerProfile.from_payload(json_body())
    issued = services.issuer.issue(Role.CONTROLLER, profile)
    sent = _welcome(services, issued)
    current_app.logger.info("Controller %s created by %s", issued.account.username, g.session.username)
    return jsonify({
        "success": True,
        "message": "Controller created successfully",
        "controller": _credentials(issued, sent),
    }), 201


@controller_bp.route("/students", methods=["GET"])
@controller_required
def list_students():
    page, limit = pagination()
    students, total = get_services().store.students.list(
        page=page,
        limit=limit,
        class_name=request.args.get("class") or None,
        is_active=bool_arg("active"),
    )
    return jsonify({
        "success": True,
        "students": [s.to_dict() for s in students],
        "pagination": page_meta(page, limit, total),
    })


def _set_active(student_id, active):
    student = _student_or_404(student_id)
    student.is_active = active
    get_services().store.students.save(student)
    current_app.logger.info("Student %s %s by %s", student.username,
                            "activated" if active else "deactivated", g.session.username)
    return jsonify({"success": True, "student": student.to_dict()})


@controller_bp.route("/students/<int:student_id>/deactivate", methods=["POST"])
@controller_required
def deactivate_student(student_id):
    return _set_active(student_id, False)


@controller_bp.route("/students/<int:student_id>/activate", methods=["POST"])
@controller_required
def activate_student(student_id):
    return _set_active(student_id, True)


@controller_bp.route("/students/<int:student_id>/reset-password", methods=["POST"])
@controller_required
def reset_student_password(student_id):
    services = get_services()
    issued = services.issuer.reset_password(_student_or_404(student_id))
    sent = _welcome(services, issued)
    return jsonify({"success": True, "student": _credentials(issued, sent)})

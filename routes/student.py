# routes/student.py
from flask import Blueprint, g, jsonify, request

from errors import ForbiddenError, ValidationError
from models.account import Role
from routes.decorators import bool_arg, controller_required, json_body, page_meta, pagination, session_required
from services import get_services

# certificates and leaderboard
student_bp = Blueprint('student', __name__)


def _int_arg(name):
    value = request.args.get(name)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError({name: "Must be an integer."})


@student_bp.route("/certificates", methods=["GET"])
@session_required
def list_certificates():
    page, limit = pagination()
    student_id = _int_arg("student")
    if g.session.role is Role.STUDENT:
        # students only ever see their own
        if student_id not in (None, g.session.id):
            raise ForbiddenError("Students can only view their own certificates")
        student_id = g.session.id
    items, total = get_services().certificates.list(
        page=page,
        limit=limit,
        student_id=student_id,
        category=request.args.get("category") or None,
        active=bool_arg("active"),
    )
    return jsonify({
        "success": True,
        "data": [c.to_dict() for c in items],
        "pagination": page_meta(page, limit, total),
    })


@student_bp.route("/certificates", methods=["POST"])
@controller_required
def create_certificate():
    services = get_services()
    awarded_by = services.store.controllers.get(g.session.id)
    certificate = services.certificates.create(json_body(), awarded_by)
    return jsonify({"success": True, "data": certificate.to_dict(), "message": "Certificate created successfully"}), 201


@student_bp.route("/certificates/<int:certificate_id>", methods=["PUT"])
@controller_required
def update_certificate(certificate_id):
    certificate = get_services().certificates.update(certificate_id, json_body())
    return jsonify({"success": True, "data": certificate.to_dict(), "message": "Certificate updated successfully"})


@student_bp.route("/certificates/<int:certificate_id>", methods=["DELETE"])
@controller_required
def delete_certificate(certificate_id):
    get_services().certificates.delete(certificate_id)
    return jsonify({"success": True, "message": "Certificate deleted successfully"})


@student_bp.route("/leaderboard", methods=["GET"])
@session_required
def leaderboard():
    limit = _int_arg("limit")
    limit = 10 if limit is None else limit
    if not 1 <= limit <= 100:
        raise ValidationError({"limit": "Must be between 1 and 100."})
    data = get_services().certificates.leaderboard(limit=limit, class_name=request.args.get("class") or None)
    return jsonify({"success": True, "data": data})

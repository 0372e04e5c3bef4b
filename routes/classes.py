# routes/classes.py
from flask import Blueprint, current_app, g, jsonify, request

from errors import ForbiddenError, ValidationError
from models.account import Role
from routes.decorators import bool_arg, controller_required, json_body, page_meta, pagination, session_required
from services import get_services

# class rosters; anyone signed in may browse, controllers manage
classes_bp = Blueprint('classes', __name__, url_prefix='/classes')


def _id_arg(name):
    value = request.args.get(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError({name: "Must be an integer."})


@classes_bp.route("", methods=["GET"])
@session_required
def list_classes():
    page, limit = pagination()
    student_id = _id_arg("student")
    if g.session.role is Role.STUDENT and student_id not in (None, g.session.id):
        raise ForbiddenError("Students can only view their own enrolments")
    items, total = get_services().classes.list(
        page=page,
        limit=limit,
        subject=request.args.get("subject") or None,
        grade=request.args.get("grade") or None,
        teacher_id=_id_arg("teacher"),
        student_id=student_id,
        active=bool_arg("active"),
    )
    return jsonify({
        "success": True,
        "data": [c.to_dict() for c in items],
        "pagination": page_meta(page, limit, total),
    })


@classes_bp.route("", methods=["POST"])
@controller_required
def create_class():
    services = get_services()
    created_by = services.store.controllers.get(g.session.id)
    classroom = services.classes.create(json_body(), created_by)
    return jsonify({"success": True, "data": classroom.to_dict(), "message": "Class created successfully"}), 201


@classes_bp.route("/<int:class_id>", methods=["GET"])
@session_required
def get_class(class_id):
    return jsonify({"success": True, "data": get_services().classes.get(class_id).to_dict()})


@classes_bp.route("/<int:class_id>", methods=["PUT"])
@controller_required
def update_class(class_id):
    classroom = get_services().classes.update(class_id, json_body())
    return jsonify({"success": True, "data": classroom.to_dict(), "message": "Class updated successfully"})


@classes_bp.route("/<int:class_id>", methods=["DELETE"])
@controller_required
def delete_class(class_id):
    get_services().classes.delete(class_id)
    current_app.logger.info("Class %s deleted by %s", class_id, g.session.username)
    return jsonify({"success": True, "message": "Class deleted successfully"})


@classes_bp.route("/<int:class_id>/students", methods=["POST"])
@controller_required
def enroll_student(class_id):
    student_id = json_body().get("studentId")
    if isinstance(student_id, bool) or not isinstance(student_id, int):
        raise ValidationError({"studentId": "Student ID is required."})
    classroom = get_services().classes.enroll(class_id, student_id)
    return jsonify({"success": True, "data": classroom.to_dict(), "message": "Student enrolled successfully"})


@classes_bp.route("/<int:class_id>/students/<int:student_id>", methods=["DELETE"])
@controller_required
def unenroll_student(class_id, student_id):
    classroom = get_services().classes.unenroll(class_id, student_id)
    return jsonify({"success": True, "data": classroom.to_dict(), "message": "Student removed from class"})

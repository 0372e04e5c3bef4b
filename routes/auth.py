# routes/auth.py
from flask import Blueprint, current_app, g, jsonify

from extensions import limiter
from routes.decorators import json_body, role_from, session_required, text_field
from services import get_services
from services.schemas import new_password, profile_update

auth_bp = Blueprint('auth', __name__, url_prefix='')


def _login_limit():
    return current_app.config.get("LOGIN_RATE_LIMIT", "10 per minute")


def _login_response(token, account):
    return jsonify({"success": True, "token": token, "user": account.to_dict()})


@auth_bp.route("/login", methods=["POST"])
@limiter.limit(_login_limit)
def login():
    data = json_body()
    role = role_from(data)
    # username or email in either field
    username, email = text_field(data, "username"), text_field(data, "email")
    identifier = (username or email).strip()
    password = text_field(data, "password")
    token, account = get_services().authenticator.login(identifier, password, role)
    return _login_response(token, account)


@auth_bp.route("/login-qr", methods=["POST"])
@limiter.limit(_login_limit)
def login_qr():
    data = json_body()
    role = role_from(data)
    token, account = get_services().authenticator.login_qr(text_field(data, "qrToken"), role)
    return _login_response(token, account)


@auth_bp.route("/me", methods=["GET"])
@session_required
def me():
    account = get_services().authenticator.current_account(g.session)
    user = account.to_dict()
    user["qrCodeImage"] = account.qr_code_image
    return jsonify({"success": True, "user": user})


@auth_bp.route("/me", methods=["PUT"])
@session_required
def update_me():
    services = get_services()
    account = services.authenticator.current_account(g.session)
    changes = profile_update(type(account), json_body())
    for column, value in changes.items():
        setattr(account, column, value)
    services.store.for_role(account.role).save(account)
    current_app.logger.info("Profile updated for %s: %s", account.username, sorted(changes))
    return jsonify({"success": True, "message": "Profile updated successfully", "user": account.to_dict()})


# Forgot / reset password; the response never says whether the email exists
@auth_bp.route('/forgot', methods=['POST'])
@limiter.limit(_login_limit)
def forgot_password():
    data = json_body()
    role = role_from(data)
    email = text_field(data, "email").strip().lower()
    services = get_services()
    account = services.store.for_role(role).by_email(email) if email else None
    if account and account.is_active:
        token = services.tokens.issue_reset(account)
        services.mailer.send_reset(account, token)
    else:
        current_app.logger.info("Password reset requested for unknown %s email %r", role.value, email)
    return jsonify({"success": True, "message": "If the account exists, a reset link has been sent."})


@auth_bp.route('/reset/<token>', methods=['POST'])
def reset_password(token):
    password = new_password(json_body())
    get_services().authenticator.reset_with_token(token, password)
    return jsonify({"success": True, "message": "Password successfully reset!"})

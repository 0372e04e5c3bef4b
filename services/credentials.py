# services/credentials.py
"""Credential issuance for new accounts.

A registration derives a username from the person's name, generates a
plaintext password (returned to the caller exactly once), stores only the
Werkzeug hash, and assigns a random QR token that works as an alternate
login key. The QR image encodes a JSON login payload.
"""
import base64
import io
import json
import logging
import re
import secrets
from dataclasses import dataclass

import qrcode
from werkzeug.security import generate_password_hash

from models.account import MODELS, Role
from errors import ConflictError

log = logging.getLogger(__name__)

QR_TOKEN_BYTES = 16


def normalize_name(name):
    # lowercase, no whitespace, letters and digits only
    return re.sub(r"[^a-z0-9]", "", re.sub(r"\s+", "", (name or "").lower()))


def derive_username(name):
    base = normalize_name(name) or "user"
    return f"{base}{100 + secrets.randbelow(9900)}"


def generate_password(name, digits=4):
    prefix = re.sub(r"[^A-Za-z0-9]", "", re.sub(r"\s+", "", name or "")) or "School"
    suffix = "".join(str(secrets.randbelow(10)) for _ in range(digits))
    return f"{prefix}{suffix}"


def generate_qr_token():
    return secrets.token_urlsafe(QR_TOKEN_BYTES)


def qr_payload(username, role, qr_token, password=None):
    data = {"type": "login", "username": username, "role": role.value, "qrToken": qr_token}
    if password is not None:
        data["password"] = password
    return json.dumps(data)


def render_qr_png(data):
    qr = qrcode.QRCode(box_size=10, border=2)
    qr.add_data(data)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def png_data_uri(png):
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


@dataclass
class IssuedCredentials:
    account: object
    password: str
    qr_png: bytes

    @property
    def qr_code_image(self):
        return self.account.qr_code_image


class CredentialIssuer:
    def __init__(self, store, password_digits=4, username_attempts=10, embed_password_in_qr=False):
        self.store = store
        self.password_digits = password_digits
        self.username_attempts = username_attempts
        self.embed_password_in_qr = embed_password_in_qr

    def unique_username(self, name):
        for _ in range(self.username_attempts):
            candidate = derive_username(name)
            if not self.store.username_taken(candidate):
                return candidate
            log.debug("Username candidate %s already taken, regenerating", candidate)
        raise ConflictError("Could not generate a unique username, please retry")

    def unique_qr_token(self):
        for _ in range(self.username_attempts):
            token = generate_qr_token()
            if not self.store.qr_token_taken(token):
                return token
        raise ConflictError("Could not generate a unique QR token, please retry")

    def _qr(self, username, role, qr_token, password):
        data = qr_payload(username, role, qr_token, password if self.embed_password_in_qr else None)
        return render_qr_png(data)

    def issue(self, role, profile):
        """Create and persist an account for ``profile``.

        ``profile`` is a validated StudentProfile or ControllerProfile.
        Controllers may request their own username and password; students
        always get generated ones.
        """
        if self.store.email_taken(profile.email):
            raise ConflictError(f"An account with email {profile.email} already exists")

        requested_username = getattr(profile, "username", "")
        if requested_username:
            if self.store.username_taken(requested_username):
                raise ConflictError(f"Username {requested_username} is already taken")
            username = requested_username
        else:
            username = self.unique_username(profile.name)

        password = getattr(profile, "password", "") or generate_password(profile.name, self.password_digits)
        qr_token = self.unique_qr_token()
        qr_png = self._qr(username, role, qr_token, password)

        account = MODELS[role](
            username=username,
            password_hash=generate_password_hash(password),
            qr_token=qr_token,
            qr_code_image=png_data_uri(qr_png),
            is_active=True,
            **profile.model_fields(),
        )
        self.store.for_role(role).add(account)
        log.info("Issued %s credentials for %s (id=%s)", role.value, username, account.id)
        return IssuedCredentials(account=account, password=password, qr_png=qr_png)

    def reset_password(self, account):
        """Replace the password; the QR token stays the same."""
        password = generate_password(account.name, self.password_digits)
        account.password_hash = generate_password_hash(password)
        qr_png = self._qr(account.username, account.role, account.qr_token, password)
        if self.embed_password_in_qr:
            account.qr_code_image = png_data_uri(qr_png)
        self.store.for_role(account.role).save(account)
        log.info("Password reset for %s %s", account.role.value, account.username)
        return IssuedCredentials(account=account, password=password, qr_png=qr_png)

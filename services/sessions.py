# services/sessions.py
import hashlib
from dataclasses import dataclass

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from models.account import Role
from errors import AuthorizationError

SESSION_SALT = "school.session.v1"
RESET_SALT = "reset-password"


@dataclass(frozen=True)
class SessionData:
    id: int
    username: str
    role: Role


def _fingerprint(password_hash):
    return hashlib.sha256(password_hash.encode("utf-8")).hexdigest()[:16]


class SessionTokens:
    """Signs and checks the bearer tokens presented on protected requests.

    Stateless: validating a token never touches the store.
    """

    def __init__(self, secret_key, max_age=7 * 24 * 3600, reset_max_age=3600):
        if not secret_key:
            raise RuntimeError("SECRET_KEY is required to sign session tokens")
        self.max_age = max_age
        self.reset_max_age = reset_max_age
        self._sessions = URLSafeTimedSerializer(secret_key, salt=SESSION_SALT)
        self._resets = URLSafeTimedSerializer(secret_key, salt=RESET_SALT)

    def issue(self, account):
        return self._sessions.dumps({"id": account.id, "username": account.username, "role": account.role.value})

    def validate(self, token, max_age=None):
        if not token:
            raise AuthorizationError("Access token required")
        try:
            data = self._sessions.loads(token, max_age=self.max_age if max_age is None else max_age)
        except SignatureExpired:
            raise AuthorizationError("Session expired, please log in again")
        except BadSignature:
            raise AuthorizationError("Invalid token")

        if not isinstance(data, dict):
            raise AuthorizationError("Invalid token")
        role = Role.parse(data.get("role"))
        account_id = data.get("id")
        if role is None or not isinstance(account_id, int):
            raise AuthorizationError("Invalid token")
        return SessionData(id=account_id, username=str(data.get("username") or ""), role=role)

    def issue_reset(self, account):
        return self._resets.dumps({
            "id": account.id,
            "role": account.role.value,
            "h": _fingerprint(account.password_hash),
        })

    def validate_reset(self, token):
        """Returns (account_id, role, fingerprint); the caller compares the fingerprint."""
        try:
            data = self._resets.loads(token, max_age=self.reset_max_age)
        except BadSignature:
            raise AuthorizationError("Reset link expired or invalid")
        role = Role.parse((data or {}).get("role")) if isinstance(data, dict) else None
        if role is None or not isinstance(data.get("id"), int):
            raise AuthorizationError("Reset link expired or invalid")
        return data["id"], role, data.get("h")

    @staticmethod
    def matches_fingerprint(account, fingerprint):
        return fingerprint == _fingerprint(account.password_hash)

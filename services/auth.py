# services/auth.py
import json
import logging

from werkzeug.security import check_password_hash, generate_password_hash

from models.account import utcnow
from errors import AuthorizationError, InvalidCredentials, NotFoundError

log = logging.getLogger(__name__)

# checked against when the identifier is unknown so both failures cost one hash
_DUMMY_HASH = generate_password_hash("not-a-real-password")


def extract_qr_token(scanned):
    """A scanner may hand over the raw QR text (JSON payload) or just the token."""
    if not isinstance(scanned, str):
        return ""
    scanned = scanned.strip()
    if scanned.startswith("{"):
        try:
            data = json.loads(scanned)
        except ValueError:
            return scanned
        if isinstance(data, dict):
            return str(data.get("qrToken") or "")
    return scanned


class Authenticator:
    def __init__(self, store, tokens):
        self.store = store
        self.tokens = tokens

    def _success(self, account):
        account.last_login = utcnow()
        self.store.for_role(account.role).save(account)
        return self.tokens.issue(account), account

    def login(self, identifier, password, role):
        repo = self.store.for_role(role)
        account = repo.by_identifier(identifier) if identifier else None
        if account is None:
            check_password_hash(_DUMMY_HASH, password or "")
            log.info("Login failed for %r (%s): no such account", identifier, role.value)
            raise InvalidCredentials()
        if not password or not check_password_hash(account.password_hash, password):
            log.info("Login failed for %s (%s): password mismatch", account.username, role.value)
            raise InvalidCredentials()
        if not account.is_active:
            log.info("Login refused for %s (%s): account inactive", account.username, role.value)
            raise InvalidCredentials()
        log.info("Login ok for %s (%s)", account.username, role.value)
        return self._success(account)

    def login_qr(self, scanned, role):
        qr_token = extract_qr_token(scanned)
        account = self.store.for_role(role).by_qr_token(qr_token)
        if account is None or not account.is_active:
            log.info("QR login failed (%s): %s", role.value, "inactive" if account else "unknown token")
            raise InvalidCredentials()
        log.info("QR login ok for %s (%s)", account.username, role.value)
        return self._success(account)

    def current_account(self, session):
        """Fresh profile for a validated session."""
        account = self.store.for_role(session.role).get(session.id)
        if account is None:
            raise NotFoundError("User not found")
        if not account.is_active:
            raise AuthorizationError("Account is inactive")
        return account

    def change_password(self, account, new_password):
        account.password_hash = generate_password_hash(new_password)
        self.store.for_role(account.role).save(account)
        log.info("Password changed for %s %s", account.role.value, account.username)

    def reset_with_token(self, token, new_password):
        account_id, role, fingerprint = self.tokens.validate_reset(token)
        account = self.store.for_role(role).get(account_id)
        if account is None or not account.is_active or not self.tokens.matches_fingerprint(account, fingerprint):
            raise AuthorizationError("Reset link expired or invalid")
        self.change_password(account, new_password)
        return account

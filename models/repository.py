# models/repository.py
import logging

from sqlalchemy.exc import IntegrityError

from models.account import MODELS, Role
from errors import ConflictError

log = logging.getLogger(__name__)


class AccountRepository:
    """Storage adapter for one account role, bound to an explicit session."""

    def __init__(self, session, model):
        self.session = session
        self.model = model

    @property
    def role(self):
        return self.model.role

    def _first(self, **criteria):
        return self.session.query(self.model).filter_by(**criteria).first()

    def get(self, account_id):
        return self.session.get(self.model, account_id)

    def by_username(self, username):
        return self._first(username=(username or "").strip().lower())

    def by_email(self, email):
        return self._first(email=(email or "").strip().lower())

    def by_identifier(self, identifier):
        # try username first, then email
        return self.by_username(identifier) or self.by_email(identifier)

    def by_qr_token(self, qr_token):
        if not qr_token:
            return None
        return self._first(qr_token=qr_token)

    def add(self, account):
        self.session.add(account)
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            log.info("Insert of %s rejected by store: %s", self.model.__name__, exc.orig)
            raise ConflictError("An account with this email, username or QR token already exists") from exc
        return account

    def save(self, account):
        self.session.commit()
        return account

    def query(self, **filters):
        q = self.session.query(self.model)
        for column, value in filters.items():
            if value is not None:
                q = q.filter(getattr(self.model, column) == value)
        return q

    def list(self, page=1, limit=10, **filters):
        q = self.query(**filters)
        total = q.count()
        items = (
            q.order_by(self.model.created_at.desc(), self.model.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return items, total


class AccountStore:
    """Dispatches on Role to the per-role repositories."""

    def __init__(self, session):
        self.session = session
        self.repositories = {role: AccountRepository(session, model) for role, model in MODELS.items()}

    def for_role(self, role):
        if not isinstance(role, Role):
            raise TypeError(f"expected Role, got {role!r}")
        return self.repositories[role]

    @property
    def students(self):
        return self.repositories[Role.STUDENT]

    @property
    def controllers(self):
        return self.repositories[Role.CONTROLLER]

    def username_taken(self, username):
        return any(repo.by_username(username) for repo in self.repositories.values())

    def email_taken(self, email):
        return any(repo.by_email(email) for repo in self.repositories.values())

    def qr_token_taken(self, qr_token):
        return any(repo.by_qr_token(qr_token) for repo in self.repositories.values())

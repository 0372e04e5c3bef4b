# services/__init__.py
from dataclasses import dataclass

from flask import current_app

from models.repository import AccountStore
from services.auth import Authenticator
from services.certificates import CertificateService
from services.classes import ClassService
from services.credentials import CredentialIssuer
from services.mailer import Mailer
from services.sessions import SessionTokens


@dataclass
class Services:
    store: AccountStore
    tokens: SessionTokens
    issuer: CredentialIssuer
    authenticator: Authenticator
    certificates: CertificateService
    classes: ClassService
    mailer: Mailer


def build_services(config, session):
    store = AccountStore(session)
    tokens = SessionTokens(
        config["SECRET_KEY"],
        max_age=config["SESSION_MAX_AGE"],
        reset_max_age=config["RESET_MAX_AGE"],
    )
    return Services(
        store=store,
        tokens=tokens,
        issuer=CredentialIssuer(
            store,
            password_digits=config["PASSWORD_DIGITS"],
            username_attempts=config["USERNAME_ATTEMPTS"],
            embed_password_in_qr=config["QR_EMBED_PASSWORD"],
        ),
        authenticator=Authenticator(store, tokens),
        certificates=CertificateService(session),
        classes=ClassService(session),
        mailer=Mailer.from_config(config),
    )


def get_services():
    return current_app.extensions["school"]

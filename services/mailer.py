# services/mailer.py
import logging
import smtplib
from email.message import EmailMessage
from html import escape

log = logging.getLogger(__name__)


class Mailer:
    def __init__(self, server="", port=465, username="", password="", use_ssl=True,
                 sender="", school_name="FG School", frontend_url="http://localhost:3000"):
        self.server = server
        self.port = port
        self.username = username
        self.password = password
        self.use_ssl = use_ssl
        self.sender = sender or username
        self.school_name = school_name
        self.frontend_url = frontend_url.rstrip("/")

    @classmethod
    def from_config(cls, config):
        return cls(
            server=config.get("MAIL_SERVER", ""),
            port=config.get("MAIL_PORT", 465),
            username=config.get("MAIL_USERNAME", ""),
            password=config.get("MAIL_PASSWORD", ""),
            use_ssl=config.get("MAIL_USE_SSL", True),
            sender=config.get("MAIL_SENDER", ""),
            school_name=config.get("SCHOOL_NAME", "FG School"),
            frontend_url=config.get("FRONTEND_URL", "http://localhost:3000"),
        )

    @property
    def configured(self):
        return bool(self.server and self.sender)

    def _deliver(self, msg):
        if not self.configured:
            log.warning("Mail not configured - skipping email to %s", msg["To"])
            return False
        try:
            if self.use_ssl:
                smtp = smtplib.SMTP_SSL(self.server, self.port, timeout=10)
            else:
                smtp = smtplib.SMTP(self.server, self.port, timeout=10)
            with smtp:
                if not self.use_ssl:
                    smtp.starttls()
                if self.username:
                    smtp.login(self.username, self.password)
                smtp.send_message(msg)
        except (smtplib.SMTPException, OSError) as exc:
            log.error("Email to %s failed: %s", msg["To"], exc)
            return False
        log.info("Email '%s' sent to %s", msg["Subject"], msg["To"])
        return True

    def _message(self, to, subject):
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = to
        return msg

    def send_welcome(self, account, password, qr_png=None):
        login_url = f"{self.frontend_url}/login"
        msg = self._message(account.email, f"Welcome to {self.school_name}!")
        lines = [
            f"Hello {account.name}!",
            "",
            f"Welcome to {self.school_name}. Your login credentials:",
            f"  Username: {account.username}",
            f"  Password: {password}",
        ]
        class_name = getattr(account, "class_name", None)
        if class_name:
            lines.append(f"  Class: {class_name}-{account.division}")
        lines += [
            f"  Login URL: {login_url}",
            "",
            "You can also log in by scanning the attached QR code.",
            "Please change your password after your first login.",
        ]
        msg.set_content("\n".join(lines))
        msg.add_alternative(
            "<html><body>"
            f"<h2>Hello {escape(account.name)}!</h2>"
            f"<p>Welcome to {escape(self.school_name)}.</p>"
            f"<p><strong>Username:</strong> {escape(account.username)}<br>"
            f"<strong>Password:</strong> {escape(password)}</p>"
            f'<p><a href="{escape(login_url)}">Log in</a> or scan the attached QR code.</p>'
            "</body></html>",
            subtype="html",
        )
        if qr_png:
            msg.add_attachment(qr_png, maintype="image", subtype="png", filename="login-qr.png")
        return self._deliver(msg)

    def send_reset(self, account, token):
        link = f"{self.frontend_url}/reset/{token}"
        msg = self._message(account.email, f"{self.school_name} password reset")
        msg.set_content(
            f"Hello {account.name},\n\n"
            f"Use this link to choose a new password (valid for one hour):\n{link}\n\n"
            "If you did not request this, ignore this email."
        )
        return self._deliver(msg)

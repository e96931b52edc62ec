import logging
import os
import smtplib
from email.mime.text import MIMEText

from jinja2 import Environment, FileSystemLoader
from starlette.requests import HTTPConnection

from core.config import settings
from core.errors import MailDeliveryError

logger = logging.getLogger(__name__)

template_dir = os.path.join(os.path.dirname(__file__), "templates")
env = Environment(loader=FileSystemLoader(template_dir), keep_trailing_newline=True)


def render_template(template_name: str, context: dict) -> str:
    return env.get_template(template_name).render(context)


class Mailer:
    """Plain-text mail sender over SMTP with STARTTLS."""

    def __init__(self, server: str, port: int, username: str, password: str, from_address: str):
        self.server = server
        self.port = port
        self.username = username
        self.password = password
        self.from_address = from_address

    def send(self, to_email: str, subject: str, body: str):
        msg = MIMEText(body, "plain", "utf-8")
        msg["From"] = self.from_address
        msg["To"] = to_email
        msg["Subject"] = subject

        try:
            with smtplib.SMTP(self.server, self.port, timeout=10) as server:
                server.starttls()
                if self.username:
                    server.login(self.username, self.password)
                server.sendmail(self.from_address, [to_email], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", to_email, e)
            raise MailDeliveryError(errors=str(e)) from e
        logger.info("Email '%s' sent to %s", subject, to_email)


def build_mailer() -> Mailer:
    return Mailer(
        server=settings.SMTP_SERVER,
        port=settings.SMTP_PORT,
        username=settings.SMTP_USER,
        password=settings.SMTP_PASSWORD,
        from_address=settings.MAIL_FROM_ADDRESS,
    )


def get_mailer(connection: HTTPConnection) -> Mailer:
    return connection.app.state.mailer

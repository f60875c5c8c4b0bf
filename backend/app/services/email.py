import logging
import smtplib
from dataclasses import dataclass
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"
SMTP_TIMEOUT_SECONDS = 10

_templates = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=select_autoescape(["html"]),
)


class EmailDeliveryError(Exception):
    """Raised when the SMTP server could not be reached or refused the message."""


@dataclass
class EmailMessage:
    to: list[str]
    subject: str
    html_body: str
    text_body: str = ""


def render_template(name: str, **context) -> str:
    return _templates.get_template(name).render(**context)


class EmailSender:
    """Sends one message per SMTP connection.

    STARTTLS and login are only used when SMTP credentials are configured,
    so a local catch-all server such as MailHog works without either.
    """

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def send(self, message: EmailMessage) -> None:
        settings = self.settings
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = settings.email_sender_address
        msg["To"] = ", ".join(message.to)

        if message.text_body:
            msg.attach(MIMEText(message.text_body, "plain"))
        msg.attach(MIMEText(message.html_body, "html"))

        recipients = message.to
        try:
            with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=SMTP_TIMEOUT_SECONDS) as server:
                if settings.smtp_user and settings.smtp_password:
                    server.starttls()
                    server.login(settings.smtp_user, settings.smtp_password)
                server.send_message(msg, to_addrs=recipients)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Failed to send email to {', '.join(recipients)}: {e}")
            raise EmailDeliveryError(str(e)) from e
        logger.info(f"Email sent to {', '.join(message.to)}: {message.subject[:50]}")


def build_verification_email(to_email: str, full_name: str, verify_url: str, expiry_minutes: int) -> EmailMessage:
    html_body = render_template(
        "verification_email.html",
        full_name=full_name,
        verify_url=verify_url,
        expiry_minutes=expiry_minutes,
    )
    text_body = (
        f"Hello {full_name},\n\n"
        "Please open the link below to verify your email address:\n\n"
        f"{verify_url}\n\n"
        f"This link will expire in {expiry_minutes} minutes.\n"
    )
    return EmailMessage(
        to=[to_email],
        subject="Welcome to Go Job Search!",
        html_body=html_body,
        text_body=text_body,
    )


def build_confirmation_email(to_email: str, full_name: str, position: str, company_name: str) -> EmailMessage:
    html_body = render_template(
        "confirmation_email.html",
        full_name=full_name,
        position=position,
        company_name=company_name,
    )
    text_body = (
        f"Dear {full_name},\n\n"
        "We would like to confirm the successful submission of your job application "
        f"for the {position} position in {company_name}. The employer will review "
        "your application and get back to you.\n"
    )
    return EmailMessage(
        to=[to_email],
        subject=f"Job Application Confirmation - {position}",
        html_body=html_body,
        text_body=text_body,
    )

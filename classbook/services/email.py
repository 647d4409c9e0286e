from __future__ import annotations

from email.message import EmailMessage
import smtplib
import ssl

from classbook.core.config import settings


class EmailDeliveryError(RuntimeError):
    pass


def _build_message(
    *,
    from_email: str,
    to_email: str,
    subject: str,
    text_content: str,
    html_content: str | None,
) -> EmailMessage:
    message = EmailMessage()
    message["From"] = from_email
    message["To"] = to_email
    message["Subject"] = subject
    message.set_content(text_content)
    if html_content:
        message.add_alternative(html_content, subtype="html")
    return message


def send_email(*, to_email: str, subject: str, text_content: str, html_content: str | None = None) -> None:
    """Deliver one message over SMTP. Raises EmailDeliveryError; never retries."""
    from_email = settings.mail_from or settings.smtp_username
    if not settings.smtp_host or not from_email:
        raise EmailDeliveryError("SMTP is not configured (SMTP_HOST / MAIL_FROM)")

    message = _build_message(
        from_email=from_email,
        to_email=to_email,
        subject=subject,
        text_content=text_content,
        html_content=html_content,
    )
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=10) as smtp:
            if settings.smtp_use_tls:
                smtp.starttls(context=ssl.create_default_context())
            if settings.smtp_username:
                smtp.login(settings.smtp_username, settings.smtp_password or "")
            smtp.send_message(message)
    except smtplib.SMTPAuthenticationError as exc:
        raise EmailDeliveryError("SMTP authentication failed") from exc
    except (smtplib.SMTPException, OSError) as exc:
        raise EmailDeliveryError(f"Unable to deliver email: {exc}") from exc

"""Teacher class-assignment notifications.

Messages are handed to FastAPI background tasks so delivery never blocks or
fails the request that produced them. Failed deliveries are logged and kept in
a bounded dead-letter list instead of being retried.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
import logging
from typing import Callable, Optional

from fastapi import BackgroundTasks
from fastapi.concurrency import run_in_threadpool

from classbook.core.config import settings
from classbook.core.enums import NotificationKind
from classbook.services.email import EmailDeliveryError, send_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TeacherNotification:
    kind: NotificationKind
    email: Optional[str]
    teacher_name: str
    class_name: str
    class_level: Optional[str]
    subject: Optional[str]
    school_name: str
    is_primary: bool = False
    academic_year: Optional[str] = None


@dataclass
class DeadLetter:
    notification: TeacherNotification
    reason: str
    failed_at: datetime = field(default_factory=datetime.utcnow)


Notifier = Callable[[TeacherNotification], None]


def _role_line(n: TeacherNotification) -> str:
    if n.is_primary:
        return "form teacher"
    if n.subject:
        return f"{n.subject} teacher"
    return "teacher"


def render_notification(n: TeacherNotification) -> tuple[str, str]:
    """Return (subject, text body) for a notification."""
    level = f" ({n.class_level})" if n.class_level else ""
    if n.kind == NotificationKind.ASSIGNED:
        year = f" for the {n.academic_year} academic year" if n.academic_year else ""
        return (
            f"Class Assignment - {n.school_name}",
            f"Hello {n.teacher_name},\n\n"
            f"You have been assigned as {_role_line(n)} of {n.class_name}{level}{year} "
            f"at {n.school_name}.\n\nSign in at {settings.frontend_url}/auth/login to view your classes.",
        )
    subject_line = f" for {n.subject}" if n.subject else ""
    return (
        f"Class Assignment Removed - {n.school_name}",
        f"Hello {n.teacher_name},\n\n"
        f"You are no longer assigned to {n.class_name}{level}{subject_line} at {n.school_name}.",
    )


class NotificationQueue:
    def __init__(
        self,
        sender: Callable[..., None] = send_email,
        dead_letter_limit: int = settings.notification_dead_letter_limit,
    ) -> None:
        self._sender = sender
        self.dead_letters: deque[DeadLetter] = deque(maxlen=dead_letter_limit)

    def dispatch(self, background_tasks: BackgroundTasks, notification: TeacherNotification) -> None:
        background_tasks.add_task(self.deliver, notification)

    async def deliver(self, notification: TeacherNotification) -> bool:
        if not notification.email:
            logger.warning(
                "Teacher %s has no email address; %s notification not sent",
                notification.teacher_name,
                notification.kind.value.lower(),
            )
            return False
        subject, body = render_notification(notification)
        try:
            await run_in_threadpool(
                self._sender,
                to_email=notification.email,
                subject=subject,
                text_content=body,
            )
        except EmailDeliveryError as exc:
            logger.warning(
                "Failed to send %s notification to %s: %s",
                notification.kind.value.lower(),
                notification.email,
                exc,
            )
            self.dead_letters.append(DeadLetter(notification=notification, reason=str(exc)))
            return False
        logger.info("Sent %s notification to %s", notification.kind.value.lower(), notification.email)
        return True


notification_queue = NotificationQueue()


def get_notification_queue() -> NotificationQueue:
    return notification_queue

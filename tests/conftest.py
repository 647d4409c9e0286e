import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from typing import AsyncGenerator, List, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import classbook.core.models  # noqa: F401  registers every table on Base.metadata
from classbook.db.session import Base, get_db
from classbook.main import app
from classbook.services.email import EmailDeliveryError
from classbook.services.notifications import NotificationQueue, get_notification_queue


TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class RecordingSender:
    """Stands in for SMTP delivery; records every message it is asked to send."""

    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.sent: List[dict] = []

    def __call__(self, *, to_email: str, subject: str, text_content: str, html_content: Optional[str] = None) -> None:
        if self.fail:
            raise EmailDeliveryError("SMTP is not configured (SMTP_HOST / MAIL_FROM)")
        self.sent.append({"to_email": to_email, "subject": subject, "text_content": text_content})


@pytest.fixture()
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database per test, shared by the test and the app through get_db."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with async_session() as session:

        async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
            yield session

        app.dependency_overrides[get_db] = override_get_db
        yield session

    app.dependency_overrides.pop(get_db, None)
    await engine.dispose()


@pytest.fixture()
def sender() -> RecordingSender:
    return RecordingSender()


@pytest.fixture()
def notification_queue(sender: RecordingSender) -> NotificationQueue:
    queue = NotificationQueue(sender=sender, dead_letter_limit=10)
    app.dependency_overrides[get_notification_queue] = lambda: queue
    yield queue
    app.dependency_overrides.pop(get_notification_queue, None)


@pytest.fixture()
async def client(db_session: AsyncSession, notification_queue: NotificationQueue) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


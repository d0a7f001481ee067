"""Pytest fixtures and shared test configuration.

Fixtures:
    - fake_gateway: In-memory assistant gateway
    - assistant_config: Valid configuration staging uploads under tmp_path
    - sleeps: Delays requested by the run poller (no real waiting)
    - chat_service: ChatService wired to the fake gateway
    - async_client: HTTPX client for API testing
    - pdf_bytes: A small valid PDF
"""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from pdfchat.api.app import create_app
from pdfchat.assistant.config import AssistantConfig
from pdfchat.assistant.service import ChatService
from tests.fakes import FakeGateway, make_pdf


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def upload_dir(tmp_path: Path) -> Path:
    return tmp_path / "uploads"


@pytest.fixture
def assistant_config(upload_dir: Path) -> AssistantConfig:
    return AssistantConfig(
        api_key="sk-test-key",
        assistant_id="asst_test",
        poll_interval=1.0,
        run_timeout=None,
        upload_dir=upload_dir,
        max_upload_size=1024 * 1024,
        serialize_turns=False,
    )


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def chat_service(
    fake_gateway: FakeGateway, assistant_config: AssistantConfig, sleeps: list[float]
) -> ChatService:
    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return ChatService(fake_gateway, assistant_config, sleep=fake_sleep)


@pytest.fixture
def app(chat_service: ChatService) -> FastAPI:
    return create_app(service=chat_service)


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for API testing.

    Yields:
        Configured AsyncClient for making test requests.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def pdf_bytes() -> bytes:
    return make_pdf(pages=2)

"""Unit tests for ConversationOrchestrator via ChatService."""

import asyncio

import pytest
import pytest_check as check

from pdfchat.assistant.config import AssistantConfig
from pdfchat.assistant.errors import (
    MalformedUpstreamResponse,
    RunFailed,
    RunTimeout,
    ThreadNotFound,
    UpstreamUnavailable,
)
from pdfchat.assistant.service import ChatService
from tests.fakes import FakeGateway, FakeImageContent, FakeImageFile, FakeLastError, api_status_error


@pytest.fixture
async def thread_id(chat_service: ChatService) -> str:
    return await chat_service.start_session()


class TestConverse:
    """Tests for a single chat turn."""

    async def test_returns_assistant_text(self, chat_service: ChatService, thread_id: str) -> None:
        reply = await chat_service.converse(thread_id, "hello")

        assert reply == "hi"

    async def test_call_order(
        self, chat_service: ChatService, fake_gateway: FakeGateway, thread_id: str
    ) -> None:
        await chat_service.converse(thread_id, "hello")

        check.equal(
            fake_gateway.calls,
            [
                "create_thread",
                "create_message",
                "create_run",
                "retrieve_run",
                "retrieve_run",
                "list_messages",
            ],
        )

    async def test_polls_at_configured_interval(
        self, chat_service: ChatService, thread_id: str, sleeps: list[float]
    ) -> None:
        await chat_service.converse(thread_id, "hello")

        assert sleeps == [1.0, 1.0]

    async def test_run_uses_configured_assistant(
        self, chat_service: ChatService, fake_gateway: FakeGateway, thread_id: str
    ) -> None:
        await chat_service.converse(thread_id, "hello")

        run = next(iter(fake_gateway.runs.values()))
        check.equal(run.assistant_id, "asst_test")
        check.equal(run.thread_id, thread_id)

    async def test_reads_back_newest_message_of_the_run(
        self, chat_service: ChatService, fake_gateway: FakeGateway, thread_id: str
    ) -> None:
        await chat_service.converse(thread_id, "hello")

        run_id = next(iter(fake_gateway.runs))
        check.equal(
            fake_gateway.list_calls[-1],
            {"thread_id": thread_id, "order": "desc", "run_id": run_id, "limit": 1},
        )

    async def test_without_attachment_sends_none(
        self, chat_service: ChatService, fake_gateway: FakeGateway, thread_id: str
    ) -> None:
        await chat_service.converse(thread_id, "hello")

        user_message = fake_gateway.messages[thread_id][0]
        check.equal(user_message.role, "user")
        check.is_none(user_message.attachments)

    async def test_attachment_enables_file_search(
        self, chat_service: ChatService, fake_gateway: FakeGateway, thread_id: str
    ) -> None:
        await chat_service.converse(thread_id, "describe", "file-abc")

        user_message = fake_gateway.messages[thread_id][0]
        check.equal(user_message.content[0].text.value, "describe")
        check.equal(
            user_message.attachments,
            [{"file_id": "file-abc", "tools": [{"type": "file_search"}]}],
        )

    async def test_attachment_can_be_reused_across_turns(
        self, chat_service: ChatService, fake_gateway: FakeGateway, thread_id: str
    ) -> None:
        await chat_service.converse(thread_id, "first", "file-abc")
        await chat_service.converse(thread_id, "second", "file-abc")

        user_messages = [m for m in fake_gateway.messages[thread_id] if m.role == "user"]
        check.equal(len(user_messages), 2)
        check.equal(user_messages[1].attachments[0]["file_id"], "file-abc")

    async def test_unknown_thread_fails_without_gateway_calls(
        self, chat_service: ChatService, fake_gateway: FakeGateway
    ) -> None:
        with pytest.raises(ThreadNotFound) as exc_info:
            await chat_service.converse("thread_unknown", "hello")

        check.equal(exc_info.value.status_code, 404)
        check.equal(fake_gateway.calls, [])

    @pytest.mark.parametrize("status", ["failed", "cancelled", "expired", "requires_action"])
    async def test_non_completed_run_raises_run_failed(
        self, chat_service: ChatService, fake_gateway: FakeGateway, thread_id: str, status: str
    ) -> None:
        fake_gateway.run_script = ["queued", status]

        with pytest.raises(RunFailed) as exc_info:
            await chat_service.converse(thread_id, "hello")

        check.equal(exc_info.value.run_status, status)
        check.is_in(status, exc_info.value.message)
        check.is_not_in("list_messages", fake_gateway.calls)

    async def test_run_failure_carries_last_error(
        self, chat_service: ChatService, fake_gateway: FakeGateway, thread_id: str
    ) -> None:
        fake_gateway.run_script = ["in_progress", "failed"]
        fake_gateway.last_error = FakeLastError(code="rate_limit_exceeded", message="Rate limit reached")

        with pytest.raises(RunFailed) as exc_info:
            await chat_service.converse(thread_id, "hello")

        check.equal(exc_info.value.last_error, "Rate limit reached")
        check.equal(exc_info.value.status_code, 500)

    async def test_user_message_is_not_rolled_back_on_failure(
        self, chat_service: ChatService, fake_gateway: FakeGateway, thread_id: str
    ) -> None:
        fake_gateway.run_script = ["failed"]

        with pytest.raises(RunFailed):
            await chat_service.converse(thread_id, "hello")

        assert [m.role for m in fake_gateway.messages[thread_id]] == ["user"]

    async def test_non_text_reply_is_malformed(
        self, chat_service: ChatService, fake_gateway: FakeGateway, thread_id: str
    ) -> None:
        fake_gateway.reply_content = [FakeImageContent(image_file=FakeImageFile(file_id="file-img"))]

        with pytest.raises(MalformedUpstreamResponse) as exc_info:
            await chat_service.converse(thread_id, "draw something")

        assert exc_info.value.status_code == 502

    async def test_missing_reply_is_malformed(
        self, chat_service: ChatService, fake_gateway: FakeGateway, thread_id: str
    ) -> None:
        async def no_messages(*args: object, **kwargs: object) -> list:
            return []

        fake_gateway.list_messages = no_messages

        with pytest.raises(MalformedUpstreamResponse):
            await chat_service.converse(thread_id, "hello")

    @pytest.mark.parametrize("operation", ["create_message", "create_run", "retrieve_run", "list_messages"])
    async def test_gateway_errors_keep_status(
        self, chat_service: ChatService, fake_gateway: FakeGateway, thread_id: str, operation: str
    ) -> None:
        fake_gateway.failures[operation] = api_status_error(429, "Too many requests")

        with pytest.raises(UpstreamUnavailable) as exc_info:
            await chat_service.converse(thread_id, "hello")

        check.equal(exc_info.value.status_code, 429)
        check.is_in("Too many requests", exc_info.value.message)

    async def test_gateway_errors_are_not_retried(
        self, chat_service: ChatService, fake_gateway: FakeGateway, thread_id: str
    ) -> None:
        fake_gateway.failures["create_run"] = api_status_error(500)

        with pytest.raises(UpstreamUnavailable):
            await chat_service.converse(thread_id, "hello")

        assert fake_gateway.calls.count("create_run") == 1


class TestConverseTimeout:
    async def test_run_timeout_is_distinct_from_gateway_failure(
        self, fake_gateway: FakeGateway, assistant_config: AssistantConfig
    ) -> None:
        config = assistant_config.model_copy(update={"run_timeout": 0.05, "poll_interval": 0.01})
        service = ChatService(fake_gateway, config)
        fake_gateway.run_script = ["queued"]
        thread_id = await service.start_session()

        with pytest.raises(RunTimeout) as exc_info:
            await service.converse(thread_id, "hello")

        check.equal(exc_info.value.status_code, 504)
        check.is_not_instance(exc_info.value, UpstreamUnavailable)


class TestSerializedTurns:
    """Tests for the optional one-turn-per-thread mode."""

    async def test_concurrent_turns_on_same_thread_queue(
        self, fake_gateway: FakeGateway, assistant_config: AssistantConfig
    ) -> None:
        config = assistant_config.model_copy(update={"serialize_turns": True})
        order: list[str] = []

        async def yielding_sleep(seconds: float) -> None:
            await asyncio.sleep(0)

        service = ChatService(fake_gateway, config, sleep=yielding_sleep)
        original_create_message = fake_gateway.create_message

        async def tracking_create_message(thread_id: str, content: str, attachments=None):
            order.append(f"message:{content}")
            return await original_create_message(thread_id, content, attachments=attachments)

        fake_gateway.create_message = tracking_create_message
        original_list = fake_gateway.list_messages

        async def tracking_list(thread_id: str, **kwargs):
            messages = await original_list(thread_id, **kwargs)
            order.append(f"reply:{messages[0].run_id}")
            return messages

        fake_gateway.list_messages = tracking_list
        thread_id = await service.start_session()

        await asyncio.gather(
            service.converse(thread_id, "one"),
            service.converse(thread_id, "two"),
        )

        run_ids = list(fake_gateway.runs)
        assert order == [
            "message:one",
            f"reply:{run_ids[0]}",
            "message:two",
            f"reply:{run_ids[1]}",
        ]

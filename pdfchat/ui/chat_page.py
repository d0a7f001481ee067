"""NiceGUI chat interface for asking questions about uploaded PDFs."""

import html
import os
import re
from datetime import datetime
from typing import Any

import httpx
from nicegui import events, ui

API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:8000")

# Assistant runs are polled server-side, so a turn can take a while
REQUEST_TIMEOUT = httpx.Timeout(300.0, connect=10.0)

GREETING = "Hello! Ask me anything, or attach a PDF and ask about its contents."


class ChatAPIError(Exception):
    """Raised when the chat API returns an error response."""


def markdown_to_html(text: str) -> str:
    """Render the small markdown subset assistants commonly emit.

    Supports: code blocks, inline code, bold, italic, links, bullet lists.
    Input is fully escaped first and only http(s) links become anchors.
    """
    text = html.escape(text)
    text = re.sub(
        r"```\w*\n?([\s\S]*?)```",
        r'<pre class="bg-slate-800 text-slate-100 rounded p-3 my-2 overflow-x-auto text-xs"><code>\1</code></pre>',
        text,
    )
    text = re.sub(r"`([^`]+)`", r'<code class="bg-slate-200 px-1 rounded text-xs">\1</code>', text)
    text = re.sub(r"\*\*(.+?)\*\*", r"<strong>\1</strong>", text)
    text = re.sub(r"\*([^*\n]+)\*", r"<em>\1</em>", text)
    text = re.sub(
        r"\[([^\]]+)\]\((https?://[^)\s]+)\)",
        r'<a href="\2" class="text-indigo-600 underline" target="_blank">\1</a>',
        text,
    )

    parts: list[str] = []
    in_list = False
    for line in text.split("\n"):
        item = re.match(r"^\s*[-*]\s+(.*)$", line)
        if item:
            if not in_list:
                parts.append('<ul class="list-disc list-inside my-1">')
                in_list = True
            parts.append(f"<li>{item.group(1)}</li>")
            continue
        if in_list:
            parts.append("</ul>")
            in_list = False
        parts.append(f"{line}<br>")
    if in_list:
        parts.append("</ul>")

    return "".join(parts).removesuffix("<br>")


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = {}
    return body.get("error") or body.get("message") or f"Server error: {response.status_code}"


async def _call_api(method: str, path: str, **kwargs: Any) -> dict[str, Any]:
    async with httpx.AsyncClient(base_url=API_BASE_URL, timeout=REQUEST_TIMEOUT) as client:
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            raise ChatAPIError(f"Connection failed: {e}") from e
    if response.is_error:
        raise ChatAPIError(_error_detail(response))
    return response.json()


async def start_chat() -> str:
    data = await _call_api("POST", "/api/start-chat")
    return data["threadId"]


async def upload_pdf(filename: str, content: bytes) -> str:
    data = await _call_api(
        "POST", "/api/upload-pdf", files={"file": (filename, content, "application/pdf")}
    )
    return data["fileId"]


async def send_chat(thread_id: str, message: str, file_id: str | None) -> str:
    data = await _call_api(
        "POST", "/api/chat", json={"threadId": thread_id, "message": message, "fileId": file_id}
    )
    return data["response"]


class ChatSession:
    """Chat state for one browser tab."""

    def __init__(self) -> None:
        self.thread_id: str | None = None
        self.messages: list[dict[str, str]] = []
        self.pending_name: str | None = None
        self.pending_content: bytes | None = None
        self.file_id: str | None = None
        self.busy: bool = False

    def add_message(self, role: str, content: str) -> None:
        self.messages.append({
            "role": role,
            "content": content,
            "time": datetime.now().strftime("%H:%M"),
        })

    def clear_file(self) -> None:
        self.pending_name = None
        self.pending_content = None
        self.file_id = None


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    session = ChatSession()

    messages_container: ui.column
    file_label: ui.label
    input_field: ui.textarea
    send_btn: ui.button
    spinner: ui.spinner

    def render_message(msg: dict[str, str]) -> None:
        role = msg["role"]
        if role == "system":
            ui.label(msg["content"]).classes("w-full text-center text-xs text-gray-400 italic")
            return
        is_user = role == "user"
        bubble = "bg-indigo-600 text-white" if is_user else "bg-gray-100 text-gray-800"
        with ui.row().classes(f"w-full {'justify-end' if is_user else 'justify-start'}"):
            with ui.column().classes("max-w-[75%] gap-1"):
                body = html.escape(msg["content"]).replace("\n", "<br>") if is_user else markdown_to_html(msg["content"])
                ui.html(body, sanitize=False).classes(f"px-4 py-2 rounded-2xl text-sm {bubble}")
                ui.label(msg["time"]).classes("text-[10px] text-gray-400")

    def refresh_messages() -> None:
        messages_container.clear()
        with messages_container:
            for msg in session.messages:
                render_message(msg)

    def refresh_file_label() -> None:
        file_label.set_text(session.pending_name or "No file")

    def set_busy(busy: bool) -> None:
        session.busy = busy
        spinner.set_visibility(busy)
        send_btn.set_enabled(not busy)

    async def new_chat() -> None:
        set_busy(True)
        session.messages.clear()
        session.clear_file()
        refresh_file_label()
        try:
            session.thread_id = await start_chat()
            session.add_message("assistant", GREETING)
        except ChatAPIError as e:
            session.thread_id = None
            ui.notify(f"Could not start chat: {e}", type="negative")
        finally:
            set_busy(False)
            refresh_messages()

    async def on_file_selected(e: events.UploadEventArguments) -> None:
        name = e.file.name
        if not name.lower().endswith(".pdf"):
            ui.notify("Only PDF files can be uploaded", type="warning")
            uploader.reset()
            return
        session.pending_name = name
        session.pending_content = await e.file.read()
        session.file_id = None
        refresh_file_label()
        uploader.reset()

    def clear_file() -> None:
        session.clear_file()
        refresh_file_label()

    async def send_message() -> None:
        text = input_field.value.strip()
        if session.busy or (not text and not session.pending_name):
            return
        if session.thread_id is None:
            ui.notify("Chat session is not initialized", type="negative")
            return

        set_busy(True)
        try:
            if session.pending_content is not None and session.file_id is None:
                session.add_message("system", f"Uploading {session.pending_name}...")
                refresh_messages()
                session.file_id = await upload_pdf(session.pending_name, session.pending_content)
                session.add_message("system", f"Uploaded {session.pending_name}")

            message = text or f'I have a question about the file "{session.pending_name}".'
            session.add_message("user", message)
            refresh_messages()

            reply = await send_chat(session.thread_id, message, session.file_id)
            session.add_message("assistant", reply)
            input_field.value = ""
            clear_file()
        except ChatAPIError as e:
            session.add_message("system", f"Error: {e}")
            ui.notify(str(e), type="negative")
        finally:
            set_busy(False)
            refresh_messages()

    with ui.column().classes("w-full max-w-3xl mx-auto h-screen p-4 gap-3"):
        with ui.row().classes("w-full items-center justify-between"):
            ui.label("PDF Chat").classes("text-xl font-semibold")
            ui.button(icon="add", on_click=new_chat).props("flat round").tooltip("New chat")

        with ui.scroll_area().classes("flex-grow w-full border rounded-lg bg-white"):
            messages_container = ui.column().classes("w-full p-4 gap-3")

        with ui.row().classes("w-full items-center gap-2"):
            uploader = ui.upload(
                on_upload=on_file_selected, auto_upload=True, max_files=1
            ).props('accept=".pdf,application/pdf" flat dense').classes("w-64")
            ui.icon("description").classes("text-gray-400")
            file_label = ui.label().classes("text-sm text-gray-600")
            ui.button(icon="close", on_click=clear_file).props("flat round dense")
            refresh_file_label()

        with ui.row().classes("w-full items-end gap-2"):
            input_field = (
                ui.textarea(placeholder="Type a message...")
                .props("autogrow outlined dense rows=1")
                .classes("flex-grow")
                .on("keydown.enter.prevent", send_message)
            )
            spinner = ui.spinner(size="md")
            send_btn = ui.button(icon="send", on_click=send_message).props("round unelevated")

    set_busy(False)
    ui.timer(0.1, new_chat, once=True)


def main() -> None:
    ui.run(title="PDF Chat", port=8080, reload=False)


if __name__ in {"__main__", "__mp_main__"}:
    main()

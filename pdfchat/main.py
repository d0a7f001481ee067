"""Main application entry point.

Runs FastAPI (port 8000) with NiceGUI mounted for the chat interface.
Environment variables are loaded from .env file.
"""

import logging
import os
import sys

from dotenv import load_dotenv

# Load environment variables before any other imports that might need them
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)


def run_integrated() -> None:
    """Run FastAPI with NiceGUI mounted on the same server.

    Configuration is validated before the server binds, so missing
    credentials stop the process instead of serving broken requests.
    """
    import uvicorn
    from nicegui import ui

    from pdfchat.api.app import create_app
    from pdfchat.assistant.service import build_chat_service
    from pdfchat.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    app = create_app(service=build_chat_service())

    ui.run_with(
        app,
        title="PDF Chat",
        storage_secret=os.getenv("NICEGUI_STORAGE_SECRET", "pdf-chat-secret"),
    )

    port = int(os.getenv("PORT", "8000"))
    logger.info(f"Starting integrated server on http://localhost:{port}")
    logger.info(f"API docs available at http://localhost:{port}/docs")

    uvicorn.run(
        app,
        host=os.getenv("HOST", "0.0.0.0"),
        port=port,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )


def run_separate() -> None:
    """Run FastAPI and NiceGUI as separate servers.

    FastAPI on port 8000, NiceGUI on port 8080.
    """
    import subprocess

    logger.info("Starting FastAPI on http://localhost:8000")
    logger.info("Starting NiceGUI on http://localhost:8080")

    fastapi_proc = subprocess.Popen([
        sys.executable, "-m", "uvicorn", "pdfchat.api.app:app",
        "--host", os.getenv("HOST", "0.0.0.0"), "--port", "8000",
    ])
    nicegui_proc = subprocess.Popen(
        [sys.executable, "-c", "from pdfchat.ui.chat_page import main; main()"]
    )

    try:
        while fastapi_proc.poll() is None and nicegui_proc.poll() is None:
            try:
                fastapi_proc.wait(timeout=1)
            except subprocess.TimeoutExpired:
                continue
    except KeyboardInterrupt:
        logger.info("Shutting down servers...")
    finally:
        for proc in (fastapi_proc, nicegui_proc):
            proc.terminate()
            proc.wait()


def main() -> None:
    """Application entry point.

    Set RUN_MODE=separate to run FastAPI and NiceGUI on different ports.
    Default is integrated mode (both on port 8000).
    """
    mode = os.getenv("RUN_MODE", "integrated").lower()

    logger.info(f"Starting PDF Chat in {mode} mode")

    if mode == "separate":
        run_separate()
    else:
        run_integrated()


if __name__ == "__main__":
    main()

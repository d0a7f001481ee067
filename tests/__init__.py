"""Test package for PDF Chat.

Structure:
    - unit/: Components in isolation against a fake gateway
    - integration/: HTTP workflows through the FastAPI app

No test talks to the real OpenAI API; the gateway is replaced by an
in-memory fake. Leverages pytest with pytest-check for soft assertions.
"""

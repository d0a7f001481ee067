"""PDF Chat - converse with a hosted assistant about uploaded PDF documents.

Combines FastAPI for HTTP endpoints, the OpenAI Assistants API for threads,
runs and file search, NiceGUI for visualization, and Pydantic for data
validation.

Components:
    - api: HTTP endpoints under /api
    - assistant: session registry, attachment upload, run orchestration
    - parsing: PDF validation before upload
    - ui: Web interface for chat interactions
    - models: Request/response schemas
"""

__version__ = "0.1.0"

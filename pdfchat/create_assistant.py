"""One-off setup: create the PDF analyzer assistant.

Prints the assistant id to store as OPENAI_ASSISTANT_ID.
"""

import asyncio
import logging
import os
import sys

from dotenv import load_dotenv
from pydantic import ValidationError

from pdfchat.assistant.config import get_gateway_config
from pdfchat.assistant.gateway import AssistantGateway

logger = logging.getLogger(__name__)

ASSISTANT_NAME = "PDF Analyzer Assistant"
ASSISTANT_INSTRUCTIONS = (
    "You are an assistant that analyzes PDF documents provided by the user "
    "and answers questions about their contents. Search the attached files "
    "before answering and say so when the documents do not contain the answer."
)


async def create_assistant(model: str) -> str:
    gateway = AssistantGateway.from_config(get_gateway_config())
    assistant = await gateway.create_assistant(ASSISTANT_NAME, ASSISTANT_INSTRUCTIONS, model)
    return assistant.id


def main() -> None:
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(levelname)s - %(message)s")

    model = os.getenv("ASSISTANT_MODEL", "gpt-4o")
    try:
        assistant_id = asyncio.run(create_assistant(model))
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    logger.info(f"Created assistant: {assistant_id}")
    logger.info("Set OPENAI_ASSISTANT_ID to this value in .env")


if __name__ == "__main__":
    main()

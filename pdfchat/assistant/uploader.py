"""Attachment upload from the local staging directory to the gateway.

A staged upload is a scratch file owned by exactly one upload call. It is
removed once the gateway call resolves, whatever the outcome.
"""

import asyncio
import logging
import secrets
import time
from pathlib import Path

from openai import OpenAIError
from pydantic import BaseModel

from pdfchat.assistant.errors import AttachmentUploadFailed, LocalResourceError
from pdfchat.assistant.gateway import AssistantGateway

logger = logging.getLogger(__name__)


class AttachmentRef(BaseModel):
    """Reference to a file stored with the gateway.

    Attributes:
        file_id: Gateway file identifier, attachable to later messages.
        filename: Original name of the uploaded file.
    """

    file_id: str
    filename: str


def staged_filename(original_name: str) -> str:
    """Generate a unique staging name that keeps the original extension."""
    suffix = Path(original_name).suffix
    return f"file-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"


async def stage_upload(upload_dir: Path, original_name: str, content: bytes) -> Path:
    """Write received bytes into the staging directory.

    Args:
        upload_dir: Shared scratch directory for uploads.
        original_name: Filename supplied by the client.
        content: Raw file bytes.

    Returns:
        Path of the staged file.

    Raises:
        LocalResourceError: If the file could not be written.
    """
    path = upload_dir / staged_filename(original_name)
    await _write_staged(path, original_name, content)
    return path


async def _write_staged(path: Path, original_name: str, content: bytes) -> None:
    def _write() -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        try:
            path.write_bytes(content)
        except OSError:
            # A partial write must not outlive the failed call
            path.unlink(missing_ok=True)
            raise

    try:
        await asyncio.to_thread(_write)
    except OSError as e:
        logger.error(f"Failed to stage upload {original_name} at {path}: {e}")
        raise LocalResourceError(f"Could not stage uploaded file: {original_name}") from e

    logger.info(f"Staged {original_name} at {path} ({len(content)} bytes)")


class AttachmentUploader:
    """Moves staged files into the gateway's file store."""

    def __init__(self, gateway: AssistantGateway) -> None:
        self._gateway = gateway

    async def stage_and_upload(
        self, upload_dir: Path, original_name: str, content: bytes
    ) -> AttachmentRef:
        """Stage received bytes and upload them, deleting the staged copy.

        The staged path is owned by this call from before the first byte is
        written, so a failed write or a cancellation still removes it.

        Raises:
            LocalResourceError: If the bytes could not be staged or read back.
            AttachmentUploadFailed: If the gateway rejected the upload.
        """
        path = upload_dir / staged_filename(original_name)
        try:
            await _write_staged(path, original_name, content)
            return await self.upload(path, original_name)
        finally:
            await self._discard(path)

    async def upload(self, local_path: Path, original_name: str) -> AttachmentRef:
        """Upload a staged file for document search and delete it locally.

        Args:
            local_path: Staged file to upload.
            original_name: Filename reported to the gateway.

        Returns:
            Reference to the stored file.

        Raises:
            AttachmentUploadFailed: If the gateway rejected the upload.
            LocalResourceError: If the staged file could not be read.
        """
        logger.info(f"Uploading {original_name} from {local_path}")
        try:
            try:
                stream = local_path.open("rb")
            except OSError as e:
                raise LocalResourceError(f"Could not read staged file: {original_name}") from e

            with stream:
                try:
                    file_object = await self._gateway.create_file((original_name, stream))
                except OpenAIError as e:
                    logger.error(f"Gateway rejected upload of {original_name}: {e}")
                    raise AttachmentUploadFailed.from_exception(e, "File upload failed") from e
        finally:
            await self._discard(local_path)

        logger.info(f"Uploaded {original_name} as {file_object.id}")
        return AttachmentRef(file_id=file_object.id, filename=original_name)

    async def _discard(self, local_path: Path) -> None:
        # Deletion problems are reported here and never replace the upload outcome
        try:
            await asyncio.to_thread(local_path.unlink, missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to delete staged file {local_path}: {e}")
        else:
            logger.debug(f"Deleted staged file {local_path}")

"""
Trip Importer - Turns pasted text or a chosen file into a trip update.

Every outcome comes back as an ``ImportResult`` with a message that can be
shown as-is; input problems never change the trip.
"""
import base64
import logging
import mimetypes
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from .extraction_client import (
    PDF_MIME_TYPE,
    DocumentExtractionClient,
    ExtractionError,
    is_supported_mime_type,
)
from .text_extractor import has_trip_data, parse_imported_text, strip_markup
from .trip_store import TripStore

logger = logging.getLogger(__name__)

TEXT_MIME_TYPES = ("text/plain", "text/html", "text/markdown", "text/csv")


class ImportStatus(str, Enum):
    """Outcome of an import."""
    DONE = "done"    # Finished; the message says whether data changed
    ERROR = "error"  # Input problem; nothing changed


class ImportResult(BaseModel):
    status: ImportStatus
    message: str
    partial: Optional[dict] = Field(
        None,
        description="Partial trip record that was merged, if any"
    )


def guess_mime_type(file_name: str) -> str:
    mime, _ = mimetypes.guess_type(file_name)
    return (mime or "").lower()


class TripImporter:
    """Routes imports to the text heuristics or the extraction server."""

    def __init__(self, store: TripStore, client: Optional[DocumentExtractionClient] = None):
        self.store = store
        self.client = client or DocumentExtractionClient()

    def import_text(self, text: str) -> ImportResult:
        trimmed = (text or "").strip()
        if not trimmed:
            return ImportResult(
                status=ImportStatus.ERROR,
                message="Paste or type some text first.",
            )

        partial = parse_imported_text(strip_markup(trimmed), self.store.record.families)
        if not has_trip_data(partial):
            return ImportResult(
                status=ImportStatus.DONE,
                message=(
                    "No trip dates or flight info was detected in the text. "
                    "You can still add details on the Travel and Schedule pages."
                ),
            )

        self.store.merge_from_import(partial)
        return ImportResult(
            status=ImportStatus.DONE,
            message="Trip data updated from pasted text. Check Schedule and Travel.",
            partial=partial,
        )

    async def import_document(self, data: bytes, mime_type: str, file_name: str) -> ImportResult:
        mime = (mime_type or "").lower()
        if not is_supported_mime_type(mime):
            return ImportResult(
                status=ImportStatus.ERROR,
                message="Please choose a PDF or image (JPEG/PNG).",
            )
        if mime == PDF_MIME_TYPE:
            return await self._import_pdf(data, file_name)
        return await self._import_image(data, mime, file_name)

    async def import_file(self, path: Path) -> ImportResult:
        """Import a file from disk: PDFs and images via the server, text locally."""
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            logger.warning(f"Could not read import file {path}: {e}")
            return ImportResult(status=ImportStatus.ERROR, message="Could not read file.")

        mime = guess_mime_type(path.name)
        if is_supported_mime_type(mime):
            return await self.import_document(data, mime, path.name)
        if mime and mime not in TEXT_MIME_TYPES:
            return ImportResult(
                status=ImportStatus.ERROR,
                message="Please choose a PDF, image (JPEG/PNG) or text file.",
            )

        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            return ImportResult(
                status=ImportStatus.ERROR,
                message=(
                    "Could not read that file as text. Try pasting the content "
                    "instead, or use a .txt file."
                ),
            )
        return self.import_text(text)

    async def _import_pdf(self, data: bytes, file_name: str) -> ImportResult:
        try:
            partial = await self.client.extract(data, PDF_MIME_TYPE, file_name)
        except ExtractionError as e:
            logger.warning(f"PDF extraction failed for {file_name}: {e}")
            return ImportResult(
                status=ImportStatus.ERROR,
                message=(
                    f"PDF could not be read: {e} You can also paste the PDF text "
                    "and import it as text."
                ),
            )
        self.store.merge_from_import(partial)
        return ImportResult(
            status=ImportStatus.DONE,
            message="Trip data updated from PDF. Check Schedule and Travel.",
            partial=partial,
        )

    async def _import_image(self, data: bytes, mime: str, file_name: str) -> ImportResult:
        # Keep the image even if text extraction fails below
        images = [image.model_dump(by_alias=True) for image in self.store.record.imported_images]
        images.append({"name": file_name or "image", "base64": base64.b64encode(data).decode("ascii")})
        self.store.merge_from_import({"importedImages": images})

        try:
            partial = await self.client.extract(data, mime, file_name)
        except ExtractionError as e:
            logger.warning(f"Image extraction failed for {file_name}: {e}")
            return ImportResult(
                status=ImportStatus.DONE,
                message=(
                    f'Added "{file_name}" to imported images, but no trip data was '
                    f"extracted: {e}"
                ),
            )

        self.store.merge_from_import(partial)
        return ImportResult(
            status=ImportStatus.DONE,
            message=f'Added "{file_name}" and updated trip data from image text. Check Schedule and Travel.',
            partial=partial,
        )

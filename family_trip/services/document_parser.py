"""
Document Parser - Server side of the ``/parse`` and ``/ocr`` endpoints.
Reads text from a PDF (pypdf) or an image (LLM vision) and asks the LLM
to shape it into a partial trip record.
"""
import base64
import binascii
import io
import json
import logging
from typing import Any, Optional

from pypdf import PdfReader

from ..config import extraction_enabled, settings
from ..models.families import FAMILIES
from .llm_client import LLMClient, get_llm_client

logger = logging.getLogger(__name__)


def _per_family(value) -> dict:
    return {f.id: value for f in FAMILIES}


EMPTY_FLIGHT = {
    "departureDate": "", "airline": "", "flightNumber": "", "departureAirport": "",
    "departureTime": "", "arrivalAirport": "", "arrivalTime": "",
}

TRIP_DATA_TEMPLATE = {
    "tripStartDate": "",
    "tripEndDate": "",
    "flights": _per_family([EMPTY_FLIGHT]),
    "accommodationSantorini": _per_family(""),
    "accommodationCrete": _per_family(""),
    "transfers": _per_family({"toAirport": "", "fromAirport": ""}),
    "schedule": [{"day": "", "time": "", "title": "", "note": ""}],
    "gettingAround": "",
    "importantNumbers": "",
}

TRIP_DATA_SCHEMA = (
    "Return valid JSON only, no markdown. Use this shape, but leave out every key "
    "you have no data for instead of sending empty values:\n"
    + json.dumps(TRIP_DATA_TEMPLATE, indent=2)
    + "\nFamily ids: " + ", ".join(f.id for f in FAMILIES) + ". "
    "The trip has two main stays: Santorini and Crete. Put each family's accommodation "
    "in Santorini in accommodationSantorini and in Crete in accommodationCrete. "
    "Extract trip dates as YYYY-MM-DD if present. Leave out flights you know nothing about."
)

EXTRACTOR_SYSTEM_PROMPT = (
    "You extract trip information from text and return only valid JSON matching "
    f"the given schema. {TRIP_DATA_SCHEMA}"
)


def drop_blank_values(value: Any) -> Any:
    """
    Remove blank strings, and the objects and lists left empty without them.

    Returns None when nothing is left. Applied to LLM replies so template
    placeholders never overwrite stored trip data when merged.
    """
    if isinstance(value, str):
        return value if value.strip() else None
    if isinstance(value, dict):
        kept = {key: drop_blank_values(item) for key, item in value.items()}
        kept = {key: item for key, item in kept.items() if item is not None}
        return kept or None
    if isinstance(value, list):
        kept = [item for item in map(drop_blank_values, value) if item is not None]
        return kept or None
    return value


class DocumentParseError(Exception):
    """Parsing failed; carries the HTTP status the API should answer with."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def decode_base64(data: str, what: str) -> bytes:
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as e:
        raise DocumentParseError(f"Invalid base64 in {what} data.") from e


def extract_pdf_text(pdf_bytes: bytes) -> str:
    """All page text of a PDF, pages separated by newlines."""
    try:
        reader = PdfReader(io.BytesIO(pdf_bytes))
        return "\n".join(page.extract_text() or "" for page in reader.pages)
    except Exception as e:
        logger.error(f"pypdf error: {e}")
        raise DocumentParseError(
            "Could not read the PDF. It may be corrupted, password-protected, or "
            "image-only (scanned). Try exporting as text or copying the text into the paste box."
        ) from e


class DocumentParser:
    """Turns uploaded documents into partial trip records."""

    def __init__(self, llm: Optional[LLMClient] = None):
        self._llm = llm

    @property
    def llm(self) -> LLMClient:
        if self._llm is None:
            self._llm = get_llm_client()
        return self._llm

    def _require_llm(self, hint: str) -> None:
        if self._llm is None and not extraction_enabled():
            raise DocumentParseError(hint, status_code=503)

    async def parse_text(self, text: str) -> dict:
        """Ask the LLM for a partial trip record."""
        messages = [
            {"role": "system", "content": EXTRACTOR_SYSTEM_PROMPT},
            {
                "role": "user",
                "content": f"Extract trip data from this text:\n\n{text[:settings.llm_max_input_chars]}",
            },
        ]
        try:
            parsed = await self.llm.chat_json(messages, temperature=settings.llm_temperature)
        except Exception as e:
            logger.error(f"LLM parse error: {e}")
            message = str(e)
            if "API key" in message or "401" in message:
                raise DocumentParseError(
                    "Invalid or missing LLM API key. Check your server environment.",
                    status_code=500,
                ) from e
            raise DocumentParseError(f"Extraction failed: {message}", status_code=500) from e
        parsed = drop_blank_values(parsed)
        if not parsed:
            raise DocumentParseError("No trip data was detected in the document.", status_code=422)
        return parsed

    async def parse_pdf(self, pdf_base64: str, file_name: str = "document.pdf") -> dict:
        pdf_bytes = decode_base64(pdf_base64, "PDF")
        text = extract_pdf_text(pdf_bytes)
        if not text.strip():
            raise DocumentParseError(
                "No text could be extracted from the PDF (maybe scanned images?). "
                "Try pasting the text or using an image of the page with Import."
            )
        logger.info(f"Extracted {len(text)} characters from {file_name}")
        self._require_llm(
            "PDF extraction is not configured on the server. Set LLM_API_KEY and restart "
            "the server, or paste the PDF text instead."
        )
        return await self.parse_text(text)

    async def parse_image(self, image_base64: str, mime_type: str = "image/jpeg") -> dict:
        decode_base64(image_base64, "image")
        self._require_llm("LLM_API_KEY is required to extract text from images.")
        try:
            text = await self.llm.read_image_text(image_base64, mime_type or "image/jpeg")
        except Exception as e:
            logger.error(f"OCR error: {e}")
            raise DocumentParseError(f"OCR failed: {e}", status_code=500) from e
        if not text.strip():
            raise DocumentParseError("No text could be extracted from the image.")
        return await self.parse_text(text)


# Global parser instance
document_parser: Optional[DocumentParser] = None


def get_document_parser() -> DocumentParser:
    """Get or create the global document parser."""
    global document_parser
    if document_parser is None:
        document_parser = DocumentParser()
    return document_parser

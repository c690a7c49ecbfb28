"""
Document Extraction Client.
Sends a PDF or image to the extraction server and returns the partial
trip record it extracted.
"""
import base64
import logging
from typing import Optional

import httpx

from ..config import settings

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
IMAGE_MIME_TYPES = ("image/jpeg", "image/jpg", "image/png")


class ExtractionError(Exception):
    """Extraction failed; the message is safe to show to the user."""


class ExtractionUnavailableError(ExtractionError):
    """No extraction server is configured."""


def is_supported_mime_type(mime_type: str) -> bool:
    mime = (mime_type or "").lower()
    return mime == PDF_MIME_TYPE or mime in IMAGE_MIME_TYPES


class DocumentExtractionClient:
    """Async client for the ``/parse`` (PDF) and ``/ocr`` (image) endpoints."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url if base_url is not None else settings.extraction_base_url) or ""
        self.base_url = self.base_url.rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._transport = transport

    async def parse_pdf(self, data: bytes, file_name: str) -> dict:
        payload = {
            "pdfBase64": base64.b64encode(data).decode("ascii"),
            "fileName": file_name,
        }
        return await self._post("/parse", payload, fallback_error="PDF parse failed.")

    async def parse_image(self, data: bytes, mime_type: str) -> dict:
        payload = {
            "imageBase64": base64.b64encode(data).decode("ascii"),
            "mimeType": mime_type or "image/jpeg",
        }
        return await self._post("/ocr", payload, fallback_error="OCR failed.")

    async def extract(self, data: bytes, mime_type: str, file_name: str = "document") -> dict:
        """Dispatch on mime type: PDFs to ``/parse``, images to ``/ocr``."""
        mime = (mime_type or "").lower()
        if mime == PDF_MIME_TYPE:
            return await self.parse_pdf(data, file_name)
        if mime in IMAGE_MIME_TYPES:
            return await self.parse_image(data, mime)
        raise ExtractionError("Please choose a PDF or image (JPEG/PNG).")

    async def _post(self, path: str, payload: dict, fallback_error: str) -> dict:
        if not self.base_url:
            raise ExtractionUnavailableError(
                "Document extraction is not configured. Set the extraction server URL "
                "or paste the document text instead."
            )

        url = f"{self.base_url}{path}"
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.post(url, json=payload)
            except httpx.HTTPError as e:
                logger.error(f"Extraction request to {url} failed: {e}")
                raise ExtractionError(f"Request failed: {e}") from e

        body = self._json_body(response)

        if not response.is_success:
            message = body.get("error") if isinstance(body, dict) else None
            logger.warning(f"Extraction server returned {response.status_code} for {path}")
            raise ExtractionError(message or response.reason_phrase or fallback_error)

        if not isinstance(body, dict):
            raise ExtractionError("Request failed: the extraction server did not return JSON.")
        if not body:
            raise ExtractionError("No trip data was detected in the document.")
        return body

    @staticmethod
    def _json_body(response: httpx.Response):
        if "application/json" not in response.headers.get("content-type", ""):
            return None
        try:
            return response.json()
        except ValueError:
            return None

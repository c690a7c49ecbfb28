"""
API Routes for the trip server.

The trip endpoints are served both at ``/trip`` and ``/api/trip`` (and the
extraction endpoints at ``/parse`` and ``/api/parse``) so the API works
directly and behind a same-origin ``/api`` proxy.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from ..services.document_parser import DocumentParseError, DocumentParser, get_document_parser
from ..services.trip_repository import TripRepository, get_trip_repository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["trip"])


# Request Models
class ParseRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    pdf_base64: Optional[str] = None
    file_name: str = "document.pdf"


class OcrRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    image_base64: Optional[str] = None
    mime_type: str = "image/jpeg"


def error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# Endpoints

@router.get("/trip")
@router.get("/api/trip")
async def get_trip(repository: TripRepository = Depends(get_trip_repository)):
    """Load the shared trip record."""
    data = repository.load()
    if data is None:
        return JSONResponse(status_code=404, content={"message": "No trip data yet"})
    return data


@router.put("/trip")
@router.put("/api/trip")
async def put_trip(request: Request, repository: TripRepository = Depends(get_trip_repository)):
    """Replace the shared trip record (last write wins)."""
    try:
        data = await request.json()
    except ValueError:
        data = None
    if not isinstance(data, dict):
        return error_response("Invalid JSON body", 400)
    try:
        repository.save(data)
    except OSError as e:
        logger.error(f"PUT /trip error: {e}")
        return error_response(f"Failed to save trip data: {e}", 500)
    return {"ok": True}


@router.post("/parse")
@router.post("/api/parse")
async def parse_pdf(
    body: ParseRequest,
    parser: DocumentParser = Depends(get_document_parser),
):
    """Extract a partial trip record from a base64 PDF."""
    if not body.pdf_base64:
        return error_response("Missing pdfBase64 in body", 400)
    try:
        return await parser.parse_pdf(body.pdf_base64, body.file_name)
    except DocumentParseError as e:
        return error_response(e.message, e.status_code)


@router.post("/ocr")
@router.post("/api/ocr")
async def parse_image(
    body: OcrRequest,
    parser: DocumentParser = Depends(get_document_parser),
):
    """Extract a partial trip record from a base64 image."""
    if not body.image_base64:
        return error_response("Missing imageBase64 in body", 400)
    try:
        return await parser.parse_image(body.image_base64, body.mime_type)
    except DocumentParseError as e:
        return error_response(e.message, e.status_code)

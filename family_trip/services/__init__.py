"""Services for the family trip planner."""
from .extraction_client import DocumentExtractionClient, ExtractionError
from .importer import TripImporter
from .merge import merge
from .text_extractor import parse_imported_text
from .trip_store import TripStore

__all__ = [
    "DocumentExtractionClient",
    "ExtractionError",
    "TripImporter",
    "merge",
    "parse_imported_text",
    "TripStore",
]

"""
Trip Repository - The shared trip record on the server, kept as one JSON file.
"""
import json
import logging
from pathlib import Path
from typing import Optional

from ..config import settings

logger = logging.getLogger(__name__)


class TripRepository:
    """Reads and writes ``trip.json`` under the server data directory."""

    def __init__(self, data_dir: Optional[Path] = None):
        self.data_dir = Path(data_dir if data_dir is not None else settings.data_dir)

    @property
    def path(self) -> Path:
        return self.data_dir / "trip.json"

    def load(self) -> Optional[dict]:
        """The stored record, or None when nothing usable has been saved."""
        if not self.path.exists():
            return None
        try:
            raw = self.path.read_text(encoding="utf-8")
            return json.loads(raw) if raw.strip() else None
        except (OSError, ValueError) as e:
            logger.error(f"Read trip data error: {e}")
            return None

    def save(self, data: dict) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


# Global repository instance
trip_repository: Optional[TripRepository] = None


def get_trip_repository() -> TripRepository:
    """Get or create the global trip repository."""
    global trip_repository
    if trip_repository is None:
        trip_repository = TripRepository()
    return trip_repository

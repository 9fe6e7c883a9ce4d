"""
JSON file saved view repository.

Keeps every view in a single JSON document on disk. Writes go to a
temporary file that replaces the original, so a crash mid-write never
leaves a truncated store.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ats_grid.data.models import SavedView
from ats_grid.utils.logger import get_logger

from .base import ViewRepository

logger = get_logger(__name__)

STORE_VERSION = 1


class JsonViewRepository(ViewRepository):
    """Saved views stored in ``{"version": 1, "views": [...]}``."""

    def __init__(self, path: Path | str):
        """
        Initialize the repository.

        Args:
            path: JSON file; created on first save
        """
        self.path = Path(path)

    def _read(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        try:
            with self.path.open("r", encoding="utf-8") as f:
                payload = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Saved view store {self.path} is not valid JSON, treating it as empty: {e}")
            return []
        if isinstance(payload, dict):
            payload = payload.get("views", [])
        if not isinstance(payload, list):
            logger.error(f"Saved view store {self.path} has no view list, treating it as empty")
            return []
        return [d for d in payload if isinstance(d, dict)]

    def _write(self, documents: list[dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".views-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump({"version": STORE_VERSION, "views": documents}, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def save_view(self, view: SavedView) -> str:
        documents = [d for d in self._read() if d.get("_id") != view.id]
        documents.append(view.model_dump(by_alias=True, mode="json"))
        self._write(documents)
        logger.debug(f"Saved view {view.id} ({view.name!r}) to {self.path}")
        return view.id

    def load_views(self) -> list[SavedView]:
        views = []
        for document in self._read():
            try:
                views.append(SavedView.model_validate(document))
            except ValidationError as e:
                logger.warning(f"Skipping unreadable saved view {document.get('_id')!r} in {self.path}: {e}")
        return self._sorted(views)

    def delete_view(self, view_id: str) -> bool:
        documents = self._read()
        remaining = [d for d in documents if d.get("_id") != view_id]
        if len(remaining) == len(documents):
            return False
        self._write(remaining)
        logger.debug(f"Deleted view {view_id} from {self.path}")
        return True

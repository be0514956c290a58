"""JSON-file backed storage for favorite recipes."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

from fridgechef.config import settings
from fridgechef.models.recipe import Recipe

logger = logging.getLogger(__name__)

_recipe_list = TypeAdapter(List[Recipe])


class FavoritesStore:
    """
    Key/value JSON file holding the favorites list under a fixed storage key.

    Loading never fails: a missing, unreadable or corrupt file yields an empty
    list. Saving failures are logged and swallowed so they cannot break the
    favorite toggle that triggered them.
    """

    def __init__(self, path: Optional[str] = None, storage_key: Optional[str] = None) -> None:
        self.path = Path(path or settings.favorites_path)
        self.storage_key = storage_key or settings.favorites_storage_key

    def load(self) -> List[Recipe]:
        try:
            raw = self._read_all().get(self.storage_key)
            if raw is None:
                return []
            favorites = _recipe_list.validate_python(raw)
        except (OSError, ValueError, ValidationError) as e:
            logger.error("Could not load favorite recipes from %s: %s", self.path, e)
            return []
        logger.info("Loaded %d favorite recipes", len(favorites))
        return favorites

    def save(self, favorites: List[Recipe]) -> None:
        try:
            data = self._read_all()
        except (OSError, ValueError):
            data = {}
        data[self.storage_key] = [recipe.model_dump() for recipe in favorites]

        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            if self.path.parent and not self.path.parent.exists():
                self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Could not save favorite recipes to %s: %s", self.path, e)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        data = json.loads(self.path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError("favorites file is not a JSON object")
        return data

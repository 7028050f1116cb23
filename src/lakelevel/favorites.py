"""
Favorite lakes, persisted as a flat list of ids in a JSON settings file.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, List, Set, Union

from .models import Lake

logger = logging.getLogger(__name__)

FAVORITES_KEY = "favoriteLakes"


class FavoritesStore:
    """Set of favorite lake ids stored under one key of a JSON settings file."""

    def __init__(self, settings_path: Union[str, Path]):
        self.settings_path = Path(settings_path)
        self._ids: Set[str] = set()
        self._load()

    @property
    def favorite_lake_ids(self) -> Set[str]:
        return set(self._ids)

    def is_favorite(self, lake: Lake) -> bool:
        return lake.id in self._ids

    def toggle(self, lake: Lake) -> None:
        if lake.id in self._ids:
            self._ids.discard(lake.id)
        else:
            self._ids.add(lake.id)
        self._save()

    def add(self, lake: Lake) -> None:
        self._ids.add(lake.id)
        self._save()

    def remove(self, lake: Lake) -> None:
        self._ids.discard(lake.id)
        self._save()

    def favorite_lakes(self, lakes: Iterable[Lake]) -> List[Lake]:
        """Filter a catalog down to favorites, keeping catalog order."""
        return [lake for lake in lakes if lake.id in self._ids]

    def _read_settings(self) -> dict:
        if not self.settings_path.exists():
            return {}
        try:
            settings = json.loads(self.settings_path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable settings file {self.settings_path}: {e}")
            return {}
        return settings if isinstance(settings, dict) else {}

    def _load(self) -> None:
        saved = self._read_settings().get(FAVORITES_KEY)
        if isinstance(saved, list):
            self._ids = {item for item in saved if isinstance(item, str)}

    def _save(self) -> None:
        settings = self._read_settings()
        settings[FAVORITES_KEY] = sorted(self._ids)
        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)
            self.settings_path.write_text(json.dumps(settings, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to save favorites to {self.settings_path}: {e}")

"""JSON persistence for business records and relationship edges."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Sequence

from .exceptions import InputError, PersistenceError
from .models import BusinessRecord, RelationshipEdge

logger = logging.getLogger(__name__)

BUSINESSES_FILE = 'businesses.json'
RELATIONSHIPS_FILE = 'relationships.json'


class RelationshipStore:
    """Flat JSON collections of businesses and relationships inside one data directory."""

    def __init__(self, data_dir='data'):
        self.data_dir = Path(data_dir)
        self.businesses_path = self.data_dir / BUSINESSES_FILE
        self.relationships_path = self.data_dir / RELATIONSHIPS_FILE

    def exists(self) -> bool:
        return self.businesses_path.is_file() and self.relationships_path.is_file()

    def _read(self, path: Path) -> list:
        if not path.is_file():
            raise InputError(f"Data file not found: {path}")
        try:
            with open(path, encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise InputError(f"Could not read {path}: {e}")
        if not isinstance(data, list):
            raise InputError(f"{path} must contain a JSON array")
        return data

    def _write(self, path: Path, items: list):
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{path.name}.", suffix='.tmp')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(items, f, indent=2, ensure_ascii=False)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.remove(tmp_name)
                raise
        except OSError as e:
            raise PersistenceError(f"Could not write {path}: {e}")

    def load_businesses(self) -> List[BusinessRecord]:
        return [BusinessRecord.from_dict(item) for item in self._read(self.businesses_path)]

    def load_relationships(self) -> List[RelationshipEdge]:
        return [RelationshipEdge.from_dict(item) for item in self._read(self.relationships_path)]

    def save_businesses(self, businesses: Sequence[BusinessRecord]):
        self._write(self.businesses_path, [b.to_dict() for b in businesses])
        logger.info("Saved %d businesses to %s", len(businesses), self.businesses_path)

    def save_relationships(self, relationships: Sequence[RelationshipEdge]):
        self._write(self.relationships_path, [r.to_dict() for r in relationships])
        logger.info("Saved %d relationships to %s", len(relationships), self.relationships_path)

    def merge(self, new_businesses: Sequence[BusinessRecord], new_relationships: Sequence[RelationshipEdge]):
        """Append new records to the persisted collections and rewrite both files."""
        businesses = self.load_businesses() + list(new_businesses)
        relationships = self.load_relationships() + list(new_relationships)
        self.save_businesses(businesses)
        self.save_relationships(relationships)
        return businesses, relationships

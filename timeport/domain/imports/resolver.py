"""
Get-or-create resolution of natural keys to persisted identifiers.

One EntityResolver serves one entity type for the lifetime of one import.
The first lookup preloads every existing candidate (restricted by a query
scope) into a map from natural-key hash to id; every entity created later
is added to the same map, so rows referring to the same natural key within
one import resolve to one entity.
"""
import hashlib
import json
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, Type

from pydantic import BaseModel, ValidationError

from .exceptions import EntityCreationError, ImportException, UnsupportedResolutionMode
from .scopes import QueryScope
from .store import EntityStore

logger = logging.getLogger(__name__)


def natural_key_hash(identifiers: Sequence[str], data: Dict[str, Any]) -> str:
    """
    Hash natural-key values in the configured field order.

    Field names are part of the hashed payload, so two different field sets
    never produce the same hash even when their values coincide.
    """
    pairs = [[field, data[field]] for field in identifiers]
    payload = json.dumps(pairs, separators=(",", ":"), ensure_ascii=False, default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


class EntityResolver:
    def __init__(
        self,
        store: EntityStore,
        model,
        identifiers: Sequence[str],
        attach_to_existing: bool = False,
        scope: Optional[QueryScope] = None,
        after_create: Optional[Callable[[Any], None]] = None,
        schema: Optional[Type[BaseModel]] = None,
    ):
        self.store = store
        self.model = model
        self.identifiers = list(identifiers)
        self.attach_to_existing = attach_to_existing
        self.scope = scope
        self.after_create = after_create
        self.schema = schema
        self._key_map: Optional[Dict[str, str]] = None
        self._external_to_hash: Dict[str, str] = {}
        self._created_count = 0

    @property
    def entity_type(self) -> str:
        return self.model.__tablename__

    def _ensure_key_map(self) -> None:
        if self._key_map is not None:
            return
        rows = self.store.query(self.model, self.identifiers, self.scope)
        self._key_map = {}
        for row in rows:
            self._key_map[natural_key_hash(self.identifiers, row)] = row["id"]
        logger.debug(f"Preloaded {len(self._key_map)} existing {self.entity_type} keys")

    def _validate_identifier_data(self, identifier_data: Dict[str, Any]) -> None:
        if list(identifier_data.keys()) != self.identifiers:
            raise ImportException(
                f"Invalid identifier data for {self.entity_type}: expected fields {self.identifiers}, "
                f"got {list(identifier_data.keys())}"
            )

    def _create(self, identifier_data: Dict[str, Any], create_values: Dict[str, Any], key_hash: str) -> str:
        data = {**identifier_data, **create_values}
        if self.schema is not None:
            try:
                data = self.schema.model_validate(data).model_dump()
            except ValidationError as exc:
                details = ", ".join(
                    f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
                )
                raise EntityCreationError(self.entity_type, f"Invalid data: {details}") from exc

        entity = self.store.create(self.model, data)
        if self.after_create is not None:
            self.after_create(entity)

        self._key_map[key_hash] = entity.id
        self._created_count += 1
        return entity.id

    def resolve(
        self,
        identifier_data: Dict[str, Any],
        create_values: Optional[Dict[str, Any]] = None,
        external_id: Optional[str] = None,
    ) -> str:
        """
        Return the id for ``identifier_data``, creating the entity when new.

        ``external_id`` is the source system's identifier for the same record;
        archive formats use it to resolve references between files.
        """
        self._validate_identifier_data(identifier_data)
        if not self.attach_to_existing:
            raise UnsupportedResolutionMode(self.entity_type)
        self._ensure_key_map()

        key_hash = natural_key_hash(self.identifiers, identifier_data)
        entity_id = self._key_map.get(key_hash)
        if entity_id is None:
            entity_id = self._create(identifier_data, create_values or {}, key_hash)

        if external_id is not None:
            self._external_to_hash[str(external_id)] = key_hash
        return entity_id

    def key_by_external_id(self, external_id: str) -> Optional[str]:
        key_hash = self._external_to_hash.get(str(external_id))
        if key_hash is None:
            return None
        return self._key_map.get(key_hash)

    def external_ids(self) -> List[str]:
        return list(self._external_to_hash.keys())

    def created_count(self) -> int:
        return self._created_count

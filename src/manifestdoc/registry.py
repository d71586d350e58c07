"""Ordered, append-only store of extracted entities."""

from __future__ import annotations

from typing import Iterator

from .errors import DuplicateNameError
from .models import Entity, EntityKind


class Registry:
    """Entities keyed by (kind, qualified name), iterated in insertion order.

    Names only need to be unique within a kind: a function and a resource
    type may share a name.
    """

    def __init__(self) -> None:
        self._entities: dict[tuple[EntityKind, str], Entity] = {}

    def insert(self, entity: Entity) -> None:
        key = (entity.kind, entity.qualified_name)
        existing = self._entities.get(key)
        if existing is not None:
            raise DuplicateNameError(
                entity.kind.value, entity.qualified_name, existing.location, entity.location
            )
        self._entities[key] = entity

    def all(self, kind: EntityKind) -> list[Entity]:
        return [e for (k, _), e in self._entities.items() if k == kind]

    def find(self, kind: EntityKind, name: str) -> Entity | None:
        """Look up an entity by its qualified name.

        Providers are keyed `type::provider`. A bare provider name also
        matches when exactly one resource type has a provider by that name.
        """
        entity = self._entities.get((kind, name))
        if entity is not None or kind != EntityKind.PROVIDER:
            return entity
        matches = [e for (k, _), e in self._entities.items() if k == kind and e.name == name]
        return matches[0] if len(matches) == 1 else None

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entities.values())

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, key: object) -> bool:
        return key in self._entities

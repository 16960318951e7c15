"""Knowledge-graph tool: entities, relations and the active entity."""

from __future__ import annotations

import json
import logging
import uuid
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone

from unified_intelligence.errors import UnifiedIntelligenceError, ValidationError
from unified_intelligence.models import (
    EntityType,
    KnowledgeNode,
    KnowledgeParams,
    KnowledgeRelation,
    KnowledgeResponse,
    KnowledgeScope,
    NodeMetadata,
    RelationMetadata,
)

log = logging.getLogger(__name__)

_VALID_MODES = (
    "create, search, set_active, get_entity, create_relation, "
    "get_relations, update_entity, delete_entity"
)
_ATTRIBUTE_SNAPSHOT_CHARS = 400

EntityIndexer = Callable[[KnowledgeNode, str], Awaitable[None]]


class KnowledgeRepository(ABC):
    """Storage for knowledge-graph entities and relations."""

    @abstractmethod
    async def create_entity(self, node: KnowledgeNode) -> None:
        """Store a new entity."""

    @abstractmethod
    async def get_entity(self, entity_id: str, scope: KnowledgeScope) -> KnowledgeNode:
        """The entity with this id; raises when it does not exist."""

    @abstractmethod
    async def get_entity_by_name(
        self, name: str, scope: KnowledgeScope
    ) -> KnowledgeNode:
        """The entity with this name; raises when it does not exist."""

    @abstractmethod
    async def update_entity(self, node: KnowledgeNode) -> None:
        """Replace a stored entity."""

    @abstractmethod
    async def delete_entity(self, entity_id: str, scope: KnowledgeScope) -> None:
        """Remove an entity."""

    @abstractmethod
    async def search_entities(
        self,
        query: str,
        scope: KnowledgeScope,
        entity_type: EntityType | None,
        limit: int,
    ) -> list[KnowledgeNode]:
        """Entities matching a query, at most ``limit`` of them."""

    @abstractmethod
    async def create_relation(self, relation: KnowledgeRelation) -> None:
        """Store a relation."""

    @abstractmethod
    async def get_relations(
        self, entity_id: str, scope: KnowledgeScope
    ) -> list[KnowledgeRelation]:
        """Relations that touch an entity."""

    @abstractmethod
    async def update_name_index(
        self, name: str, entity_id: str, scope: KnowledgeScope
    ) -> None:
        """Record that ``name`` refers to ``entity_id``."""

    @abstractmethod
    async def set_active_entity(
        self, session_key: str, entity_id: str, scope: KnowledgeScope
    ) -> None:
        """Remember the entity in focus under ``session_key``."""


def entity_embedding_text(node: KnowledgeNode) -> str:
    """Compact text describing an entity, used to embed it."""
    text = node.display_name
    if node.tags:
        text += " | tags: " + ", ".join(node.tags)
    if node.attributes:
        try:
            snapshot = json.dumps(
                node.attributes, separators=(",", ":"), ensure_ascii=False
            )
        except (TypeError, ValueError):
            snapshot = None
        if snapshot is not None:
            text += " | attrs: " + snapshot[:_ATTRIBUTE_SNAPSHOT_CHARS]
    return text


def _require(value, field: str, mode: str):
    if value is None:
        raise ValidationError(field, f"{field} is required for {mode} mode")
    return value


def _now() -> datetime:
    return datetime.now(timezone.utc)


class KnowledgeHandler:
    """Serves knowledge-graph requests for one instance.

    ``indexer`` is an optional best-effort hook that receives each created or
    updated entity with its embedding text; its failures are logged and ignored.
    """

    def __init__(
        self,
        repository: KnowledgeRepository,
        instance_id: str,
        indexer: EntityIndexer | None = None,
    ) -> None:
        self.repository = repository
        self.instance_id = instance_id
        self.indexer = indexer

    async def handle(self, params: KnowledgeParams) -> KnowledgeResponse:
        """Run the operation named by ``params.mode``."""
        operations = {
            "create": self._create_entity,
            "search": self._search_entities,
            "set_active": self._set_active_entity,
            "get_entity": self._get_entity,
            "create_relation": self._create_relation,
            "get_relations": self._get_relations,
            "update_entity": self._update_entity,
            "delete_entity": self._delete_entity,
        }
        operation = operations.get(params.mode)
        if operation is None:
            raise ValidationError(
                "mode",
                f"Invalid mode: {params.mode}. Valid modes are: {_VALID_MODES}",
            )
        return await operation(params)

    async def _index(self, node: KnowledgeNode) -> None:
        if self.indexer is None:
            return
        try:
            await self.indexer(node, entity_embedding_text(node))
        except Exception as exc:  # best effort: never fail the request
            log.warning("Failed to index entity %s: %s", node.id, exc)

    async def _create_entity(self, params: KnowledgeParams) -> KnowledgeResponse:
        name = _require(params.name, "name", "create")
        entity_type = _require(params.entity_type, "entity_type", "create")
        scope = params.scope or KnowledgeScope.FEDERATION
        log.info("Creating entity '%s' in %s scope", name, scope)

        try:
            existing = await self.repository.get_entity_by_name(name, scope)
        except UnifiedIntelligenceError:
            existing = None
        if existing is not None:
            return KnowledgeResponse(
                status="exists",
                entity_id=existing.id,
                entities=[existing],
                message=f"Entity '{name}' already exists",
            )

        moment = _now()
        node = KnowledgeNode(
            id=str(uuid.uuid4()),
            name=name,
            display_name=params.display_name if params.display_name is not None else name,
            entity_type=entity_type,
            scope=scope,
            created_at=moment,
            updated_at=moment,
            created_by=self.instance_id,
            attributes=dict(params.attributes or {}),
            tags=list(params.tags or []),
            thought_ids=[],
            embedding=None,
            metadata=NodeMetadata(),
        )
        await self.repository.create_entity(node)
        await self.repository.update_name_index(name, node.id, scope)
        await self._index(node)
        return KnowledgeResponse(
            status="created",
            entity_id=node.id,
            entities=[node],
            message=f"Entity '{name}' created successfully",
        )

    async def _search_entities(self, params: KnowledgeParams) -> KnowledgeResponse:
        query = _require(params.query, "query", "search")
        scope = params.scope or KnowledgeScope.FEDERATION
        limit = params.limit if params.limit is not None else 10
        log.info("Searching for '%s' in %s scope", query, scope)
        entities = await self.repository.search_entities(
            query, scope, params.entity_type, limit
        )
        return KnowledgeResponse(
            status="success",
            entities=list(entities),
            message=f"Found {len(entities)} entities",
        )

    async def _set_active_entity(self, params: KnowledgeParams) -> KnowledgeResponse:
        entity_id = _require(params.entity_id, "entity_id", "set_active")
        scope = params.scope or KnowledgeScope.FEDERATION
        log.info("Setting active entity '%s' in %s scope", entity_id, scope)
        entity = await self.repository.get_entity(entity_id, scope)
        session_key = f"{self.instance_id}:KG:active_entity"
        await self.repository.set_active_entity(session_key, entity_id, scope)
        return KnowledgeResponse(
            status="active",
            entity_id=entity.id,
            entities=[entity],
            message="Entity set as active context",
        )

    async def _get_entity(self, params: KnowledgeParams) -> KnowledgeResponse:
        entity_id = _require(params.entity_id, "entity_id", "get_entity")
        scope = params.scope or KnowledgeScope.FEDERATION
        log.info("Getting entity '%s' from %s scope", entity_id, scope)
        entity = await self.repository.get_entity(entity_id, scope)
        return KnowledgeResponse(
            status="success",
            entity_id=entity.id,
            entities=[entity],
            message="Entity retrieved successfully",
        )

    async def _create_relation(self, params: KnowledgeParams) -> KnowledgeResponse:
        mode = "create_relation"
        from_id = _require(params.from_entity_id, "from_entity_id", mode)
        to_id = _require(params.to_entity_id, "to_entity_id", mode)
        relationship_type = _require(params.relationship_type, "relationship_type", mode)
        scope = params.scope or KnowledgeScope.FEDERATION
        bidirectional = params.bidirectional if params.bidirectional is not None else False
        weight = params.weight if params.weight is not None else 1.0
        log.info(
            "Creating relation '%s' from %s to %s in %s scope",
            relationship_type,
            from_id,
            to_id,
            scope,
        )
        await self.repository.get_entity(from_id, scope)
        await self.repository.get_entity(to_id, scope)

        relation = KnowledgeRelation(
            id=str(uuid.uuid4()),
            from_entity_id=from_id,
            to_entity_id=to_id,
            relationship_type=relationship_type,
            scope=scope,
            created_at=_now(),
            created_by=self.instance_id,
            attributes=dict(params.attributes or {}),
            metadata=RelationMetadata(bidirectional=bidirectional, weight=weight),
        )
        await self.repository.create_relation(relation)
        return KnowledgeResponse(
            status="created",
            relations=[relation],
            message="Relation created successfully",
        )

    async def _get_relations(self, params: KnowledgeParams) -> KnowledgeResponse:
        entity_id = _require(params.entity_id, "entity_id", "get_relations")
        scope = params.scope or KnowledgeScope.FEDERATION
        log.info("Getting relations for entity '%s' in %s scope", entity_id, scope)
        relations = await self.repository.get_relations(entity_id, scope)
        return KnowledgeResponse(
            status="success",
            entity_id=entity_id,
            relations=list(relations),
            message=f"Found {len(relations)} relations",
        )

    async def _update_entity(self, params: KnowledgeParams) -> KnowledgeResponse:
        entity_id = _require(params.entity_id, "entity_id", "update_entity")
        scope = params.scope or KnowledgeScope.FEDERATION
        log.info("Updating entity '%s' in %s scope", entity_id, scope)
        entity = await self.repository.get_entity(entity_id, scope)
        if params.display_name is not None:
            entity.display_name = params.display_name
        if params.attributes is not None:
            entity.attributes = dict(params.attributes)
        if params.tags is not None:
            entity.tags = list(params.tags)
        entity.updated_at = _now()
        await self.repository.update_entity(entity)
        await self._index(entity)
        return KnowledgeResponse(
            status="updated",
            entity_id=entity.id,
            entities=[entity],
            message="Entity updated successfully",
        )

    async def _delete_entity(self, params: KnowledgeParams) -> KnowledgeResponse:
        entity_id = _require(params.entity_id, "entity_id", "delete_entity")
        scope = params.scope or KnowledgeScope.FEDERATION
        log.info("Deleting entity '%s' from %s scope", entity_id, scope)
        entity = await self.repository.get_entity(entity_id, scope)
        await self.repository.delete_entity(entity_id, scope)
        return KnowledgeResponse(
            status="deleted",
            entity_id=entity_id,
            message=f"Entity '{entity.name}' deleted successfully",
        )
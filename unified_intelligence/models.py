"""Data records exchanged by the tools and stored alongside thoughts."""

from __future__ import annotations

import math
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar

from unified_intelligence.errors import SerializationError
from unified_intelligence.frameworks import WorkflowState

_I32_MIN = -(2**31)
_I32_MAX = 2**31 - 1
_INT_TEXT = re.compile(r"[+-]?[0-9]+")
_FRACTION = re.compile(r"\.([0-9]+)")


def flexible_int(value: Any) -> int:
    """Read an integer given as an int, a float (truncated) or a decimal string."""
    if isinstance(value, bool):
        raise SerializationError("expected an integer, a float or a string, got a boolean")
    if isinstance(value, int):
        return max(_I32_MIN, min(_I32_MAX, value))
    if isinstance(value, float):
        if math.isnan(value):
            return 0
        if value >= _I32_MAX:
            return _I32_MAX
        if value <= _I32_MIN:
            return _I32_MIN
        return int(value)
    if isinstance(value, str):
        if _INT_TEXT.fullmatch(value):
            number = int(value)
            if _I32_MIN <= number <= _I32_MAX:
                return number
            raise SerializationError(f"number too large to fit in target type: {value}")
        raise SerializationError(f"invalid digit found in string: {value!r}")
    raise SerializationError("expected an integer, a float or a string")


# ── field readers ────────────────────────────────────────────────────────────


def _mapping(data: Any, what: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise SerializationError(f"expected an object for {what}")
    return data


def _field(data: dict[str, Any], key: str) -> Any:
    try:
        return data[key]
    except KeyError:
        raise SerializationError(f"missing field `{key}`") from None


def _as_str(value: Any, key: str) -> str:
    if not isinstance(value, str):
        raise SerializationError(f"field `{key}` must be a string")
    return value


def _as_int(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise SerializationError(f"field `{key}` must be an integer")
    return value


def _as_bool(value: Any, key: str) -> bool:
    if not isinstance(value, bool):
        raise SerializationError(f"field `{key}` must be a boolean")
    return value


def _as_float(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise SerializationError(f"field `{key}` must be a number")
    return float(value)


def _as_str_list(value: Any, key: str) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise SerializationError(f"field `{key}` must be a list of strings")
    return list(value)


def _as_dict(value: Any, key: str) -> dict[str, Any]:
    if not isinstance(value, dict) or not all(isinstance(k, str) for k in value):
        raise SerializationError(f"field `{key}` must be an object")
    return dict(value)


def _required(data: dict[str, Any], key: str, reader) -> Any:
    return reader(_field(data, key), key)


def _optional(data: dict[str, Any], key: str, reader) -> Any:
    value = data.get(key)
    return None if value is None else reader(value, key)


def _parse_datetime(value: Any, key: str = "timestamp") -> datetime:
    text = _as_str(value, key).strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + (m.group(1) + "000000")[:6], text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise SerializationError(f"field `{key}` is not an RFC 3339 timestamp") from None
    if parsed.tzinfo is None:
        raise SerializationError(f"field `{key}` lacks a time zone")
    return parsed.astimezone(timezone.utc)


def _format_datetime(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ── thoughts ─────────────────────────────────────────────────────────────────


@dataclass
class ThinkParams:
    """Arguments of the think tool, with forgiving defaults."""

    thought: str
    thought_number: int = 1
    total_thoughts: int = 1
    next_thought_needed: bool = False
    chain_id: str | None = None
    framework_state: WorkflowState = WorkflowState.CONVERSATION
    importance: int | None = 5
    relevance: int | None = 5
    tags: list[str] | None = field(default_factory=list)
    category: str | None = "general"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ThinkParams:
        data = _mapping(data, "think parameters")
        params = cls(thought=_required(data, "thought", _as_str))
        for key in ("thought_number", "total_thoughts", "importance", "relevance"):
            if key in data:
                setattr(params, key, flexible_int(data[key]))
        if "next_thought_needed" in data:
            params.next_thought_needed = _as_bool(
                data["next_thought_needed"], "next_thought_needed"
            )
        params.chain_id = _optional(data, "chain_id", _as_str)
        for key in ("framework_state", "framework", "state"):
            if key in data:
                params.framework_state = WorkflowState.parse(data[key])
                break
        if "tags" in data:
            params.tags = _optional(data, "tags", _as_str_list)
        if "category" in data:
            params.category = _optional(data, "category", _as_str)
        return params


@dataclass
class ThoughtRecord:
    """A stored thought; ``content`` mirrors ``thought``."""

    id: str
    instance: str
    thought: str
    content: str
    thought_number: int
    total_thoughts: int
    timestamp: str
    chain_id: str | None = None
    next_thought_needed: bool = False
    framework: str | None = None
    importance: int | None = None
    relevance: int | None = None
    tags: list[str] | None = None
    category: str | None = None

    @classmethod
    def create(
        cls,
        instance: str,
        thought: str,
        thought_number: int,
        total_thoughts: int,
        chain_id: str | None = None,
        next_thought_needed: bool = False,
        framework: str | None = None,
        importance: int | None = None,
        relevance: int | None = None,
        tags: list[str] | None = None,
        category: str | None = None,
    ) -> ThoughtRecord:
        """Build a record with a fresh id and the current UTC time."""
        stamp = _utc_now().isoformat(timespec="milliseconds").replace("+00:00", "Z")
        return cls(
            id=str(uuid.uuid4()),
            instance=instance,
            thought=thought,
            content=thought,
            thought_number=thought_number,
            total_thoughts=total_thoughts,
            timestamp=stamp,
            chain_id=chain_id,
            next_thought_needed=next_thought_needed,
            framework=framework,
            importance=importance,
            relevance=relevance,
            tags=list(tags) if tags is not None else None,
            category=category,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "instance": self.instance,
            "thought": self.thought,
            "content": self.content,
            "thought_number": self.thought_number,
            "total_thoughts": self.total_thoughts,
            "timestamp": self.timestamp,
            "chain_id": self.chain_id,
            "next_thought_needed": self.next_thought_needed,
            "framework": self.framework,
            "importance": self.importance,
            "relevance": self.relevance,
            "tags": list(self.tags) if self.tags is not None else None,
            "category": self.category,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ThoughtRecord:
        data = _mapping(data, "thought record")
        return cls(
            id=_required(data, "id", _as_str),
            instance=_required(data, "instance", _as_str),
            thought=_required(data, "thought", _as_str),
            content=_required(data, "content", _as_str),
            thought_number=_required(data, "thought_number", _as_int),
            total_thoughts=_required(data, "total_thoughts", _as_int),
            timestamp=_required(data, "timestamp", _as_str),
            chain_id=_optional(data, "chain_id", _as_str),
            next_thought_needed=_required(data, "next_thought_needed", _as_bool),
            framework=_optional(data, "framework", _as_str),
            importance=_optional(data, "importance", _as_int),
            relevance=_optional(data, "relevance", _as_int),
            tags=_optional(data, "tags", _as_str_list),
            category=_optional(data, "category", _as_str),
        )


@dataclass
class ThinkResponse:
    """Reply of the think tool."""

    status: str
    thought_id: str
    next_thought_needed: bool
    auto_generated_thought: ThoughtRecord | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "status": self.status,
            "thought_id": self.thought_id,
            "next_thought_needed": self.next_thought_needed,
        }
        if self.auto_generated_thought is not None:
            result["auto_generated_thought"] = self.auto_generated_thought.to_dict()
        return result


@dataclass
class ChainMetadata:
    """Bookkeeping stored for a thought chain."""

    chain_id: str
    created_at: str
    thought_count: int
    instance: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "chain_id": self.chain_id,
            "created_at": self.created_at,
            "thought_count": self.thought_count,
            "instance": self.instance,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChainMetadata:
        data = _mapping(data, "chain metadata")
        return cls(
            chain_id=_required(data, "chain_id", _as_str),
            created_at=_required(data, "created_at", _as_str),
            thought_count=_required(data, "thought_count", _as_int),
            instance=_required(data, "instance", _as_str),
        )


@dataclass
class Thought:
    """A scored thought used for synthesis."""

    id: uuid.UUID
    content: str
    instance_id: str
    created_at: datetime
    updated_at: datetime
    importance: int
    relevance: int
    category: str | None = None
    tags: list[str] = field(default_factory=list)
    semantic_score: float | None = None
    temporal_score: float | None = None
    usage_score: float | None = None
    combined_score: float | None = None


# ── intent and chat completion ───────────────────────────────────────────────


@dataclass
class TemporalFilter:
    """Time window extracted from a query."""

    start_date: str | None = None
    end_date: str | None = None
    relative_timeframe: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TemporalFilter:
        data = _mapping(data, "temporal filter")
        return cls(
            start_date=_optional(data, "start_date", _as_str),
            end_date=_optional(data, "end_date", _as_str),
            relative_timeframe=_optional(data, "relative_timeframe", _as_str),
        )


@dataclass
class QueryIntent:
    """Structured reading of a natural-language query."""

    original_query: str = ""
    temporal_filter: TemporalFilter | None = None
    synthesis_style: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> QueryIntent:
        data = _mapping(data, "query intent")
        raw_filter = data.get("temporal_filter")
        return cls(
            original_query=_required(data, "original_query", _as_str),
            temporal_filter=(
                TemporalFilter.from_dict(raw_filter) if raw_filter is not None else None
            ),
            synthesis_style=_optional(data, "synthesis_style", _as_str),
        )


@dataclass
class ChatMessage:
    """One message of a chat completion exchange."""

    role: str
    content: str

    def to_dict(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ChatMessage:
        data = _mapping(data, "chat message")
        return cls(
            role=_required(data, "role", _as_str),
            content=_required(data, "content", _as_str),
        )


@dataclass
class GroqRequest:
    """A chat completion request."""

    model: str
    messages: list[ChatMessage]
    temperature: float
    max_tokens: int
    response_format: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "model": self.model,
            "messages": [message.to_dict() for message in self.messages],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }
        if self.response_format is not None:
            result["response_format"] = self.response_format
        return result


@dataclass
class GroqUsage:
    """Token accounting reported with a completion."""

    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


@dataclass
class Choice:
    """One completion alternative."""

    message: ChatMessage


@dataclass
class GroqResponse:
    """A chat completion response."""

    choices: list[Choice]
    usage: GroqUsage | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GroqResponse:
        data = _mapping(data, "completion response")
        raw_choices = _field(data, "choices")
        if not isinstance(raw_choices, list):
            raise SerializationError("field `choices` must be a list")
        choices = [
            Choice(ChatMessage.from_dict(_field(_mapping(c, "choice"), "message")))
            for c in raw_choices
        ]
        raw_usage = data.get("usage")
        usage = None
        if raw_usage is not None:
            raw_usage = _mapping(raw_usage, "usage")
            usage = GroqUsage(
                prompt_tokens=_optional(raw_usage, "prompt_tokens", _as_int),
                completion_tokens=_optional(raw_usage, "completion_tokens", _as_int),
                total_tokens=_optional(raw_usage, "total_tokens", _as_int),
            )
        return cls(choices=choices, usage=usage)


# ── knowledge graph ──────────────────────────────────────────────────────────

_TEAM_MEMBERS = frozenset({"Sam", "CC", "DT", "Gem"})
_BUILTIN_ENTITY_TYPES = ("issue", "person", "system", "concept", "tool", "framework")


class KnowledgeScope(Enum):
    """Visibility of a knowledge-graph item."""

    FEDERATION = "federation"
    PERSONAL = "personal"

    def __str__(self) -> str:
        return self.value.capitalize()

    @classmethod
    def from_context(cls, entity_type: EntityType, instance: str) -> KnowledgeScope:
        """Default scope for an entity type created by an instance."""
        if entity_type.custom:
            return cls.PERSONAL
        if entity_type.name == "person":
            return cls.FEDERATION if instance in _TEAM_MEMBERS else cls.PERSONAL
        return cls.FEDERATION


def _scope(value: Any, key: str) -> KnowledgeScope:
    try:
        return KnowledgeScope(_as_str(value, key))
    except ValueError:
        raise SerializationError(f"unknown scope `{value}`") from None


@dataclass(frozen=True)
class EntityType:
    """Kind of knowledge-graph entity: a built-in kind or a custom name."""

    ISSUE: ClassVar[EntityType]
    PERSON: ClassVar[EntityType]
    SYSTEM: ClassVar[EntityType]
    CONCEPT: ClassVar[EntityType]
    TOOL: ClassVar[EntityType]
    FRAMEWORK: ClassVar[EntityType]

    name: str
    custom: bool = False

    def __post_init__(self) -> None:
        if not self.custom and self.name not in _BUILTIN_ENTITY_TYPES:
            raise ValueError(f"unknown entity type: {self.name}")

    def __str__(self) -> str:
        return self.name

    @classmethod
    def from_value(cls, value: Any) -> EntityType:
        """Read ``"issue"`` style names or ``{"custom": name}``."""
        if isinstance(value, str):
            if value in _BUILTIN_ENTITY_TYPES:
                return cls(value)
            raise SerializationError(f"unknown variant `{value}`")
        if (
            isinstance(value, dict)
            and list(value) == ["custom"]
            and isinstance(value["custom"], str)
        ):
            return cls(value["custom"], custom=True)
        raise SerializationError("invalid entity type")

    def to_value(self) -> str | dict[str, str]:
        return {"custom": self.name} if self.custom else self.name


EntityType.ISSUE = EntityType("issue")
EntityType.PERSON = EntityType("person")
EntityType.SYSTEM = EntityType("system")
EntityType.CONCEPT = EntityType("concept")
EntityType.TOOL = EntityType("tool")
EntityType.FRAMEWORK = EntityType("framework")


def _entity_type(value: Any, key: str) -> EntityType:
    return EntityType.from_value(value)


def _floats(value: Any, key: str) -> list[float]:
    if not isinstance(value, list):
        raise SerializationError(f"field `{key}` must be a list of numbers")
    return [_as_float(v, key) for v in value]


@dataclass
class NodeMetadata:
    """Provenance of a knowledge node."""

    auto_extracted: bool = False
    extraction_source: str | None = None
    extraction_timestamp: datetime | None = None


@dataclass
class KnowledgeNode:
    """An entity in the knowledge graph."""

    id: str
    name: str
    display_name: str
    entity_type: EntityType
    scope: KnowledgeScope
    created_at: datetime
    updated_at: datetime
    created_by: str
    attributes: dict[str, Any] = field(default_factory=dict)
    tags: list[str] = field(default_factory=list)
    thought_ids: list[str] = field(default_factory=list)
    embedding: list[float] | None = None
    metadata: NodeMetadata = field(default_factory=NodeMetadata)

    def to_dict(self) -> dict[str, Any]:
        stamp = self.metadata.extraction_timestamp
        return {
            "id": self.id,
            "name": self.name,
            "display_name": self.display_name,
            "entity_type": self.entity_type.to_value(),
            "scope": self.scope.value,
            "created_at": _format_datetime(self.created_at),
            "updated_at": _format_datetime(self.updated_at),
            "created_by": self.created_by,
            "attributes": dict(self.attributes),
            "tags": list(self.tags),
            "thought_ids": list(self.thought_ids),
            "embedding": list(self.embedding) if self.embedding is not None else None,
            "metadata": {
                "auto_extracted": self.metadata.auto_extracted,
                "extraction_source": self.metadata.extraction_source,
                "extraction_timestamp": _format_datetime(stamp) if stamp else None,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KnowledgeNode:
        data = _mapping(data, "knowledge node")
        meta = _mapping(_field(data, "metadata"), "metadata")
        return cls(
            id=_required(data, "id", _as_str),
            name=_required(data, "name", _as_str),
            display_name=_required(data, "display_name", _as_str),
            entity_type=_required(data, "entity_type", _entity_type),
            scope=_required(data, "scope", _scope),
            created_at=_required(data, "created_at", _parse_datetime),
            updated_at=_required(data, "updated_at", _parse_datetime),
            created_by=_required(data, "created_by", _as_str),
            attributes=_required(data, "attributes", _as_dict),
            tags=_required(data, "tags", _as_str_list),
            thought_ids=_required(data, "thought_ids", _as_str_list),
            embedding=_optional(data, "embedding", _floats),
            metadata=NodeMetadata(
                auto_extracted=_required(meta, "auto_extracted", _as_bool),
                extraction_source=_optional(meta, "extraction_source", _as_str),
                extraction_timestamp=_optional(
                    meta, "extraction_timestamp", _parse_datetime
                ),
            ),
        )


@dataclass
class RelationMetadata:
    """Direction and strength of a relation."""

    bidirectional: bool = False
    weight: float = 1.0


@dataclass
class KnowledgeRelation:
    """A typed edge between two entities."""

    id: str
    from_entity_id: str
    to_entity_id: str
    relationship_type: str
    scope: KnowledgeScope
    created_at: datetime
    created_by: str
    attributes: dict[str, Any] = field(default_factory=dict)
    metadata: RelationMetadata = field(default_factory=RelationMetadata)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "from_entity_id": self.from_entity_id,
            "to_entity_id": self.to_entity_id,
            "relationship_type": self.relationship_type,
            "scope": self.scope.value,
            "created_at": _format_datetime(self.created_at),
            "created_by": self.created_by,
            "attributes": dict(self.attributes),
            "metadata": {
                "bidirectional": self.metadata.bidirectional,
                "weight": self.metadata.weight,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KnowledgeRelation:
        data = _mapping(data, "knowledge relation")
        meta = _mapping(_field(data, "metadata"), "metadata")
        return cls(
            id=_required(data, "id", _as_str),
            from_entity_id=_required(data, "from_entity_id", _as_str),
            to_entity_id=_required(data, "to_entity_id", _as_str),
            relationship_type=_required(data, "relationship_type", _as_str),
            scope=_required(data, "scope", _scope),
            created_at=_required(data, "created_at", _parse_datetime),
            created_by=_required(data, "created_by", _as_str),
            attributes=_required(data, "attributes", _as_dict),
            metadata=RelationMetadata(
                bidirectional=_required(meta, "bidirectional", _as_bool),
                weight=_required(meta, "weight", _as_float),
            ),
        )


def _non_negative(value: Any, key: str) -> int:
    number = _as_int(value, key)
    if number < 0:
        raise SerializationError(f"field `{key}` must not be negative")
    return number


@dataclass
class KnowledgeParams:
    """Arguments of the knowledge tool."""

    mode: str
    entity_id: str | None = None
    scope: KnowledgeScope | None = None
    name: str | None = None
    display_name: str | None = None
    entity_type: EntityType | None = None
    attributes: dict[str, Any] | None = None
    tags: list[str] | None = None
    query: str | None = None
    limit: int | None = None
    from_entity_id: str | None = None
    to_entity_id: str | None = None
    relationship_type: str | None = None
    bidirectional: bool | None = None
    weight: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> KnowledgeParams:
        data = _mapping(data, "knowledge parameters")
        return cls(
            mode=_required(data, "mode", _as_str),
            entity_id=_optional(data, "entity_id", _as_str),
            scope=_optional(data, "scope", _scope),
            name=_optional(data, "name", _as_str),
            display_name=_optional(data, "display_name", _as_str),
            entity_type=_optional(data, "entity_type", _entity_type),
            attributes=_optional(data, "attributes", _as_dict),
            tags=_optional(data, "tags", _as_str_list),
            query=_optional(data, "query", _as_str),
            limit=_optional(data, "limit", _non_negative),
            from_entity_id=_optional(data, "from_entity_id", _as_str),
            to_entity_id=_optional(data, "to_entity_id", _as_str),
            relationship_type=_optional(data, "relationship_type", _as_str),
            bidirectional=_optional(data, "bidirectional", _as_bool),
            weight=_optional(data, "weight", _as_float),
        )


@dataclass
class KnowledgeResponse:
    """Reply of the knowledge tool."""

    status: str
    entity_id: str | None = None
    entities: list[KnowledgeNode] | None = None
    relations: list[KnowledgeRelation] | None = None
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "entity_id": self.entity_id,
            "entities": (
                [node.to_dict() for node in self.entities]
                if self.entities is not None
                else None
            ),
            "relations": (
                [relation.to_dict() for relation in self.relations]
                if self.relations is not None
                else None
            ),
            "message": self.message,
        }
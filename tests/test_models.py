import uuid
from datetime import datetime, timezone

import pytest

from unified_intelligence.errors import SerializationError
from unified_intelligence.frameworks import WorkflowState
from unified_intelligence.models import (
    ChainMetadata,
    ChatMessage,
    EntityType,
    GroqRequest,
    GroqResponse,
    KnowledgeNode,
    KnowledgeParams,
    KnowledgeRelation,
    KnowledgeResponse,
    KnowledgeScope,
    NodeMetadata,
    QueryIntent,
    RelationMetadata,
    ThinkParams,
    ThinkResponse,
    ThoughtRecord,
    flexible_int,
)


def _node() -> KnowledgeNode:
    moment = datetime(2024, 1, 29, 12, 30, 15, 123456, tzinfo=timezone.utc)
    return KnowledgeNode(
        id="node-1",
        name="redis",
        display_name="Redis",
        entity_type=EntityType.SYSTEM,
        scope=KnowledgeScope.FEDERATION,
        created_at=moment,
        updated_at=moment,
        created_by="CC",
        attributes={"port": 6379},
        tags=["database"],
        thought_ids=["t1"],
        embedding=[0.5, 0.25],
        metadata=NodeMetadata(auto_extracted=True, extraction_source="thought",
                              extraction_timestamp=moment),
    )


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(7, 7), (7.9, 7), (-3.2, -3), ("42", 42), ("-8", -8)],
)
def test_flexible_int_accepts_variants(raw, expected):
    assert flexible_int(raw) == expected


@pytest.mark.parametrize("raw", ["abc", "4.5", " 4", True, None, [1]])
def test_flexible_int_rejects_bad_input(raw):
    with pytest.raises(SerializationError):
        flexible_int(raw)


def test_flexible_int_saturates_large_numbers():
    assert flexible_int(10**12) == flexible_int(1e12)
    assert flexible_int(-(10**12)) == flexible_int(-1e12)
    assert flexible_int(10**12) > flexible_int(10**9)


def test_think_params_defaults():
    params = ThinkParams.from_dict({"thought": "idea"})
    assert params.thought_number == 1
    assert params.total_thoughts == 1
    assert params.next_thought_needed is False
    assert params.chain_id is None
    assert params.framework_state is WorkflowState.CONVERSATION
    assert params.importance == 5
    assert params.relevance == 5
    assert params.tags == []
    assert params.category == "general"


def test_think_params_flexible_and_aliases():
    params = ThinkParams.from_dict(
        {
            "thought": "idea",
            "thought_number": "2",
            "total_thoughts": 3.0,
            "importance": "8",
            "state": "dbg",
            "chain_id": "chain-a",
            "tags": ["x"],
        }
    )
    assert params.thought_number == 2
    assert params.total_thoughts == 3
    assert params.importance == 8
    assert params.framework_state is WorkflowState.DEBUG
    assert params.chain_id == "chain-a"
    assert params.tags == ["x"]


def test_think_params_requires_thought():
    with pytest.raises(SerializationError):
        ThinkParams.from_dict({"thought_number": 1})


def test_thought_record_create_and_round_trip():
    record = ThoughtRecord.create(
        "CC", "hello", 1, 2, chain_id="c1", framework="debug", tags=["a"]
    )
    assert record.content == record.thought == "hello"
    assert str(uuid.UUID(record.id)) == record.id
    assert record.timestamp.endswith("Z")
    assert ThoughtRecord.from_dict(record.to_dict()) == record


def test_thought_record_missing_optional_fields_become_none():
    data = ThoughtRecord.create("CC", "x", 1, 1).to_dict()
    del data["category"]
    del data["tags"]
    restored = ThoughtRecord.from_dict(data)
    assert restored.category is None
    assert restored.tags is None


def test_think_response_skips_missing_auto_thought():
    response = ThinkResponse(status="stored", thought_id="t", next_thought_needed=True)
    assert "auto_generated_thought" not in response.to_dict()
    record = ThoughtRecord.create("CC", "x", 1, 1)
    with_auto = ThinkResponse("stored", "t", False, record).to_dict()
    assert with_auto["auto_generated_thought"] == record.to_dict()


def test_chain_metadata_round_trip():
    meta = ChainMetadata("c1", "2024-01-29T00:00:00Z", 3, "CC")
    assert ChainMetadata.from_dict(meta.to_dict()) == meta


def test_query_intent_from_dict():
    intent = QueryIntent.from_dict(
        {
            "original_query": "What did Gem and Sam do?",
            "temporal_filter": {"relative_timeframe": "yesterday"},
            "synthesis_style": "chronological",
        }
    )
    assert intent.original_query == "What did Gem and Sam do?"
    assert intent.temporal_filter.relative_timeframe == "yesterday"
    assert intent.temporal_filter.start_date is None
    assert intent.synthesis_style == "chronological"


def test_query_intent_requires_original_query():
    with pytest.raises(SerializationError):
        QueryIntent.from_dict({"synthesis_style": "chronological"})


def test_groq_request_omits_missing_response_format():
    request = GroqRequest("m", [ChatMessage("user", "hi")], 0.0, 1500)
    data = request.to_dict()
    assert "response_format" not in data
    assert data["messages"] == [{"role": "user", "content": "hi"}]
    fmt = {"type": "json_object"}
    assert GroqRequest("m", [], 0.0, 1500, fmt).to_dict()["response_format"] == fmt


def test_groq_response_from_dict():
    response = GroqResponse.from_dict(
        {"choices": [{"message": {"role": "assistant", "content": "{}"}}]}
    )
    assert response.choices[0].message == ChatMessage("assistant", "{}")
    assert response.usage is None
    with pytest.raises(SerializationError):
        GroqResponse.from_dict({"usage": None})


def test_scope_display_and_context():
    assert str(KnowledgeScope.FEDERATION) == "Federation"
    assert str(KnowledgeScope.PERSONAL) == "Personal"
    assert KnowledgeScope.from_context(EntityType.PERSON, "Gem") is KnowledgeScope.FEDERATION
    assert KnowledgeScope.from_context(EntityType.PERSON, "Other") is KnowledgeScope.PERSONAL
    assert KnowledgeScope.from_context(EntityType.ISSUE, "Other") is KnowledgeScope.FEDERATION
    custom = EntityType("widget", custom=True)
    assert KnowledgeScope.from_context(custom, "Sam") is KnowledgeScope.PERSONAL


def test_entity_type_values():
    assert EntityType.from_value("tool") == EntityType.TOOL
    assert EntityType.TOOL.to_value() == "tool"
    custom = EntityType.from_value({"custom": "widget"})
    assert custom.custom and str(custom) == "widget"
    assert custom.to_value() == {"custom": "widget"}
    with pytest.raises(SerializationError):
        EntityType.from_value("gadget")


def test_knowledge_node_round_trip():
    node = _node()
    data = node.to_dict()
    assert data["scope"] == "federation"
    assert data["created_at"].endswith("Z")
    assert KnowledgeNode.from_dict(data) == node


def test_knowledge_relation_round_trip():
    relation = KnowledgeRelation(
        id="r1",
        from_entity_id="a",
        to_entity_id="b",
        relationship_type="depends_on",
        scope=KnowledgeScope.PERSONAL,
        created_at=datetime(2024, 1, 29, tzinfo=timezone.utc),
        created_by="CC",
        metadata=RelationMetadata(bidirectional=True, weight=0.5),
    )
    assert KnowledgeRelation.from_dict(relation.to_dict()) == relation


def test_knowledge_params_from_dict():
    params = KnowledgeParams.from_dict(
        {"mode": "search", "query": "redis", "scope": "personal", "limit": 3,
         "entity_type": "concept"}
    )
    assert params.scope is KnowledgeScope.PERSONAL
    assert params.limit == 3
    assert params.entity_type == EntityType.CONCEPT
    assert params.name is None
    with pytest.raises(SerializationError):
        KnowledgeParams.from_dict({"mode": "search", "scope": "Federation"})
    with pytest.raises(SerializationError):
        KnowledgeParams.from_dict({"query": "redis"})


def test_knowledge_response_keeps_nulls():
    data = KnowledgeResponse(status="deleted", entity_id="e1").to_dict()
    assert data["entities"] is None
    assert data["relations"] is None
    assert data["entity_id"] == "e1"
    node = _node()
    assert KnowledgeResponse("ok", entities=[node]).to_dict()["entities"] == [node.to_dict()]
import json

import pytest

from unified_intelligence.errors import InternalError, SerializationError
from unified_intelligence.models import ThoughtRecord
from unified_intelligence.recall import (
    InvalidParamsError,
    RecallHandler,
    RecallParams,
    ThoughtRepository,
    ToolInternalError,
)


class MemoryRepository(ThoughtRepository):
    def __init__(self, thoughts=(), chains=None, fail=None):
        self.thoughts = {t.id: t for t in thoughts}
        self.chains = chains or {}
        self.fail = fail
        self.calls = []

    async def get_thought(self, instance, thought_id):
        self.calls.append(("thought", instance, thought_id))
        if self.fail:
            raise self.fail
        return self.thoughts.get(thought_id)

    async def get_chain_thoughts(self, instance, chain_id):
        self.calls.append(("chain", instance, chain_id))
        if self.fail:
            raise self.fail
        return [self.thoughts[i] for i in self.chains.get(chain_id, [])]


def _record(text, number=1, chain_id=None):
    return ThoughtRecord.create("test", text, number, 2, chain_id=chain_id)


@pytest.mark.asyncio
async def test_recall_single_thought_returns_its_json():
    record = _record("cache invalidation needs review")
    handler = RecallHandler(MemoryRepository([record]), "test")
    result = await handler.recall(RecallParams(mode="thought", id=record.id))
    assert result.is_error is False
    assert len(result.content) == 1
    assert json.loads(result.content[0]) == record.to_dict()


@pytest.mark.asyncio
async def test_recall_uses_instance_id():
    record = _record("x")
    repo = MemoryRepository([record])
    await RecallHandler(repo, "test").recall(RecallParams("thought", record.id))
    assert repo.calls == [("thought", "test", record.id)]


@pytest.mark.asyncio
async def test_missing_thought_is_invalid_params():
    handler = RecallHandler(MemoryRepository(), "test")
    with pytest.raises(InvalidParamsError) as info:
        await handler.recall(RecallParams("thought", "abc"))
    assert info.value.message == "Thought with ID abc not found."


@pytest.mark.asyncio
async def test_repository_failure_on_thought_is_internal():
    repo = MemoryRepository(fail=InternalError("boom"))
    with pytest.raises(ToolInternalError) as info:
        await RecallHandler(repo, "test").recall(RecallParams("thought", "abc"))
    assert info.value.message == "Error recalling thought: Internal error: boom"


@pytest.mark.asyncio
async def test_recall_chain_keeps_order():
    first = _record("first", 1, "c1")
    second = _record("second", 2, "c1")
    repo = MemoryRepository([first, second], chains={"c1": [first.id, second.id]})
    result = await RecallHandler(repo, "test").recall(RecallParams("chain", "c1"))
    decoded = json.loads(result.content[0])
    assert [t["thought"] for t in decoded] == ["first", "second"]
    assert decoded == [first.to_dict(), second.to_dict()]


@pytest.mark.asyncio
async def test_unknown_chain_returns_empty_list():
    result = await RecallHandler(MemoryRepository(), "test").recall(
        RecallParams("chain", "none")
    )
    assert json.loads(result.content[0]) == []


@pytest.mark.asyncio
async def test_repository_failure_on_chain_is_internal():
    repo = MemoryRepository(fail=InternalError("down"))
    with pytest.raises(ToolInternalError) as info:
        await RecallHandler(repo, "test").recall(RecallParams("chain", "c1"))
    assert info.value.message.startswith("Error recalling chain:")


@pytest.mark.asyncio
@pytest.mark.parametrize("mode", ["help", "search", ""])
async def test_invalid_mode_is_rejected(mode):
    repo = MemoryRepository()
    with pytest.raises(InvalidParamsError) as info:
        await RecallHandler(repo, "test").recall(RecallParams(mode, "x"))
    assert info.value.message == (
        f"Invalid recall mode '{mode}'. Must be 'thought' or 'chain'."
    )
    assert repo.calls == []


def test_error_codes_differ():
    assert InvalidParamsError("a").code != ToolInternalError("b").code


def test_params_from_dict_round_trip():
    params = RecallParams.from_dict({"mode": "chain", "id": "c1"})
    assert params == RecallParams(mode="chain", id="c1")


@pytest.mark.parametrize(
    "data", [{"mode": "chain"}, {"id": "x"}, {"mode": 1, "id": "x"}, ["mode"]]
)
def test_params_from_dict_rejects_bad_input(data):
    with pytest.raises(SerializationError):
        RecallParams.from_dict(data)
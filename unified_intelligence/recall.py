"""Recall stored thoughts by thought id or chain id."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from unified_intelligence.errors import SerializationError, UnifiedIntelligenceError
from unified_intelligence.models import ThoughtRecord

log = logging.getLogger(__name__)

_INVALID_PARAMS = -32602
_INTERNAL_ERROR = -32603


class ThoughtRepository(ABC):
    """Read access to stored thoughts."""

    @abstractmethod
    async def get_thought(self, instance: str, thought_id: str) -> ThoughtRecord | None:
        """The thought with this id, or None when it does not exist."""

    @abstractmethod
    async def get_chain_thoughts(
        self, instance: str, chain_id: str
    ) -> list[ThoughtRecord]:
        """All thoughts of a chain, in chain order."""


@dataclass
class RecallParams:
    """Arguments of the recall tool."""

    mode: str
    id: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecallParams:
        if not isinstance(data, dict):
            raise SerializationError("expected an object for recall parameters")
        values = {}
        for key in ("mode", "id"):
            if key not in data:
                raise SerializationError(f"missing field `{key}`")
            if not isinstance(data[key], str):
                raise SerializationError(f"field `{key}` must be a string")
            values[key] = data[key]
        return cls(**values)


@dataclass
class ToolResult:
    """A successful tool call: each content item is JSON text."""

    content: list[str] = field(default_factory=list)
    is_error: bool = False


class InvalidParamsError(UnifiedIntelligenceError):
    """The tool was called with parameters that cannot be served."""

    code = _INVALID_PARAMS

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ToolInternalError(UnifiedIntelligenceError):
    """The tool failed while serving a valid request."""

    code = _INTERNAL_ERROR

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


def _json_text(value: Any, what: str) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError) as exc:
        raise ToolInternalError(f"Failed to serialize {what}: {exc}") from exc


class RecallHandler:
    """Serves recall requests for one instance."""

    def __init__(self, repository: ThoughtRepository, instance_id: str) -> None:
        self.repository = repository
        self.instance_id = instance_id

    async def recall(self, params: RecallParams) -> ToolResult:
        """Return a thought (mode 'thought') or a whole chain (mode 'chain')."""
        if params.mode == "thought":
            return await self._recall_thought(params.id)
        if params.mode == "chain":
            return await self._recall_chain(params.id)
        log.warning("Invalid recall mode: %s", params.mode)
        raise InvalidParamsError(
            f"Invalid recall mode '{params.mode}'. Must be 'thought' or 'chain'."
        )

    async def _recall_thought(self, thought_id: str) -> ToolResult:
        try:
            thought = await self.repository.get_thought(self.instance_id, thought_id)
        except Exception as exc:
            log.warning("Error recalling thought %s: %s", thought_id, exc)
            raise ToolInternalError(f"Error recalling thought: {exc}") from exc
        if thought is None:
            log.warning("Thought not found: %s", thought_id)
            raise InvalidParamsError(f"Thought with ID {thought_id} not found.")
        log.info("Successfully recalled thought: %s", thought_id)
        return ToolResult(content=[_json_text(thought.to_dict(), "thought")])

    async def _recall_chain(self, chain_id: str) -> ToolResult:
        try:
            thoughts = await self.repository.get_chain_thoughts(
                self.instance_id, chain_id
            )
        except Exception as exc:
            log.warning("Error recalling chain %s: %s", chain_id, exc)
            raise ToolInternalError(f"Error recalling chain: {exc}") from exc
        log.info("Successfully recalled chain %s: %d thoughts", chain_id, len(thoughts))
        payload = [thought.to_dict() for thought in thoughts]
        return ToolResult(content=[_json_text(payload, "chain thoughts")])
"""Workflow states, thinking modes and the stuck-cycle tracker."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

VALID_FRAMEWORKS = "ooda, socratic, first_principles, systems, root_cause, swot"


class FrameworkError(Exception):
    """Base class for framework errors."""


class InvalidFrameworkError(FrameworkError):
    """An unknown framework name was given."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.valid_list = VALID_FRAMEWORKS
        super().__init__(
            f"Invalid framework name '{name}'. Valid frameworks: {VALID_FRAMEWORKS}"
        )


class ProcessingTimeoutError(FrameworkError):
    """Framework processing took too long."""

    def __init__(self, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        super().__init__(f"Framework processing timeout after {timeout_ms}ms")


class ProcessingFailedError(FrameworkError):
    """Framework processing failed."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Framework processing failed: {reason}")


class EmptyFrameworkNameError(FrameworkError):
    """An empty framework name was given."""

    def __init__(self) -> None:
        super().__init__("Empty framework name provided")


def _ascii_lower(text: str) -> str:
    return "".join(c.lower() if "A" <= c <= "Z" else c for c in text)


def normalize(text: str) -> str:
    """Lower-case ASCII and keep only ASCII letters and digits."""
    lowered = _ascii_lower(text.strip())
    return "".join(c for c in lowered if c.isascii() and c.isalnum())


def levenshtein(a: str, b: str) -> int:
    """Edit distance between the UTF-8 bytes of two strings."""
    left, right = a.encode(), b.encode()
    prev = list(range(len(right) + 1))
    for i, ac in enumerate(left, start=1):
        curr = [i]
        for j, bc in enumerate(right, start=1):
            cost = 0 if ac == bc else 1
            curr.append(min(prev[j] + 1, curr[j - 1] + 1, prev[j - 1] + cost))
        prev = curr
    return prev[-1]


class ThinkingMode(Enum):
    """Cognitive approach applied to a thought."""

    FIRST_PRINCIPLES = "first_principles"
    SOCRATIC = "socratic"
    SYSTEMS = "systems"
    OODA = "ooda"
    ROOT_CAUSE = "root_cause"
    SWOT = "swot"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: str) -> ThinkingMode:
        """Parse a mode name, ignoring case, '_', '-' and spaces."""
        norm = _ascii_lower(text)
        for ch in "_- ":
            norm = norm.replace(ch, "")
        for mode in cls:
            if mode.value.replace("_", "") == norm:
                return mode
        raise ValueError(f"unknown thinking mode: {text}")

    @classmethod
    def from_string(cls, framework: str) -> ThinkingMode:
        """Parse a framework name, raising a FrameworkError on failure."""
        if not framework.strip():
            raise EmptyFrameworkNameError()
        try:
            return cls.parse(framework)
        except ValueError:
            raise InvalidFrameworkError(framework) from None

    @classmethod
    def from_string_safe(cls, framework: str) -> ThinkingMode:
        """Parse a framework name, falling back to first principles."""
        try:
            return cls.from_string(framework)
        except FrameworkError:
            return cls.FIRST_PRINCIPLES

    def title(self) -> str:
        return _MODE_TITLES[self]

    def description(self) -> str:
        return _MODE_DESCRIPTIONS[self]

    def color(self) -> str:
        return _MODE_COLORS[self]

    def persistence_priority(self) -> int:
        return _MODE_PRIORITIES[self]


_MODE_TITLES = {
    ThinkingMode.OODA: "OODA Loop",
    ThinkingMode.SOCRATIC: "Socratic Method",
    ThinkingMode.FIRST_PRINCIPLES: "First Principles",
    ThinkingMode.SYSTEMS: "Systems Thinking",
    ThinkingMode.ROOT_CAUSE: "Root Cause Analysis",
    ThinkingMode.SWOT: "SWOT Analysis",
}

_MODE_DESCRIPTIONS = {
    ThinkingMode.OODA: "Observe, Orient, Decide, Act methodology",
    ThinkingMode.SOCRATIC: "Question-based analysis and inquiry",
    ThinkingMode.FIRST_PRINCIPLES: "Break down to fundamental truths",
    ThinkingMode.SYSTEMS: "Understand interconnections and patterns",
    ThinkingMode.ROOT_CAUSE: "Five Whys root cause analysis",
    ThinkingMode.SWOT: "Strengths, Weaknesses, Opportunities, Threats analysis",
}

_MODE_COLORS = {
    ThinkingMode.OODA: "bright_green",
    ThinkingMode.SOCRATIC: "bright_white",
    ThinkingMode.FIRST_PRINCIPLES: "bright_blue",
    ThinkingMode.SYSTEMS: "bright_cyan",
    ThinkingMode.ROOT_CAUSE: "bright_red",
    ThinkingMode.SWOT: "bright_orange",
}

_MODE_PRIORITIES = {
    ThinkingMode.FIRST_PRINCIPLES: 6,
    ThinkingMode.ROOT_CAUSE: 5,
    ThinkingMode.SYSTEMS: 4,
    ThinkingMode.OODA: 3,
    ThinkingMode.SOCRATIC: 2,
    ThinkingMode.SWOT: 2,
}


class WorkflowState(Enum):
    """Operational state of a thinking session."""

    CONVERSATION = "conversation"
    DEBUG = "debug"
    BUILD = "build"
    STUCK = "stuck"
    REVIEW = "review"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: Any) -> WorkflowState:
        """Forgiving parse: synonyms, prefixes and near misses; never fails."""
        if not isinstance(text, str):
            return cls.CONVERSATION
        norm = normalize(text)
        for state, synonyms in _STATE_SYNONYMS:
            if norm in synonyms:
                return state
        for prefix, state in _STATE_PREFIXES:
            if norm.startswith(prefix):
                return state
        distance, state = min(
            ((levenshtein(norm, s.value), s) for s in cls),
            key=lambda pair: pair[0],
        )
        return state if distance <= 2 else cls.CONVERSATION

    def is_readonly(self) -> bool:
        return self is WorkflowState.CONVERSATION

    def thinking_modes(self) -> tuple[ThinkingMode, ...]:
        return _STATE_MODES[self]

    def suggested_next(self) -> WorkflowState | None:
        return _STATE_NEXT[self]

    def persistence_priority(self) -> int:
        return _STATE_PRIORITIES[self]


_STATE_SYNONYMS = (
    (WorkflowState.CONVERSATION, {"conversation", "conv", "chat", "talk", "notes", "log"}),
    (WorkflowState.DEBUG, {"debug", "dbg", "fix", "diagnose", "triage"}),
    (WorkflowState.BUILD, {"build", "make", "compile", "ship"}),
    (WorkflowState.STUCK, {"stuck", "blocked", "jammed", "deadlock"}),
    (WorkflowState.REVIEW, {"review", "rev", "pr", "codereview", "critique"}),
)

_STATE_PREFIXES = (
    ("deb", WorkflowState.DEBUG),
    ("bui", WorkflowState.BUILD),
    ("stu", WorkflowState.STUCK),
    ("rev", WorkflowState.REVIEW),
    ("con", WorkflowState.CONVERSATION),
)

_STATE_MODES = {
    WorkflowState.CONVERSATION: (
        ThinkingMode.FIRST_PRINCIPLES,
        ThinkingMode.SYSTEMS,
        ThinkingMode.SWOT,
    ),
    WorkflowState.DEBUG: (
        ThinkingMode.ROOT_CAUSE,
        ThinkingMode.OODA,
        ThinkingMode.SOCRATIC,
    ),
    WorkflowState.BUILD: (),
    WorkflowState.STUCK: (
        ThinkingMode.FIRST_PRINCIPLES,
        ThinkingMode.SOCRATIC,
        ThinkingMode.SYSTEMS,
        ThinkingMode.OODA,
        ThinkingMode.ROOT_CAUSE,
    ),
    WorkflowState.REVIEW: (
        ThinkingMode.SOCRATIC,
        ThinkingMode.SYSTEMS,
        ThinkingMode.FIRST_PRINCIPLES,
    ),
}

_STATE_NEXT = {
    WorkflowState.STUCK: WorkflowState.BUILD,
    WorkflowState.DEBUG: WorkflowState.BUILD,
    WorkflowState.REVIEW: WorkflowState.BUILD,
    WorkflowState.BUILD: WorkflowState.REVIEW,
    WorkflowState.CONVERSATION: None,
}

_STATE_PRIORITIES = {
    WorkflowState.BUILD: 10,
    WorkflowState.DEBUG: 9,
    WorkflowState.STUCK: 8,
    WorkflowState.REVIEW: 7,
    WorkflowState.CONVERSATION: 1,
}


def combined_priority(
    state: WorkflowState, mode: ThinkingMode | None
) -> tuple[int, int]:
    """Priority pair of a state and an optional mode (missing mode counts 0)."""
    return state.persistence_priority(), (
        mode.persistence_priority() if mode is not None else 0
    )


def ordered_modes(modes: Iterable[ThinkingMode]) -> Iterator[ThinkingMode]:
    """Yield the given modes in canonical order, without duplicates."""
    present = set(modes)
    return (mode for mode in ThinkingMode if mode in present)


def modes_to_json(modes: Iterable[ThinkingMode]) -> list[str]:
    """Snake-case names of the modes in canonical order."""
    return [mode.value for mode in ordered_modes(modes)]


def modes_from_json(values: Iterable[str]) -> set[ThinkingMode]:
    """Parse a list of mode names; raises ValueError on an unknown one."""
    return {ThinkingMode.parse(value) for value in values}


@dataclass
class StuckTracker:
    """Rotates through thinking modes while a chain stays stuck."""

    CYCLE_ORDER: ClassVar[tuple[ThinkingMode, ...]] = (
        ThinkingMode.FIRST_PRINCIPLES,
        ThinkingMode.SOCRATIC,
        ThinkingMode.SYSTEMS,
        ThinkingMode.OODA,
        ThinkingMode.ROOT_CAUSE,
    )

    chain_id: str
    attempted: set[ThinkingMode] = field(default_factory=set)
    current_cycle: int = 0

    def next_approach(self) -> ThinkingMode:
        for mode in self.CYCLE_ORDER:
            if mode not in self.attempted:
                self.attempted.add(mode)
                return mode
        self.reset_cycle()
        return self.CYCLE_ORDER[0]

    def mark_attempted(self, mode: ThinkingMode) -> None:
        self.attempted.add(mode)

    def reset_cycle(self) -> None:
        self.current_cycle += 1
        self.attempted = {self.CYCLE_ORDER[0]}

    def attempts_count(self) -> int:
        return len(self.attempted)

    def is_cycle_complete_for_order(self) -> bool:
        return len(self.attempted) == len(self.CYCLE_ORDER)

    def ordered_attempts(self) -> Iterator[ThinkingMode]:
        return (mode for mode in self.CYCLE_ORDER if mode in self.attempted)

    def to_dict(self) -> dict[str, Any]:
        return {
            "chain_id": self.chain_id,
            "attempted": modes_to_json(self.attempted),
            "current_cycle": self.current_cycle,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StuckTracker:
        try:
            chain_id = data["chain_id"]
            attempted = data["attempted"]
            current_cycle = data["current_cycle"]
        except KeyError as exc:
            raise ValueError(f"missing field {exc.args[0]!r}") from None
        if not isinstance(chain_id, str):
            raise ValueError("chain_id must be a string")
        if not isinstance(current_cycle, int) or current_cycle < 0:
            raise ValueError("current_cycle must be a non-negative integer")
        return cls(
            chain_id=chain_id,
            attempted=modes_from_json(attempted),
            current_cycle=current_cycle,
        )
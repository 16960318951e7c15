"""Apply a thinking mode to a thought and render its output."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass, field
from typing import Any, TextIO

from termcolor import colored

from unified_intelligence.frameworks import ThinkingMode

_OODA_STAGES = {1: "Observe", 2: "Orient", 3: "Decide", 0: "Act"}

_OODA_PROMPTS = {
    "Observe": (
        "What data and observations are relevant to this situation?",
        "What patterns or changes do you notice?",
    ),
    "Orient": (
        "How do these observations fit with your existing understanding?",
        "What mental models or frameworks apply here?",
    ),
    "Decide": (
        "What are the available options based on your analysis?",
        "Which course of action best addresses the situation?",
    ),
    "Act": (
        "What concrete steps will you take?",
        "How will you monitor the results of your actions?",
    ),
}

_ICONS = {
    ThinkingMode.OODA: "🎯",
    ThinkingMode.SOCRATIC: "❓",
    ThinkingMode.FIRST_PRINCIPLES: "🔬",
    ThinkingMode.SYSTEMS: "🌐",
    ThinkingMode.ROOT_CAUSE: "🔍",
    ThinkingMode.SWOT: "📊",
}


def _truncated_remainder(value: int, divisor: int) -> int:
    """Remainder that takes the sign of the dividend."""
    return int(math.fmod(value, divisor))


@dataclass
class FrameworkResult:
    """Prompts, insights and metadata produced for one thought."""

    framework: ThinkingMode
    prompts: list[str] = field(default_factory=list)
    insights: list[str] = field(default_factory=list)
    metadata: dict[str, Any] | None = None


@dataclass(frozen=True)
class FrameworkProcessor:
    """Processes thoughts through one thinking mode."""

    framework: ThinkingMode

    def process_thought(self, thought: str, thought_number: int) -> FrameworkResult:
        handlers = {
            ThinkingMode.OODA: lambda: self._ooda(thought_number),
            ThinkingMode.SOCRATIC: self._socratic,
            ThinkingMode.FIRST_PRINCIPLES: self._first_principles,
            ThinkingMode.SYSTEMS: self._systems,
            ThinkingMode.ROOT_CAUSE: lambda: self._root_cause(thought_number),
            ThinkingMode.SWOT: self._swot,
        }
        return handlers[self.framework]()

    def _ooda(self, thought_number: int) -> FrameworkResult:
        stage_number = _truncated_remainder(thought_number, 4)
        stage = _OODA_STAGES.get(stage_number, "Observe")
        return FrameworkResult(
            framework=self.framework,
            prompts=list(_OODA_PROMPTS[stage]),
            insights=[f"OODA Stage: {stage}"],
            metadata={"ooda_stage": stage, "stage_number": stage_number},
        )

    def _socratic(self) -> FrameworkResult:
        return FrameworkResult(
            framework=self.framework,
            prompts=[
                "What assumptions are you making in this thought?",
                "What evidence supports or challenges this idea?",
                "What would someone who disagrees with this think?",
                "What are the implications if this thought is true?",
            ],
            insights=["Question your assumptions and examine evidence"],
            metadata={"method": "questioning", "focus": "assumptions_and_evidence"},
        )

    def _first_principles(self) -> FrameworkResult:
        return FrameworkResult(
            framework=self.framework,
            prompts=[
                "What are the fundamental facts that are certainly true?",
                "What am I assuming that might not be true?",
                "Can I break this down into more basic components?",
                "What would I conclude if I reasoned from these fundamentals?",
            ],
            insights=["Break down to fundamental truths and reason upward"],
            metadata={"approach": "deconstruction", "goal": "fundamental_understanding"},
        )

    def _systems(self) -> FrameworkResult:
        return FrameworkResult(
            framework=self.framework,
            prompts=[
                "What other elements or systems does this connect to?",
                "What are the feedback loops and interconnections?",
                "How might changes here affect other parts of the system?",
                "What emergent properties arise from these relationships?",
            ],
            insights=["Consider interconnections and system-wide effects"],
            metadata={"perspective": "holistic", "focus": "interconnections"},
        )

    def _root_cause(self, thought_number: int) -> FrameworkResult:
        why_number = min(thought_number, 5)
        return FrameworkResult(
            framework=self.framework,
            prompts=[
                f"Why #{why_number}: Why is this happening? "
                "(Dig deeper into the root cause)",
                "What evidence supports this cause?",
            ],
            insights=[f"Root cause analysis - Why #{why_number}"],
            metadata={"why_number": why_number, "method": "five_whys"},
        )

    def _swot(self) -> FrameworkResult:
        return FrameworkResult(
            framework=self.framework,
            prompts=[
                "Strengths: What advantages or positive aspects are present?",
                "Weaknesses: What limitations or negative aspects exist?",
                "Opportunities: What external factors could be beneficial?",
                "Threats: What external factors could be harmful?",
            ],
            insights=["Analyze internal and external factors systematically"],
            metadata={
                "quadrants": ["strengths", "weaknesses", "opportunities", "threats"],
                "perspective": "strategic",
            },
        )


def display_framework_start(mode: ThinkingMode, stream: TextIO | None = None) -> None:
    """Print the mode's icon and title."""
    out = stream if stream is not None else sys.stderr
    print(f"   {_ICONS[mode]} {colored(mode.title(), 'light_yellow')}", file=out)


def display_prompts(prompts: list[str], stream: TextIO | None = None) -> None:
    """Print a numbered list of prompts, if there are any."""
    if not prompts:
        return
    out = stream if stream is not None else sys.stderr
    print(
        f"   {colored('💭', 'light_cyan')} {colored('Framework prompts:', 'light_cyan')}",
        file=out,
    )
    for number, prompt in enumerate(prompts, start=1):
        print(f"      {colored(str(number), 'cyan')}. {colored(prompt, 'white')}", file=out)


def display_insights(insights: list[str], stream: TextIO | None = None) -> None:
    """Print each insight on its own line."""
    out = stream if stream is not None else sys.stderr
    for insight in insights:
        print(f"   {colored('💡', 'light_yellow')} {colored(insight, 'yellow')}", file=out)
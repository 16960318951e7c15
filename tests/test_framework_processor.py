import io

import pytest

from unified_intelligence.framework_processor import (
    FrameworkProcessor,
    FrameworkResult,
    display_framework_start,
    display_insights,
    display_prompts,
)
from unified_intelligence.frameworks import ThinkingMode


@pytest.mark.parametrize(
    ("number", "stage"),
    [(1, "Observe"), (2, "Orient"), (3, "Decide"), (4, "Act"), (5, "Observe")],
)
def test_ooda_stages(number, stage):
    result = FrameworkProcessor(ThinkingMode.OODA).process_thought("x", number)
    assert result.insights == [f"OODA Stage: {stage}"]
    assert result.metadata["ooda_stage"] == stage
    assert len(result.prompts) == 2


def test_ooda_act_prompts_and_stage_number():
    result = FrameworkProcessor(ThinkingMode.OODA).process_thought("x", 4)
    assert result.prompts[0] == "What concrete steps will you take?"
    assert result.metadata["stage_number"] == 0


def test_ooda_negative_number_falls_back_to_observe():
    result = FrameworkProcessor(ThinkingMode.OODA).process_thought("x", -1)
    assert result.metadata["ooda_stage"] == "Observe"
    assert result.metadata["stage_number"] == -1


def test_root_cause_caps_why_number():
    result = FrameworkProcessor(ThinkingMode.ROOT_CAUSE).process_thought("x", 9)
    assert result.metadata == {"why_number": 5, "method": "five_whys"}
    assert result.insights == ["Root cause analysis - Why #5"]
    assert result.prompts[0].startswith("Why #5: Why is this happening?")


def test_root_cause_small_number_kept():
    result = FrameworkProcessor(ThinkingMode.ROOT_CAUSE).process_thought("x", 2)
    assert result.metadata["why_number"] == 2


@pytest.mark.parametrize("mode", list(ThinkingMode))
def test_every_mode_produces_output(mode):
    result = FrameworkProcessor(mode).process_thought("thought", 1)
    assert isinstance(result, FrameworkResult)
    assert result.framework is mode
    assert result.prompts and result.insights
    assert result.metadata


def test_swot_quadrants():
    result = FrameworkProcessor(ThinkingMode.SWOT).process_thought("x", 1)
    assert result.metadata["quadrants"] == [
        "strengths",
        "weaknesses",
        "opportunities",
        "threats",
    ]
    assert result.prompts[3].startswith("Threats:")


def test_display_framework_start_writes_title():
    out = io.StringIO()
    display_framework_start(ThinkingMode.SYSTEMS, out)
    text = out.getvalue()
    assert "Systems Thinking" in text
    assert "🌐" in text


def test_display_prompts_lists_all():
    out = io.StringIO()
    display_prompts(["first", "second"], out)
    lines = out.getvalue().splitlines()
    assert len(lines) == 3
    assert "Framework prompts:" in lines[0]
    assert "first" in lines[1]
    assert "second" in lines[2]


def test_display_prompts_empty_writes_nothing():
    out = io.StringIO()
    display_prompts([], out)
    assert out.getvalue() == ""


def test_display_insights():
    out = io.StringIO()
    display_insights(["a", "b"], out)
    lines = out.getvalue().splitlines()
    assert len(lines) == 2
    assert "a" in lines[0] and "b" in lines[1]
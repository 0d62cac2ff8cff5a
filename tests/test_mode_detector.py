"""Tests for the persona suggestion heuristics."""

import pytest

from ai_tutor.services.mode_detector import (
    ModeDetectorConfig,
    ModeSuggestion,
    detect_mode,
    should_suggest,
    suggestion_message,
)


def test_exam_keywords_suggest_exam_mode() -> None:
    suggestion = detect_mode("I have an exam tomorrow, quiz me on cell biology!")

    assert suggestion.mode == "exam"
    assert suggestion.confidence == 1.0
    assert "exam" in suggestion.matched
    assert should_suggest(suggestion, "standard")


def test_exam_tomorrow_alone_clears_threshold() -> None:
    suggestion = detect_mode("Exam tomorrow")

    assert suggestion.mode == "exam"
    assert suggestion.confidence == pytest.approx(0.75)
    assert should_suggest(suggestion, "standard")


def test_no_suggestion_when_mode_already_active() -> None:
    suggestion = detect_mode("quiz me please, the exam is tomorrow")

    assert suggestion.mode == "exam"
    assert not should_suggest(suggestion, "exam")


@pytest.mark.parametrize(
    "message, expected",
    [
        ("I need some career advice about becoming a data scientist", "mentor"),
        ("Let's brainstorm some creative ideas for my science fair", "creative"),
    ],
)
def test_other_personas_are_detected(message, expected) -> None:
    suggestion = detect_mode(message)

    assert suggestion.mode == expected
    assert should_suggest(suggestion, "standard")


def test_plain_message_suggests_nothing() -> None:
    suggestion = detect_mode("What is the derivative of x squared?")

    assert suggestion == ModeSuggestion(mode="standard", confidence=0.0)
    assert not should_suggest(suggestion, "exam")


def test_weak_signal_stays_below_threshold() -> None:
    suggestion = detect_mode("What should we do tonight?")

    assert suggestion.mode == "exam"
    assert suggestion.confidence < 0.5
    assert not should_suggest(suggestion, "standard")


def test_ties_prefer_exam_then_mentor() -> None:
    config = ModeDetectorConfig(
        keywords={
            "creative": ((r"\bplan\b", 0.6),),
            "mentor": ((r"\bplan\b", 0.6),),
            "exam": ((r"\bplan\b", 0.6),),
        }
    )

    assert detect_mode("help me plan", config).mode == "exam"
    without_exam = ModeDetectorConfig(keywords={"creative": config.keywords["creative"], "mentor": config.keywords["mentor"]})
    assert detect_mode("help me plan", without_exam).mode == "mentor"


def test_threshold_is_configurable() -> None:
    strict = ModeDetectorConfig(threshold=0.9)
    suggestion = detect_mode("Exam tomorrow", strict)

    assert not should_suggest(suggestion, "standard", strict)
    assert should_suggest(suggestion, "standard")


def test_suggestion_messages_name_the_mode() -> None:
    assert "Exam" in suggestion_message("exam")
    assert "Mentor" in suggestion_message("mentor")
    assert "Creative" in suggestion_message("creative")
    assert "Pirate" in suggestion_message("pirate")

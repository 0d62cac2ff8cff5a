"""Keyword heuristics that suggest a tutor persona from a learner's first message."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .persona_registry import DEFAULT_MODE

KeywordWeights = Tuple[Tuple[str, float], ...]

# Checked in this order; on equal scores the earlier mode wins.
MODE_PRIORITY = ("exam", "mentor", "creative")

EXAM_KEYWORDS: KeywordWeights = (
    (r"\bexams?\b", 0.5),
    (r"\bquiz\s+me\b", 0.6),
    (r"\btest\s+me\b", 0.6),
    (r"\b(mid-?terms?|finals?)\b", 0.4),
    (r"\btests?\b", 0.3),
    (r"\b(revise|revision|cram(ming)?)\b", 0.35),
    (r"\b(tomorrow|tonight|next week)\b", 0.25),
    (r"\b(practice|mock)\s+(questions?|problems?|papers?)\b", 0.35),
    (r"\b(deadline|due)\b", 0.15),
)

MENTOR_KEYWORDS: KeywordWeights = (
    (r"\bcareer\b", 0.45),
    (r"\b(advice|advise|guidance)\b", 0.35),
    (r"\bmentor(ing)?\b", 0.5),
    (r"\b(motivat\w*|stuck|overwhelmed|struggling)\b", 0.3),
    (r"\b(how should i|where do i start|what should i learn)\b", 0.35),
    (r"\b(roadmap|long[- ]term|goals?)\b", 0.25),
    (r"\bimprove\b", 0.15),
)

CREATIVE_KEYWORDS: KeywordWeights = (
    (r"\b(brainstorm\w*|ideas?)\b", 0.4),
    (r"\b(creative|creativity|imagine|invent)\b", 0.45),
    (r"\b(story|stories|poem|analog(y|ies)|metaphors?)\b", 0.35),
    (r"\bwhat if\b", 0.3),
    (r"\b(design|project)\b", 0.2),
    (r"\b(fun|game|playful)\b", 0.2),
)

SUGGESTION_MESSAGES: Dict[str, str] = {
    "exam": "Looks like you're preparing for an exam. Switch to Exam mode for focused practice?",
    "mentor": "Want guidance beyond the material? Switch to Mentor mode for advice and direction.",
    "creative": "Feeling exploratory? Switch to Creative mode for analogies and brainstorming.",
    "standard": "Switch back to Standard mode for balanced explanations.",
}


@dataclass(frozen=True)
class ModeDetectorConfig:
    """Tunable keyword weights and the confidence needed before a suggestion is shown."""

    keywords: Dict[str, KeywordWeights] = field(
        default_factory=lambda: {
            "exam": EXAM_KEYWORDS,
            "mentor": MENTOR_KEYWORDS,
            "creative": CREATIVE_KEYWORDS,
        }
    )
    threshold: float = 0.5


DEFAULT_CONFIG = ModeDetectorConfig()


@dataclass(frozen=True)
class ModeSuggestion:
    mode: str
    confidence: float
    matched: Tuple[str, ...] = ()


def _score(message: str, patterns: KeywordWeights) -> Tuple[float, List[str]]:
    total = 0.0
    matched: List[str] = []
    for pattern, weight in patterns:
        hit = re.search(pattern, message, re.IGNORECASE)
        if hit:
            total += weight
            matched.append(hit.group(0).lower())
    return total, matched


def detect_mode(message: str, config: Optional[ModeDetectorConfig] = None) -> ModeSuggestion:
    """Score the message against each persona's keywords and return the strongest."""

    config = config or DEFAULT_CONFIG
    text = message or ""
    best = ModeSuggestion(mode=DEFAULT_MODE, confidence=0.0)
    best_score = 0.0
    modes = [mode for mode in MODE_PRIORITY if mode in config.keywords]
    modes.extend(mode for mode in config.keywords if mode not in MODE_PRIORITY)
    for mode in modes:
        score, matched = _score(text, config.keywords[mode])
        if score > best_score:
            best_score = score
            best = ModeSuggestion(mode=mode, confidence=min(1.0, score), matched=tuple(matched))
    return best


def should_suggest(
    suggestion: ModeSuggestion,
    current_mode: str,
    config: Optional[ModeDetectorConfig] = None,
) -> bool:
    config = config or DEFAULT_CONFIG
    if suggestion.mode == current_mode or suggestion.mode == DEFAULT_MODE:
        return False
    return suggestion.confidence >= config.threshold


def suggestion_message(mode: str) -> str:
    return SUGGESTION_MESSAGES.get(mode, f"Switch to {mode.capitalize()} mode?")


__all__ = [
    "DEFAULT_CONFIG",
    "ModeDetectorConfig",
    "ModeSuggestion",
    "detect_mode",
    "should_suggest",
    "suggestion_message",
]

from __future__ import annotations

import json
import re
from typing import Protocol


class RemoteScoringError(Exception):
    """Raised by RemoteScorer implementations when the grading service cannot answer.

    AnswerGrader treats it as "no remote score" and grades locally.
    """


class RemoteScorer(Protocol):
    """Remote grading service returning the model's raw text reply."""

    def evaluate(self, reference: str, candidate: str) -> str:
        ...


def build_evaluation_prompt(reference: str, candidate: str) -> str:
    return (
        f'Evaluate the following student\'s answer: "{candidate}" '
        f'against the correct answer: "{reference}". '
        'Return a JSON object with a single field "score" whose value is an '
        "integer between 0 and 100."
    )


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences around a JSON reply."""
    if "```json" in text:
        text = text.replace("```json", "").replace("```", "")
    elif "```" in text:
        text = text.replace("```", "")
    return text.strip()


def parse_remote_score(text: object) -> int | None:
    """Extract the integer score from a remote reply, or None when absent."""
    if not isinstance(text, str) or not text:
        return None

    try:
        payload = json.loads(strip_code_fences(text))
    except ValueError:
        payload = None
    if isinstance(payload, dict):
        value = payload.get("score")
        if isinstance(value, int) and not isinstance(value, bool):
            return value

    match = re.search(r"\d+", text)
    if match:
        return int(match.group(0))
    return None

from __future__ import annotations

import re
from dataclasses import dataclass

_REVISED_HEADING = (
    r"(?:(?:a\.|a\)|\*\*a\.\*\*)(?:[ \t]*\**Revised prompt:?\**)?"
    r"|\*\*Revised prompt:?\*\*|Revised prompt:?)"
)
_QUESTIONS_HEADING = r"(?:(?:b\.|b\)|\*\*b\.\*\*)(?:[ \t]*\**Questions:?\**)?|\*\*Questions:?\*\*|Questions:?)"

_REVISED_RE = re.compile(
    rf"(?:^|\n)\s*{_REVISED_HEADING}\s*(.*?)(?=\n\s*{_QUESTIONS_HEADING}|\Z)",
    re.IGNORECASE | re.DOTALL,
)
_QUESTIONS_RE = re.compile(rf"(?:^|\n)\s*{_QUESTIONS_HEADING}\s*(.*)\Z", re.IGNORECASE | re.DOTALL)
_PREAMBLE_RE = re.compile(rf"^(.*?)(?=\n\s*{_REVISED_HEADING})", re.IGNORECASE | re.DOTALL)


@dataclass(frozen=True)
class EngineerReply:
    preamble: str
    revised_prompt: str
    questions: str


def parse_engineer_reply(content: str) -> EngineerReply | None:
    """Split a prompt-engineer reply into its revised prompt and questions.

    Matching is best effort. Returns ``None`` when neither section is found,
    in which case the reply should be shown as plain text.
    """
    revised = _REVISED_RE.search(content)
    questions = _QUESTIONS_RE.search(content)
    revised_prompt = revised.group(1).strip() if revised else ""
    question_text = questions.group(1).strip() if questions else ""
    if not revised_prompt and not question_text:
        return None

    preamble = _PREAMBLE_RE.search(content)
    return EngineerReply(
        preamble=preamble.group(1).strip() if preamble else "",
        revised_prompt=revised_prompt,
        questions=question_text,
    )

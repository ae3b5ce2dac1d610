from __future__ import annotations

import re

_VARIABLE_RE = re.compile(r"\{\{([^}]+)\}\}")


def extract_variables(prompt: str) -> list[str]:
    """Return the ``{{name}}`` placeholders in ``prompt``, unique, in order of first use."""
    names: list[str] = []
    for match in _VARIABLE_RE.finditer(prompt):
        name = match.group(1).strip()
        if name not in names:
            names.append(name)
    return names


def missing_variables(prompt: str, values: dict[str, str]) -> list[str]:
    return [name for name in extract_variables(prompt) if not values.get(name, "").strip()]


def substitute_variables(prompt: str, values: dict[str, str]) -> str:
    """Replace each ``{{ name }}`` with its value.

    Placeholders whose value is blank are left in place.
    """
    for name, value in values.items():
        value = value.strip()
        if not value:
            continue
        placeholder = re.compile(r"\{\{\s*" + re.escape(name) + r"\s*\}\}")
        prompt = placeholder.sub(lambda _: value, prompt)
    return prompt

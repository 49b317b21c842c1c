"""Filter rules routing discovered message names to service sends/receives.

A rule is one of:

- a string: exact name match,
- a list of strings: membership,
- a mapping with any of ``exact``, ``prefix``, ``suffix``, ``includes``
  (each a string or list of strings): matches if ANY supplied condition
  matches.

Mappings may also carry ``topic`` and ``message_type`` tags. They never
affect matching; they travel with the match.

INVARIANT: Evaluation never raises. Malformed rules fail closed.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

_CONDITIONS: dict[str, Callable[[str, str], bool]] = {
    "exact": lambda name, value: name == value,
    "prefix": lambda name, value: name.startswith(value),
    "suffix": lambda name, value: name.endswith(value),
    "includes": lambda name, value: value in name,
}


def _condition_values(value: Any) -> list[str]:
    """Normalize a condition value to a list of non-empty strings."""
    if isinstance(value, str):
        return [value] if value else []
    if isinstance(value, (list, tuple)):
        return [item for item in value if isinstance(item, str) and item]
    return []


def matches(name: str, rule: Any) -> bool:
    """Return True if *name* satisfies *rule*."""
    if not isinstance(name, str):
        return False

    if isinstance(rule, str):
        return bool(rule) and name == rule

    if isinstance(rule, (list, tuple)):
        if not rule or not all(isinstance(item, str) for item in rule):
            return False
        return name in rule

    if isinstance(rule, Mapping):
        for key, check in _CONDITIONS.items():
            if any(check(name, value) for value in _condition_values(rule.get(key))):
                return True
        return False

    return False


def rule_tag(rule: Any, key: str) -> str | None:
    """Read a non-matching tag (``topic``, ``message_type``) off a rule."""
    if not isinstance(rule, Mapping):
        return None
    value = rule.get(key)
    if isinstance(value, str) and value:
        return value
    return None


def has_pattern_rules(rules: Iterable[Any]) -> bool:
    """True if any rule needs the full candidate set (prefix/suffix/includes)."""
    for rule in rules:
        if isinstance(rule, Mapping) and any(
            _condition_values(rule.get(key)) for key in ("prefix", "suffix", "includes")
        ):
            return True
    return False


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FilterMatch:
    """A candidate assigned to one direction, with the tags of its rules."""

    name: str
    topic: str | None = None
    message_type: str | None = None


@dataclass(frozen=True)
class Classification:
    """Result of :func:`classify`."""

    sends: list[FilterMatch] = field(default_factory=list)
    receives: list[FilterMatch] = field(default_factory=list)
    unmatched: list[str] = field(default_factory=list)

    @property
    def send_names(self) -> list[str]:
        return [m.name for m in self.sends]

    @property
    def receive_names(self) -> list[str]:
        return [m.name for m in self.receives]


def _first_match(name: str, rules: Sequence[Any]) -> FilterMatch | None:
    """Evaluate *rules* in order; the first match classifies *name*.

    Tags come from the earliest matching rule that declares them; a tag
    already assigned is never replaced by a later rule.
    """
    matched = False
    topic: str | None = None
    message_type: str | None = None
    for rule in rules:
        if not matches(name, rule):
            continue
        matched = True
        if topic is None:
            topic = rule_tag(rule, "topic")
        if message_type is None:
            message_type = rule_tag(rule, "message_type")
        if topic is not None and message_type is not None:
            break
    if not matched:
        return None
    return FilterMatch(name=name, topic=topic, message_type=message_type)


def classify(
    candidate_names: Iterable[str],
    *,
    sends: Sequence[Any] | None = None,
    receives: Sequence[Any] | None = None,
) -> Classification:
    """Split *candidate_names* into sends/receives by first-match rules.

    A name may land in both directions. Names matching no rule in
    either set are reported as unmatched. Candidate order is preserved
    and duplicate names are classified once.
    """
    result = Classification()
    seen: set[str] = set()
    for name in candidate_names:
        if name in seen:
            continue
        seen.add(name)

        sent = _first_match(name, sends or [])
        received = _first_match(name, receives or [])
        if sent is not None:
            result.sends.append(sent)
        if received is not None:
            result.receives.append(received)
        if sent is None and received is None:
            result.unmatched.append(name)
    return result

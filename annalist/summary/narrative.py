"""Decision table turning the dominant areas of a commit into a sentence.

The table is a heuristic: it names where most files changed and guesses at
the kind of work. Rules are tried in order against the top one or two areas
and the first match wins; when none match, a generic sentence names the
areas directly.
"""

from __future__ import annotations

import dataclasses
import typing as typ

if typ.TYPE_CHECKING:
    from .models import AreaCount

ROOT_AREA = "(root)"


@dataclasses.dataclass(frozen=True, slots=True)
class NarrativeRule:
    """One row of the narrative decision table.

    A rule matches when every condition it sets holds: ``primary`` equals
    the top area, ``secondary`` equals the second area, and the top area
    ends with ``primary_suffix``. Unset conditions are ignored.
    """

    sentence: str
    primary: str | None = None
    secondary: str | None = None
    primary_suffix: str | None = None

    def matches(self, primary: str, secondary: str | None) -> bool:
        """Return whether the rule applies to the given top areas."""
        if self.primary is not None and primary != self.primary:
            return False
        if self.secondary is not None and secondary != self.secondary:
            return False
        return self.primary_suffix is None or primary.endswith(self.primary_suffix)


def build_narrative_rules(
    *,
    test_area: str = "Tests",
    app_area: str = "marble",
) -> tuple[NarrativeRule, ...]:
    """Return the decision table for a repository's directory names.

    Parameters
    ----------
    test_area
        Top-level directory holding the test suite.
    app_area
        Top-level directory holding application code.

    """
    return (
        NarrativeRule(
            primary=test_area,
            secondary=app_area,
            sentence=(
                "Mostly tests + app code, likely a feature iteration "
                "with coverage updates."
            ),
        ),
        NarrativeRule(
            primary=test_area,
            sentence=(
                "Heavily test-focused changes, likely stabilizing or "
                "expanding coverage."
            ),
        ),
        NarrativeRule(
            primary=app_area,
            sentence="Primarily app-side changes, likely UI/feature iteration.",
        ),
        NarrativeRule(
            primary_suffix=".xcodeproj",
            sentence=(
                "Project configuration changes, likely build/settings maintenance."
            ),
        ),
        NarrativeRule(
            primary=ROOT_AREA,
            sentence="Repo-level maintenance (docs, tooling, or configuration).",
        ),
    )


DEFAULT_NARRATIVE_RULES = build_narrative_rules()


def narrate(
    areas: typ.Sequence[AreaCount],
    rules: typ.Sequence[NarrativeRule] = DEFAULT_NARRATIVE_RULES,
) -> str | None:
    """Return the narrative sentence for ``areas``, or ``None`` when empty."""
    if not areas:
        return None

    primary = areas[0].area
    secondary = areas[1].area if len(areas) > 1 else None
    for rule in rules:
        if rule.matches(primary, secondary):
            return rule.sentence

    if secondary is None:
        return f"Most changes are in {primary}."
    return f"Most changes are in {primary} and {secondary}."

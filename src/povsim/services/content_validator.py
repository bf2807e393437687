"""Static content table validation utilities."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Collection, Iterable, Mapping, MutableMapping

from povsim.core.types import Severity
from povsim.domain.defs import (
    ChoiceDef,
    LedgerEffect,
    ShowPopupEffect,
    ShowTipEffect,
    SlideDef,
    SlideEffect,
    UnlockFactEffect,
)
from povsim.services.ledger_service import is_valid_amount


@dataclass(frozen=True, slots=True)
class Issue:
    severity: Severity
    code: str
    message: str
    context: dict[str, str]


def format_issue(issue: Issue) -> str:
    context = " ".join(f"{key}={value}" for key, value in issue.context.items())
    suffix = f" ({context})" if context else ""
    return f"[{issue.severity}] {issue.code}: {issue.message}{suffix}"


def has_errors(issues: Iterable[Issue]) -> bool:
    return any(issue.severity == "ERROR" for issue in issues)


def validate_content(
    slides: Mapping[str, SlideDef],
    start_slide_id: str,
    achievement_ids: Collection[str],
    *,
    error_on_autoadvance_cycle: bool = False,
) -> list[Issue]:
    """Check a loaded content table for authoring mistakes.

    Problems are reported, never raised. ERROR issues break navigation or
    silently drop effects at runtime; WARN issues are legal but suspicious.
    """
    issues: list[Issue] = []
    slide_ids = set(slides.keys())
    known_facts = set(achievement_ids)

    if start_slide_id not in slide_ids:
        issues.append(
            Issue(
                severity="ERROR",
                code="MISSING_START_SLIDE",
                message="Start slide is not in the content table.",
                context={"referenced_id": start_slide_id},
            )
        )

    for slide in slides.values():
        _validate_slide_shape(slide, issues)
        _validate_references(slide, slide_ids, issues)
        for index, choice in enumerate(slide.choices):
            _validate_choice(slide.id, index, choice, issues)
        for index, effect in enumerate(slide.on_enter):
            _validate_effect(slide.id, f"on_enter[{index}]", effect, known_facts, issues)

    _validate_reachability(slides, start_slide_id, issues)
    _validate_auto_advance_cycles(slides, issues, error_on_autoadvance_cycle=error_on_autoadvance_cycle)
    return issues


def _validate_slide_shape(slide: SlideDef, issues: list[Issue]) -> None:
    if slide.choices and slide.next_slide_id:
        issues.append(
            Issue(
                severity="WARN",
                code="CHOICES_AND_NEXT",
                message="Slide has choices and a successor; the successor is never followed.",
                context={"slide_id": slide.id},
            )
        )
    popups = [effect for effect in slide.on_enter if isinstance(effect, ShowPopupEffect)]
    if len(popups) > 1:
        issues.append(
            Issue(
                severity="WARN",
                code="MULTIPLE_POPUPS",
                message="Only the first popup requested on entry is shown.",
                context={"slide_id": slide.id},
            )
        )
    for popup in popups:
        if not (popup.next_slide_id or slide.next_slide_id):
            issues.append(
                Issue(
                    severity="WARN",
                    code="POPUP_WITHOUT_SUCCESSOR",
                    message="Dismissing this popup leaves the player on the same slide.",
                    context={"slide_id": slide.id, "popup_kind": popup.kind},
                )
            )


def _validate_references(slide: SlideDef, slide_ids: set[str], issues: list[Issue]) -> None:
    if slide.next_slide_id and slide.next_slide_id not in slide_ids:
        issues.append(
            Issue(
                severity="ERROR",
                code="MISSING_SLIDE_REF",
                message="Slide references missing next slide.",
                context={"slide_id": slide.id, "field_path": "next", "referenced_id": slide.next_slide_id},
            )
        )
    for index, choice in enumerate(slide.choices):
        if choice.next_slide_id and choice.next_slide_id not in slide_ids:
            issues.append(
                Issue(
                    severity="ERROR",
                    code="MISSING_SLIDE_REF",
                    message="Choice references missing slide.",
                    context={
                        "slide_id": slide.id,
                        "field_path": f"choices[{index}].next",
                        "referenced_id": choice.next_slide_id,
                    },
                )
            )
    for index, effect in enumerate(slide.on_enter):
        if isinstance(effect, ShowPopupEffect) and effect.next_slide_id and effect.next_slide_id not in slide_ids:
            issues.append(
                Issue(
                    severity="ERROR",
                    code="MISSING_SLIDE_REF",
                    message="Popup references missing slide.",
                    context={
                        "slide_id": slide.id,
                        "field_path": f"on_enter[{index}].next",
                        "referenced_id": effect.next_slide_id,
                    },
                )
            )


def _validate_choice(slide_id: str, index: int, choice: ChoiceDef, issues: list[Issue]) -> None:
    path = f"choices[{index}]"
    if choice.locked and (choice.next_slide_id or choice.effect):
        issues.append(
            Issue(
                severity="WARN",
                code="LOCKED_CHOICE_HAS_TARGET",
                message="Locked choice carries a successor or effect that can never be used.",
                context={"slide_id": slide_id, "field_path": path},
            )
        )
    if not choice.locked and not choice.next_slide_id:
        issues.append(
            Issue(
                severity="WARN",
                code="INERT_CHOICE",
                message="Choice is neither locked nor linked and does nothing when selected.",
                context={"slide_id": slide_id, "field_path": path},
            )
        )
    if choice.effect is not None and not is_valid_amount(choice.effect.amount):
        issues.append(_invalid_amount_issue(slide_id, f"{path}.effect", choice.effect))


def _validate_effect(
    slide_id: str,
    path: str,
    effect: SlideEffect,
    known_facts: set[str],
    issues: list[Issue],
) -> None:
    if isinstance(effect, LedgerEffect) and not is_valid_amount(effect.amount):
        issues.append(_invalid_amount_issue(slide_id, path, effect))
        return
    fact_id: str | None = None
    if isinstance(effect, (UnlockFactEffect, ShowTipEffect)):
        fact_id = effect.fact_id
    elif isinstance(effect, ShowPopupEffect):
        fact_id = effect.unlock_fact
    if fact_id is not None and fact_id not in known_facts:
        issues.append(
            Issue(
                severity="ERROR",
                code="UNKNOWN_FACT_ID",
                message="Effect unlocks a fact that is not in the registry.",
                context={"slide_id": slide_id, "field_path": path, "referenced_id": fact_id},
            )
        )


def _invalid_amount_issue(slide_id: str, path: str, effect: LedgerEffect) -> Issue:
    return Issue(
        severity="ERROR",
        code="INVALID_EFFECT_AMOUNT",
        message="Ledger effect amount must be a non-negative number; it will be ignored.",
        context={"slide_id": slide_id, "field_path": path, "amount": repr(effect.amount)},
    )


def _successors(slide: SlideDef) -> list[str]:
    targets = [choice.next_slide_id for choice in slide.choices if choice.selectable]
    if slide.next_slide_id:
        targets.append(slide.next_slide_id)
    for effect in slide.on_enter:
        if isinstance(effect, ShowPopupEffect) and effect.next_slide_id:
            targets.append(effect.next_slide_id)
    return [target for target in targets if target]


def _validate_reachability(slides: Mapping[str, SlideDef], start_slide_id: str, issues: list[Issue]) -> None:
    reachable: set[str] = set()
    stack = [start_slide_id] if start_slide_id in slides else []
    while stack:
        slide_id = stack.pop()
        if slide_id in reachable:
            continue
        reachable.add(slide_id)
        stack.extend(target for target in _successors(slides[slide_id]) if target in slides)
    for slide_id in slides:
        if slide_id in reachable:
            continue
        issues.append(
            Issue(
                severity="WARN",
                code="UNREACHABLE_SLIDE",
                message="Slide is unreachable from the start slide.",
                context={"slide_id": slide_id},
            )
        )


def _validate_auto_advance_cycles(
    slides: Mapping[str, SlideDef],
    issues: list[Issue],
    *,
    error_on_autoadvance_cycle: bool,
) -> None:
    adjacency: MutableMapping[str, str] = {}
    for slide_id, slide in slides.items():
        if slide.auto_advances and slide.next_slide_id in slides:
            assert slide.next_slide_id is not None
            adjacency[slide_id] = slide.next_slide_id

    visited: set[str] = set()
    cycles: list[list[str]] = []
    for origin in adjacency:
        if origin in visited:
            continue
        path: list[str] = []
        on_path: set[str] = set()
        current: str | None = origin
        while current is not None and current not in visited:
            visited.add(current)
            path.append(current)
            on_path.add(current)
            current = adjacency.get(current)
        if current is not None and current in on_path:
            cycles.append(path[path.index(current) :])

    if not cycles:
        return
    severity: Severity = "ERROR" if error_on_autoadvance_cycle else "WARN"
    for cycle in cycles:
        issues.append(
            Issue(
                severity=severity,
                code="AUTOADVANCE_CYCLE",
                message="Slides continue into each other forever with no choice to break out.",
                context={"cycle": " -> ".join(cycle + [cycle[0]])},
            )
        )

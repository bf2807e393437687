import json

import pytest

from povsim.data.repositories import AchievementsRepository, GameConfigRepository, SlidesRepository
from povsim.domain.defs import (
    ChoiceDef,
    LedgerEffect,
    LedgerOp,
    ShowPopupEffect,
    ShowTipEffect,
    SlideDef,
)
from povsim.presentation.cli import validate
from povsim.services.content_validator import Issue, format_issue, has_errors, validate_content


def _codes(issues: list[Issue], severity: str | None = None) -> list[str]:
    return [issue.code for issue in issues if severity is None or issue.severity == severity]


def _slides(*slides: SlideDef) -> dict[str, SlideDef]:
    return {slide.id: slide for slide in slides}


def test_packaged_content_has_no_errors() -> None:
    slides = {slide.id: slide for slide in SlidesRepository().all()}
    issues = validate_content(
        slides,
        GameConfigRepository().get_config().start_slide_id,
        AchievementsRepository().ids(),
        error_on_autoadvance_cycle=True,
    )

    assert not has_errors(issues), "\n".join(format_issue(issue) for issue in issues)
    assert "UNREACHABLE_SLIDE" not in _codes(issues)


def test_missing_start_slide() -> None:
    issues = validate_content(_slides(SlideDef(id="a")), "nowhere", [])
    assert "MISSING_START_SLIDE" in _codes(issues, "ERROR")


def test_dangling_references_are_errors() -> None:
    slides = _slides(
        SlideDef(
            id="a",
            choices=(ChoiceDef(label="go", next_slide_id="ghost"),),
            on_enter=(ShowPopupEffect(kind="info", next_slide_id="phantom"),),
        ),
        SlideDef(id="b", next_slide_id="void"),
    )
    issues = validate_content(slides, "a", [])

    refs = [issue.context["referenced_id"] for issue in issues if issue.code == "MISSING_SLIDE_REF"]
    assert sorted(refs) == ["ghost", "phantom", "void"]


def test_invalid_effect_amounts_are_errors() -> None:
    slides = _slides(
        SlideDef(
            id="a",
            choices=(
                ChoiceDef(label="x", next_slide_id="a", effect=LedgerEffect(op=LedgerOp.DEBIT, amount=-1)),
            ),
            on_enter=(LedgerEffect(op=LedgerOp.CREDIT, amount="lots"),),
        )
    )
    issues = validate_content(slides, "a", [])

    assert _codes(issues, "ERROR").count("INVALID_EFFECT_AMOUNT") == 2


def test_unknown_fact_ids_are_errors() -> None:
    slides = _slides(
        SlideDef(
            id="a",
            on_enter=(
                ShowTipEffect(fact_id="known"),
                ShowTipEffect(fact_id="unknown"),
                ShowPopupEffect(kind="p", unlock_fact="also_unknown"),
            ),
            next_slide_id="a",
        )
    )
    issues = validate_content(slides, "a", ["known"])

    unknown = [issue.context["referenced_id"] for issue in issues if issue.code == "UNKNOWN_FACT_ID"]
    assert unknown == ["unknown", "also_unknown"]


def test_authoring_smells_are_warnings() -> None:
    slides = _slides(
        SlideDef(
            id="a",
            next_slide_id="b",
            choices=(
                ChoiceDef(label="locked", locked=True, next_slide_id="b"),
                ChoiceDef(label="inert"),
                ChoiceDef(label="ok", next_slide_id="b"),
            ),
        ),
        SlideDef(
            id="b",
            on_enter=(ShowPopupEffect(kind="one"), ShowPopupEffect(kind="two")),
        ),
        SlideDef(id="orphan"),
    )
    issues = validate_content(slides, "a", [])

    warnings = set(_codes(issues, "WARN"))
    assert {
        "CHOICES_AND_NEXT",
        "LOCKED_CHOICE_HAS_TARGET",
        "INERT_CHOICE",
        "MULTIPLE_POPUPS",
        "POPUP_WITHOUT_SUCCESSOR",
        "UNREACHABLE_SLIDE",
    } <= warnings
    assert not has_errors(issues)


def test_locked_choice_targets_do_not_count_for_reachability() -> None:
    slides = _slides(
        SlideDef(id="a", choices=(ChoiceDef(label="x", locked=True, next_slide_id="b"),)),
        SlideDef(id="b"),
    )
    issues = validate_content(slides, "a", [])

    assert [issue.context.get("slide_id") for issue in issues if issue.code == "UNREACHABLE_SLIDE"] == ["b"]


@pytest.mark.parametrize(("strict", "severity"), [(False, "WARN"), (True, "ERROR")])
def test_auto_advance_cycle_severity(strict: bool, severity: str) -> None:
    slides = _slides(
        SlideDef(id="a", next_slide_id="b"),
        SlideDef(id="b", next_slide_id="c"),
        SlideDef(id="c", next_slide_id="b"),
    )
    issues = validate_content(slides, "a", [], error_on_autoadvance_cycle=strict)

    cycles = [issue for issue in issues if issue.code == "AUTOADVANCE_CYCLE"]
    assert len(cycles) == 1
    assert cycles[0].severity == severity
    assert cycles[0].context["cycle"] == "b -> c -> b"


def test_choice_breaks_auto_advance_cycle() -> None:
    slides = _slides(
        SlideDef(id="a", next_slide_id="b"),
        SlideDef(id="b", choices=(ChoiceDef(label="back", next_slide_id="a"),)),
    )
    assert "AUTOADVANCE_CYCLE" not in _codes(validate_content(slides, "a", []))


def test_format_issue_includes_context() -> None:
    issue = Issue(severity="ERROR", code="X", message="Broken.", context={"slide_id": "a"})
    assert format_issue(issue) == "[ERROR] X: Broken. (slide_id=a)"


def test_validate_cli_passes_on_packaged_content(capsys) -> None:
    validate.main(["--quiet"])
    assert "Validation passed" in capsys.readouterr().out


def test_validate_cli_exits_nonzero_on_errors(tmp_path, capsys) -> None:
    (tmp_path / "slides.json").write_text(json.dumps({"a": {"next": "missing"}}), encoding="utf-8")
    (tmp_path / "achievements.json").write_text("[]", encoding="utf-8")
    (tmp_path / "game.json").write_text(json.dumps({"start_slide_id": "a"}), encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        validate.main([str(tmp_path)])

    assert excinfo.value.code == 1
    output = capsys.readouterr().out
    assert "MISSING_SLIDE_REF" in output
    assert "Validation failed." in output

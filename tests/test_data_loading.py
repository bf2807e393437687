import json
from pathlib import Path

import pytest

from povsim.data.errors import DataLoadError, DataValidationError
from povsim.data.repositories import AchievementsRepository, GameConfigRepository, SlidesRepository
from povsim.domain.defs import (
    LedgerEffect,
    LedgerOp,
    SetBalancesEffect,
    ShowPopupEffect,
    ShowTipEffect,
    UnlockFactEffect,
)


def test_packaged_slides_load() -> None:
    repo = SlidesRepository()
    intro = repo.get("game_intro")

    assert intro.title_screen is True
    assert intro.opening is True
    assert repo.ids()[0] == "game_intro"
    assert repo.has("to_be_continued")


def test_packaged_registry_and_config_load() -> None:
    achievements = AchievementsRepository().all()
    config = GameConfigRepository().get_config()

    assert [entry.id for entry in achievements][:2] == ["paying_yourself_first", "time_in_the_market"]
    assert config.start_slide_id == "game_intro"
    assert config.initial_balance == 5550
    assert config.goal_amount == 15000
    assert config.initial_credit_score == 680
    assert config.typing_ms_per_char == 35


def test_slide_fields_parse_into_definitions(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(
        definitions_dir / "slides.json",
        {
            "a": {
                "text": "Pay day",
                "background": "bg.png",
                "choices": [
                    {"label": "Save", "subtitle": "wise", "next": "b", "effect": {"type": "transfer_to_savings", "amount": 50}},
                    {"label": "Later", "locked": True},
                ],
                "on_enter": [
                    {"type": "credit", "amount": 500},
                    {"type": "unlock_fact", "fact_id": "f1"},
                    {"type": "show_tip", "fact_id": "f2", "title": "Two"},
                    {"type": "set_balances", "balance": 10},
                    {"type": "show_popup", "kind": "info", "next": "b"},
                ],
            },
            "b": {"text": "Done", "next": "a"},
        },
    )
    slide = SlidesRepository(base_path=definitions_dir).get("a")

    assert slide.choices[0].effect == LedgerEffect(op=LedgerOp.TRANSFER_TO_SAVINGS, amount=50)
    assert slide.choices[1].locked is True
    assert slide.choices[1].selectable is False
    assert slide.on_enter == (
        LedgerEffect(op=LedgerOp.CREDIT, amount=500),
        UnlockFactEffect(fact_id="f1"),
        ShowTipEffect(fact_id="f2", title="Two"),
        SetBalancesEffect(balance=10, total_saved=None),
        ShowPopupEffect(kind="info", next_slide_id="b"),
    )
    assert slide.auto_advances is False
    assert SlidesRepository(base_path=definitions_dir).get("b").auto_advances is True


def test_invalid_ledger_amount_is_kept_for_runtime_rejection(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(
        definitions_dir / "slides.json",
        {"a": {"on_enter": [{"type": "debit", "amount": -5}]}},
    )
    slide = SlidesRepository(base_path=definitions_dir).get("a")

    assert slide.on_enter == (LedgerEffect(op=LedgerOp.DEBIT, amount=-5),)


@pytest.mark.parametrize(
    "payload",
    [
        {"a": {"text": "x", "extra": 1}},
        {"a": {"choices": [{"label": "x", "bogus": True}]}},
        {"a": {"choices": [{"label": "x", "effect": {"type": "unlock_fact"}}]}},
        {"a": {"on_enter": [{"type": "teleport"}]}},
        {"a": {"choices": [{"next": "a"}]}},
        {"a": {"opening": "yes"}},
        {"a": "not an object"},
        ["a"],
    ],
)
def test_slides_validation_rejects_bad_shapes(tmp_path: Path, payload: object) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(definitions_dir / "slides.json", payload)
    repo = SlidesRepository(base_path=definitions_dir)
    with pytest.raises(DataValidationError):
        repo.all()


def test_achievements_reject_duplicates(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    entry = {"id": "dup", "title": "T", "description": "D"}
    _write_json(definitions_dir / "achievements.json", [entry, entry])
    with pytest.raises(DataValidationError):
        AchievementsRepository(base_path=definitions_dir).all()


def test_game_config_defaults_fill_missing_sections(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(definitions_dir / "game.json", {"start_slide_id": "a"})
    config = GameConfigRepository(base_path=definitions_dir).get_config()

    assert config.start_slide_id == "a"
    assert config.initial_balance == 5550
    assert config.notification_stagger == 0.5


def test_game_config_rejects_negative_balance(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    _write_json(definitions_dir / "game.json", {"start_slide_id": "a", "initial_state": {"balance": -1}})
    with pytest.raises(DataValidationError):
        GameConfigRepository(base_path=definitions_dir).get_config()


def test_missing_file_raises_load_error(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    with pytest.raises(DataLoadError):
        SlidesRepository(base_path=definitions_dir).all()


def test_malformed_json_raises_load_error(tmp_path: Path) -> None:
    definitions_dir = _make_definitions_dir(tmp_path)
    (definitions_dir / "slides.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(DataLoadError):
        SlidesRepository(base_path=definitions_dir).all()


def _make_definitions_dir(tmp_path: Path) -> Path:
    definitions_dir = tmp_path / "definitions"
    definitions_dir.mkdir()
    return definitions_dir


def _write_json(path: Path, payload: object) -> None:
    path.write_text(json.dumps(payload), encoding="utf-8")

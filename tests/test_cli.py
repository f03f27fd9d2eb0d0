"""Tests for the terminal entrypoint."""

import json

import pytest

from bouquetai.api import cli
from bouquetai.errors import GenerationError
from bouquetai.types import GenerationResult, SuggestionSet


def test_generate_prints_result(monkeypatch, capsys):
    captured = {}

    def fake_generate(bouquet):
        captured["bouquet"] = bouquet
        return GenerationResult(bouquet.flowers, "Lovely.", ("https://img/1.png",))

    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")
    monkeypatch.setattr(cli, "generate_bouquet", fake_generate)

    code = cli.main([
        "generate", "--occasion", "Birthday", "--recipient", "Mom",
        "--flower", "rose", "--flower", "lily",
    ])

    assert code == 0
    assert json.loads(capsys.readouterr().out) == {
        "flowerList": ["rose", "lily"],
        "description": "Lovely.",
        "images": ["https://img/1.png"],
    }
    assert captured["bouquet"].openai_key == "sk-env"


def test_suggest_prints_suggestions(monkeypatch, capsys):
    monkeypatch.setattr(
        cli,
        "generate_suggestions",
        lambda bouquet: SuggestionSet((("rose", "lily", "tulip"), ("iris", "daisy", "peony"))),
    )

    code = cli.main(["suggest", "--occasion", "Wedding", "--recipient", "Anna"])

    assert code == 0
    assert json.loads(capsys.readouterr().out)["suggestions"][0] == ["rose", "lily", "tulip"]


def test_generation_error_exits_non_zero(monkeypatch, capsys):
    def failing(bouquet):
        raise GenerationError("At least one flower must be selected", kind="ValidationError")

    monkeypatch.setattr(cli, "generate_bouquet", failing)

    code = cli.main(["generate", "--occasion", "Birthday", "--recipient", "Mom"])

    assert code == 1
    assert "At least one flower must be selected" in capsys.readouterr().err


def test_invalid_temperature_is_a_usage_error():
    with pytest.raises(SystemExit):
        cli.main(["suggest", "--occasion", "x", "--recipient", "y", "--temperature", "3"])

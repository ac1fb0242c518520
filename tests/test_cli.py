from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from main import app

GEDCOM = """\
0 HEAD
1 GEDC
2 VERS 5.5.1
2 FORM LINEAGE-LINKED
1 CHAR UTF-8
0 @I1@ INDI
1 NAME John /Smith/
1 SEX M
1 BIRT
2 DATE 3 MAR 1920
0 @I2@ INDI
1 NAME Mary /Jones/
1 SEX F
1 BIRT
2 DATE 1922
0 @I3@ INDI
1 NAME Anna /Smith/
1 SEX F
1 BIRT
2 DATE 12 JUN 1950
0 @F1@ FAM
1 HUSB @I1@
1 WIFE @I2@
1 CHIL @I3@
0 TRLR
"""


@pytest.fixture
def gedcom_file(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("FAMTREE_LOG_LEVEL", "WARNING")
    path = tmp_path / "family.ged"
    path.write_text(GEDCOM, encoding="utf-8")
    return path


def test_cli_validate_clean_file(gedcom_file: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["validate", str(gedcom_file)], catch_exceptions=False)

    assert result.exit_code == 0
    assert "Imported" in result.stdout
    assert "No validation issues found" in result.stdout


def test_cli_layout_json(gedcom_file: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["layout", str(gedcom_file), "--root", "I3", "--json"], catch_exceptions=False)

    assert result.exit_code == 0
    records = json.loads(result.stdout[result.stdout.index("[") :])
    by_id = {r["id"]: r for r in records}
    assert set(by_id) == {"I1", "I2", "I3"}
    assert by_id["I3"]["data"]["is_root"] is True
    assert by_id["I3"]["data"]["birthday"] == "1950-06-12"
    assert by_id["I3"]["rels"]["father"] == "I1"
    assert by_id["I3"]["rels"]["mother"] == "I2"
    assert by_id["I1"]["rels"]["spouses"] == ["I2"]


def test_cli_layout_table(gedcom_file: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["layout", str(gedcom_file), "-r", "I1"], catch_exceptions=False)

    assert result.exit_code == 0
    assert "Tree rooted at I1" in result.stdout


def test_cli_unknown_root(gedcom_file: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(app, ["layout", str(gedcom_file), "--root", "I99"])

    assert result.exit_code == 1
    assert "Error" in result.stdout


def test_cli_bad_log_level(gedcom_file: Path, monkeypatch) -> None:
    monkeypatch.setenv("FAMTREE_LOG_LEVEL", "chatty")
    runner = CliRunner()

    result = runner.invoke(app, ["validate", str(gedcom_file)])

    assert result.exit_code == 1

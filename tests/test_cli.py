import json

import pytest

from cookbook import cli


def test_parser_ingest_data():
    args = cli.build_parser().parse_args(
        ["ingest-data", "-i", "i.json", "-p", "p.json", "-u", "u.json", "-r", "r.json"]
    )
    assert args.command == "ingest-data"
    assert (args.ingredients, args.preparations, args.units, args.recipes) == (
        "i.json", "p.json", "u.json", "r.json"
    )


def test_parser_requires_all_ingest_files():
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["ingest-data", "-i", "i.json"])


def test_parser_server_defaults():
    args = cli.build_parser().parse_args(["server"])
    assert (args.host, args.port) == ("0.0.0.0", 8000)


def test_ingest_data_migrates_and_loads(tmp_path, monkeypatch, payload_files, capsys):
    db_path = tmp_path / "cookbook.sqlite"
    monkeypatch.setattr(cli.settings, "database_url", f"sqlite:///{db_path}")

    code = cli.main([
        "ingest-data",
        "-i", str(payload_files["ingredients"]),
        "-p", str(payload_files["preparations"]),
        "-u", str(payload_files["units"]),
        "-r", str(payload_files["recipes"]),
    ])

    assert code == 0
    summary = json.loads(capsys.readouterr().out)
    assert summary["recipes"] == 1
    assert summary["ingredient_units"] == 1


def test_ingest_data_reports_failure(tmp_path, monkeypatch, payload_files):
    monkeypatch.setattr(cli.settings, "database_url", f"sqlite:///{tmp_path / 'cookbook.sqlite'}")

    code = cli.main([
        "ingest-data",
        "-i", str(payload_files["ingredients"]),
        "-p", str(payload_files["preparations"]),
        "-u", str(payload_files["units"]),
        "-r", str(tmp_path / "missing.json"),
    ])

    assert code == 1

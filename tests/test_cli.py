import json
from pathlib import Path

import pytest

from feasibility import cli

SAMPLE = Path(__file__).resolve().parents[1] / "inputs" / "sample_project.yaml"


def test_cli_runs_text(capsys):
    rc = cli.main(["--config", str(SAMPLE)])

    out = capsys.readouterr().out
    assert rc == 0
    assert "FEASIBILITY RESULTS" in out
    assert "Decision: proceed (3/3 criteria)" in out
    assert "Profitability index:" in out
    assert "(Acceptable)" in out
    assert "Sensitivity (+/-20%)" in out


def test_cli_runs_json(capsys):
    rc = cli.main(["--config", str(SAMPLE), "--format", "json", "--variation", "10", "--workers", "2"])

    obj = json.loads(capsys.readouterr().out)
    assert rc == 0
    assert obj["metrics"]["total_capex"] == pytest.approx(134_272_600.0)
    assert obj["metrics"]["npv"] > 0
    assert obj["decision"]["recommendation"] == "proceed"
    assert obj["decision"]["profitability_index"] > 1
    assert len(obj["cash_flows"]) == 6
    assert [row["variable"] for row in obj["sensitivity"]][0] == "Revenue"
    assert obj["variation_pct"] == 10.0


def test_cli_schema(capsys):
    rc = cli.main(["--schema"])

    out = capsys.readouterr().out
    assert rc == 0
    assert "discount_rate" in out
    assert "project_years" in out


def test_cli_missing_config_file_returns_2(tmp_path, capsys):
    rc = cli.main(["--config", str(tmp_path / "missing.yaml")])

    assert rc == 2
    assert "error:" in capsys.readouterr().err


def test_cli_invalid_config_returns_2(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("project:\n  discount_rate_pct: 10\n", encoding="utf-8")

    assert cli.main(["--config", str(path)]) == 2


def test_cli_requires_config_or_schema():
    with pytest.raises(SystemExit) as ei:
        cli.parse_args([])
    assert ei.value.code == 2


def test_cli_invalid_format_exits_2():
    with pytest.raises(SystemExit) as ei:
        cli.parse_args(["--config", str(SAMPLE), "--format", "xml"])
    assert ei.value.code == 2

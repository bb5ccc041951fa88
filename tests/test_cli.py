"""Tests for the command-line interface."""

import json
from unittest.mock import patch

import pytest

from payrollmap import cli


@pytest.fixture
def patched_service(service):
    """Make the CLI build our temporary-root service."""
    with patch.object(cli, "ReconciliationService", return_value=service):
        yield service


class TestCli:
    """Test the payrollmap CLI commands."""

    def test_no_command_exits(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main([])
        assert exc_info.value.code == 1

    def test_structure(self, patched_service, capsys):
        cli.main(["structure"])

        data = json.loads(capsys.readouterr().out)
        assert data["structure"][0]["mainHeader"] == "Name"

    def test_process(self, patched_service, tmp_path, build_workbook, read_workbook, capsys):
        source = tmp_path / "march.xlsx"
        source.write_bytes(
            build_workbook({"Payroll History": [["Employee", "Bonus"], ["Alice", 10]]})
        )
        target = tmp_path / "out.xlsx"

        cli.main(["process", str(source), "--output", str(target)])

        data = json.loads(capsys.readouterr().out)
        assert data["summary"]["fallbackMatches"] == 1
        assert data["new_columns"] == ["Bonus"]
        assert data["output"] == str(target)
        assert read_workbook(target.read_bytes())["Payroll History"][1] == [
            "Alice",
            None,
            None,
            10,
        ]

    def test_add_column(self, patched_service, capsys):
        cli.main(["add-column", "Overtime"])

        data = json.loads(capsys.readouterr().out)
        assert data["structure"][-1]["mainHeader"] == "Overtime"

    def test_add_duplicate_column_fails(self, patched_service, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.main(["add-column", "Salary"])

        assert exc_info.value.code == 1
        assert "already exists" in capsys.readouterr().err

    def test_serve(self):
        with patch.object(cli.uvicorn, "run") as run:
            cli.main(["serve", "--port", "9001"])

        run.assert_called_once()
        assert run.call_args.args[0] == "payrollmap.api:create_app"
        assert run.call_args.kwargs["port"] == 9001
        assert run.call_args.kwargs["factory"] is True

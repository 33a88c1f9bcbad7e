"""Tests for the command line entry point."""

from unittest.mock import patch

import pytest

from weather_risk import cli


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main([])
    assert exc.value.code == 1
    assert "weather-risk" in capsys.readouterr().out


def test_load_prints_summaries(write_gldas, wind_rows, tmp_path, capsys):
    files = {"wind_speed": write_gldas("wind_speed", wind_rows), "humidity": tmp_path / "x.csv"}

    with patch.object(cli, "VARIABLE_FILES", files):
        cli.main(["load"])

    out = capsys.readouterr().out
    assert "wind_speed" in out
    assert "3 days" in out
    assert "humidity" in out and "FAILED" in out


def test_analyze(write_gldas, temp_rows, capsys):
    files = {"max_temp": write_gldas("max_temp", temp_rows)}

    with patch.object(cli, "VARIABLE_FILES", files):
        cli.main([
            "analyze", "--variable", "max_temp", "--month", "3", "--day", "15",
            "--threshold", "14.5",
        ])

    out = capsys.readouterr().out
    assert "probability: 50.00%" in out
    assert "years:       10" in out
    assert "increased" in out


def test_analyze_day_range(write_gldas, rain_rows, capsys):
    files = {"precipitation": write_gldas("precipitation", rain_rows)}

    with patch.object(cli, "VARIABLE_FILES", files):
        cli.main([
            "analyze", "--variable", "precipitation", "--month", "1", "--day", "1",
            "--end-month", "1", "--end-day", "31", "--threshold", "1",
        ])

    out = capsys.readouterr().out
    assert "01-01 to 01-31" in out
    assert "years:       1" in out
    assert "mean:        3.24 mm" in out


def test_analyze_end_month_requires_end_day():
    with pytest.raises(SystemExit) as exc:
        cli.main([
            "analyze", "--variable", "wind_speed", "--month", "12", "--day", "31",
            "--end-month", "1", "--threshold", "5",
        ])
    assert exc.value.code == 2


def test_analyze_missing_file(tmp_path):
    files = {"wind_speed": tmp_path / "missing.csv"}

    with patch.object(cli, "VARIABLE_FILES", files):
        with pytest.raises(SystemExit) as exc:
            cli.main([
                "analyze", "--variable", "wind_speed", "--month", "1", "--day", "5",
                "--threshold", "5",
            ])
    assert exc.value.code == 1


@patch("uvicorn.run")
def test_serve_uses_port(mock_run, monkeypatch):
    monkeypatch.setenv("PORT", "9123")

    cli.main(["serve"])

    assert mock_run.call_args.kwargs["port"] == 9123
    assert mock_run.call_args.kwargs["factory"] is True

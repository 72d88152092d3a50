"""Tests for the sheet-webhook CLI."""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import httpx
from click.testing import CliRunner

from src.cli import cli


def test_invoke_acknowledges_payload() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["invoke", '{"type":"edit","sheet":"Sheet1"}'])
    assert result.exit_code == 0
    output = json.loads(result.output)
    assert output["statusCode"] == 200
    body = json.loads(output["body"])
    assert body["receivedData"]["sheet"] == "Sheet1"


def test_invoke_wrong_method_exits_nonzero() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["invoke", "--method", "GET", "{}"])
    assert result.exit_code == 1
    assert json.loads(result.output)["statusCode"] == 405


def test_invoke_malformed_body_exits_nonzero() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["invoke", "not json"])
    assert result.exit_code == 1
    assert json.loads(result.output)["statusCode"] == 500


def test_invoke_rejects_bad_header() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["invoke", "--header", "nocolon", "{}"])
    assert result.exit_code == 2


def test_send_posts_sample_payload() -> None:
    fake = MagicMock(status_code=200, text='{"success":true}')
    with patch("src.cli.httpx.post", return_value=fake) as mock_post:
        runner = CliRunner()
        result = runner.invoke(cli, [
            "send", "http://localhost:8888/webhook",
            "--sheet", "Orders", "--user", "ana", "--timestamp", "2024-01-01T00:00:00Z",
        ])
    assert result.exit_code == 0
    assert "HTTP 200" in result.output
    kwargs = mock_post.call_args.kwargs
    assert kwargs["json"] == {
        "type": "edit", "sheet": "Orders", "timestamp": "2024-01-01T00:00:00Z", "user": "ana",
    }


def test_send_reports_unreachable_endpoint() -> None:
    with patch("src.cli.httpx.post", side_effect=httpx.ConnectError("refused")):
        runner = CliRunner()
        result = runner.invoke(cli, ["send", "http://localhost:1/webhook"])
    assert result.exit_code == 1
    assert "unavailable" in result.output


def test_serve_runs_uvicorn_factory() -> None:
    with patch("uvicorn.run") as mock_run:
        runner = CliRunner()
        result = runner.invoke(cli, ["serve", "--port", "9000"])
    assert result.exit_code == 0
    mock_run.assert_called_once_with(
        "src.server.app:create_app_from_env", host="127.0.0.1", port=9000, factory=True,
    )

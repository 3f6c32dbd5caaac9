"""
Unit tests for nspass.cli - Command-Line Interface.

Parsing is tested directly; command execution runs against a mock backend
by swapping the HttpClient factory.
"""

import json
from pathlib import Path

import httpx
import pytest

import nspass.cli as cli
from nspass.cli import build_parser, main
from nspass.client.config import SERVICE_TIMEOUTS
from nspass.client.http import HttpClient
from tests.conftest import RecordingTransport, ok_body


def test_parser_builds_successfully():
    """Test parser can be built without errors."""
    assert build_parser() is not None


def test_parser_list_command():
    args = build_parser().parse_args(["routes", "list", "--page", "2", "--page-size", "20"])
    assert args.resource == "routes"
    assert args.action == "list"
    assert args.page == 2
    assert args.page_size == 20


def test_parser_update_command_parses_json_and_id():
    args = build_parser().parse_args(["forward-rules", "update", "7", "--data", '{"name": "web"}'])
    assert args.id == 7
    assert args.data == {"name": "web"}


def test_parser_batch_delete_ids():
    args = build_parser().parse_args(["users", "batch-delete", "1", "2", "abc"])
    assert args.ids == [1, 2, "abc"]


def test_parser_rejects_invalid_json():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["egress", "create", "--data", "{oops"])


def test_parser_create_requires_data():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["egress", "create"])


def test_parser_unknown_resource():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["dns", "list"])


def test_main_without_command_prints_help(capsys):
    with pytest.raises(SystemExit) as exc:
        main([])
    assert exc.value.code == 1


def test_config_show(monkeypatch, capsys):
    monkeypatch.setenv("NSPASS_API_BASE_URL", "https://panel.example.com/")
    with pytest.raises(SystemExit) as exc:
        main(["config", "show"])
    assert exc.value.code == 0
    shown = json.loads(capsys.readouterr().out)
    assert shown["base_url"] == "https://panel.example.com"
    assert shown["default_page_size"] == 10


def test_base_url_flag_overrides_env(monkeypatch, capsys):
    monkeypatch.setenv("NSPASS_API_BASE_URL", "https://env.example.com")
    with pytest.raises(SystemExit):
        main(["--base-url", "https://flag.example.com/", "config", "show"])
    assert json.loads(capsys.readouterr().out)["base_url"] == "https://flag.example.com"


@pytest.fixture
def cli_backend(monkeypatch, tmp_path: Path) -> RecordingTransport:
    """Route CLI traffic to a mock backend and an empty session file."""
    backend = RecordingTransport()
    monkeypatch.setenv("NSPASS_SESSION_FILE", str(tmp_path / "session.json"))
    monkeypatch.setattr(
        cli,
        "HttpClient",
        lambda config, session, **kwargs: HttpClient(
            config, session, transport=backend.transport, **kwargs
        ),
    )
    return backend


def test_list_command(cli_backend, capsys):
    cli_backend.respond_with(
        lambda r: httpx.Response(
            200, json=ok_body([{"id": 1}], pagination={"page": 1, "pageSize": 10, "total": 1})
        )
    )
    with pytest.raises(SystemExit) as exc:
        main(["egress", "list"])

    assert exc.value.code == 0
    output = json.loads(capsys.readouterr().out)
    assert output["data"] == [{"id": 1}]
    assert output["error"] is None
    assert cli_backend.calls() == [("GET", "/v1/egress")]


def test_failed_delete_exits_non_zero(cli_backend, capsys):
    cli_backend.respond_with(lambda r: httpx.Response(500, text="boom"))
    with pytest.raises(SystemExit) as exc:
        main(["users", "delete", "3"])

    assert exc.value.code == 1
    captured = capsys.readouterr()
    assert json.loads(captured.out)["success"] is False
    assert "[error]" in captured.err


def test_batch_delete_unsupported(cli_backend, capsys):
    with pytest.raises(SystemExit) as exc:
        main(["egress", "batch-delete", "1", "2"])

    assert exc.value.code == 1
    output = json.loads(capsys.readouterr().out)
    assert output["failure_count"] == 2
    assert cli_backend.requests == []


def test_cli_module_importable():
    """Test CLI modules can be imported."""
    import nspass.cli

    assert nspass.cli is not None


def test_service_timeout_applied_to_client(monkeypatch, tmp_path: Path, capsys):
    backend = RecordingTransport()
    backend.respond_with(lambda r: httpx.Response(200, json=ok_body([])))
    clients: list[HttpClient] = []

    def make_client(config, session, **kwargs):
        client = HttpClient(config, session, transport=backend.transport, **kwargs)
        clients.append(client)
        return client

    monkeypatch.setenv("NSPASS_SESSION_FILE", str(tmp_path / "session.json"))
    monkeypatch.setenv("NSPASS_REQUEST_TIMEOUT_SECONDS", "30")
    monkeypatch.setitem(SERVICE_TIMEOUTS, "users", 12.5)
    monkeypatch.setattr(cli, "HttpClient", make_client)

    with pytest.raises(SystemExit):
        main(["users", "list"])
    with pytest.raises(SystemExit):
        main(["routes", "list"])

    assert [c.timeout_seconds for c in clients] == [12.5, 30.0]

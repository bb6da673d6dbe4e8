"""Tests for the command line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from httpx import ASGITransport

from taskflow import cli
from taskflow.client import TaskflowClient
from taskflow.domain.models import User
from taskflow.server.auth import AuthConfig, create_access_token


@pytest.fixture
def token(app, settings) -> str:
    user = app.state.container.users.upsert(User(name="Cli", email="cli@example.com", password_hash="x"))
    return create_access_token(AuthConfig(settings), user.id)


@pytest.fixture
def wired(app, monkeypatch: pytest.MonkeyPatch) -> None:
    """Route the CLI's REST client to the in-process app."""

    def _client(base_url: str, token: str | None = None) -> TaskflowClient:
        return TaskflowClient(base_url, token=token, transport=ASGITransport(app=app))

    monkeypatch.setattr(cli, "TaskflowClient", _client)


def _run(capsys: pytest.CaptureFixture, tmp_path: Path, *argv: str) -> tuple[int, str]:
    code = cli.main(["--data-dir", str(tmp_path), "--log-level", "WARNING", *argv])
    return code, capsys.readouterr().out


def test_no_command_prints_help(capsys: pytest.CaptureFixture) -> None:
    assert cli.main([]) == 1
    assert "usage" in capsys.readouterr().out.lower()


def test_parser_accepts_move() -> None:
    args = cli.build_parser().parse_args(["move", "task-1", "list-2"])
    assert (args.task_id, args.over_id) == ("task-1", "list-2")
    assert args.func is cli._move


def test_board_commands_need_token(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
    monkeypatch.delenv("TASKFLOW_TOKEN", raising=False)
    assert cli.main(["--data-dir", str(tmp_path), "show"]) == 1
    assert "Not logged in" in capsys.readouterr().err


def test_add_list_task_move_and_show(tmp_path: Path, wired, token: str, capsys) -> None:
    code, out = _run(capsys, tmp_path, "--token", token, "add-list", "Inbox")
    assert code == 0
    inbox = json.loads(out)["id"]
    code, out = _run(capsys, tmp_path, "--token", token, "add-list", "Done")
    done = json.loads(out)["id"]

    code, out = _run(capsys, tmp_path, "--token", token, "add-task", inbox, "Write report", "--priority", "high")
    assert code == 0
    task = json.loads(out)
    assert task["priority"] == "high"

    code, out = _run(capsys, tmp_path, "--token", token, "move", task["id"], done)
    assert code == 0
    assert json.loads(out)["target_list_id"] == done

    code, out = _run(capsys, tmp_path, "--token", token, "show", "--json")
    board = {tl["title"]: [t["title"] for t in tl["tasks"]] for tl in json.loads(out)}
    assert board == {"Inbox": [], "Done": ["Write report"]}


def test_move_onto_itself_is_reported(tmp_path: Path, wired, token: str, capsys) -> None:
    _, out = _run(capsys, tmp_path, "--token", token, "add-list", "Inbox")
    inbox = json.loads(out)["id"]
    _, out = _run(capsys, tmp_path, "--token", token, "add-task", inbox, "Solo")
    task_id = json.loads(out)["id"]
    code, out = _run(capsys, tmp_path, "--token", token, "move", task_id, task_id)
    assert code == 0
    assert "Nothing to move" in out


def test_delete_missing_task_fails(tmp_path: Path, wired, token: str, capsys) -> None:
    code, _ = _run(capsys, tmp_path, "--token", token, "delete-task", "missing")
    assert code == 1


def test_update_task_and_toggle(tmp_path: Path, wired, token: str, capsys) -> None:
    _, out = _run(capsys, tmp_path, "--token", token, "add-list", "Inbox")
    inbox = json.loads(out)["id"]
    _, out = _run(capsys, tmp_path, "--token", token, "add-task", inbox, "Draft")
    task_id = json.loads(out)["id"]

    code, out = _run(
        capsys, tmp_path, "--token", token,
        "update-task", task_id, "--title", "Final", "--priority", "low", "--deadline", "2026-03-01",
    )
    assert code == 0
    updated = json.loads(out)
    assert (updated["title"], updated["priority"], updated["deadline"]) == ("Final", "low", "2026-03-01")
    assert updated["completed"] is False

    code, out = _run(capsys, tmp_path, "--token", token, "toggle", task_id)
    assert code == 0
    assert json.loads(out)["completed"] is True
    code, out = _run(capsys, tmp_path, "--token", token, "toggle", task_id)
    assert json.loads(out)["completed"] is False


def test_update_task_without_fields_fails(tmp_path: Path, capsys) -> None:
    assert cli.main(["--data-dir", str(tmp_path), "--token", "t", "update-task", "task-1"]) == 1
    assert "Nothing to update" in capsys.readouterr().err


def test_toggle_unknown_task_fails(tmp_path: Path, wired, token: str, capsys) -> None:
    code, _ = _run(capsys, tmp_path, "--token", token, "toggle", "missing")
    assert code == 1


def test_move_list_reorders_board(tmp_path: Path, wired, token: str, capsys) -> None:
    _, out = _run(capsys, tmp_path, "--token", token, "add-list", "Inbox")
    inbox = json.loads(out)["id"]
    _, out = _run(capsys, tmp_path, "--token", token, "add-list", "Done")
    done = json.loads(out)["id"]

    code, out = _run(capsys, tmp_path, "--token", token, "move-list", done, inbox)
    assert code == 0
    assert [(tl["id"], tl["order"]) for tl in json.loads(out)] == [(done, 0), (inbox, 1)]

    _, out = _run(capsys, tmp_path, "--token", token, "show", "--json")
    assert [tl["title"] for tl in json.loads(out)] == ["Done", "Inbox"]

    code, out = _run(capsys, tmp_path, "--token", token, "move-list", done, done)
    assert code == 0
    assert "Nothing to move" in out


def test_server_runs_uvicorn(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    uvicorn = pytest.importorskip("uvicorn")
    calls = []
    monkeypatch.setattr(uvicorn, "run", lambda app, host, port: calls.append((app, host, port)))
    assert cli.main(["--data-dir", str(tmp_path), "server", "--port", "9001"]) == 0
    assert calls and calls[0][1:] == ("127.0.0.1", 9001)
    assert calls[0][0].state.settings.data_dir == tmp_path.resolve()

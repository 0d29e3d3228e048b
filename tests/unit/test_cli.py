"""
Unit tests for the command line host.
"""

import io
import json
import re

import pytest

from chatstore import cli
from chatstore.cli import build_parser, main


@pytest.fixture
def base_args(tmp_path) -> list[str]:
    return ["--data-dir", str(tmp_path / "data"), "--log-dir", str(tmp_path / "logs")]


def _response(output: str) -> dict:
    """Each run prints exactly one JSON response."""
    return json.loads(output)


@pytest.mark.unit
class TestCli:
    @pytest.mark.asyncio
    async def test_save_get_list_delete(self, base_args, capsys):
        assert await main(base_args + ["save", "c1.json", '{"messages": [1, 2, 3]}']) == 0
        assert _response(capsys.readouterr().out) == {"success": True, "data": None}

        assert await main(base_args + ["get", "c1.json"]) == 0
        assert _response(capsys.readouterr().out)["data"] == {
            "filename": "c1.json",
            "content": {"messages": [1, 2, 3]},
        }

        assert await main(base_args + ["list"]) == 0
        assert _response(capsys.readouterr().out)["data"] == ["c1.json"]

        assert await main(base_args + ["delete", "c1.json"]) == 0
        capsys.readouterr()

        assert await main(base_args + ["get", "c1.json"]) == 1
        response = _response(capsys.readouterr().out)
        assert response["success"] is False
        assert response["error"].startswith("Failed to read conversation")

    @pytest.mark.asyncio
    async def test_save_from_stdin_and_clear(self, base_args, capsys, monkeypatch):
        monkeypatch.setattr("sys.stdin", io.StringIO('{"title": "piped"}'))

        assert await main(base_args + ["save", "piped.json", "-"]) == 0
        assert await main(base_args + ["clear"]) == 0
        capsys.readouterr()

        assert await main(base_args + ["list"]) == 0
        assert _response(capsys.readouterr().out)["data"] == []

    @pytest.mark.asyncio
    async def test_save_invalid_json(self, base_args, capsys):
        assert await main(base_args + ["save", "c1.json", "{oops"]) == 1

        response = _response(capsys.readouterr().out)
        assert response["error"].startswith("Invalid JSON content")

    @pytest.mark.asyncio
    async def test_new_name(self, capsys):
        assert await main(["new-name"]) == 0

        assert re.fullmatch(
            r"\d{4}-\d{2}-\d{2}_\d{2}-\d{2}-\d{2}\.json\n", capsys.readouterr().out
        )

    @pytest.mark.asyncio
    async def test_unusable_storage(self, tmp_path, capsys):
        blocked = tmp_path / "data"
        blocked.mkdir()
        (blocked / "chat_conversations").write_text("")

        code = await main(
            ["--data-dir", str(blocked), "--log-dir", str(tmp_path / "logs"), "list"]
        )

        assert code == 1
        assert capsys.readouterr().out == ""

    def test_parser_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_run_logs_to_requested_directory(self, tmp_path, monkeypatch):
        configured = []

        async def fake_main(argv=None):
            return 0

        monkeypatch.setattr(cli, "configure_logging", configured.append)
        monkeypatch.setattr(cli, "main", fake_main)
        monkeypatch.setattr(
            "sys.argv", ["chatstore", "--log-dir", str(tmp_path / "cli_logs"), "list"]
        )

        with pytest.raises(SystemExit) as exc_info:
            cli.run()

        assert exc_info.value.code == 0
        assert configured == [str(tmp_path / "cli_logs")]

    def test_run_uses_environment_log_directory(self, tmp_path, monkeypatch):
        configured = []

        async def fake_main(argv=None):
            return 0

        monkeypatch.setattr(cli, "configure_logging", configured.append)
        monkeypatch.setattr(cli, "main", fake_main)
        monkeypatch.setenv("CHAT_LOG_DIR", str(tmp_path / "env_logs"))
        monkeypatch.setattr("sys.argv", ["chatstore", "list"])

        with pytest.raises(SystemExit):
            cli.run()

        assert configured == [str(tmp_path / "env_logs")]

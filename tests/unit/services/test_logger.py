"""
Unit tests for AsyncLoggingService.
"""

import os

import pytest

from chatstore.context import Context
from chatstore.services.logger import AsyncLoggingService


@pytest.mark.unit
class TestAsyncLoggingService:
    """Log file naming, formatting and flushing."""

    def test_timestamped_log_file_name(self, tmp_path):
        service = AsyncLoggingService(Context(), log_dir=str(tmp_path))

        assert service.log_file.startswith("app_")
        assert service.log_file.endswith(".log")

    def test_plain_log_file_name(self, tmp_path):
        service = AsyncLoggingService(Context(), log_dir=str(tmp_path), use_timestamp=False)

        assert service.log_file == "app.log"
        assert service.log_path == tmp_path / "app.log"

    def test_absolute_log_file_overrides_dir(self, tmp_path):
        target = tmp_path / "elsewhere" / "run.log"

        service = AsyncLoggingService(Context(), log_dir="logs", log_file=str(target))

        assert service.log_path == target
        assert service.log_dir == target.parent

    @pytest.mark.asyncio
    async def test_messages_are_written_on_close(self, tmp_path):
        service = AsyncLoggingService(
            Context(), log_dir=str(tmp_path / "logs"), log_file="test.log", console_output=False
        )
        await service.on_start(None)

        await service.debug("debug line")
        await service.info("info line")
        await service.warning("warning line")
        await service.error("error line")
        await service.critical("critical line")
        await service.on_close()

        with open(service.log_path, encoding="utf-8") as f:
            lines = f.read().splitlines()

        assert "AsyncLoggingService initialized" in lines[0]
        assert lines[1].endswith("[DEBUG] debug line")
        assert lines[2].endswith("[INFO] info line")
        assert lines[3].endswith("[WARNING] warning line")
        assert lines[4].endswith("[ERROR] error line")
        assert lines[5].endswith("[CRITICAL] critical line")
        assert lines[1].startswith("[")

    @pytest.mark.asyncio
    async def test_console_output(self, tmp_path, capsys):
        service = AsyncLoggingService(Context(), log_dir=str(tmp_path), use_timestamp=False)
        await service.on_start(None)

        await service.info("to the console")
        await service.on_close()

        assert "[INFO] to the console" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_write_failure_goes_to_stderr(self, tmp_path, capsys):
        service = AsyncLoggingService(
            Context(), log_dir=str(tmp_path), use_timestamp=False, console_output=False
        )
        await service.on_start(None)
        # a directory where the log file should be
        service.log_path = tmp_path / "a_directory"
        os.mkdir(service.log_path)

        await service.info("lost line")
        await service.on_close()

        assert "Failed to write to log file" in capsys.readouterr().err

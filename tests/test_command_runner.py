"""
Tests for CommandRunner.
"""

import shutil

import pytest

from mapvault.core.exceptions import CommandTimeoutError, CommandUnavailableError
from mapvault.services.platform.command_runner import CommandResult, CommandRunner


class TestCommandResult:
    def test_output_joins_streams(self):
        result = CommandResult(args=["net"], returncode=2, stdout=" first \n", stderr="second\n")
        assert result.output == "first\nsecond"
        assert not result.ok


class TestCommandRunner:
    @pytest.mark.asyncio
    async def test_missing_command(self):
        with pytest.raises(CommandUnavailableError):
            await CommandRunner().run(["mapvault-no-such-command-xyz"])

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("sleep") is None, reason="needs sleep")
    async def test_timeout_kills_process(self):
        with pytest.raises(CommandTimeoutError):
            await CommandRunner(timeout_seconds=0.2).run(["sleep", "5"])

    @pytest.mark.asyncio
    @pytest.mark.skipif(shutil.which("echo") is None, reason="needs echo")
    async def test_captures_stdout(self):
        result = await CommandRunner().run(["echo", "hello"])
        assert result.ok
        assert result.stdout.strip() == "hello"

    def test_password_is_redacted(self):
        redacted = CommandRunner._redact(
            ["net", "use", "Z:", "\\\\srv01\\data", "s3cret", "/user:jdoe", "/persistent:yes"]
        )
        assert "s3cret" not in redacted
        assert "/user:jdoe" in redacted

    @pytest.mark.parametrize("password", ["/Secret1", "\\\\pw", "-p4ss"])
    def test_password_redacted_whatever_it_looks_like(self, password):
        redacted = CommandRunner._redact(["net", "use", "\\\\srv01\\data", password, "/user:jdoe"])
        assert password not in redacted.split()
        assert redacted.split()[3] == "********"

    def test_commands_without_user_are_untouched(self):
        args = ["net", "use", "Z:", "\\\\srv01\\data", "/persistent:yes"]
        assert CommandRunner._redact(args) == " ".join(args)

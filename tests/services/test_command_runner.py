import sys

import pytest

from hostinit.errors import InitializerError
from hostinit.services.command_runner import CommandRunner


class DummyLogger:
    def __init__(self):
        self.messages = []

    def debug(self, message, *args, **_kwargs):
        self.messages.append(message % args if args else message)

    def warning(self, message, *args, **_kwargs):
        self.messages.append(message % args if args else message)


def test_command_runner_raises_with_stderr():
    runner = CommandRunner(logger=DummyLogger())

    with pytest.raises(InitializerError, match="boom"):
        runner.run(
            [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(1)"],
            check=True,
            capture_output=True,
        )


def test_command_runner_returns_when_check_disabled():
    runner = CommandRunner(logger=DummyLogger())

    result = runner.run(
        [sys.executable, "-c", "import sys; sys.exit(1)"],
        check=False,
        capture_output=True,
    )

    assert result.returncode == 1


def test_command_runner_decodes_output_to_text():
    runner = CommandRunner(logger=DummyLogger())

    result = runner.run([sys.executable, "-c", "print('hello')"], capture_output=True)

    assert result.stdout.strip() == "hello"


def test_command_runner_feeds_stdin_without_logging_it():
    logger = DummyLogger()
    runner = CommandRunner(logger=logger)

    result = runner.run(
        [sys.executable, "-c", "import sys; sys.stdout.write(str(len(sys.stdin.read())))"],
        capture_output=True,
        input_data=b"root:Secure@Pass123\n",
    )

    assert result.stdout == "20"
    assert all("Secure@Pass123" not in message for message in logger.messages)


def test_command_runner_accepts_only_the_arguments_callers_use():
    runner = CommandRunner(logger=DummyLogger())

    with pytest.raises(TypeError):
        runner.run([sys.executable, "-c", "pass"], retry_count=1)
    with pytest.raises(TypeError):
        runner.run([sys.executable, "-c", "pass"], timeout=1)


def test_command_runner_reports_missing_binary():
    runner = CommandRunner(logger=DummyLogger())

    with pytest.raises(InitializerError, match="Required command not found"):
        runner.run(["hostinit-no-such-binary"])


def test_available_checks_path(monkeypatch):
    runner = CommandRunner(logger=DummyLogger())
    monkeypatch.setattr("hostinit.services.command_runner.shutil.which", lambda name: None)

    assert runner.available("sysctl") is False

from click.testing import CliRunner

import hostinit.cli as cli_module
from hostinit import __version__


def fake_initializer(captured, exit_code=0):
    class FakeInitializer:
        def __init__(self, **kwargs):
            captured.update(kwargs)

        def run(self):
            return exit_code

    return FakeInitializer


def test_cli_uses_config_and_allows_cli_override(tmp_path, monkeypatch):
    config_file = tmp_path / ".hostinit.yml"
    config_file.write_text(
        "skip_update: false\n"
        "skip_packages: true\n"
        "backup_dir: /srv/backups\n"
        "password_attempts: 5\n",
        encoding="utf-8",
    )

    captured = {}
    monkeypatch.setattr(cli_module, "SystemInitializer", fake_initializer(captured))

    runner = CliRunner()
    result = runner.invoke(cli_module.main, ["--config", str(config_file), "--skip-update"])

    assert result.exit_code == 0
    assert captured["skip_update"] is True
    assert captured["skip_packages"] is True
    assert captured["verbose"] is False
    assert captured["password_attempts"] == 5
    assert captured["min_password_length"] == 12
    assert captured["paths"].backup_dir == "/srv/backups"
    assert captured["paths"].hosts_file == "/etc/hosts"


def test_cli_uses_default_config_file_when_present(tmp_path, monkeypatch):
    default_config = tmp_path / ".hostinit.yml"
    default_config.write_text("verbose: true\nlog_file: /tmp/init.log\n", encoding="utf-8")

    captured = {}
    monkeypatch.setattr(cli_module, "SystemInitializer", fake_initializer(captured))
    monkeypatch.chdir(tmp_path)

    runner = CliRunner()
    result = runner.invoke(cli_module.main, [])

    assert result.exit_code == 0
    assert captured["verbose"] is True
    assert captured["paths"].log_file == "/tmp/init.log"


def test_cli_propagates_run_exit_code(tmp_path, monkeypatch):
    monkeypatch.setattr(cli_module, "SystemInitializer", fake_initializer({}, exit_code=1))
    monkeypatch.chdir(tmp_path)

    result = CliRunner().invoke(cli_module.main, [])

    assert result.exit_code == 1


def test_cli_reports_invalid_config(tmp_path, monkeypatch):
    config_file = tmp_path / "bad.yml"
    config_file.write_text("unknown_key: 1\n", encoding="utf-8")
    monkeypatch.setattr(cli_module, "SystemInitializer", fake_initializer({}))

    result = CliRunner().invoke(cli_module.main, ["--config", str(config_file)])

    assert result.exit_code != 0
    assert "Unknown configuration keys" in result.output


def test_cli_help_options_exit_cleanly():
    runner = CliRunner()

    for flag in ("--help", "-h"):
        result = runner.invoke(cli_module.main, [flag])
        assert result.exit_code == 0
        assert "--skip-update" in result.output
        assert "--skip-packages" in result.output


def test_cli_version_options_print_version():
    runner = CliRunner()

    for flag in ("--version", "-v"):
        result = runner.invoke(cli_module.main, [flag])
        assert result.exit_code == 0
        assert __version__ in result.output


def test_cli_rejects_unknown_flag(monkeypatch):
    monkeypatch.setattr(cli_module, "SystemInitializer", fake_initializer({}))

    result = CliRunner().invoke(cli_module.main, ["--force"])

    assert result.exit_code != 0
    assert "No such option" in result.output

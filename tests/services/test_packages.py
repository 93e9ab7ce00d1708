import subprocess

import pytest

from hostinit.errors import MutationError
from hostinit.models import STEP_SKIPPED, STEP_SUCCESS
from hostinit.services.packages import PackageService


@pytest.fixture
def package_service(fake_runner, dummy_logger):
    return PackageService(fake_runner, dummy_logger)


def test_apt_update_runs_refresh_upgrade_and_autoremove(package_service, fake_runner):
    result = package_service.update("apt")

    assert result.status == STEP_SUCCESS
    assert fake_runner.commands() == [
        ["apt-get", "update", "-qq"],
        ["apt-get", "upgrade", "-y", "-qq"],
        ["apt-get", "autoremove", "-y", "-qq"],
    ]


def test_skip_packages_drops_autoremove(package_service, fake_runner):
    result = package_service.update("yum", skip_packages=True)

    assert "cleanup skipped" in result.message
    assert [cmd[1] for cmd in fake_runner.commands()] == ["check-update", "update"]


def test_skip_update_runs_nothing(package_service, fake_runner):
    result = package_service.update("apt", skip_update=True)

    assert result.status == STEP_SKIPPED
    assert fake_runner.calls == []


def test_yum_check_update_exit_code_is_tolerated(package_service, fake_runner, monkeypatch):
    checks = []

    def run(cmd, check=True, **_kwargs):
        checks.append((cmd[1], check))
        returncode = 100 if cmd[1] == "check-update" else 0
        return subprocess.CompletedProcess(cmd, returncode, stdout="", stderr="")

    monkeypatch.setattr(fake_runner, "run", run)

    assert package_service.update("yum").status == STEP_SUCCESS
    assert checks == [("check-update", False), ("update", True), ("autoremove", True)]


def test_failed_command_is_a_mutation_error(package_service, fake_runner):
    fake_runner.returncodes["apt-get"] = 100

    with pytest.raises(MutationError, match="apt-get update -qq"):
        package_service.update("apt")


def test_unknown_package_manager_is_rejected(package_service):
    with pytest.raises(MutationError, match="Unsupported package manager: pacman"):
        package_service.plan("pacman", skip_packages=False)


def test_apt_runs_noninteractive(package_service, fake_runner, monkeypatch):
    seen = []

    def run(cmd, check=True, env=None, **_kwargs):
        seen.append(env["DEBIAN_FRONTEND"])

    monkeypatch.setattr(fake_runner, "run", run)

    package_service.update("apt")

    assert seen == ["noninteractive"] * 3

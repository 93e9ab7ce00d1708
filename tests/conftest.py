import subprocess

import pytest

from hostinit.errors import InitializerError
from hostinit.models import HostPaths


class FakeRunner:
    """Records commands instead of executing them."""

    def __init__(self, available=(), returncodes=None, outputs=None):
        self.available_commands = set(available)
        self.returncodes = returncodes or {}
        self.outputs = outputs or {}
        self.calls = []

    def available(self, name):
        return name in self.available_commands

    def run(self, cmd, check=True, capture_output=False, input_data=None, **kwargs):
        self.calls.append({"cmd": list(cmd), "input_data": input_data, "check": check})
        returncode = self.returncodes.get(cmd[0], 0)
        stdout, stderr = self.outputs.get(cmd[0], ("", ""))
        if returncode != 0 and check:
            raise InitializerError(f"Command failed ({returncode}): {' '.join(cmd)}")
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr=stderr)

    def commands(self):
        return [call["cmd"] for call in self.calls]


class DummyLogger:
    def __init__(self):
        self.records = []

    def _record(self, level, message, *args):
        self.records.append((level, message % args if args else message))

    def debug(self, message, *args, **_kwargs):
        self._record("DEBUG", message, *args)

    def info(self, message, *args, **_kwargs):
        self._record("INFO", message, *args)

    def warning(self, message, *args, **_kwargs):
        self._record("WARN", message, *args)

    def error(self, message, *args, **_kwargs):
        self._record("ERROR", message, *args)


class DummyConsole:
    def __init__(self):
        self.printed = []

    def print(self, *args, **_kwargs):
        self.printed.append(" ".join(str(arg) for arg in args))


HOSTS_CONTENT = (
    "127.0.0.1\tlocalhost\n"
    "# The following lines are desirable for IPv6 capable hosts\n"
    "::1     ip6-localhost ip6-loopback\n"
    "\n"
    "127.0.1.1\told-name\n"
    "10.0.0.5 db.internal db\n"
)


@pytest.fixture
def host_paths(tmp_path):
    etc = tmp_path / "etc"
    (etc / "sysctl.d").mkdir(parents=True)
    (etc / "security").mkdir()
    (tmp_path / "proc").mkdir()
    (tmp_path / "var" / "log").mkdir(parents=True)

    (etc / "hosts").write_text(HOSTS_CONTENT, encoding="utf-8")
    (etc / "hostname").write_text("old-name\n", encoding="utf-8")
    (etc / "shadow").write_text("root:$6$oldhash:19000:0:99999:7:::\ndaemon:*:19000:0:99999:7:::\n", encoding="utf-8")
    (etc / "sysctl.conf").write_text("# system defaults\n", encoding="utf-8")
    (etc / "security" / "limits.conf").write_text("# /etc/security/limits.conf\n", encoding="utf-8")
    (etc / "os-release").write_text('NAME="Ubuntu"\nID=ubuntu\nVERSION_ID="22.04"\n', encoding="utf-8")
    (tmp_path / "proc" / "1-cgroup").write_text("0::/init.scope\n", encoding="utf-8")

    return HostPaths(
        hosts_file=str(etc / "hosts"),
        hostname_file=str(etc / "hostname"),
        shadow_file=str(etc / "shadow"),
        sysctl_conf_file=str(etc / "sysctl.conf"),
        sysctl_file=str(etc / "sysctl.d" / "99-system-initializer.conf"),
        limits_file=str(etc / "security" / "limits.conf"),
        os_release_file=str(etc / "os-release"),
        dockerenv_file=str(tmp_path / ".dockerenv"),
        init_cgroup_file=str(tmp_path / "proc" / "1-cgroup"),
        log_file=str(tmp_path / "var" / "log" / "system-initializer.log"),
        report_file=str(tmp_path / "var" / "log" / "system-initializer-report.txt"),
        manifest_file=str(tmp_path / "var" / "log" / "system-initializer-run.json"),
        backup_dir=str(tmp_path / "var" / "backups" / "system-initializer"),
    )


@pytest.fixture
def fake_runner():
    return FakeRunner(available={"hostnamectl", "getent", "sysctl", "chpasswd"})


@pytest.fixture
def dummy_logger():
    return DummyLogger()


@pytest.fixture
def dummy_console():
    return DummyConsole()

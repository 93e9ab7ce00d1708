"""Fixed paths, modes and policy defaults for hostinit."""

LOG_FILE = "/var/log/system-initializer.log"
REPORT_FILE = "/var/log/system-initializer-report.txt"
MANIFEST_FILE = "/var/log/system-initializer-run.json"
BACKUP_DIR = "/var/backups/system-initializer"

HOSTS_FILE = "/etc/hosts"
HOSTNAME_FILE = "/etc/hostname"
SHADOW_FILE = "/etc/shadow"
SYSCTL_CONF_FILE = "/etc/sysctl.conf"
SYSCTL_FILE = "/etc/sysctl.d/99-system-initializer.conf"
LIMITS_FILE = "/etc/security/limits.conf"
OS_RELEASE_FILE = "/etc/os-release"
DOCKERENV_FILE = "/.dockerenv"
INIT_CGROUP_FILE = "/proc/1/cgroup"

PRIVATE_DIR_MODE = 0o700
PRIVATE_FILE_MODE = 0o600
PUBLIC_FILE_MODE = 0o644
NO_ACCESS_MODE = 0o000

MIN_PASSWORD_LENGTH = 12
MAX_HOSTNAME_ATTEMPTS = 3
MAX_PASSWORD_ATTEMPTS = 3
HOSTNAME_MAX_LENGTH = 63
HOSTNAME_PATTERN = r"[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?"

LOOPBACK_ALIAS_ADDRESS = "127.0.1.1"
LOCALHOST_ADDRESS = "127.0.0.1"

NOFILE_LIMIT = 1048576
BBR_MIN_KERNEL = "4.9"

CONTAINER_CGROUP_MARKERS = ("docker", "lxc", "containerd", "kubepods")
RECOMMENDED_COMMANDS = ("grep", "sed", "awk", "hostnamectl", "ip", "free", "df", "getent", "chpasswd", "sysctl")

APT_DISTRIBUTIONS = ("ubuntu", "debian")
YUM_DISTRIBUTIONS = ("centos", "rhel", "fedora", "almalinux", "rocky")

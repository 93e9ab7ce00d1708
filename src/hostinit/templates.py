"""Versioned static templates rendered verbatim to system files."""

from string import Template

from .errors import InitializerError

PROFILE_VERSION = "1.1.0"

KERNEL_PROFILE = Template(
    """# Linux System Initializer - Security & Performance Hardening
# Profile version: $profile_version
# Generated: $generated_at

# --- SECURITY ---

# IP forwarding (required by tunnels and proxies)
net.ipv4.ip_forward = 1

# Do not send redirects
net.ipv4.conf.all.send_redirects = 0
net.ipv4.conf.default.send_redirects = 0
net.ipv6.conf.all.send_redirects = 0
net.ipv6.conf.default.send_redirects = 0

# Bad error message protection
net.ipv4.icmp_ignore_bogus_error_responses = 1

# Reverse path filtering (loose mode for VPN routing)
net.ipv4.conf.all.rp_filter = 2
net.ipv4.conf.default.rp_filter = 2

# Log suspicious packets
net.ipv4.conf.all.log_martians = 1
net.ipv4.conf.default.log_martians = 1

# Reject ICMP redirects
net.ipv4.conf.all.accept_redirects = 0
net.ipv4.conf.default.accept_redirects = 0
net.ipv6.conf.all.accept_redirects = 0
net.ipv6.conf.default.accept_redirects = 0

# Core dumps (restrict)
kernel.core_uses_pid = 1
fs.suid_dumpable = 0

# Magic SysRq key (disable)
kernel.sysrq = 0

# Restrict dmesg
kernel.dmesg_restrict = 1

# --- PERFORMANCE ---

net.core.somaxconn = 65536
net.core.netdev_max_backlog = 5000

# Socket buffers
net.core.rmem_max = 16777216
net.core.wmem_max = 16777216
net.ipv4.tcp_rmem = 4096 87380 16777216
net.ipv4.tcp_wmem = 4096 65536 16777216

# SYN backlog and cookies
net.ipv4.tcp_max_syn_backlog = 8192
net.ipv4.tcp_syncookies = 1

# TIME-WAIT reuse
net.ipv4.tcp_tw_reuse = 1
net.ipv4.tcp_fin_timeout = 15

# Keepalive
net.ipv4.tcp_keepalive_time = 300
net.ipv4.tcp_keepalive_intvl = 10
net.ipv4.tcp_keepalive_probes = 5

# System-wide file descriptor limit
fs.file-max = 2097152

# Memory management
vm.overcommit_memory = 1

# BBR congestion control (if available)
net.core.default_qdisc = fq
net.ipv4.tcp_congestion_control = bbr
"""
)

LIMITS_MARKER = "# Added by Linux System Initializer"

LIMITS_STANZA = Template(
    """
$marker
* soft nofile $nofile
* hard nofile $nofile
root soft nofile $nofile
root hard nofile $nofile
"""
)

REPORT_TEMPLATE = Template(
    """================================================================================
Linux System Initializer - Completion Report
Generated: $generated_at
================================================================================

SYSTEM INFORMATION
------------------
Distribution:    $distribution
Hostname:        $current_hostname
Kernel:          $kernel
Uptime:          $uptime
Container:       $is_container

CHANGES APPLIED
---------------
$changes

BACKUP LOCATIONS
----------------
Log File:        $log_file
Backups:         $backup_dir/
Snapshot:        $snapshot

VERIFICATION STEPS
------------------
1. Verify hostname:
   hostname
   cat $hostname_file
   grep "$loopback_alias" $hosts_file

2. Test DNS resolution:
   getent hosts $hostname

3. Check performance settings:
   sysctl net.core.somaxconn
   ulimit -n

SECURITY NOTES
--------------
- Root password changed (minimum $min_password_length characters with mixed complexity)
- SSH key-based authentication recommended
- Firewall configuration recommended
- Regular security updates advised

Logs:    $log_file
================================================================================
"""
)


def render_template(template: Template, **values) -> str:
    """Fill every named substitution point; a missing one is an error."""
    try:
        return template.substitute(**values)
    except (KeyError, ValueError) as exc:
        raise InitializerError(f"Template rendering failed, missing value: {exc}") from exc

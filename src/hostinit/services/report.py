"""Pre-run system information and the completion report."""

import logging
import os
from datetime import datetime
from typing import Dict

from rich.console import Console
from rich.table import Table

from hostinit.constants import LOOPBACK_ALIAS_ADDRESS, PRIVATE_FILE_MODE
from hostinit.models import RunContext
from hostinit.templates import REPORT_TEMPLATE, render_template


class ReportService:
    def __init__(self, logger: logging.Logger, console: Console):
        self.logger = logger
        self.console = console

    def show_system_info(self, context: RunContext, facts: Dict[str, str]):
        table = Table(title="System Information", show_header=False)
        table.add_column("Property", style="bold")
        table.add_column("Value")
        rows = [
            ("Distribution", context.distribution or "unknown"),
            ("Package Manager", context.package_manager or "unknown"),
            ("Container", str(context.is_container).lower()),
            ("Kernel", facts.get("kernel", "N/A")),
            ("Hostname (current)", facts.get("current_hostname", "N/A")),
            ("Hostname (config)", facts.get("configured_hostname", "N/A")),
            ("IPv4 Address", facts.get("ipv4", "N/A")),
            ("Disk Usage", facts.get("disk_usage", "N/A")),
            ("Memory Usage", facts.get("memory_usage", "N/A")),
        ]
        for label, value in rows:
            table.add_row(label, value)
        self.console.print(table)

    def render(self, context: RunContext, facts: Dict[str, str], min_password_length: int) -> str:
        changes = "\n".join(f"✓ {change}" for change in context.applied_changes) or "(none)"
        return render_template(
            REPORT_TEMPLATE,
            generated_at=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            distribution=context.distribution or "unknown",
            current_hostname=facts.get("current_hostname", "N/A"),
            kernel=facts.get("kernel", "N/A"),
            uptime=facts.get("uptime", "N/A"),
            is_container=str(context.is_container).lower(),
            changes=changes,
            log_file=context.paths.log_file,
            backup_dir=context.paths.backup_dir,
            snapshot=context.snapshot.path if context.snapshot else "N/A",
            hostname_file=context.paths.hostname_file,
            hosts_file=context.paths.hosts_file,
            loopback_alias=LOOPBACK_ALIAS_ADDRESS,
            hostname=context.hostname or "N/A",
            min_password_length=str(min_password_length),
        )

    def write(self, path: str, text: str):
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, PRIVATE_FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as file_obj:
            file_obj.write(text)
        os.chmod(path, PRIVATE_FILE_MODE)
        self.logger.info("Report generated: %s", path)
        self.console.print()
        self.console.print(text, markup=False, highlight=False)

import logging
import os
from dataclasses import replace

import click
from rich.logging import RichHandler

from . import __version__
from .constants import MAX_HOSTNAME_ATTEMPTS, MAX_PASSWORD_ATTEMPTS, MIN_PASSWORD_LENGTH
from .core import SystemInitializer
from .errors import InitializerError
from .models import HostPaths
from .services.config_loader import ConfigLoader

DEFAULT_CONFIG_FILE = ".hostinit.yml"


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


def _build_paths(config_values) -> HostPaths:
    overrides = {
        key: config_values[key]
        for key in ("log_file", "report_file", "manifest_file", "backup_dir")
        if config_values.get(key)
    }
    return replace(HostPaths(), **overrides)


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-v", "--version", prog_name="Linux System Initializer")
@click.option(
    "--skip-update",
    is_flag=True,
    default=None,
    help="Skip APT/YUM package updates.",
)
@click.option(
    "--skip-packages",
    is_flag=True,
    default=None,
    help="Skip autoremove of obsolete packages.",
)
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging.")
def main(skip_update, skip_packages, config, verbose):
    """Take a freshly provisioned Linux host to a validated, hardened state.

    Backs up critical files, then sets the hostname and hosts mapping, rotates
    the root password and applies kernel and resource-limit tuning. Must run
    as root.
    """
    logger = logging.getLogger("hostinit")

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except InitializerError as exc:
        raise click.ClickException(str(exc)) from exc

    skip_update = bool(_resolve_option(skip_update, config_values, "skip_update", default=False))
    skip_packages = bool(_resolve_option(skip_packages, config_values, "skip_packages", default=False))
    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if skip_update:
        logger.info("Flag set: --skip-update")
    if skip_packages:
        logger.info("Flag set: --skip-packages")

    initializer = SystemInitializer(
        skip_update=skip_update,
        skip_packages=skip_packages,
        verbose=verbose,
        paths=_build_paths(config_values),
        min_password_length=int(config_values.get("min_password_length", MIN_PASSWORD_LENGTH)),
        hostname_attempts=int(config_values.get("hostname_attempts", MAX_HOSTNAME_ATTEMPTS)),
        password_attempts=int(config_values.get("password_attempts", MAX_PASSWORD_ATTEMPTS)),
    )

    raise SystemExit(initializer.run())


if __name__ == "__main__":
    main()

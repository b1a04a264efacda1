import logging
import os

import click
from rich.logging import RichHandler

from .constants import (
    DEFAULT_ADMIN_NETWORK,
    DEFAULT_CONFIG_FILE,
    DEFAULT_DOCKER_SOCKET,
    DEFAULT_ENV_DIR,
    DEFAULT_LOCK_POLL_SECONDS,
    DEFAULT_PORT,
    DEFAULT_PROXY_ADMIN_URL,
    DEFAULT_SETTLE_SECONDS,
)
from .core import Deployer, DeployError
from .services.config_loader import ConfigLoader


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.command()
@click.option("--name", required=False, help="Deployment name (canonical container name)")
@click.option("--image", required=False, help="Image reference to deploy")
@click.option(
    "--port",
    required=False,
    type=int,
    default=None,
    help=f"Port the service listens on inside the container (default: {DEFAULT_PORT})",
)
@click.option(
    "--mount-docker-socket",
    is_flag=True,
    default=None,
    help="Bind-mount the Docker socket into the new container. Grants it control of the runtime.",
)
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_FILE} if present.",
)
@click.option(
    "--admin-network",
    required=False,
    help=f"Network shared with the reverse proxy (default: {DEFAULT_ADMIN_NETWORK})",
)
@click.option(
    "--proxy-admin-url",
    required=False,
    help=f"Reverse proxy admin API base URL (default: {DEFAULT_PROXY_ADMIN_URL})",
)
@click.option(
    "--settle-seconds",
    required=False,
    type=float,
    default=None,
    help=f"Delay between container start and traffic switch (default: {DEFAULT_SETTLE_SECONDS:g})",
)
@click.option("--lock-dir", required=False, type=click.Path(), help="Directory for deploy lock files (default: home)")
@click.option("--env-dir", required=False, type=click.Path(), help=f"Directory holding .<name>.env files (default: {DEFAULT_ENV_DIR})")
@click.option(
    "--strict-release",
    is_flag=True,
    default=None,
    help="Fail when the deploy lock is already gone at release time.",
)
@click.option("--report-file", required=False, type=click.Path(), help="Write a JSON deploy report to this path")
@click.option("--verbose", is_flag=True, default=None, help="Enable verbose logging")
@click.option("--log-file", type=click.Path(), help="Path to log file")
def main(
    name,
    image,
    port,
    mount_docker_socket,
    config,
    admin_network,
    proxy_admin_url,
    settle_seconds,
    lock_dir,
    env_dir,
    strict_release,
    report_file,
    verbose,
    log_file,
):
    """Redeploy a service container with zero downtime behind the proxy."""
    logger = logging.getLogger("haasdeploy")

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except DeployError as exc:
        raise click.ClickException(str(exc)) from exc

    name = _resolve_option(name, config_values, "name")
    image = _resolve_option(image, config_values, "image")
    port = int(_resolve_option(port, config_values, "port", default=DEFAULT_PORT))
    mount_docker_socket = bool(
        _resolve_option(mount_docker_socket, config_values, "mount_docker_socket", default=False)
    )
    docker_socket = str(config_values.get("docker_socket", DEFAULT_DOCKER_SOCKET))
    admin_network = _resolve_option(
        admin_network, config_values, "admin_network", default=DEFAULT_ADMIN_NETWORK
    )
    proxy_admin_url = _resolve_option(
        proxy_admin_url, config_values, "proxy_admin_url", default=DEFAULT_PROXY_ADMIN_URL
    )
    proxy_timeout = config_values.get("proxy_timeout")
    if proxy_timeout is not None:
        proxy_timeout = float(proxy_timeout)
    settle_seconds = float(
        _resolve_option(settle_seconds, config_values, "settle_seconds", default=DEFAULT_SETTLE_SECONDS)
    )
    lock_dir = _resolve_option(lock_dir, config_values, "lock_dir")
    lock_poll_seconds = float(
        config_values.get("lock_poll_seconds", DEFAULT_LOCK_POLL_SECONDS)
    )
    env_dir = _resolve_option(env_dir, config_values, "env_dir", default=DEFAULT_ENV_DIR)
    strict_release = bool(
        _resolve_option(strict_release, config_values, "strict_release", default=False)
    )
    report_file = _resolve_option(report_file, config_values, "report_file")
    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    log_file = _resolve_option(log_file, config_values, "log_file")

    if not name:
        raise click.ClickException("Missing required option '--name' (or provide it in config).")
    if not image:
        raise click.ClickException("Missing required option '--image' (or provide it in config).")

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(message)s"))
        logger.addHandler(file_handler)

    try:
        deployer = Deployer(
            name=name,
            image=image,
            port=port,
            mount_docker_socket=mount_docker_socket,
            docker_socket=docker_socket,
            admin_network=admin_network,
            proxy_admin_url=proxy_admin_url,
            proxy_timeout=proxy_timeout,
            settle_seconds=settle_seconds,
            lock_dir=lock_dir,
            lock_poll_seconds=lock_poll_seconds,
            strict_release=strict_release,
            env_dir=env_dir,
            report_file=report_file,
        )
    except DeployError as exc:
        raise click.ClickException(str(exc)) from exc

    raise SystemExit(deployer.run())


if __name__ == "__main__":
    main()

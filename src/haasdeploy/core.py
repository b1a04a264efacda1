import logging
import time
import uuid
from typing import Optional

import docker
import requests
from docker.errors import DockerException
from rich.console import Console

from .constants import (
    DEFAULT_ADMIN_NETWORK,
    DEFAULT_DOCKER_SOCKET,
    DEFAULT_ENV_DIR,
    DEFAULT_LOCK_POLL_SECONDS,
    DEFAULT_PORT,
    DEFAULT_PROXY_ADMIN_URL,
    DEFAULT_SETTLE_SECONDS,
)
from .errors import DeployError, LockError
from .errors_catalog import actionable_error
from .models import ContainerInstance, DeploymentTarget, DeployState
from .services.decommissioner import Decommissioner
from .services.env_file import EnvFileLoader
from .services.image_puller import ImagePuller
from .services.lock import DeploymentLockRegistry
from .services.provisioner import ContainerProvisioner
from .services.proxy import ProxySwapper
from .services.report import DeployReportService
from .services.validation import ValidationService

console = Console()
logger = logging.getLogger("haasdeploy")


class Deployer:
    """Runs one zero-downtime redeploy of a named service.

    The pipeline is strictly linear: lock, pull, provision, settle, swap the
    proxy upstream, then remove the previous instance and promote the new one.
    Any error moves the deploy to ``FAILED``; the lock is released and the
    containers are left exactly as they were at that point.
    """

    def __init__(
        self,
        name: str,
        image: str,
        port: int = DEFAULT_PORT,
        mount_docker_socket: bool = False,
        docker_socket: str = DEFAULT_DOCKER_SOCKET,
        admin_network: str = DEFAULT_ADMIN_NETWORK,
        proxy_admin_url: str = DEFAULT_PROXY_ADMIN_URL,
        proxy_timeout: Optional[float] = None,
        settle_seconds: float = DEFAULT_SETTLE_SECONDS,
        lock_dir: Optional[str] = None,
        lock_poll_seconds: float = DEFAULT_LOCK_POLL_SECONDS,
        strict_release: bool = False,
        env_dir: str = DEFAULT_ENV_DIR,
        report_file: Optional[str] = None,
        docker_client=None,
    ):
        self.validation_service = ValidationService()
        self.validation_service.validate(name, image, port, proxy_admin_url)
        if settle_seconds < 0:
            raise DeployError("settle_seconds must not be negative.")
        if lock_poll_seconds <= 0:
            raise DeployError("lock_poll_seconds must be greater than zero.")

        self.target = DeploymentTarget(name)
        self.image = image
        self.port = port
        self.mount_docker_socket = mount_docker_socket
        self.docker_socket = docker_socket
        self.admin_network = admin_network
        self.settle_seconds = settle_seconds
        self.deploy_id = uuid.uuid4().hex[:10]

        self.state: Optional[DeployState] = None
        self.failed_state: Optional[DeployState] = None
        self.instance: Optional[ContainerInstance] = None

        self.lock_registry = DeploymentLockRegistry(
            logger=logger,
            lock_dir=lock_dir,
            poll_interval=lock_poll_seconds,
            strict_release=strict_release,
        )
        self.report_service = DeployReportService(report_file=report_file, logger=logger)
        self.env_loader = EnvFileLoader(logger=logger, env_dir=env_dir)
        self.proxy_swapper = ProxySwapper(
            logger=logger,
            admin_url=proxy_admin_url,
            timeout=proxy_timeout,
            requests_module=requests,
        )

        self.docker_client = docker_client
        self.image_puller: Optional[ImagePuller] = None
        self.provisioner: Optional[ContainerProvisioner] = None
        self.decommissioner: Optional[Decommissioner] = None

    @property
    def name(self) -> str:
        return self.target.name

    def _connect_docker(self):
        if self.docker_client is not None:
            return self.docker_client
        try:
            self.docker_client = docker.from_env()
        except DockerException as exc:
            raise DeployError(actionable_error("docker_unavailable", detail=str(exc))) from exc
        return self.docker_client

    def _ensure_runtime(self):
        if self.image_puller and self.provisioner and self.decommissioner:
            return

        client = self._connect_docker()
        self.image_puller = self.image_puller or ImagePuller(
            docker_client=client,
            logger=logger,
            console=console,
        )
        self.provisioner = self.provisioner or ContainerProvisioner(
            docker_client=client,
            env_loader=self.env_loader,
            logger=logger,
            console=console,
            admin_network=self.admin_network,
            docker_socket=self.docker_socket,
        )
        self.decommissioner = self.decommissioner or Decommissioner(
            docker_client=client,
            logger=logger,
        )

    def _run_state(self, state: DeployState, callback, *args, **kwargs):
        self.state = state
        self.report_service.state_entered(state.value)
        logger.debug("Entering state %s", state.value)

        try:
            result = callback(*args, **kwargs)
        except BaseException as exc:
            self.failed_state = state
            self.state = DeployState.FAILED
            self.report_service.state_finished(state.value, "failed", error=str(exc))
            raise

        self.report_service.state_finished(state.value, "success")
        return result

    def acquire_lock(self):
        if self.lock_registry.is_locked(self.name):
            console.print("[yellow]Deployment locked, waiting for release...[/yellow]")
            logger.info("Deploy lock for '%s' is held, waiting", self.name)

        self.lock_registry.wait_and_acquire(
            self.name,
            on_wait=lambda _attempt: console.print("[dim]still locked...[/dim]"),
        )

    def pull_image(self):
        console.print(f"Pulling image: [bold]{self.image}[/bold]\n")
        self.image_puller.pull(self.image)

    def provision_container(self) -> ContainerInstance:
        console.print("Starting container...")
        instance = self.provisioner.provision(
            self.target,
            self.image,
            mount_docker_socket=self.mount_docker_socket,
        )
        console.print(f"New IP: {instance.ip_address}\n")
        self.report_service.set_container(
            {"id": instance.id, "name": instance.name, "ip_address": instance.ip_address}
        )
        return instance

    def settle(self):
        logger.info("Waiting %.1fs before switching traffic", self.settle_seconds)
        time.sleep(self.settle_seconds)

    def swap_proxy(self, ip_address: str):
        console.print("Redirecting traffic to new deployment...")
        self.proxy_swapper.swap(self.target, ip_address, self.port)

    def cleanup(self):
        console.print("Replacing previous deployment...")
        self.decommissioner.cleanup(self.target)

    def release_lock(self):
        self.lock_registry.release(self.name)

    def run(self) -> int:
        exit_code = 1
        report_status = "failed"
        report_error: Optional[str] = None

        self.report_service.start(
            deploy_id=self.deploy_id,
            target={
                "name": self.name,
                "image": self.image,
                "port": self.port,
                "mount_docker_socket": self.mount_docker_socket,
            },
        )

        try:
            logger.info("Deploying %s as '%s' (deploy %s)", self.image, self.name, self.deploy_id)

            self._run_state(DeployState.LOCK_WAIT, self.acquire_lock)
            self._ensure_runtime()
            self._run_state(DeployState.PULLING, self.pull_image)
            self.instance = self._run_state(DeployState.PROVISIONING, self.provision_container)
            self._run_state(DeployState.SETTLING, self.settle)
            self._run_state(DeployState.SWAPPING, self.swap_proxy, self.instance.ip_address)
            self._run_state(DeployState.CLEANING, self.cleanup)

            self.state = DeployState.DONE
            report_status = "success"
            exit_code = 0

        except KeyboardInterrupt:
            console.print("[bold red]Deployment cancelled by user.[/bold red]")
            logger.info("Deployment cancelled by user")
            self.state = DeployState.FAILED
            report_status = "aborted"
            report_error = "Deployment cancelled by user."
        except DeployError as exc:
            console.print(f"[bold red]Deployment failed[/bold red]: {exc}")
            logger.error(str(exc))
            self.state = DeployState.FAILED
            report_error = str(exc)
        except Exception as exc:
            console.print(f"[bold red]Deployment failed[/bold red] with an unexpected error: {exc}")
            logger.exception("Unexpected error")
            self.state = DeployState.FAILED
            report_error = str(exc)
        finally:
            if self.lock_registry.held_by_us(self.name):
                try:
                    self.release_lock()
                except LockError as exc:
                    console.print(f"[bold red]Error:[/bold red] {exc}")
                    logger.error(str(exc))
                    self.state = DeployState.FAILED
                    report_status = "failed"
                    report_error = report_error or str(exc)
                    exit_code = 1

            self.report_service.finalize(report_status, error=report_error)

        if exit_code == 0:
            console.print("[bold green]Deployment succeeded![/bold green]")
        return exit_code

"""Provisioning of the next container instance."""

from typing import Optional

from docker.errors import DockerException

from haasdeploy.constants import DEFAULT_ADMIN_NETWORK, DEFAULT_DOCKER_SOCKET
from haasdeploy.errors import ProvisionError
from haasdeploy.errors_catalog import actionable_error
from haasdeploy.models import ContainerInstance, ContainerSpec, DeploymentTarget


class ContainerProvisioner:
    """Creates, networks, starts and inspects ``{name}_next``."""

    def __init__(
        self,
        docker_client,
        env_loader,
        logger,
        console,
        admin_network: str = DEFAULT_ADMIN_NETWORK,
        docker_socket: str = DEFAULT_DOCKER_SOCKET,
    ):
        self.docker = docker_client
        self.env_loader = env_loader
        self.logger = logger
        self.console = console
        self.admin_network = admin_network
        self.docker_socket = docker_socket

    def build_spec(
        self,
        target: DeploymentTarget,
        image: str,
        mount_docker_socket: bool = False,
    ) -> ContainerSpec:
        environment = self.env_loader.load(target)
        if environment is not None:
            self.console.print(f"Setting {len(environment)} environment variables")
            self.logger.info("Loaded %s environment variables for %s", len(environment), target.name)

        return ContainerSpec(
            name=target.next_container_name,
            image=image,
            network=self.admin_network,
            environment=environment or None,
            docker_socket=self.docker_socket if mount_docker_socket else None,
        )

    def provision(
        self,
        target: DeploymentTarget,
        image: str,
        mount_docker_socket: bool = False,
    ) -> ContainerInstance:
        spec = self.build_spec(target, image, mount_docker_socket=mount_docker_socket)
        if spec.docker_socket:
            self.logger.warning("Mounting %s into %s", spec.docker_socket, spec.name)

        container = self._create(spec)
        self._connect(spec, container)

        try:
            container.start()
        except DockerException as exc:
            raise ProvisionError(f"Failed to start container {spec.name}: {exc}") from exc

        ip_address = self.resolve_ip(container, spec.name)
        self.logger.info("Container %s (%s) is up at %s", spec.name, container.id, ip_address)
        return ContainerInstance(id=container.id, name=spec.name, ip_address=ip_address)

    def resolve_ip(self, container, container_name: str) -> str:
        try:
            container.reload()
        except DockerException as exc:
            raise ProvisionError(f"Failed to inspect container {container_name}: {exc}") from exc

        networks = (container.attrs.get("NetworkSettings") or {}).get("Networks") or {}
        endpoint = networks.get(self.admin_network) or {}
        ip_address: Optional[str] = endpoint.get("IPAddress")
        if not ip_address:
            raise ProvisionError(
                actionable_error(
                    "ip_unavailable",
                    container=container_name,
                    network=self.admin_network,
                )
            )
        return ip_address

    def _create(self, spec: ContainerSpec):
        try:
            return self.docker.containers.create(
                spec.image,
                name=spec.name,
                environment=spec.environment,
                restart_policy={"Name": spec.restart_policy},
                volumes=spec.volumes(),
                detach=True,
            )
        except DockerException as exc:
            raise ProvisionError(f"Failed to create container {spec.name}: {exc}") from exc

    def _connect(self, spec: ContainerSpec, container):
        try:
            network = self.docker.networks.get(spec.network)
            network.connect(container)
        except DockerException as exc:
            raise ProvisionError(
                f"Failed to connect {spec.name} to network '{spec.network}': {exc}"
            ) from exc

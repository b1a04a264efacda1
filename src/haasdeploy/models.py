"""Shared domain models for haasdeploy."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from .constants import (
    ENV_FILE_TEMPLATE,
    LOCK_FILE_TEMPLATE,
    NEXT_SUFFIX,
    RESTART_POLICY,
    UPSTREAM_SUFFIX,
)


class DeployState(str, Enum):
    LOCK_WAIT = "lock_wait"
    PULLING = "pulling"
    PROVISIONING = "provisioning"
    SETTLING = "settling"
    SWAPPING = "swapping"
    CLEANING = "cleaning"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class DeploymentTarget:
    """A deployment name and every identifier derived from it."""

    name: str

    @property
    def canonical_container_name(self) -> str:
        return self.name

    @property
    def next_container_name(self) -> str:
        return f"{self.name}{NEXT_SUFFIX}"

    @property
    def upstream_id(self) -> str:
        return f"{self.name}{UPSTREAM_SUFFIX}"

    @property
    def lock_file_name(self) -> str:
        return LOCK_FILE_TEMPLATE.format(name=self.name)

    @property
    def env_file_name(self) -> str:
        return ENV_FILE_TEMPLATE.format(name=self.name)


@dataclass(frozen=True)
class ContainerSpec:
    """Creation parameters for the next instance of a service."""

    name: str
    image: str
    network: str
    environment: Optional[List[str]] = None
    restart_policy: str = RESTART_POLICY
    docker_socket: Optional[str] = None

    def volumes(self) -> Optional[Dict[str, Dict[str, str]]]:
        if not self.docker_socket:
            return None
        return {self.docker_socket: {"bind": self.docker_socket, "mode": "rw"}}


@dataclass(frozen=True)
class ContainerInstance:
    id: str
    name: str
    ip_address: str


@dataclass(frozen=True)
class ProxyUpstreamRecord:
    id: str
    dial: str

    @classmethod
    def for_target(cls, target: DeploymentTarget, host: str, port: int) -> "ProxyUpstreamRecord":
        return cls(id=target.upstream_id, dial=f"{host}:{port}")

    def payload(self) -> Dict[str, str]:
        return {"@id": self.id, "dial": self.dial}

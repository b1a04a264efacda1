"""Removal of the previous instance and promotion of the next one."""

from docker.errors import DockerException, NotFound

from haasdeploy.errors import CleanupError
from haasdeploy.errors_catalog import actionable_error
from haasdeploy.models import DeploymentTarget


class Decommissioner:
    """Vacates the canonical name and renames ``{name}_next`` into it."""

    def __init__(self, docker_client, logger):
        self.docker = docker_client
        self.logger = logger

    def cleanup(self, target: DeploymentTarget):
        next_container = self._get_exact(target.next_container_name)
        if next_container is None:
            raise CleanupError(
                f"Container {target.next_container_name} not found; "
                f"keeping the current {target.canonical_container_name} instance."
            )

        previous = self._get_exact(target.canonical_container_name)
        if previous is not None:
            self.logger.info("Removing previous container %s (%s)", previous.name, previous.id)
            try:
                previous.remove(force=True)
            except NotFound:
                self.logger.warning("Previous container %s disappeared before removal", previous.name)
            except DockerException as exc:
                raise CleanupError(
                    f"Failed to remove previous container {target.canonical_container_name}: {exc}"
                ) from exc
        else:
            self.logger.info("No previous container named %s", target.canonical_container_name)

        try:
            next_container.rename(target.canonical_container_name)
        except DockerException as exc:
            if previous is None:
                raise CleanupError(
                    f"Failed to rename {target.next_container_name} to "
                    f"{target.canonical_container_name}: {exc}"
                ) from exc
            raise CleanupError(
                actionable_error(
                    "promotion_failed",
                    name=target.canonical_container_name,
                    container=target.next_container_name,
                    detail=str(exc),
                )
            ) from exc

        self.logger.info(
            "Promoted %s to %s", target.next_container_name, target.canonical_container_name
        )

    def _get_exact(self, name: str):
        try:
            container = self.docker.containers.get(name)
        except NotFound:
            return None
        except DockerException as exc:
            raise CleanupError(f"Failed to look up container {name}: {exc}") from exc

        # The engine also resolves id prefixes, so confirm the name itself matched.
        if container.name.lstrip("/") != name:
            return None
        return container

"""Image pull service backed by the Docker Engine API."""

from typing import Any, Dict

from docker.errors import DockerException

from haasdeploy.errors import PullError


class ImagePuller:
    """Pulls an image into the local image store, stopping at the first error event."""

    def __init__(self, docker_client, logger, console):
        self.docker = docker_client
        self.logger = logger
        self.console = console

    def pull(self, image: str):
        self.logger.info("Pulling image %s", image)
        events = 0

        try:
            for event in self.docker.api.pull(image, stream=True, decode=True):
                events += 1
                error = self._event_error(event)
                if error:
                    raise PullError(f"Failed to pull {image}: {error}")
                self._log_progress(event)
        except DockerException as exc:
            raise PullError(f"Failed to pull {image}: {exc}") from exc

        self.logger.debug("Pull of %s finished after %s events", image, events)

    @staticmethod
    def _event_error(event: Dict[str, Any]) -> str:
        if "error" in event:
            return str(event["error"])
        detail = event.get("errorDetail")
        if detail:
            return str(detail.get("message") or detail)
        return ""

    def _log_progress(self, event: Dict[str, Any]):
        status = event.get("status")
        if not status:
            return
        layer = event.get("id")
        progress = event.get("progress")
        parts = [p for p in (layer, status, progress) if p]
        self.logger.debug("%s", " ".join(parts))

"""Actionable error catalog for haasdeploy."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "docker_unavailable": {
        "what": "Error connecting to Docker: {detail}",
        "next": "Check that the Docker daemon is running and that this user can access its socket.",
    },
    "lock_unwritable": {
        "what": "Could not create deploy lock {path}: {detail}",
        "next": "Make sure the lock directory exists and is writable, or set `lock_dir`.",
    },
    "ip_unavailable": {
        "what": "Container {container} has no address on network '{network}'.",
        "next": "Check that the network exists and that the container did not exit on startup.",
    },
    "promotion_failed": {
        "what": "Previous instance of '{name}' was removed but {container} could not be renamed: {detail}",
        "next": "The service is down. Rename the container manually with `docker rename {container} {name}`.",
    },
    "proxy_rejected": {
        "what": "Proxy rejected upstream update for {upstream} ({status}): {detail}",
        "next": "Check that the upstream id exists in the proxy configuration. Traffic was not moved.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"

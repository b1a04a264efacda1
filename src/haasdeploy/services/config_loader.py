"""Configuration loader for haasdeploy."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from haasdeploy.errors import DeployError


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults."""

    STRING_KEYS = {
        "name",
        "image",
        "docker_socket",
        "admin_network",
        "proxy_admin_url",
        "lock_dir",
        "env_dir",
        "log_file",
        "report_file",
    }
    INTEGER_KEYS = {"port"}
    NUMBER_KEYS = {"proxy_timeout", "settle_seconds", "lock_poll_seconds"}
    BOOLEAN_KEYS = {"mount_docker_socket", "strict_release", "verbose"}
    SUPPORTED_KEYS = STRING_KEYS | INTEGER_KEYS | NUMBER_KEYS | BOOLEAN_KEYS

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise DeployError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise DeployError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise DeployError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise DeployError(f"Unknown configuration keys: {unknown_list}")

        self._check_types(parsed)
        return parsed

    def _check_types(self, values: Dict[str, Any]):
        invalid = []
        for key, value in sorted(values.items()):
            if value is None:
                continue
            if key in self.STRING_KEYS:
                valid = isinstance(value, str)
                expected = "a string"
            elif key in self.INTEGER_KEYS:
                valid = isinstance(value, int) and not isinstance(value, bool)
                expected = "an integer"
            elif key in self.NUMBER_KEYS:
                valid = isinstance(value, (int, float)) and not isinstance(value, bool)
                expected = "a number"
            else:
                valid = isinstance(value, bool)
                expected = "true or false"
            if not valid:
                invalid.append(f"{key} must be {expected} (got {value!r})")

        if invalid:
            raise DeployError("Invalid configuration values: " + "; ".join(invalid))

"""Per-service environment file reader."""

from pathlib import Path
from typing import List, Optional

from haasdeploy.constants import DEFAULT_ENV_DIR
from haasdeploy.errors import ProvisionError
from haasdeploy.models import DeploymentTarget


class EnvFileLoader:
    """Reads ``KEY=VALUE`` lines from ``{env_dir}/.{name}.env``."""

    def __init__(self, logger, env_dir: str = DEFAULT_ENV_DIR):
        self.logger = logger
        self.env_dir = Path(env_dir)

    def env_path(self, target: DeploymentTarget) -> Path:
        return self.env_dir / target.env_file_name

    def load(self, target: DeploymentTarget) -> Optional[List[str]]:
        path = self.env_path(target)
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            self.logger.debug("No env file at %s", path)
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise ProvisionError(f"Could not read env file '{path}': {exc}") from exc

        entries = []
        for line in content.splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            entries.append(line)
        return entries

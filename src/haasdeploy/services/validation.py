"""Input validation helpers for haasdeploy."""

import re
from urllib.parse import urlparse

from haasdeploy.errors import DeployError


class ValidationService:
    """Rejects inputs that would fail halfway through a deploy."""

    # Docker's own rule for container names.
    NAME_RE = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9_.-]*$")

    def validate_name(self, name: str):
        if not name or not self.NAME_RE.match(name):
            raise DeployError(
                f"Invalid deployment name '{name}'. Use letters, digits, '_', '.' or '-', "
                "starting with a letter or digit."
            )

    def validate_image(self, image: str):
        if not image or any(c.isspace() for c in image):
            raise DeployError(f"Invalid image reference '{image}'.")

    def validate_port(self, port: int):
        if not 1 <= port <= 65535:
            raise DeployError(f"Invalid port {port}. Use a value between 1 and 65535.")

    def validate_proxy_url(self, url: str):
        parsed = urlparse(url)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise DeployError(f"Invalid proxy admin URL '{url}'. Use an http(s) URL.")

    def validate(self, name: str, image: str, port: int, proxy_admin_url: str):
        self.validate_name(name)
        self.validate_image(image)
        self.validate_port(port)
        self.validate_proxy_url(proxy_admin_url)

"""Default values shared by the CLI and the deployer."""

DEFAULT_PORT = 3000
DEFAULT_ADMIN_NETWORK = "haas_admin"
DEFAULT_PROXY_ADMIN_URL = "http://localhost:2019"
DEFAULT_DOCKER_SOCKET = "/var/run/docker.sock"
DEFAULT_ENV_DIR = "/home/deploy"
DEFAULT_SETTLE_SECONDS = 5.0
DEFAULT_LOCK_POLL_SECONDS = 5.0

RESTART_POLICY = "unless-stopped"
NEXT_SUFFIX = "_next"
UPSTREAM_SUFFIX = "_upstream"
LOCK_FILE_TEMPLATE = ".{name}_deploy_lock"
ENV_FILE_TEMPLATE = ".{name}.env"
DEFAULT_CONFIG_FILE = ".haasdeploy.yml"

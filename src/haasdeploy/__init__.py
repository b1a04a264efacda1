"""
haasdeploy - zero-downtime container redeploys behind a Caddy reverse proxy
"""

__version__ = "0.1.0"

from .core import Deployer, DeployError

__all__ = ["Deployer", "DeployError"]

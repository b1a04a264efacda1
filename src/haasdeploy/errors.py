"""Domain errors for haasdeploy."""


class DeployError(RuntimeError):
    """Raised when the deploy cannot continue safely."""


class LockError(DeployError):
    """Raised when the deploy lock cannot be created or removed."""


class LockHeldError(LockError):
    """Raised when another deploy already holds the lock for a name."""


class PullError(DeployError):
    """Raised when the runtime reports an image pull failure."""


class ProvisionError(DeployError):
    """Raised when the next container cannot be created, started or inspected."""


class SwapError(DeployError):
    """Raised when the proxy rejects the upstream update."""


class CleanupError(DeployError):
    """Raised when the previous instance cannot be removed or the new one promoted."""

"""Error types raised by dockside."""


class DocksideError(Exception):
    """Base class for all dockside failures."""
    pass


class ConfigError(DocksideError):
    """Compose file is unreadable, malformed or invalid."""
    pass


class ResourceError(DocksideError):
    """A shared resource (network, volume, config, secret) could not be resolved."""
    pass


class ContainerRuntimeError(DocksideError):
    """A call to the container runtime failed."""
    pass

"""
Dockside - converge a Docker engine onto a Compose file.

Compares the services declared in a Compose file with the containers running
for the project, and creates, replaces or removes containers until the two
agree. The runtime's container labels are the only state kept between runs.
"""

__version__ = "1.0.0"

# Re-export key components for easier access
from dockside.models.project import ProjectSpec
from dockside.models.service import ServiceSpec
from dockside.models.state import ObservedContainer, ResolvedResources

__all__ = [
    "ProjectSpec",
    "ServiceSpec",
    "ObservedContainer",
    "ResolvedResources",
]

"""Removal of everything a project owns."""

import logging
from typing import List

from dockside.providers.base import RuntimeClient


logger = logging.getLogger(__name__)


class TeardownDriver:
    """Removes containers, then volumes, then networks of a project."""

    def __init__(self, runtime: RuntimeClient):
        """Initialize teardown driver."""
        self.runtime = runtime

    async def teardown(self, project: str) -> List[str]:
        """Tear the project down and return the removed container ids.

        Only the project label is consulted, so containers of services that
        are no longer declared go too. Consumers are removed before the
        volumes and networks they use.
        """
        logger.info(f"Tearing down project {project}")

        removed = []
        observed = await self.runtime.list_containers(project)
        for containers in observed.values():
            for container in containers:
                logger.info(f"Removing container {container.name or container.id}")
                await self.runtime.remove(container.id)
                removed.append(container.id)

        await self.runtime.remove_volumes(project)
        await self.runtime.remove_networks(project)

        logger.info(f"Project {project} removed ({len(removed)} containers)")
        return removed

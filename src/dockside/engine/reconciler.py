"""State reconciliation engine."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional

from dockside.engine.fingerprint import fingerprint
from dockside.engine.materializer import ServiceMaterializer
from dockside.models.service import ServiceSpec
from dockside.models.state import ObservedContainer, ObservedState, ResolvedResources
from dockside.providers.base import RuntimeClient


logger = logging.getLogger(__name__)

CREATE = "create"
KEEP = "keep"
REPLACE = "replace"
REMOVE = "remove"


@dataclass
class Action:
    """One decision taken for a service during a pass."""
    service: str
    kind: str
    removed: List[str] = field(default_factory=list)
    created: Optional[str] = None


@dataclass
class ReconcileReport:
    """Decisions applied by a successful reconciliation pass."""
    project: str
    actions: List[Action] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    @property
    def created(self) -> List[str]:
        return [a.created for a in self.actions if a.created]

    @property
    def removed(self) -> List[str]:
        return [cid for a in self.actions for cid in a.removed]

    @property
    def changed(self) -> bool:
        return any(a.kind != KEEP for a in self.actions)


class Reconciler:
    """Converges the runtime onto a set of desired services in one pass."""

    def __init__(self, runtime: RuntimeClient, materializer: Optional[ServiceMaterializer] = None):
        """Initialize reconciler."""
        self.runtime = runtime
        self.materializer = materializer or ServiceMaterializer(runtime)

    async def reconcile(
        self,
        project: str,
        desired: Iterable[ServiceSpec],
        observed: ObservedState,
        resolved: ResolvedResources,
    ) -> ReconcileReport:
        """Create, keep or replace each desired service, then remove orphans.

        Services are handled one at a time in declaration order. The first
        runtime failure propagates and ends the pass; nothing done before it
        is undone.
        """
        report = ReconcileReport(project=project)
        remaining = {name: list(containers) for name, containers in observed.items()}
        logger.info(f"Starting reconciliation of project {project}")

        for spec in desired:
            containers = remaining.pop(spec.name, [])
            report.actions.append(await self._reconcile_service(project, spec, containers, resolved))

        # Whatever was not claimed by a desired service is orphaned
        for service, containers in remaining.items():
            if not containers:
                continue
            logger.info(f"Service {service or '<unlabelled>'} is no longer declared, removing")
            report.actions.append(Action(
                service=service,
                kind=REMOVE,
                removed=await self._remove_all(containers),
            ))

        report.finished_at = datetime.now()
        duration = (report.finished_at - report.started_at).total_seconds()
        logger.info(f"Reconciliation of project {project} completed in {duration:.2f}s")
        return report

    async def _reconcile_service(
        self,
        project: str,
        spec: ServiceSpec,
        containers: List[ObservedContainer],
        resolved: ResolvedResources,
    ) -> Action:
        if not containers:
            logger.info(f"Service {spec.name} has no container, creating")
            created = await self.materializer.materialize(spec, resolved, project)
            return Action(service=spec.name, kind=CREATE, created=created)

        expected = fingerprint(spec)
        if all(c.fingerprint == expected for c in containers):
            logger.debug(f"Service {spec.name} is up to date ({len(containers)} containers)")
            return Action(service=spec.name, kind=KEEP)

        # One diverged container condemns the whole service
        logger.info(f"Service {spec.name} configuration changed, replacing {len(containers)} containers")
        removed = await self._remove_all(containers)
        created = await self.materializer.materialize(spec, resolved, project)
        return Action(service=spec.name, kind=REPLACE, removed=removed, created=created)

    async def _remove_all(self, containers: List[ObservedContainer]) -> List[str]:
        removed = []
        for container in containers:
            logger.info(f"Removing container {container.name or container.id}")
            await self.runtime.remove(container.id)
            removed.append(container.id)
        return removed

"""Reconciliation engine."""

from dockside.engine.fingerprint import fingerprint, read_fingerprint
from dockside.engine.materializer import ServiceMaterializer
from dockside.engine.reconciler import Reconciler, ReconcileReport, Action
from dockside.engine.teardown import TeardownDriver

__all__ = [
    "fingerprint",
    "read_fingerprint",
    "ServiceMaterializer",
    "Reconciler",
    "ReconcileReport",
    "Action",
    "TeardownDriver",
]

from .directory import WorkerDirectory, WorkerRecord
from .dispatch import DispatchService
from .workflow import WorkflowTrigger

__all__ = [
    "DispatchService",
    "WorkerDirectory",
    "WorkerRecord",
    "WorkflowTrigger",
]

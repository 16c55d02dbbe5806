"""Phase orchestration"""

from .workflow import Workflow, PhaseTask, PhaseStatus
from .pipeline import PhaseOrchestrator, BatchResult, PHASE_CLASSES

__all__ = [
    "Workflow",
    "PhaseTask",
    "PhaseStatus",
    "PhaseOrchestrator",
    "BatchResult",
    "PHASE_CLASSES",
]

"""Workflow dependency management for generation phases"""

from typing import Dict, List, Optional, Any
from enum import Enum

from chronicler.models import PHASE_SEQUENCE, PipelineState


class PhaseStatus(str, Enum):
    """Phase execution status"""
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class PhaseTask:
    """Represents a phase in the workflow"""

    def __init__(self, state: PipelineState, dependencies: Optional[List[PipelineState]] = None):
        """
        Initialize phase task

        Args:
            state: Pipeline state the phase produces
            dependencies: States that must complete first
        """
        self.state = state
        self.dependencies = dependencies or []
        self.status = PhaseStatus.PENDING
        self.output: Optional[Dict[str, Any]] = None
        self.error: Optional[Exception] = None

    def is_ready(self, completed: List[PipelineState]) -> bool:
        """Check if all dependencies are completed"""
        if self.status != PhaseStatus.PENDING:
            return False
        return all(dep in completed for dep in self.dependencies)

    def mark_running(self):
        self.status = PhaseStatus.RUNNING

    def mark_completed(self, output: Dict[str, Any]):
        """Mark task as completed with output"""
        self.status = PhaseStatus.COMPLETED
        self.output = output

    def mark_failed(self, error: Exception):
        """Mark task as failed with error"""
        self.status = PhaseStatus.FAILED
        self.error = error


class Workflow:
    """Strictly linear chain of phases: each depends on the one before it"""

    def __init__(self, states: Optional[List[PipelineState]] = None):
        self.tasks: Dict[PipelineState, PhaseTask] = {}
        previous = None
        for state in states or PHASE_SEQUENCE:
            self.tasks[state] = PhaseTask(state, [previous] if previous else [])
            previous = state

    def get_execution_order(self) -> List[PipelineState]:
        """Phases in dependency order"""
        completed: List[PipelineState] = []

        while len(completed) < len(self.tasks):
            ready = [
                task.state
                for task in self.tasks.values()
                if task.state not in completed
                and all(dep in completed for dep in task.dependencies)
            ]

            if not ready:
                remaining = [state.value for state in self.tasks if state not in completed]
                raise ValueError(f"Cannot resolve dependencies for phases: {remaining}")

            completed.extend(ready)

        return completed

    def get_task(self, state: PipelineState) -> Optional[PhaseTask]:
        """Get a task by state"""
        return self.tasks.get(state)

    def completed_states(self) -> List[PipelineState]:
        return [task.state for task in self.tasks.values() if task.status == PhaseStatus.COMPLETED]

    def is_complete(self) -> bool:
        """Check if every phase completed"""
        return all(task.status == PhaseStatus.COMPLETED for task in self.tasks.values())

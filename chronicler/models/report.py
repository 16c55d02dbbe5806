"""Run report: normalization and validation statistics returned as data"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field


class ReportEntry(BaseModel):
    """Single noteworthy outcome recorded during a run"""
    phase: str
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class RunReport(BaseModel):
    """Report sink passed explicitly through the pipeline"""
    entries: List[ReportEntry] = Field(default_factory=list)
    counters: Dict[str, int] = Field(default_factory=dict)

    def record(
        self,
        phase: str,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        """Record an entry and bump the counter named after its code"""
        self.entries.append(ReportEntry(
            phase=phase,
            code=code,
            message=message,
            details=details or {}
        ))
        self.increment(code)

    def increment(self, counter: str, amount: int = 1):
        """Add to a named counter"""
        self.counters[counter] = self.counters.get(counter, 0) + amount

    def count(self, counter: str) -> int:
        return self.counters.get(counter, 0)

    def for_phase(self, phase: str) -> List[ReportEntry]:
        """Entries recorded by one phase"""
        return [entry for entry in self.entries if entry.phase == phase]

"""Teacher workload bands and candidate ranking.

Bands are computed from the number of LESSON periods a teacher holds in a
term. Ranking is advisory: an OVERLOADED teacher can still be assigned.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional
from uuid import UUID

from classbook.core.enums import WorkloadBand

# Periods per week
LOW_BELOW = 10
NORMAL_MAX = 25
HIGH_MAX = 30


def classify_workload(period_count: int) -> WorkloadBand:
    if period_count < LOW_BELOW:
        return WorkloadBand.LOW
    if period_count <= NORMAL_MAX:
        return WorkloadBand.NORMAL
    if period_count <= HIGH_MAX:
        return WorkloadBand.HIGH
    return WorkloadBand.OVERLOADED


def workload_warning(teacher_name: str, period_count: int, band: WorkloadBand) -> Optional[str]:
    if band == WorkloadBand.OVERLOADED:
        return f"{teacher_name} has {period_count} periods - consider redistributing workload"
    if band == WorkloadBand.HIGH:
        return f"{teacher_name} has {period_count} periods - approaching maximum capacity"
    return None


@dataclass(frozen=True)
class WorkloadCandidate:
    teacher_id: UUID
    first_name: str
    last_name: str
    period_count: int

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class RankedTeacher:
    teacher_id: UUID
    first_name: str
    last_name: str
    period_count: int
    band: WorkloadBand
    recommended: bool
    warning: Optional[str]


def rank_teachers(candidates: Iterable[WorkloadCandidate]) -> List[RankedTeacher]:
    """Least loaded first; ties keep their input order. The first entry is recommended."""
    ordered = sorted(candidates, key=lambda c: c.period_count)
    ranked = []
    for position, c in enumerate(ordered):
        band = classify_workload(c.period_count)
        ranked.append(
            RankedTeacher(
                teacher_id=c.teacher_id,
                first_name=c.first_name,
                last_name=c.last_name,
                period_count=c.period_count,
                band=band,
                recommended=position == 0,
                warning=workload_warning(c.full_name, c.period_count, band),
            )
        )
    return ranked

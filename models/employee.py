from dataclasses import dataclass
from typing import Any, Optional, Tuple


@dataclass(frozen=True)
class EligibleEmployee:
    employee_id: str
    final_score: Any                          # raw upstream value; numeric and > 0 once filtered
    score_rank: Optional[int] = None          # 1 = best
    percentile_rank: Optional[float] = None   # 0-100, higher = better
    position_level: Optional[str] = None
    department_id: Optional[str] = None
    work_months: float = 0.0
    performance_score: Optional[float] = None
    business_line_ids: Tuple[str, ...] = ()
    period: Optional[str] = None
    employee_name: str = ""
    department_name: str = ""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


@dataclass
class AllocationScenario:
    scenario_id: str
    name: str
    description: str = ""
    rule_overrides: Dict[str, Any] = field(default_factory=dict)   # AllocationRule field -> value
    pool_overrides: Dict[str, Any] = field(default_factory=dict)   # BonusPool field -> value
    created_at: datetime = field(default_factory=datetime.now)
    run: Optional[Any] = None          # AllocationRun once simulated
    last_run_at: Optional[datetime] = None

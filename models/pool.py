from dataclasses import dataclass

from config.defaults import DEFAULT_RESERVE_RATIO


@dataclass(frozen=True)
class BonusPool:
    id: str
    period: str                     # e.g. "2025-Q4"
    total_amount: float
    reserve_ratio: float = DEFAULT_RESERVE_RATIO   # withheld from distribution, in [0, 1)
    status: str = "active"          # one of POOL_STATUSES
    allocated_amount: float = 0.0
    allocated_count: int = 0

    @property
    def available_amount(self) -> float:
        """Budget left after the reserve is withheld."""
        return self.total_amount * (1 - self.reserve_ratio)

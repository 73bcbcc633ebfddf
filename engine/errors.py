"""Error taxonomy for allocation runs."""


class BonusAllocationError(Exception):
    """Base class for every allocation failure."""


class EmptyEligibleSetError(BonusAllocationError):
    """No employee satisfies the scope and score filters."""


class InsufficientBudgetError(BonusAllocationError):
    """Pool total or available amount is not positive."""


class NoValidScoresError(BonusAllocationError):
    """Scores of the eligible set sum to zero or less."""


class InvalidRuleError(BonusAllocationError):
    """Rule or pool configuration fails validation."""

    def __init__(self, errors):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


class InvalidCoefficientError(BonusAllocationError):
    """A configured weight is malformed. Recovered by falling back to 1.0."""

    def __init__(self, name: str, value, employee_id=None):
        self.name = name
        self.value = value
        self.employee_id = employee_id
        super().__init__(f"invalid {name} coefficient {value!r} for employee {employee_id}")

"""
RangeValidator - checks numeric amounts such as invoice cost and stock value
against fixed bounds.
"""

import operator
from decimal import Decimal
from typing import Any

from .base_validator import BaseValidator

# parameter -> (comparison that must hold, failure message)
BOUNDS = {
    "min": (operator.ge, "is less than minimum"),
    "min_exclusive": (operator.gt, "must be greater than"),
    "max": (operator.le, "exceeds maximum"),
    "max_exclusive": (operator.lt, "must be less than"),
}


class RangeValidator(BaseValidator):
    """
    Validates that a numeric field is within a specified range.

    Parameters (at least one required):
    - min / max: Inclusive bounds
    - min_exclusive / max_exclusive: Exclusive bounds

    Bounds are compared as Decimal so that coerced money values are not
    mixed with floats.
    """

    rule_type = "range"

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        self.bounds = {
            name: Decimal(str(self.parameters[name]))
            for name in BOUNDS
            if self.parameters.get(name) is not None
        }
        if not self.bounds:
            raise ValueError(f"RangeValidator requires at least one of: {', '.join(BOUNDS)}")

    def check(self, value: Any, record: dict[str, Any]) -> Any:
        if isinstance(value, bool) or not isinstance(value, int | float | Decimal):
            raise self.fail(f"Value must be numeric, got {type(value).__name__}")

        number = value if isinstance(value, Decimal) else Decimal(str(value))
        for name, bound in self.bounds.items():
            holds, message = BOUNDS[name]
            if not holds(number, bound):
                raise self.fail(f"Value {value} {message} {self.parameters[name]}")

        return value

"""
Common machinery shared by the row validators.

A validator is bound to one column. ``validate`` hands a missing value
straight through unless the validator opts in to seeing it, and otherwise
returns whatever ``check`` returns, which becomes the input of the next
rule on the same column.
"""

from abc import ABC, abstractmethod
from typing import Any, ClassVar


class ValidationError(Exception):
    """A single column failed a single rule."""

    def __init__(self, rule_name: str, field_name: str, message: str):
        self.rule_name = rule_name
        self.field_name = field_name
        self.message = message
        super().__init__(f"[{rule_name}] {field_name}: {message}")


class BaseValidator(ABC):
    """
    Base class of every column rule.

    Subclasses set ``rule_type`` and implement ``check``. Only validators
    that set ``handles_missing`` see ``None``; absence is reported by the
    required_field rule alone, so other rules never double-report it.
    """

    rule_type: ClassVar[str]
    handles_missing: ClassVar[bool] = False

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        self.field_name = field_name
        self.parameters = parameters or {}

    def validate(self, value: Any, record: dict[str, Any]) -> Any:
        """
        Run the rule against one column value.

        Args:
            value: Current value of the column, possibly coerced by earlier rules
            record: The whole row, for rules that look at other columns

        Returns:
            The value handed to the next rule

        Raises:
            ValidationError: If the rule fails
        """
        if value is None and not self.handles_missing:
            return None
        return self.check(value, record)

    @abstractmethod
    def check(self, value: Any, record: dict[str, Any]) -> Any:
        ...

    def fail(self, message: str, rule_name: str | None = None) -> ValidationError:
        """Build the error for this column; ``rule_name`` defaults to the rule type."""
        return ValidationError(rule_name or self.rule_type, self.field_name, message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(field={self.field_name}, params={self.parameters})"

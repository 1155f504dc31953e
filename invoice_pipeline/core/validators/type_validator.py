"""
TypeValidator - validates and optionally coerces field types.
"""

from decimal import Decimal, InvalidOperation
from typing import Any

from .base_validator import BaseValidator


class TypeValidator(BaseValidator):
    """
    Validates that a field matches the expected type.

    Supports optional type coercion (e.g., "99.99" -> Decimal("99.99")).

    Supported types:
    - int, str, bool, Decimal
    - Custom type names: "integer", "decimal", "string", "boolean"
    """

    rule_type = "type_check"

    TYPE_MAPPING = {
        "integer": int,
        "int": int,
        "decimal": Decimal,
        "number": Decimal,
        "string": str,
        "str": str,
        "boolean": bool,
        "bool": bool,
    }

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        expected_type = self.parameters.get("expected_type")
        if not expected_type:
            raise ValueError("TypeValidator requires 'expected_type' parameter")

        if isinstance(expected_type, str):
            self.expected_type = self.TYPE_MAPPING.get(expected_type.lower())
            if not self.expected_type:
                raise ValueError(f"Unsupported type: {expected_type}")
        else:
            self.expected_type = expected_type

        self.coerce = self.parameters.get("coerce", True)

    def check(self, value: Any, record: dict[str, Any]) -> Any:
        """
        Returns:
            The value converted to the expected type
        """
        # bool is a subclass of int, so only accept it where bool is expected
        if isinstance(value, bool):
            if self.expected_type is bool:
                return value
        elif isinstance(value, self.expected_type):
            return value

        type_name = self.expected_type.__name__
        if not self.coerce:
            raise self.fail(f"Expected {type_name}, got {type(value).__name__}")

        try:
            return self._coerce_type(value)
        except (ValueError, TypeError, InvalidOperation) as e:
            raise self.fail(f"Cannot coerce {type(value).__name__} to {type_name}: {e}") from e

    def _coerce_type(self, value: Any) -> Any:
        # "False" must not become True
        if self.expected_type is bool:
            if isinstance(value, str):
                if value.lower() in ("true", "1", "yes"):
                    return True
                elif value.lower() in ("false", "0", "no"):
                    return False
                else:
                    raise ValueError(f"Cannot parse '{value}' as boolean")
            return bool(value)

        if self.expected_type is Decimal:
            if isinstance(value, float):
                value = repr(value)
            coerced = Decimal(str(value).strip())
            if not coerced.is_finite():
                raise ValueError(f"'{value}' is not a finite number")
            return coerced

        return self.expected_type(value)

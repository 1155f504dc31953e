"""
Validation rule implementations.

Provides validators for required fields, type checking, ranges, regex patterns,
enumeration membership, text length and DD/MM/YYYY dates.
"""

from .base_validator import BaseValidator, ValidationError
from .date_validator import DateValidator
from .enum_validator import EnumValidator
from .length_validator import LengthValidator
from .range_validator import RangeValidator
from .regex_validator import RegexValidator
from .required_field_validator import RequiredFieldValidator
from .type_validator import TypeValidator

__all__ = [
    "BaseValidator",
    "ValidationError",
    "RequiredFieldValidator",
    "TypeValidator",
    "RangeValidator",
    "RegexValidator",
    "EnumValidator",
    "DateValidator",
    "LengthValidator",
]

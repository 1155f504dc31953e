"""
Validation rule engine and configuration management.
"""

from .default_rules import invoice_rules, supplier_rules
from .rule_config import RuleConfigBuilder, RuleConfigLoader
from .rule_engine import RuleEngine

__all__ = [
    "RuleEngine",
    "RuleConfigLoader",
    "RuleConfigBuilder",
    "invoice_rules",
    "supplier_rules",
]

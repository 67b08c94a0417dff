"""
Tag-based access control
"""
from .principal import Principal
from .access import AccessDecision, AccessDecisionEngine, SENSITIVITY_ROLES

__all__ = [
    'Principal',
    'AccessDecision',
    'AccessDecisionEngine',
    'SENSITIVITY_ROLES',
]

"""Access evaluation engine.

Defines:
- Condition / ConditionKind / DeniedLevel: structured denial reasons
- Parameter / NumParam / StringParam: per-slot parse and validate rules
- Access: a named capability with its ordered parameters
- Principal / AccessResult / BLANKET: groups, users and the evaluator
- AccessControl: root group plus the group, alias and tag registries
"""

from .access import Access
from .conditions import Condition, ConditionKind, DeniedLevel
from .parameters import NumParam, Parameter, StringParam, round_half_up
from .principals import BLANKET, AccessResult, Principal
from .registry import AccessControl

__all__ = [
    "BLANKET",
    "Access",
    "AccessControl",
    "AccessResult",
    "Condition",
    "ConditionKind",
    "DeniedLevel",
    "NumParam",
    "Parameter",
    "Principal",
    "StringParam",
    "round_half_up",
]

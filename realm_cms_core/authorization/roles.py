"""
Role ordinals.

The hierarchy is fixed and small, so it is a lookup table rather than a
class hierarchy: a held role satisfies a requirement when its level is at
least the required level.
"""

from typing import Optional, Union

from ..constants import ROLE_LEVEL
from ..enums import RealmRole, Role

RoleLike = Union[Role, RealmRole, str]


def role_level(role: Optional[RoleLike]) -> int:
    """Ordinal of ``role``; 0 for no role or an unknown name."""
    if role is None:
        return 0
    value = role.value if hasattr(role, "value") else str(role)
    return ROLE_LEVEL.get(value, 0)


def satisfies(held: Optional[RoleLike], required: RoleLike) -> bool:
    """True when the held role meets or exceeds the required one."""
    held_level = role_level(held)
    return held_level > 0 and held_level >= role_level(required)

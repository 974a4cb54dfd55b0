"""Realm-scoped authorization: privileged primitives, role ordinals and row predicates."""

from .grants import (
    accessible_realm_ids,
    can_act,
    effective_role,
    is_superuser,
    lookup_global_role,
    lookup_grant_role,
)
from .predicates import (
    AccessScope,
    realm_scope_predicate,
    resolve_scope,
    role_grant_visibility_predicate,
)
from .roles import role_level, satisfies

__all__ = [
    "AccessScope",
    "accessible_realm_ids",
    "can_act",
    "effective_role",
    "is_superuser",
    "lookup_global_role",
    "lookup_grant_role",
    "realm_scope_predicate",
    "resolve_scope",
    "role_grant_visibility_predicate",
    "role_level",
    "satisfies",
]

"""Data and behavior contracts shared with components outside the role schema."""

from element_roles.contracts.batch import BatchOperationCreateRequest, OperationType
from element_roles.contracts.lifecycle import LifecycleComponent, LifecycleStatus, ManagedServer

__all__ = [
    "BatchOperationCreateRequest",
    "LifecycleComponent",
    "LifecycleStatus",
    "ManagedServer",
    "OperationType",
]

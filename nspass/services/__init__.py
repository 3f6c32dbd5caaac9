"""
nspass.services - Resource services and the standard-service adapter.
"""

from nspass.services.adapter import AdapterPresets, ServiceAdapter, create_adapter
from nspass.services.base import (
    BaseService,
    BatchDeleteService,
    StandardService,
    supports_batch_delete,
)
from nspass.services.egress import EgressService
from nspass.services.forward_rules import ForwardRuleService
from nspass.services.routes import RouteService
from nspass.services.users import UserService

__all__ = [
    "AdapterPresets",
    "BaseService",
    "BatchDeleteService",
    "EgressService",
    "ForwardRuleService",
    "RouteService",
    "ServiceAdapter",
    "StandardService",
    "UserService",
    "create_adapter",
    "supports_batch_delete",
]

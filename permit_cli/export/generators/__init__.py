"""Export generators, one per category of Permit state.

``default_generators`` returns them in the order their sections appear in
the exported document.
"""

from typing import List

from ...permit_client import PermitClient
from ..warnings import WarningCollector
from .base import HCLGenerator
from .resource import ResourceGenerator
from .role import RoleGenerator
from .user_attributes import UserAttributesGenerator
from .relation import RelationGenerator
from .condition_set import ConditionSetGenerator
from .resource_set import ResourceSetGenerator
from .user_set import UserSetGenerator
from .role_derivation import RoleDerivationGenerator


def default_generators(client: PermitClient, warning_collector: WarningCollector) -> List[HCLGenerator]:
    """Instantiate every generator in document order."""
    return [
        ResourceGenerator(client, warning_collector),
        RoleGenerator(client, warning_collector),
        UserAttributesGenerator(client, warning_collector),
        RelationGenerator(client, warning_collector),
        ConditionSetGenerator(client, warning_collector),
        ResourceSetGenerator(client, warning_collector),
        UserSetGenerator(client, warning_collector),
        RoleDerivationGenerator(client, warning_collector),
    ]


__all__ = [
    "HCLGenerator",
    "ResourceGenerator",
    "RoleGenerator",
    "UserAttributesGenerator",
    "RelationGenerator",
    "ConditionSetGenerator",
    "ResourceSetGenerator",
    "UserSetGenerator",
    "RoleDerivationGenerator",
    "default_generators",
]

"""Exports Permit resources as permitio_resource blocks."""

import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ...models import AttributeSpec, ResourceDefinition
from ..hcl import render_resource_block, render_section
from .base import HCLGenerator

logger = logging.getLogger(__name__)


def is_exportable_resource(resource: Dict[str, Any]) -> bool:
    """Whether ``ResourceGenerator`` renders a block for this API resource.

    Built-in resources (``__`` prefix) and resources without actions are
    never exported; other stages use this to avoid referencing them.
    """
    key = resource.get("key")
    actions = resource.get("actions")
    return bool(key) and not key.startswith("__") and isinstance(actions, dict) and bool(actions)


def exported_resource_keys(resources: Iterable[Dict[str, Any]]) -> List[str]:
    """Keys of the exportable resources, sorted."""
    return sorted(r["key"] for r in resources if is_exportable_resource(r))


class ResourceGenerator(HCLGenerator):
    """Generates ``permitio_resource`` blocks for every non built-in resource."""

    @property
    def name(self) -> str:
        return "resources"

    async def generate_hcl(self) -> Optional[str]:
        resources = await self.client.list_resources()
        blocks = []
        for resource in self.sorted_by_key(resources):
            converted = self.to_definition(resource)
            if converted is None:
                continue
            definition, action_details = converted
            blocks.append(render_resource_block(definition, action_details))

        logger.debug("Rendered %d of %d resources", len(blocks), len(resources))
        return render_section("Resources", blocks)

    def to_definition(
        self, resource: Dict[str, Any]
    ) -> Optional[Tuple[ResourceDefinition, Dict[str, Dict[str, Any]]]]:
        """Convert an API resource to its canonical form plus action display details."""
        key = resource.get("key")
        if not key:
            self.warnings.add_warning("Skipped a resource without a key")
            return None
        if key.startswith("__"):
            return None

        actions = resource.get("actions") or {}
        if not isinstance(actions, dict) or not actions:
            self.warnings.add_warning(f"Resource '{key}' has no actions and was skipped")
            return None

        action_details = {}
        for action_key in sorted(actions):
            action = actions[action_key] or {}
            action_details[action_key] = {
                "name": action.get("name"),
                "description": action.get("description"),
            }

        attributes = {}
        raw_attributes = resource.get("attributes") or {}
        for attr_key in sorted(raw_attributes):
            attribute = raw_attributes[attr_key] or {}
            attributes[attr_key] = AttributeSpec(
                type=self.attribute_type(
                    attribute.get("type"), f"Attribute '{attr_key}' of resource '{key}'"
                ),
                description=attribute.get("description") or None,
            )

        definition = ResourceDefinition(
            key=key,
            name=resource.get("name") or key,
            description=resource.get("description") or None,
            actions=list(action_details),
            attributes=attributes,
        )
        return definition, action_details

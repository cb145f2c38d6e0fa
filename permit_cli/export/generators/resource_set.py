"""Exports resource sets (resource-typed condition sets)."""

from typing import Any, Dict, Iterable, Optional, Set

from ..hcl import Raw, hcl_jsonencode, render_block, render_section, resource_ref, safe_id
from .base import HCLGenerator
from .resource import is_exportable_resource


def condition_set_resource_key(condition_set: Dict[str, Any], keys_by_id: Dict[str, str]) -> Optional[str]:
    """Resolve the resource a condition set applies to from its nested or id reference."""
    resource = condition_set.get("resource")
    if isinstance(resource, dict) and resource.get("key"):
        return resource["key"]
    if isinstance(resource, str) and resource:
        return resource
    resource_id = condition_set.get("resource_id")
    if resource_id:
        return keys_by_id.get(resource_id)
    return None


class ResourceIndex:
    """Resolves resource set targets against the exported resources."""

    def __init__(self, resources: Iterable[Dict[str, Any]]):
        resources = list(resources)
        self.keys_by_id = {r["id"]: r["key"] for r in resources if r.get("id") and r.get("key")}
        self.exported: Set[str] = {r["key"] for r in resources if is_exportable_resource(r)}

    def exported_resource(self, condition_set: Dict[str, Any]) -> Optional[str]:
        """Key of the set's resource when that resource is exported, else None."""
        resource_key = condition_set_resource_key(condition_set, self.keys_by_id)
        return resource_key if resource_key in self.exported else None


def is_exportable_resource_set(condition_set: Dict[str, Any], index: ResourceIndex) -> bool:
    """Whether ``ResourceSetGenerator`` renders a block for this condition set."""
    return (
        bool(condition_set.get("key"))
        and not condition_set.get("autogenerated")
        and index.exported_resource(condition_set) is not None
    )


class ResourceSetGenerator(HCLGenerator):
    """Generates ``permitio_resource_set`` blocks.

    Autogenerated sets are managed by Permit and are not exported.
    """

    @property
    def name(self) -> str:
        return "resource sets"

    async def generate_hcl(self) -> Optional[str]:
        index = ResourceIndex(await self.client.list_resources())

        blocks = []
        condition_sets = await self.client.list_condition_sets("resourceset")
        for condition_set in self.sorted_by_key(condition_sets):
            key = condition_set.get("key")
            if not key:
                self.warnings.add_warning("Skipped a resource set without a key")
                continue
            if condition_set.get("autogenerated"):
                continue

            resource_key = index.exported_resource(condition_set)
            if resource_key is None:
                self.warnings.add_warning(
                    f"Resource set '{key}' does not reference an exported resource and was skipped"
                )
                continue

            blocks.append(render_block("permitio_resource_set", safe_id(key), [
                ("key", key),
                ("name", condition_set.get("name") or key),
                ("description", condition_set.get("description") or None),
                ("resource", Raw(f"{resource_ref(resource_key)}.key")),
                ("conditions", hcl_jsonencode(condition_set.get("conditions") or {})),
                ("depends_on", [resource_ref(resource_key)]),
            ]))

        return render_section("Resource Sets", blocks)

"""Exports resource relations."""

from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..hcl import Raw, render_block, render_section, resource_ref
from .base import HCLGenerator
from .resource import is_exportable_resource

RelationOwner = Tuple[str, str]


def is_exportable_relation(relation: Dict[str, Any], exported_resources: Iterable[str]) -> bool:
    """Whether a relation listed on an exported resource gets a block.

    The subject resource has to be exported as well.
    """
    return bool(relation.get("key")) and relation.get("subject_resource") in exported_resources


def relation_owners(
    relations_by_resource: Dict[str, List[Dict[str, Any]]], exported_resources: Iterable[str]
) -> List[RelationOwner]:
    """Owners of every exported relation block, in document order."""
    exported = set(exported_resources)
    return [
        (object_key, relation["key"])
        for object_key, relations in relations_by_resource.items()
        if object_key in exported
        for relation in relations
        if is_exportable_relation(relation, exported)
    ]


class RelationGenerator(HCLGenerator):
    """Generates ``permitio_relation`` blocks.

    Relations are listed per object resource; a relation whose object or
    subject resource is not part of the export is skipped with a warning.
    """

    @property
    def name(self) -> str:
        return "relations"

    async def generate_hcl(self) -> Optional[str]:
        resources = self.sorted_by_key(await self.client.list_resources())
        exported = {r["key"] for r in resources if is_exportable_resource(r)}

        relations_by_resource: Dict[str, List[Dict[str, Any]]] = {}
        for resource in resources:
            object_key = resource.get("key")
            if not object_key or object_key.startswith("__"):
                continue
            relations_by_resource[object_key] = self.sorted_by_key(
                await self.client.list_resource_relations(object_key)
            )

        names = self.block_names(relation_owners(relations_by_resource, exported), "Relation")

        blocks = []
        for object_key, relations in relations_by_resource.items():
            for relation in relations:
                key = relation.get("key")
                subject_key = relation.get("subject_resource")
                if not key:
                    self.warnings.add_warning(f"Skipped a relation without a key on resource '{object_key}'")
                    continue
                if object_key not in exported:
                    self.warnings.add_warning(
                        f"Relation '{key}' belongs to resource '{object_key}', which is not "
                        "exported, and was skipped"
                    )
                    continue
                if not is_exportable_relation(relation, exported):
                    self.warnings.add_warning(
                        f"Relation '{key}' on resource '{object_key}' references unknown "
                        f"subject resource '{subject_key}' and was skipped"
                    )
                    continue

                blocks.append(render_block("permitio_relation", names[(object_key, key)], [
                    ("key", key),
                    ("name", relation.get("name") or key),
                    ("description", relation.get("description") or None),
                    ("subject_resource", Raw(f"{resource_ref(subject_key)}.key")),
                    ("object_resource", Raw(f"{resource_ref(object_key)}.key")),
                    ("depends_on", sorted({resource_ref(subject_key), resource_ref(object_key)})),
                ]))

        return render_section("Relations", blocks)

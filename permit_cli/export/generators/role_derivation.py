"""Exports role derivations declared on resource roles."""

from typing import Any, Dict, List, Optional, Tuple

from ..hcl import assign_block_names, block_ref, render_block, render_section
from .base import HCLGenerator
from .relation import relation_owners
from .resource import exported_resource_keys
from .role import role_owners

DerivationOwner = Tuple[str, ...]


class RoleDerivationGenerator(HCLGenerator):
    """Generates ``permitio_role_derivation`` blocks.

    Each entry of a resource role's ``granted_to.users_with_role`` means:
    users holding ``role`` on a related ``on_resource`` (linked by the
    relation ``linked_by_relation``, declared on this resource) get this role
    on this resource. A derivation is only exported when both roles and the
    relation are exported by the earlier stages.
    """

    @property
    def name(self) -> str:
        return "role derivations"

    async def generate_hcl(self) -> Optional[str]:
        exported = exported_resource_keys(await self.client.list_resources())

        roles_by_resource: Dict[str, List[Dict[str, Any]]] = {}
        for resource_key in exported:
            roles_by_resource[resource_key] = self.sorted_by_key(
                await self.client.list_resource_roles(resource_key)
            )

        pending = []
        for resource_key, roles in roles_by_resource.items():
            for role in roles:
                granted_to = role.get("granted_to") or {}
                derivations = sorted(granted_to.get("users_with_role") or [], key=lambda d: (
                    str(d.get("on_resource") or ""),
                    str(d.get("role") or ""),
                    str(d.get("linked_by_relation") or ""),
                ))
                pending.extend((resource_key, role.get("key"), d) for d in derivations)
        if not pending:
            return None

        # Names must match the blocks written by the role and relation stages
        top_level_roles = self.sorted_by_key(await self.client.list_roles())
        role_names = assign_block_names(role_owners(top_level_roles, roles_by_resource))
        relations_by_resource = {
            resource_key: self.sorted_by_key(await self.client.list_resource_relations(resource_key))
            for resource_key in exported
        }
        relation_names = assign_block_names(relation_owners(relations_by_resource, exported))

        rendered: Dict[DerivationOwner, List] = {}
        for resource_key, to_role, derivation in pending:
            resolved = self._resolve(resource_key, to_role, derivation, role_names, relation_names)
            if resolved:
                owner, items = resolved
                if owner in rendered and rendered[owner] != items:
                    # Same roles linked by another relation
                    owner = owner + ("via", derivation["linked_by_relation"])
                rendered.setdefault(owner, items)

        names = self.block_names(rendered, "Role derivation", self._label)
        blocks = [
            render_block("permitio_role_derivation", names[owner], items)
            for owner, items in rendered.items()
        ]
        return render_section("Role Derivations", blocks)

    @staticmethod
    def _label(owner: DerivationOwner) -> str:
        on_resource, source_role, _, resource_key, to_role = owner[:5]
        label = f"{on_resource}#{source_role} -> {resource_key}#{to_role}"
        return f"{label} via {owner[-1]}" if len(owner) > 5 else label

    def _resolve(
        self,
        resource_key: str,
        to_role: str,
        derivation: Dict[str, Any],
        role_names: Dict[Tuple[str, ...], str],
        relation_names: Dict[Tuple[str, str], str],
    ) -> Optional[Tuple[DerivationOwner, List]]:
        source_role = derivation.get("role")
        on_resource = derivation.get("on_resource")
        linked_by = derivation.get("linked_by_relation")
        label = f"{on_resource}#{source_role} -> {resource_key}#{to_role}"

        if not source_role or not on_resource or not linked_by or not to_role:
            self.warnings.add_warning(
                f"Role derivation '{label}' is missing its role, resource or relation and was skipped"
            )
            return None
        source_name = role_names.get((on_resource, source_role))
        if source_name is None:
            self.warnings.add_warning(
                f"Role derivation '{label}' references unknown role '{on_resource}#{source_role}' "
                "and was skipped"
            )
            return None
        relation_name = relation_names.get((resource_key, linked_by))
        if relation_name is None:
            self.warnings.add_warning(
                f"Role derivation '{label}' references unknown relation '{linked_by}' "
                "and was skipped"
            )
            return None

        owner = (on_resource, source_role, "to", resource_key, to_role)
        items = [
            ("role", source_role),
            ("on_resource", on_resource),
            ("to_role", to_role),
            ("resource", resource_key),
            ("linked_by", linked_by),
            ("depends_on", [
                block_ref("permitio_role", source_name),
                block_ref("permitio_role", role_names[(resource_key, to_role)]),
                block_ref("permitio_relation", relation_name),
            ]),
        ]
        return owner, items

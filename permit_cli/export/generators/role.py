"""Exports top-level and resource roles as permitio_role blocks."""

from typing import Any, Dict, List, Optional, Set, Tuple

from ..hcl import Raw, block_ref, render_block, render_section, resource_ref
from .base import HCLGenerator
from .resource import is_exportable_resource

RoleOwner = Tuple[str, ...]


def role_owner(key: str, resource_key: Optional[str] = None) -> RoleOwner:
    return (resource_key, key) if resource_key else (key,)


def role_owners(roles: List[Dict[str, Any]], resource_roles: Dict[str, List[Dict[str, Any]]]) -> List[RoleOwner]:
    """Owners of every exported role block, in document order.

    Top-level roles come first, then the roles of each exported resource in
    the order of ``resource_roles``.
    """
    owners = [role_owner(role["key"]) for role in roles if role.get("key")]
    for resource_key, scoped in resource_roles.items():
        owners.extend(role_owner(role["key"], resource_key) for role in scoped if role.get("key"))
    return owners


class RoleGenerator(HCLGenerator):
    """Generates ``permitio_role`` blocks.

    Top-level roles come first, followed by the roles of each exported
    resource. Roles of resources that are not exported are skipped.
    Permissions on unknown resources or actions and extends of unknown roles
    are dropped with a warning; the role itself is still exported.
    """

    @property
    def name(self) -> str:
        return "roles"

    async def generate_hcl(self) -> Optional[str]:
        resources = self.sorted_by_key(await self.client.list_resources())
        resource_actions: Dict[str, Set[str]] = {
            r["key"]: set(r["actions"].keys())
            for r in resources
            if is_exportable_resource(r)
        }

        roles = self.sorted_by_key(await self.client.list_roles())
        resource_roles: Dict[str, List[Dict[str, Any]]] = {}
        for resource in resources:
            resource_key = resource.get("key")
            if not resource_key or resource_key.startswith("__"):
                continue
            scoped = self.sorted_by_key(await self.client.list_resource_roles(resource_key))
            if resource_key in resource_actions:
                resource_roles[resource_key] = scoped
                continue
            for role in scoped:
                self.warnings.add_warning(
                    f"Role '{resource_key}#{role.get('key')}' belongs to resource "
                    f"'{resource_key}', which is not exported, and was skipped"
                )

        names = self.block_names(role_owners(roles, resource_roles), "Role")

        blocks = []
        role_keys = {role.get("key") for role in roles}
        for role in roles:
            block = self._render_role(role, role_keys, resource_actions, names)
            if block:
                blocks.append(block)

        for resource_key, scoped in resource_roles.items():
            scoped_keys = {role.get("key") for role in scoped}
            for role in scoped:
                block = self._render_role(role, scoped_keys, resource_actions, names, resource_key)
                if block:
                    blocks.append(block)

        return render_section("Roles", blocks)

    def _valid_permissions(
        self,
        role_label: str,
        permissions: List[str],
        resource_actions: Dict[str, Set[str]],
        resource_key: Optional[str],
    ) -> List[str]:
        valid = []
        for permission in permissions:
            if ":" in permission:
                perm_resource, action = permission.split(":", 1)
            else:
                perm_resource, action = resource_key, permission

            if not perm_resource:
                self.warnings.add_warning(
                    f"Role '{role_label}' permission '{permission}' names no resource and was dropped"
                )
                continue
            if resource_key and perm_resource == resource_key:
                # Resource roles reference their own actions without a prefix
                rendered = action
            else:
                rendered = f"{perm_resource}:{action}"

            if perm_resource not in resource_actions:
                self.warnings.add_warning(
                    f"Role '{role_label}' permission '{permission}' references unknown "
                    f"resource '{perm_resource}' and was dropped"
                )
                continue
            if action not in resource_actions[perm_resource]:
                self.warnings.add_warning(
                    f"Role '{role_label}' permission '{permission}' references unknown "
                    f"action '{action}' and was dropped"
                )
                continue
            valid.append(rendered)
        return sorted(valid)

    def _render_role(
        self,
        role: Dict[str, Any],
        known_roles: Set[str],
        resource_actions: Dict[str, Set[str]],
        names: Dict[RoleOwner, str],
        resource_key: Optional[str] = None,
    ) -> Optional[str]:
        key = role.get("key")
        if not key:
            self.warnings.add_warning("Skipped a role without a key")
            return None
        label = f"{resource_key}#{key}" if resource_key else key

        permissions = self._valid_permissions(
            label, role.get("permissions") or [], resource_actions, resource_key
        )

        extends = []
        for parent in sorted(role.get("extends") or []):
            if parent not in known_roles:
                self.warnings.add_warning(
                    f"Role '{label}' extends unknown role '{parent}', which was dropped"
                )
                continue
            extends.append(parent)

        depends_on = []
        if resource_key:
            depends_on.append(resource_ref(resource_key))
        for perm_resource in sorted({p.split(":", 1)[0] for p in permissions if ":" in p}):
            depends_on.append(resource_ref(perm_resource))
        for parent in extends:
            depends_on.append(block_ref("permitio_role", names[role_owner(parent, resource_key)]))

        items = [
            ("key", key),
            ("name", role.get("name") or key),
            ("description", role.get("description") or None),
            ("resource", Raw(f"{resource_ref(resource_key)}.key") if resource_key else None),
            ("permissions", permissions),
            ("extends", extends or None),
            ("depends_on", depends_on or None),
        ]
        return render_block("permitio_role", names[role_owner(key, resource_key)], items)

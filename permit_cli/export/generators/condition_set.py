"""Exports condition set rules (permissions granted from user sets to resource sets)."""

from typing import Optional

from ..hcl import Raw, render_block, render_section, resource_set_ref, user_set_ref
from .base import HCLGenerator
from .resource_set import ResourceIndex, is_exportable_resource_set
from .user_set import is_exportable_user_set


class ConditionSetGenerator(HCLGenerator):
    """Generates ``permitio_condition_set_rule`` blocks.

    A rule is only exported when both its user set and its resource set are
    exported too.
    """

    @property
    def name(self) -> str:
        return "condition set rules"

    async def generate_hcl(self) -> Optional[str]:
        index = ResourceIndex(await self.client.list_resources())
        condition_sets = await self.client.list_condition_sets()
        known_sets = {cs.get("key") for cs in condition_sets if cs.get("key")}
        user_sets = {
            cs["key"] for cs in condition_sets
            if cs.get("type") == "userset" and is_exportable_user_set(cs)
        }
        resource_sets = {
            cs["key"] for cs in condition_sets
            if cs.get("type") == "resourceset" and is_exportable_resource_set(cs, index)
        }

        rules = await self.client.list_condition_set_rules()
        rules = sorted(rules, key=lambda r: (
            str(r.get("user_set") or ""),
            str(r.get("permission") or ""),
            str(r.get("resource_set") or ""),
        ))

        exported = []
        for rule in rules:
            user_set = rule.get("user_set")
            permission = rule.get("permission")
            resource_set = rule.get("resource_set")
            label = f"{user_set} -> {permission} -> {resource_set}"

            if not permission:
                self.warnings.add_warning(f"Condition set rule '{label}' has no permission and was skipped")
                continue
            if user_set not in user_sets:
                self.warnings.add_warning(
                    f"Condition set rule '{label}' references {self._describe(user_set, known_sets)} "
                    f"user set '{user_set}' and was skipped"
                )
                continue
            if resource_set not in resource_sets:
                self.warnings.add_warning(
                    f"Condition set rule '{label}' references {self._describe(resource_set, known_sets)} "
                    f"resource set '{resource_set}' and was skipped"
                )
                continue
            exported.append((user_set, permission, resource_set))

        # The same rule listed twice is exported once
        exported = list(dict.fromkeys(exported))
        names = self.block_names(exported, "Condition set rule", " -> ".join)

        blocks = []
        for owner in exported:
            user_set, permission, resource_set = owner
            blocks.append(render_block("permitio_condition_set_rule", names[owner], [
                ("user_set", Raw(f"{user_set_ref(user_set)}.key")),
                ("permission", permission),
                ("resource_set", Raw(f"{resource_set_ref(resource_set)}.key")),
                ("depends_on", [user_set_ref(user_set), resource_set_ref(resource_set)]),
            ]))

        return render_section("Condition Set Rules", blocks)

    @staticmethod
    def _describe(set_key, known_sets) -> str:
        return "unexported" if set_key in known_sets else "unknown"

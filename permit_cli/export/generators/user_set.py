"""Exports user sets (user-typed condition sets)."""

from typing import Any, Dict, Optional

from ..hcl import hcl_jsonencode, render_block, render_section, safe_id
from .base import HCLGenerator


def is_exportable_user_set(condition_set: Dict[str, Any]) -> bool:
    """Whether ``UserSetGenerator`` renders a block for this condition set."""
    return bool(condition_set.get("key")) and not condition_set.get("autogenerated")


class UserSetGenerator(HCLGenerator):
    """Generates ``permitio_user_set`` blocks."""

    @property
    def name(self) -> str:
        return "user sets"

    async def generate_hcl(self) -> Optional[str]:
        condition_sets = await self.client.list_condition_sets("userset")
        blocks = []
        for condition_set in self.sorted_by_key(condition_sets):
            key = condition_set.get("key")
            if not key:
                self.warnings.add_warning("Skipped a user set without a key")
                continue
            if condition_set.get("autogenerated"):
                continue

            conditions = condition_set.get("conditions")
            if not conditions:
                self.warnings.add_warning(
                    f"User set '{key}' has no conditions; exported with empty conditions"
                )
                conditions = {}

            blocks.append(render_block("permitio_user_set", safe_id(key), [
                ("key", key),
                ("name", condition_set.get("name") or key),
                ("description", condition_set.get("description") or None),
                ("conditions", hcl_jsonencode(conditions)),
            ]))

        return render_section("User Sets", blocks)

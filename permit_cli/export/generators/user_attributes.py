"""Exports custom user attributes."""

from typing import Optional

from ..hcl import render_block, render_section, safe_id
from .base import HCLGenerator

# Attributes every Permit user has; they cannot be managed from Terraform
BUILT_IN_USER_ATTRIBUTES = {"key", "email", "first_name", "last_name", "roles"}


class UserAttributesGenerator(HCLGenerator):
    """Generates ``permitio_user_attribute`` blocks."""

    @property
    def name(self) -> str:
        return "user attributes"

    async def generate_hcl(self) -> Optional[str]:
        attributes = await self.client.list_user_attributes()
        blocks = []
        for attribute in self.sorted_by_key(attributes):
            key = attribute.get("key")
            if not key:
                self.warnings.add_warning("Skipped a user attribute without a key")
                continue
            if attribute.get("built_in") or key in BUILT_IN_USER_ATTRIBUTES:
                continue

            attr_type = self.attribute_type(attribute.get("type"), f"User attribute '{key}'")
            blocks.append(render_block("permitio_user_attribute", safe_id(key), [
                ("key", key),
                ("type", attr_type.value),
                ("description", attribute.get("description") or None),
            ]))

        return render_section("User Attributes", blocks)

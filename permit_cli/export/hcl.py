"""HCL rendering helpers for Permit Terraform documents.

All generators build their blocks through these helpers so quoting,
identifier naming and cross-references stay consistent across the document.
"""

import json
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from ..config import settings
from ..models import ExportScope, ResourceDefinition

PROVIDER_NAME = "permitio"
PROVIDER_SOURCE = "permitio/permit-io"
UNKNOWN_SCOPE_VALUE = "unknown"

_INVALID_ID_CHARS = re.compile(r"[^A-Za-z0-9_-]")


class Raw(str):
    """An already rendered HCL expression (reference, function call...)."""


class HCLMap(dict):
    """A map whose keys are rendered as quoted strings."""


def escape_string(value: Any) -> str:
    """Escape a value for use inside a double quoted HCL string."""
    escaped = str(value)
    escaped = escaped.replace("\\", "\\\\").replace('"', '\\"')
    escaped = escaped.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    # Template sequences would otherwise be interpolated by Terraform
    escaped = escaped.replace("${", "$${").replace("%{", "%%{")
    return escaped


def hcl_string(value: Any) -> str:
    return f'"{escape_string(value)}"'


def hcl_value(value: Any) -> str:
    """Render a scalar or list as an HCL expression."""
    if isinstance(value, Raw):
        return str(value)
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(hcl_value(v) for v in value) + "]"
    return hcl_string(value)


def hcl_jsonencode(value: Any) -> Raw:
    """Render ``jsonencode(...)`` of a JSON-compatible value with stable key order."""
    encoded = json.dumps(value, indent=2, sort_keys=True)
    encoded = encoded.replace("${", "$${").replace("%{", "%%{")
    return Raw(f"jsonencode({encoded})")


def safe_id(*parts: str) -> str:
    """Build a Terraform resource name from one or more keys.

    Only letters, digits, underscores and hyphens are kept and the result
    never starts with a digit or hyphen.
    """
    joined = "_".join(str(p) for p in parts if p)
    identifier = _INVALID_ID_CHARS.sub("_", joined)
    if not identifier or not (identifier[0].isalpha() or identifier[0] == "_"):
        identifier = "_" + identifier
    return identifier


def assign_block_names(owners: Iterable[Tuple[str, ...]]) -> Dict[Tuple[str, ...], str]:
    """Give every owner (a tuple of keys) a distinct Terraform name.

    The name is ``safe_id(*owner)``. Scoped keys such as ``("doc", "editor")``
    and ``("doc_editor",)`` can produce the same name; the later owner then
    gets a numeric suffix. Owners are named in iteration order, so the same
    input always gives the same names.
    """
    names: Dict[Tuple[str, ...], str] = {}
    taken = set()
    for owner in owners:
        if owner in names:
            continue
        base = safe_id(*owner)
        name = base
        index = 2
        while name in taken:
            name = f"{base}_{index}"
            index += 1
        taken.add(name)
        names[owner] = name
    return names


# Cross-references between generated blocks
def resource_ref(resource_key: str) -> Raw:
    return Raw(f"permitio_resource.{safe_id(resource_key)}")


def block_ref(resource_type: str, name: str) -> Raw:
    return Raw(f"{resource_type}.{name}")


def user_set_ref(set_key: str) -> Raw:
    return Raw(f"permitio_user_set.{safe_id(set_key)}")


def resource_set_ref(set_key: str) -> Raw:
    return Raw(f"permitio_resource_set.{safe_id(set_key)}")


def _indent_continuation(value: str, pad: str) -> str:
    lines = value.split("\n")
    return "\n".join([lines[0]] + [pad + line for line in lines[1:]])


def render_attributes(items: Iterable[Tuple[str, Any]], indent: int = 2, quote_keys: bool = False) -> List[str]:
    """Render ``name = value`` lines, aligning runs of single-line values.

    ``None`` values are skipped. ``dict`` values become nested objects and
    ``HCLMap`` values become maps with quoted keys.
    """
    pad = " " * indent
    lines: List[str] = []
    group: List[Tuple[str, str]] = []

    def flush():
        if not group:
            return
        width = max(len(label) for label, _ in group)
        for label, rendered in group:
            lines.append(f"{pad}{label.ljust(width)} = {_indent_continuation(rendered, pad)}")
        group.clear()

    for name, value in items:
        if value is None:
            continue
        label = hcl_string(name) if quote_keys else name
        if isinstance(value, dict):
            flush()
            if not value:
                lines.append(f"{pad}{label} = {{}}")
                continue
            lines.append(f"{pad}{label} = {{")
            lines.extend(render_attributes(
                list(value.items()),
                indent + 2,
                quote_keys=isinstance(value, HCLMap),
            ))
            lines.append(f"{pad}}}")
        else:
            group.append((label, hcl_value(value)))
    flush()
    return lines


def render_block(resource_type: str, name: str, items: Sequence[Tuple[str, Any]]) -> str:
    """Render a ``resource "<type>" "<name>" { ... }`` block."""
    lines = [f'resource "{resource_type}" "{name}" {{']
    lines.extend(render_attributes(items, 2))
    lines.append("}")
    return "\n".join(lines)


def render_section(title: str, blocks: Sequence[str]) -> Optional[str]:
    """Join blocks under a comment heading; ``None`` when there are no blocks."""
    if not blocks:
        return None
    return f"\n# {title}\n" + "\n\n".join(blocks) + "\n"


def render_resource_block(
    resource: ResourceDefinition,
    action_details: Optional[Dict[str, Dict[str, Any]]] = None,
) -> str:
    """Render a canonical resource definition as a ``permitio_resource`` block.

    Args:
        resource: Resource to render
        action_details: Optional display name/description per action key

    Returns:
        HCL block as a string
    """
    details = action_details or {}
    actions = HCLMap()
    for action in resource.actions:
        detail = details.get(action, {})
        actions[action] = {
            "name": detail.get("name") or action,
            "description": detail.get("description") or None,
        }

    attributes = HCLMap()
    for attr_name, spec in resource.attributes.items():
        attributes[attr_name] = {
            "name": attr_name,
            "type": spec.type.value,
            "description": spec.description,
        }

    items: List[Tuple[str, Any]] = [
        ("key", resource.key),
        ("name", resource.name),
        ("description", resource.description or None),
        ("actions", actions),
    ]
    if attributes:
        items.append(("attributes", attributes))
    return render_block("permitio_resource", safe_id(resource.key), items)


def _header_value(value: Optional[str]) -> str:
    if not value:
        return UNKNOWN_SCOPE_VALUE
    return " ".join(str(value).split())


def generate_header(scope: Optional[ExportScope]) -> str:
    """Comment lines identifying the tool and the exported scope."""
    scope = scope or ExportScope()
    lines = [
        "# Generated by Permit CLI",
        f"# Environment: {_header_value(scope.environment_id)}",
        f"# Project: {_header_value(scope.project_id)}",
        f"# Organization: {_header_value(scope.organization_id)}",
    ]
    return "\n".join(lines) + "\n"


def generate_provider_block(
    api_key: str,
    api_url: Optional[str] = None,
    provider_version: Optional[str] = None,
) -> str:
    """Terraform settings plus the provider block carrying the API key."""
    lines = ["terraform {"]
    lines.append("  required_providers {")
    lines.append(f"    {PROVIDER_NAME} = {{")
    lines.append(f"      source  = {hcl_string(PROVIDER_SOURCE)}")
    lines.append(f"      version = {hcl_string(provider_version or settings.terraform_provider_version)}")
    lines.append("    }")
    lines.append("  }")
    lines.append("}")
    lines.append("")
    lines.append(f'provider "{PROVIDER_NAME}" {{')
    lines.append(f"  api_url = {hcl_string(api_url or settings.permit_api_url)}")
    lines.append(f"  api_key = {hcl_string(api_key)}")
    lines.append("}")
    return "\n".join(lines) + "\n"

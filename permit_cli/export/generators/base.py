"""Base class for export generators."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ...models import CanonicalType
from ...permit_client import PermitClient
from ..hcl import assign_block_names, safe_id
from ..warnings import WarningCollector


class HCLGenerator(ABC):
    """Renders one category of live Permit state as Terraform blocks.

    Subclasses fetch their entities through the Permit client, report
    entities they can only partially render to the shared warning collector,
    and let transport or response-shape errors propagate.
    """

    def __init__(self, client: PermitClient, warning_collector: WarningCollector):
        self.client = client
        self.warnings = warning_collector

    @property
    @abstractmethod
    def name(self) -> str:
        """Human readable category name used in progress messages."""
        pass

    @abstractmethod
    async def generate_hcl(self) -> Optional[str]:
        """Fetch the category and render it.

        Returns:
            The rendered section, or None when there is nothing to export
        """
        pass

    def sorted_by_key(self, items: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Order API objects by key so output does not depend on API ordering."""
        return sorted(items, key=lambda item: str(item.get("key") or ""))

    def attribute_type(self, value: Any, owner: str) -> CanonicalType:
        """Parse an attribute type, falling back to string with a warning."""
        try:
            return CanonicalType(value)
        except ValueError:
            self.warnings.add_warning(
                f"{owner} has unsupported type '{value}', exported as 'string'"
            )
            return CanonicalType.STRING

    def block_names(
        self,
        owners: Iterable[Tuple[str, ...]],
        kind: str,
        describe: Callable[[Tuple[str, ...]], str] = "#".join,
    ) -> Dict[Tuple[str, ...], str]:
        """Assign unique Terraform names, warning about owners that were renamed."""
        names = assign_block_names(owners)
        for owner, name in names.items():
            if name != safe_id(*owner):
                self.warnings.add_warning(
                    f"{kind} '{describe(owner)}' is exported as '{name}' because its "
                    "Terraform name is already used"
                )
        return names

"""Environment export to Terraform (HCL).

Generators render each category of Permit state; the orchestrator runs them
in order behind a header and provider block.
"""

from .warnings import WarningCollector
from .generators import HCLGenerator, default_generators
from .orchestrator import ExportOrchestrator, export_config, validate_api_key

__all__ = [
    "WarningCollector",
    "HCLGenerator",
    "default_generators",
    "ExportOrchestrator",
    "export_config",
    "validate_api_key",
]

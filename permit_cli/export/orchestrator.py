"""Drives the export generators and assembles the Terraform document."""

import logging
from typing import Callable, Optional

from ..errors import ConfigurationError
from ..models import ExportResult, ExportScope, ExportState
from ..permit_client import PermitClient
from .generators import default_generators
from .hcl import generate_header, generate_provider_block
from .warnings import WarningCollector

logger = logging.getLogger(__name__)

API_KEY_PREFIX = "permit_key_"

ProgressCallback = Callable[[str], None]


def validate_api_key(api_key: Optional[str]) -> str:
    """Check that an API key is present and looks like a Permit key."""
    if not api_key or not api_key.strip():
        raise ConfigurationError("A Permit API key is required")
    api_key = api_key.strip()
    if not api_key.startswith(API_KEY_PREFIX):
        raise ConfigurationError(
            f"Invalid API key: Permit API keys start with '{API_KEY_PREFIX}'"
        )
    return api_key


class ExportOrchestrator:
    """Runs every generator in order and concatenates their output.

    Stages run one after another. The first failing stage aborts the export:
    its exception propagates unchanged and nothing is returned.

    Example usage:
        async with PermitClient(api_key) as client:
            orchestrator = ExportOrchestrator(client, api_key, scope, on_progress=print)
            result = await orchestrator.export()
    """

    def __init__(
        self,
        client: PermitClient,
        api_key: str,
        scope: Optional[ExportScope] = None,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self.client = client
        self.api_key = api_key
        self.scope = scope or ExportScope()
        self.on_progress = on_progress
        self.state = ExportState()

    def _publish(self, status: str, stage: Optional[str] = None):
        self.state.status = status
        self.state.stage = stage
        logger.debug(status)
        if self.on_progress:
            self.on_progress(status)

    async def export(self) -> ExportResult:
        """Generate the full document.

        Returns:
            ExportResult with the HCL document and the collected warnings

        Raises:
            ConfigurationError: API key missing or malformed (before any stage runs)
            Whatever the first failing generator raised
        """
        api_key = validate_api_key(self.api_key)

        warning_collector = WarningCollector()
        self.state = ExportState()

        hcl = generate_header(self.scope) + generate_provider_block(api_key)

        try:
            for generator in default_generators(self.client, warning_collector):
                self._publish(f"Exporting {generator.name}...", generator.name)

                generated_hcl = await generator.generate_hcl()
                if generated_hcl:
                    hcl += generated_hcl
        except Exception as e:
            logger.debug("Export failed while exporting %s: %s", self.state.stage, e)
            self.state.error = e
            self.state.warnings = warning_collector.get_warnings()
            raise

        warnings = warning_collector.get_warnings()
        self.state.stage = None
        self.state.status = "Export complete"
        self.state.is_complete = True
        self.state.warnings = warnings
        return ExportResult(document=hcl, warnings=warnings)


async def export_config(
    api_key: str,
    scope: Optional[ExportScope] = None,
    client: Optional[PermitClient] = None,
    on_progress: Optional[ProgressCallback] = None,
) -> ExportResult:
    """Export an environment, opening a Permit client when none is given."""
    api_key = validate_api_key(api_key)

    if client is not None:
        return await ExportOrchestrator(client, api_key, scope, on_progress).export()

    async with PermitClient(api_key=api_key, scope=scope) as permit:
        return await ExportOrchestrator(permit, api_key, scope, on_progress).export()

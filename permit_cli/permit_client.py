"""Permit API client."""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar

import httpx

from .config import settings
from .errors import AuthenticationError, ConfigurationError, MalformedResponseError, PermitAPIError
from .models import ExportScope, ResourceDefinition

logger = logging.getLogger(__name__)

T = TypeVar('T')

USER_RESOURCE_KEY = "__user"


class PermitClient:
    """Async client for the Permit REST API.

    Project and environment ids come from the scope passed in; when either is
    missing it is resolved once from the API key itself.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        scope: Optional[ExportScope] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        page_size: Optional[int] = None,
    ):
        self.api_key = api_key or settings.permit_api_key
        self.base_url = (base_url or settings.permit_api_url).rstrip("/")
        self.scope = scope
        self.timeout = timeout or settings.permit_request_timeout
        self.max_retries = settings.permit_max_retries if max_retries is None else max_retries
        self.page_size = page_size or settings.permit_page_size
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            if not self.api_key:
                raise ConfigurationError("A Permit API key is required")
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {self.api_key}",
                },
                timeout=self.timeout,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def _retry_with_backoff(
        self,
        operation: Callable[[], Awaitable[T]],
        initial_delay: float = 1.0,
        retryable_status_codes: tuple = (429, 500, 502, 503, 504),
    ) -> T:
        """Execute operation with exponential backoff for transient failures.

        Args:
            operation: Coroutine factory to execute
            initial_delay: Initial delay in seconds (default: 1.0)
            retryable_status_codes: HTTP status codes to retry on

        Returns:
            Result of the operation

        Raises:
            Last exception if all retries fail
        """
        last_exception = None
        delay = initial_delay

        for attempt in range(self.max_retries + 1):
            try:
                return await operation()
            except httpx.HTTPStatusError as e:
                if e.response.status_code not in retryable_status_codes:
                    raise
                last_exception = e
            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e

            if attempt < self.max_retries:
                logger.debug("Retrying Permit API call in %.1fs (%s)", delay, last_exception)
                await asyncio.sleep(delay)
                delay *= 2  # Exponential backoff

        if last_exception:
            raise last_exception
        raise RuntimeError("Retry operation failed without exception")

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and decode its JSON body, translating failures."""
        async def send():
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()
            return response

        try:
            response = await self._retry_with_backoff(send)
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            message = f"Permit API {method} {path} failed with status {status}"
            if status in (401, 403):
                raise AuthenticationError(
                    f"Permit API rejected the API key ({status})", status_code=status
                ) from e
            raise PermitAPIError(message, status_code=status, details={"body": e.response.text}) from e
        except httpx.HTTPError as e:
            raise PermitAPIError(f"Could not reach Permit API at {self.base_url}: {e}") from e

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"Permit API {method} {path} returned invalid JSON",
                details={"body": response.text[:500]},
            ) from e

    # Scope
    async def get_scope(self) -> ExportScope:
        """Get the organization, project and environment the API key belongs to."""
        data = await self._request("GET", "/v1/api-key/scope")
        if not isinstance(data, dict):
            raise MalformedResponseError("API key scope response is not an object")
        return ExportScope(
            organization_id=data.get("organization_id"),
            project_id=data.get("project_id"),
            environment_id=data.get("environment_id"),
        )

    async def resolve_scope(self) -> ExportScope:
        """Return a scope with project and environment ids filled in."""
        if self.scope and self.scope.project_id and self.scope.environment_id:
            return self.scope

        key_scope = await self.get_scope()
        current = self.scope or ExportScope()
        self.scope = ExportScope(
            organization_id=current.organization_id or key_scope.organization_id,
            project_id=current.project_id or key_scope.project_id,
            environment_id=current.environment_id or key_scope.environment_id,
        )
        if not self.scope.project_id or not self.scope.environment_id:
            raise ConfigurationError(
                "The API key is not scoped to an environment; pass project and environment ids",
                details=self.scope.model_dump(),
            )
        return self.scope

    async def _schema_path(self, suffix: str) -> str:
        scope = await self.resolve_scope()
        return f"/v2/schema/{scope.project_id}/{scope.environment_id}/{suffix}"

    async def _facts_path(self, suffix: str) -> str:
        scope = await self.resolve_scope()
        return f"/v2/facts/{scope.project_id}/{scope.environment_id}/{suffix}"

    async def _list_paginated(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Fetch every page of a list endpoint.

        Pages may be a bare JSON list or an object with a ``data`` list.
        """
        items: List[Dict[str, Any]] = []
        page = 1
        while True:
            query = dict(params or {})
            query.update({"page": page, "per_page": self.page_size})
            data = await self._request("GET", path, params=query)

            if isinstance(data, list):
                batch = data
            elif isinstance(data, dict) and isinstance(data.get("data"), list):
                batch = data["data"]
            else:
                raise MalformedResponseError(
                    f"Unexpected list response from {path}",
                    details={"type": type(data).__name__},
                )

            for item in batch:
                if not isinstance(item, dict):
                    raise MalformedResponseError(f"Unexpected item in list response from {path}")
            items.extend(batch)

            if isinstance(data, dict) and "page_count" in data:
                try:
                    page_count = int(data["page_count"] or 0)
                except (TypeError, ValueError) as e:
                    raise MalformedResponseError(
                        f"Unexpected page_count in list response from {path}",
                        details={"page_count": repr(data["page_count"])},
                    ) from e
                if page >= page_count:
                    break
            elif len(batch) < self.page_size:
                break
            page += 1

        logger.debug("Fetched %d items from %s", len(items), path)
        return items

    # Schema operations
    async def list_resources(self) -> List[Dict[str, Any]]:
        """List resources (built-in resources excluded)."""
        return await self._list_paginated(
            await self._schema_path("resources"), {"include_built_in": "false"}
        )

    async def list_roles(self) -> List[Dict[str, Any]]:
        """List top-level (tenant) roles."""
        return await self._list_paginated(await self._schema_path("roles"))

    async def list_resource_roles(self, resource_key: str) -> List[Dict[str, Any]]:
        """List roles scoped to a resource."""
        return await self._list_paginated(await self._schema_path(f"resources/{resource_key}/roles"))

    async def list_resource_relations(self, resource_key: str) -> List[Dict[str, Any]]:
        """List relations whose object is the given resource."""
        return await self._list_paginated(await self._schema_path(f"resources/{resource_key}/relations"))

    async def list_user_attributes(self) -> List[Dict[str, Any]]:
        """List attributes of the built-in user resource."""
        return await self._list_paginated(
            await self._schema_path(f"resources/{USER_RESOURCE_KEY}/attributes")
        )

    async def list_condition_sets(self, set_type: Optional[str] = None) -> List[Dict[str, Any]]:
        """List condition sets, optionally only 'userset' or 'resourceset'."""
        params = {"type": set_type} if set_type else None
        return await self._list_paginated(await self._schema_path("condition_sets"), params)

    async def list_condition_set_rules(self) -> List[Dict[str, Any]]:
        """List permissions granted from user sets to resource sets."""
        return await self._list_paginated(await self._facts_path("set_rules"))

    async def create_resource(self, resource: ResourceDefinition) -> Dict[str, Any]:
        """Create a resource."""
        return await self._request("POST", await self._schema_path("resources"), json=resource.to_api_payload())

    async def update_resource(self, resource: ResourceDefinition) -> Dict[str, Any]:
        """Replace actions and attributes of an existing resource."""
        payload = resource.to_api_payload()
        payload.pop("key")
        return await self._request(
            "PATCH", await self._schema_path(f"resources/{resource.key}"), json=payload
        )

    async def upsert_resource(self, resource: ResourceDefinition) -> Dict[str, Any]:
        """Create a resource, updating it instead when the key already exists."""
        try:
            return await self.create_resource(resource)
        except PermitAPIError as e:
            if e.status_code != 409:
                raise
            logger.debug("Resource %s exists, updating", resource.key)
            return await self.update_resource(resource)

    # Utility methods
    async def health_check(self) -> bool:
        """Check that the API key is accepted."""
        try:
            await self.get_scope()
            return True
        except PermitAPIError:
            return False

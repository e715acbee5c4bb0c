"""HTTP client for the remote task/user collection service."""

import logging
import re
from typing import Any, Protocol

import httpx

from src.core.config import constants, settings
from src.core.errors import TransportError


logger = logging.getLogger(__name__)


def _validate_collection_name(collection: str) -> None:
    """Validate that a collection name contains only alphanumeric characters and underscores."""
    if not re.match(r"^[a-zA-Z_][a-zA-Z0-9_]*$", collection):
        msg = f"Invalid collection name: {collection}. Only alphanumeric characters and underscores are allowed."
        raise ValueError(msg)


class DataGateway(Protocol):
    """CRUD surface of the remote collection service consumed by the services."""

    async def list_records(self, *, collection: str, filters: dict[str, str] | None = None) -> list[dict[str, Any]]:
        """List records matching every equality filter."""
        ...

    async def get_record(self, *, collection: str, record_id: str) -> dict[str, Any]:
        """Fetch a single record by ID."""
        ...

    async def create_record(self, *, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Create a record and return the stored representation."""
        ...

    async def update_record(self, *, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Partially update a record and return the stored representation."""
        ...

    async def delete_record(self, *, collection: str, record_id: str) -> None:
        """Delete a record by ID."""
        ...


class RestGateway:
    """json-server style REST gateway backed by a shared httpx.AsyncClient.

    Every transport failure, timeout and non-2xx answer is raised as TransportError.
    No request is retried.
    """

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url or settings.gateway_url,
            timeout=timeout if timeout is not None else settings.gateway_timeout_seconds,
            headers={"Content-Type": "application/json"},
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            logger.error("gateway_timeout", extra={"method": method, "url": url, "error": str(e)})
            raise TransportError(f"Gateway request timed out: {method} {url}") from e
        except httpx.RequestError as e:
            logger.error("gateway_unreachable", extra={"method": method, "url": url, "error": str(e)})
            raise TransportError(f"Gateway unreachable: {e}") from e

        if not response.is_success:
            logger.error(
                "gateway_error_status",
                extra={"method": method, "url": url, "status": response.status_code},
            )
            raise TransportError(
                f"Gateway returned status {response.status_code} for {method} {url}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise TransportError("Gateway returned a malformed JSON body", status_code=response.status_code) from e

    async def list_records(self, *, collection: str, filters: dict[str, str] | None = None) -> list[dict[str, Any]]:
        """List records from a collection, filtered by field equality.

        Args:
            collection: Collection name (e.g. "tasks")
            filters: Field/value pairs sent as query parameters

        Returns:
            List of matching records
        """
        _validate_collection_name(collection)
        response = await self._request("GET", f"/{collection}", params=filters or {})
        records = self._json(response)
        if not isinstance(records, list):
            raise TransportError(f"Expected a list from /{collection}", status_code=response.status_code)

        logger.info("Listed records", extra={"collection": collection, "count": len(records)})
        return records

    async def get_record(self, *, collection: str, record_id: str) -> dict[str, Any]:
        """Fetch a single record by ID."""
        _validate_collection_name(collection)
        response = await self._request("GET", f"/{collection}/{record_id}")

        logger.info("Retrieved record", extra={"collection": collection, "record_id": record_id})
        return self._json(response)

    async def create_record(self, *, collection: str, data: dict[str, Any]) -> dict[str, Any]:
        """Create a record and return the gateway's representation (with its canonical id)."""
        _validate_collection_name(collection)
        response = await self._request("POST", f"/{collection}", json=data)
        if response.status_code != constants.HTTP_CREATED:
            logger.warning(
                "Unexpected status for create",
                extra={"collection": collection, "status": response.status_code},
            )
        record = self._json(response)

        logger.info("Created record", extra={"collection": collection, "record_id": record.get("id")})
        return record

    async def update_record(self, *, collection: str, record_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """PATCH a record and return the updated representation."""
        if not data:
            msg = "Empty update payload"
            raise ValueError(msg)

        _validate_collection_name(collection)
        response = await self._request("PATCH", f"/{collection}/{record_id}", json=data)

        logger.info("Updated record", extra={"collection": collection, "record_id": record_id})
        return self._json(response)

    async def delete_record(self, *, collection: str, record_id: str) -> None:
        """Delete a record by ID."""
        _validate_collection_name(collection)
        await self._request("DELETE", f"/{collection}/{record_id}")

        logger.info("Deleted record", extra={"collection": collection, "record_id": record_id})

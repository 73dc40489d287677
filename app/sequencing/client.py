"""
SequencingClient - the sequencing API over HTTP.

Exposes the same `list_ordered` / `reorder` / `delete` surface as
ReorderCoordinator so an OptimisticListView can drive a remote service.
HTTP failures are mapped back onto the sequencing error types.
"""
import logging
from typing import Awaitable, Callable, List, Optional

import httpx

from app.sequencing.errors import (
    BackendUnavailableError,
    ItemNotFoundError,
    PartialReorderError,
    ReorderError,
)
from app.sequencing.models import ReorderResult, ReorderState, SequencedItem
from app.sequencing.schemas import PartialReorderResponse, ReorderResponse, SequencedItemResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


def _to_item(data: SequencedItemResponse) -> SequencedItem:
    return SequencedItem(
        id=data.id,
        parent_scope_id=data.parent_scope_id,
        sequence=data.sequence,
        updated_at=data.updated_at,
        name=data.name,
    )


class SequencingClient:
    """Remote coordinator for one sequenced entity kind."""

    def __init__(
        self,
        base_url: str,
        kind: str,
        access_token: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.kind = kind
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Authorization": f"Bearer {access_token}"},
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "SequencingClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(method, f"/sequencing/{self.kind}{path}", **kwargs)
        except httpx.TransportError as e:
            logger.error(f"Sequencing request {method} {path} failed: {e}")
            raise BackendUnavailableError(str(e)) from e

    def _raise_for_status(self, response: httpx.Response, parent_scope_id: str, item_id: Optional[str] = None) -> None:
        if response.is_success:
            return
        if response.status_code == 409:
            body = PartialReorderResponse.model_validate(response.json())
            raise PartialReorderError([_to_item(item) for item in body.items], body.failed_ids)
        if response.status_code == 404 and item_id is not None:
            raise ItemNotFoundError(item_id, parent_scope_id)
        if response.status_code >= 500:
            raise BackendUnavailableError(f"Server responded {response.status_code}")
        raise ReorderError(f"Server responded {response.status_code}: {response.text}")

    def _to_result(self, response: httpx.Response) -> ReorderResult:
        body = ReorderResponse.model_validate(response.json())
        return ReorderResult(
            parent_scope_id=body.parent_scope_id,
            items=[_to_item(item) for item in body.items],
            state=ReorderState(body.state),
        )

    async def list_ordered(self, parent_scope_id: str) -> List[SequencedItem]:
        response = await self._request("GET", f"/{parent_scope_id}")
        self._raise_for_status(response, parent_scope_id)
        return [_to_item(SequencedItemResponse.model_validate(item)) for item in response.json()]

    async def reorder(self, parent_scope_id: str, moved_item_id: str, new_index: int) -> ReorderResult:
        response = await self._request(
            "POST",
            f"/{parent_scope_id}/reorder",
            json={"item_id": moved_item_id, "new_index": new_index},
        )
        self._raise_for_status(response, parent_scope_id, moved_item_id)
        return self._to_result(response)

    async def compact(self, parent_scope_id: str) -> ReorderResult:
        response = await self._request("POST", f"/{parent_scope_id}/compact")
        self._raise_for_status(response, parent_scope_id)
        return self._to_result(response)

    async def delete(
        self,
        parent_scope_id: str,
        item_id: str,
        remove: Optional[Callable[[], Awaitable[None]]] = None,
    ) -> ReorderResult:
        """Run the entity delete (`remove`), then read back the renumbered scope.

        Entity delete endpoints renumber server-side, so no writes are issued here.
        An `httpx.HTTPStatusError` from `remove` is mapped like any other response.
        """
        if remove is not None:
            try:
                await remove()
            except httpx.TransportError as e:
                raise BackendUnavailableError(str(e)) from e
            except httpx.HTTPStatusError as e:
                self._raise_for_status(e.response, parent_scope_id, item_id)
                raise ReorderError(str(e)) from e
        items = await self.list_ordered(parent_scope_id)
        return ReorderResult(parent_scope_id=parent_scope_id, items=items)

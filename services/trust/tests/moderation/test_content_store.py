import uuid

import httpx
import pytest

from app.moderation.content import ContentStoreError, HttpContentStore

BASE = "http://content.test/api/v1"


def _store(handler, **kwargs) -> HttpContentStore:
    return HttpContentStore(BASE + "/", transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.asyncio
async def test_owner_lookup() -> None:
    song = uuid.uuid4()
    owner = uuid.uuid4()
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"owner_ids": [str(owner)]})

    store = _store(handler, internal_token="s3cret")

    assert await store.owner_of("song", song) == [owner]
    assert str(seen[0].url) == f"{BASE}/internal/content/song/{song}/owners"
    assert seen[0].headers["X-Internal-Token"] == "s3cret"


@pytest.mark.asyncio
async def test_missing_content_has_no_owners() -> None:
    store = _store(lambda request: httpx.Response(404, json={"detail": "Not found"}))

    assert await store.owner_of("album", uuid.uuid4()) is None


@pytest.mark.asyncio
async def test_delete_treats_404_as_done() -> None:
    methods: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        methods.append(request.method)
        return httpx.Response(404)

    await _store(handler).hard_delete("playlist", uuid.uuid4())
    assert methods == ["DELETE"]


@pytest.mark.asyncio
async def test_server_errors_surface_the_envelope_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            503, json={"error": {"code": "internal_error", "message": "Storage offline"}}
        )

    with pytest.raises(ContentStoreError, match="Storage offline"):
        await _store(handler).hard_delete("song", uuid.uuid4())


@pytest.mark.asyncio
async def test_connection_failure() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ContentStoreError, match="unavailable"):
        await _store(handler).owner_of("comment", uuid.uuid4())


@pytest.mark.asyncio
async def test_malformed_owner_list() -> None:
    store = _store(lambda request: httpx.Response(200, json={"owner_ids": ["not-a-uuid"]}))

    with pytest.raises(ContentStoreError):
        await store.owner_of("song", uuid.uuid4())

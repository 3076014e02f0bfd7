from __future__ import annotations

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from vibebox.core.exceptions import ErrorCode, VendorError
from vibebox.providers.chinamobile.auth import verify_signature
from vibebox.providers.chinamobile.client import ChinaMobileAPIError, ChinaMobileClient

from fake_ecs import API, FakeECS

pytestmark = [pytest.mark.unit, pytest.mark.xdist_group("unit")]


@pytest.fixture
async def client(endpoint: str):
    async with ChinaMobileClient("ak", "sk", endpoint=endpoint) as c:
        yield c


# ─── Envelope ────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_unwraps_ok_envelope(client: ChinaMobileClient, ecs: FakeECS):
    ecs.statuses["i-1"] = ["active"]
    details = await client.describe_instance("i-1")
    assert details["id"] == "i-1"
    assert details["status"] == "active"


@pytest.mark.asyncio
async def test_error_envelope_raises(client: ChinaMobileClient):
    with pytest.raises(ChinaMobileAPIError) as exc:
        await client.describe_instance("i-missing")
    assert isinstance(exc.value, VendorError)
    assert exc.value.code == "INSTANCE_NOT_FOUND"
    assert exc.value.request_id == "req-err"
    assert exc.value.provider == "chinamobile"
    assert str(exc.value) == (
        "[INSTANCE_NOT_FOUND] Instance i-missing does not exist (request_id=req-err)"
    )


@pytest.mark.asyncio
async def test_error_envelope_without_details():
    async def handler(_: web.Request) -> web.Response:
        return web.json_response({"requestId": "r", "state": "EXCEPTION"})

    app = web.Application()
    app.router.add_get(f"{API}/describe-instance", handler)
    srv = TestServer(app)
    await srv.start_server()
    try:
        async with ChinaMobileClient("ak", "sk", endpoint=f"http://{srv.host}:{srv.port}") as c:
            with pytest.raises(ChinaMobileAPIError) as exc:
                await c.describe_instance("i-1")
    finally:
        await srv.close()
    assert exc.value.code == ErrorCode.UNKNOWN_ERROR
    assert exc.value.message == "API request failed"


@pytest.mark.asyncio
async def test_numeric_error_code_is_stringified():
    async def handler(_: web.Request) -> web.Response:
        return web.json_response({"requestId": "r", "state": "ERROR", "errorCode": 4001})

    async def http_error(_: web.Request) -> web.Response:
        return web.json_response({"state": "ERROR", "errorCode": 5000}, status=500)

    app = web.Application()
    app.router.add_get(f"{API}/describe-instance", handler)
    app.router.add_get(f"{API}/list-instances", http_error)
    srv = TestServer(app)
    await srv.start_server()
    try:
        async with ChinaMobileClient("ak", "sk", endpoint=f"http://{srv.host}:{srv.port}") as c:
            with pytest.raises(ChinaMobileAPIError) as enveloped:
                await c.describe_instance("i-1")
            with pytest.raises(ChinaMobileAPIError) as failed:
                await c.list_instances()
    finally:
        await srv.close()
    assert enveloped.value.code == "4001"
    assert failed.value.code == "5000"


@pytest.mark.asyncio
async def test_http_error_with_envelope_body():
    async def handler(_: web.Request) -> web.Response:
        return web.json_response(
            {"requestId": "r-500", "state": "ERROR", "errorCode": "InternalError", "errorMessage": "oops"},
            status=500,
        )

    async def plain(_: web.Request) -> web.Response:
        return web.Response(status=502, text="bad gateway")

    app = web.Application()
    app.router.add_get(f"{API}/describe-instance", handler)
    app.router.add_get(f"{API}/list-instances", plain)
    srv = TestServer(app)
    await srv.start_server()
    try:
        async with ChinaMobileClient("ak", "sk", endpoint=f"http://{srv.host}:{srv.port}") as c:
            with pytest.raises(ChinaMobileAPIError) as enveloped:
                await c.describe_instance("i-1")
            with pytest.raises(ChinaMobileAPIError) as bare:
                await c.list_instances()
    finally:
        await srv.close()

    assert enveloped.value.code == "InternalError"
    assert enveloped.value.request_id == "r-500"
    assert bare.value.code == ErrorCode.HTTP_ERROR
    assert "502" in bare.value.message


@pytest.mark.asyncio
async def test_network_failure():
    async with ChinaMobileClient("ak", "sk", endpoint="http://127.0.0.1:1", timeout=5) as c:
        with pytest.raises(ChinaMobileAPIError) as exc:
            await c.describe_instance("i-1")
    assert exc.value.code == ErrorCode.NETWORK_ERROR


# ─── Signing ─────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_get_signed_in_query(client: ChinaMobileClient, ecs: FakeECS):
    ecs.statuses["i-1"] = ["active"]
    await client.describe_instance("i-1")
    query = ecs.requests[-1]["query"]
    assert query["AccessKey"] == "ak"
    assert query["instanceId"] == "i-1"
    assert verify_signature(query, "sk", query["Signature"])


@pytest.mark.asyncio
async def test_post_signed_in_headers(client: ChinaMobileClient, ecs: FakeECS):
    ecs.statuses["i-1"] = ["active"]
    await client.start_instances(["i-1"])
    request = ecs.requests[-1]
    assert request["headers"]["AccessKey"] == "ak"
    assert "Signature" in request["headers"]
    assert "Signature" not in request["query"]


# ─── Operations ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_create_instances(client: ChinaMobileClient, ecs: FakeECS):
    response = await client.create_instances(
        {
            "zoneId": "cn-jiangsu-1a",
            "chargeMode": "HOUR",
            "flavorName": "s1.large.2",
            "bootVolume": {"size": 40, "volumeType": "highPerformance"},
            "imageId": "ubuntu-22.04-base",
            "privateNetwork": {"networkId": "net-1", "portType": 0},
            "instanceName": "box",
            "password": "encrypted",
            "quantity": 1,
        }
    )
    assert response == {"orderId": "order-1", "instanceIds": ["i-1"]}
    assert ecs.created[0]["flavorName"] == "s1.large.2"


@pytest.mark.asyncio
async def test_batch_operations(client: ChinaMobileClient, ecs: FakeECS):
    ecs.statuses["i-1"] = ["active"]
    await client.start_instances(["i-1"])
    await client.stop_instances(["i-1"])
    await client.reboot_instances(["i-1"])
    await client.delete_instances(
        {"instanceIds": ["i-1"], "deletePublicNetwork": True, "deleteDataVolumes": True}
    )
    assert [action for action, _ in ecs.batch_calls] == ["start", "stop", "reboot", "delete"]


@pytest.mark.asyncio
async def test_list_instances(client: ChinaMobileClient, ecs: FakeECS):
    ecs.statuses["i-1"] = ["active"]
    ecs.statuses["i-2"] = ["shutoff"]
    result = await client.list_instances(page_num=1, page_size=10)
    assert result["totalCount"] == 2
    assert [s["id"] for s in result["content"]] == ["i-1", "i-2"]
    assert ecs.requests[-1]["query"]["pageSize"] == "10"


@pytest.mark.asyncio
async def test_list_flavors(client: ChinaMobileClient, ecs: FakeECS):
    ecs.flavors = [{"flavorName": "s1.large.2", "flavorType": "s1", "cpu": 2, "ram": 4096}]
    flavors = await client.list_flavors("cn-jiangsu-1a")
    assert flavors == ecs.flavors
    assert ecs.requests[-1]["query"]["zoneId"] == "cn-jiangsu-1a"


@pytest.mark.asyncio
async def test_describe_zones_falls_back_to_next_endpoint(client: ChinaMobileClient, ecs: FakeECS):
    zones = await client.describe_zones()
    assert zones[0]["zoneId"] == "cn-jiangsu-1a"
    assert [r["path"] for r in ecs.requests] == [
        f"{API}/describe-zones",
        f"{API}/describe-availability-zones",
    ]


@pytest.mark.asyncio
async def test_describe_zones_all_endpoints_fail():
    srv = TestServer(web.Application())
    await srv.start_server()
    try:
        async with ChinaMobileClient("ak", "sk", endpoint=f"http://{srv.host}:{srv.port}") as c:
            with pytest.raises(ChinaMobileAPIError, match="Unable to query zones"):
                await c.describe_zones()
    finally:
        await srv.close()


# ─── Health ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_health_check_not_found_means_reachable(client: ChinaMobileClient):
    assert await client.health_check() is True


@pytest.mark.asyncio
async def test_health_check_unreachable():
    async with ChinaMobileClient("ak", "sk", endpoint="http://127.0.0.1:1", timeout=5) as c:
        assert await c.health_check() is False

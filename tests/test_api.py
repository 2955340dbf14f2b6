"""Control-plane tests for the v1 light API."""

from __future__ import annotations

import httpx
import pytest

from api.app import create_app
from core.bridge import HueBridge
from core.config import BridgeConfig

pytestmark = pytest.mark.anyio


async def test_description(client, bridge):
    resp = await client.get("/description.xml")
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/xml")
    assert resp.text == bridge.description()
    assert f"<UDN>uuid:{bridge.identity.uuid}</UDN>" in resp.text


async def test_pairing_stub(client):
    resp = await client.post("/api", json={"devicetype": "app#phone"})
    assert resp.status_code == 200
    assert resp.json() == [{"success": {"username": "foo"}}]


async def test_list_lights(client, bridge):
    resp = await client.get("/api/foo/lights")
    assert resp.status_code == 200
    assert resp.json() == {}

    a = bridge.add_light("A")
    b = bridge.register_light("B", model="LWB006")
    resp = await client.get("/api/anyuser/lights")
    data = resp.json()
    assert list(data) == [str(a), str(b)]
    assert data[str(b)]["type"] == "Dimmable light"


async def test_end_to_end_default_light(client, bridge):
    light_id = bridge.add_light("Kitchen Light")
    resp = await client.get(f"/api/foo/lights/{light_id}")
    assert resp.status_code == 200
    data = resp.json()
    assert data["name"] == "Kitchen Light"
    assert data["state"] == bridge.models.default.state


async def test_unknown_light_is_404_with_empty_body(client):
    resp = await client.get("/api/foo/lights/999")
    assert resp.status_code == 404
    assert resp.content == b""

    resp = await client.put("/api/foo/lights/999/state", json={"on": True})
    assert resp.status_code == 404
    assert resp.content == b""

    resp = await client.get("/api/foo/lights/abc")
    assert resp.status_code == 404


async def test_put_state(client, bridge):
    light_id = bridge.add_light("A")
    resp = await client.put(f"/api/foo/lights/{light_id}/state", json={"on": True, "bri": 77})
    assert resp.status_code == 200
    assert resp.json() == [
        {"success": {f"/lights/{light_id}/state/on": True}},
        {"success": {f"/lights/{light_id}/state/bri": 77}},
    ]

    resp = await client.get(f"/api/foo/lights/{light_id}")
    assert resp.json()["state"]["on"] is True
    assert resp.json()["state"]["bri"] == 77


async def test_put_state_with_form_content_type(client, bridge):
    light_id = bridge.add_light("A")
    resp = await client.put(
        f"/api/foo/lights/{light_id}/state",
        content=b'{"on": true}',
        headers={"content-type": "application/x-www-form-urlencoded"},
    )
    assert resp.status_code == 200
    assert bridge.get_light(light_id)["state"]["on"] is True


async def test_put_state_bad_body(client, bridge):
    light_id = bridge.add_light("A")
    resp = await client.put(f"/api/foo/lights/{light_id}/state", content=b"{oops")
    assert resp.status_code == 400

    resp = await client.put(f"/api/foo/lights/{light_id}/state", json=[1, 2])
    assert resp.status_code == 400

    resp = await client.put(f"/api/foo/lights/{light_id}/state", content=b"")
    assert resp.status_code == 200
    assert resp.json() == []


async def test_put_state_with_failing_callback(client, bridge):
    def callback(key, value):
        if key == "x":
            raise ValueError("bad key")

    light_id = bridge.register_light("A", callback=callback)
    resp = await client.put(f"/api/foo/lights/{light_id}/state", json={"x": 1, "y": 2})

    assert resp.status_code == 200
    assert resp.json() == [
        {"success": {f"/lights/{light_id}/state/x": 1}},
        {"success": {f"/lights/{light_id}/state/y": 2}},
    ]
    assert bridge.get_light(light_id)["state"]["y"] == 2


async def test_put_state_with_global_callback_leaves_state():
    seen = []
    bridge = HueBridge(
        BridgeConfig(
            ip_address="192.0.2.10",
            upnp=False,
            callback=lambda hbe, light_id, light, state: seen.append(state),
        )
    )
    light_id = bridge.add_light("A")
    transport = httpx.ASGITransport(app=create_app(bridge))
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        resp = await client.put(f"/api/foo/lights/{light_id}/state", json={"on": True})

    assert resp.status_code == 200
    assert resp.json() == [{"success": {f"/lights/{light_id}/state/on": True}}]
    assert seen == [{"on": True}]
    assert bridge.get_light(light_id)["state"]["on"] is False


async def test_custom_description_path_and_debug_logging(caplog):
    import logging

    caplog.set_level(logging.DEBUG, logger="huesim.api")
    bridge = HueBridge(
        BridgeConfig(
            ip_address="192.0.2.10",
            upnp=False,
            debug=True,
            description_path="/upnp/desc.xml",
        )
    )
    transport = httpx.ASGITransport(app=create_app(bridge))
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        resp = await client.get("/upnp/desc.xml")
        assert resp.status_code == 200
        resp = await client.get("/description.xml")
        assert resp.status_code == 404

    assert "FastAPI app created, description at /upnp/desc.xml" in caplog.text
    assert "routers" not in caplog.text
    assert "GET /upnp/desc.xml" in caplog.text


@pytest.mark.parametrize("alias", ["01", "1_0", "+1", "%201", "1%20", "10.0"])
async def test_light_id_aliases_are_404(client, bridge, alias):
    for i in range(10):
        bridge.add_light(f"L{i}")

    resp = await client.get(f"/api/foo/lights/{alias}")
    assert resp.status_code == 404
    assert resp.content == b""

    resp = await client.put(f"/api/foo/lights/{alias}/state", json={"on": True})
    assert resp.status_code == 404
    assert all(light["state"]["on"] is False for light in bridge.lights().values())

    resp = await client.get("/api/foo/lights/10")
    assert resp.status_code == 200

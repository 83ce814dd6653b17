import pytest
from httpx import AsyncClient

pytestmark = pytest.mark.asyncio


async def test_get_state_defaults_to_safe(client: AsyncClient):
    response = await client.get("/api/v1/capabilities")
    assert response.status_code == 200
    data = response.json()
    assert data["execution_mode"] == "manual"
    assert data["active_profile"] == "safe"
    assert data["capabilities"]["write_file"]["enabled"] is False
    assert data["capabilities"]["unknown"]["executable"] is False


async def test_list_profiles(client: AsyncClient):
    response = await client.get("/api/v1/capabilities/profiles")
    assert response.status_code == 200
    profiles = {p["name"]: p for p in response.json()}
    assert set(profiles) == {"safe", "editor", "organizer", "analysis"}
    assert sorted(profiles["editor"]["enabled_caps"]) == ["edit_file", "read_file", "write_file"]


async def test_apply_profile(client: AsyncClient, runtime):
    response = await client.post("/api/v1/capabilities/profiles/organizer/apply")
    assert response.status_code == 200
    assert response.json()["active_profile"] == "organizer"
    assert runtime.capabilities.can_execute("organize_files") is True

    response = await client.post("/api/v1/capabilities/profiles/yolo/apply")
    assert response.status_code == 404


async def test_set_mode(client: AsyncClient, runtime):
    response = await client.put("/api/v1/capabilities/mode", json={"mode": "disabled"})
    assert response.status_code == 200
    assert response.json()["execution_mode"] == "disabled"
    assert response.json()["active_profile"] == "custom"

    response = await client.put("/api/v1/capabilities/mode", json={"mode": "autopilot"})
    assert response.status_code == 422


async def test_enable_and_disable_capability(client: AsyncClient, runtime):
    response = await client.post("/api/v1/capabilities/read_file/enable")
    assert response.status_code == 200
    assert response.json()["capabilities"]["read_file"]["enabled"] is True
    assert runtime.capabilities.can_execute("read_file") is True

    response = await client.post("/api/v1/capabilities/read_file/disable")
    assert response.json()["capabilities"]["read_file"]["enabled"] is False


@pytest.mark.parametrize("cap", ["teleport", "unknown"])
async def test_unknown_capability_returns_404(client: AsyncClient, cap: str):
    response = await client.post(f"/api/v1/capabilities/{cap}/enable")
    assert response.status_code == 404

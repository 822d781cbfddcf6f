from uuid import UUID

import pytest
from httpx import AsyncClient

from famcare.models.user import FamilyRole, User, parse_family_role
from famcare.services.feature_service import FEATURE_CATALOG, is_feature_enabled
from helpers import auth_headers, register_user


def test_parse_family_role_accepts_keys_and_labels() -> None:
    assert parse_family_role("mom") is FamilyRole.MOM
    assert parse_family_role(" DAD ") is FamilyRole.DAD
    assert parse_family_role("дочь") is FamilyRole.DAUGHTER
    assert parse_family_role("Сын") is FamilyRole.SON
    assert parse_family_role("aunt") is None
    assert parse_family_role(None) is None


def test_feature_gate_needs_premium_and_family() -> None:
    by_key = {feature.key: feature for feature in FEATURE_CATALOG}
    assert is_feature_enabled(by_key["tasks"], has_premium=False, has_family=False)
    assert not is_feature_enabled(by_key["chat"], has_premium=True, has_family=False)
    assert is_feature_enabled(by_key["chat"], has_premium=False, has_family=True)
    assert not is_feature_enabled(by_key["password_manager"], has_premium=False, has_family=True)
    assert is_feature_enabled(by_key["password_manager"], has_premium=True, has_family=False)


@pytest.mark.asyncio
async def test_roles_are_listed_with_display_names(client: AsyncClient) -> None:
    response = await client.get("/Users/Roles", headers={"X-Request-ID": "roles-1"})
    assert response.status_code == 200
    body = response.json()
    assert body["code"] == 0
    assert body["request_id"] == "roles-1"
    assert body["role_list"][0] == {"key": "grandma", "name": "Бабушка"}
    assert [item["key"] for item in body["role_list"]] == [
        "grandma",
        "grandpa",
        "mom",
        "dad",
        "daughter",
        "son",
    ]


@pytest.mark.asyncio
async def test_update_profile_role_and_birth_date(client: AsyncClient) -> None:
    user = await register_user(client, "profile@example.com")

    response = await client.post(
        "/Users/Info",
        json={"role": "Мама", "date_of_birth": "1985-03-08"},
        headers=auth_headers(user),
    )
    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "mom"
    assert body["role_label"] == "Мама"
    assert body["date_of_birth"] == "1985-03-08"

    bad = await client.post(
        "/Users/Info",
        json={"role": "cousin", "date_of_birth": "1800-01-01"},
        headers=auth_headers(user),
    )
    assert bad.status_code == 422
    assert set(bad.json()["errors"]) == {"role", "date_of_birth"}


@pytest.mark.asyncio
async def test_update_profile_requires_authentication(client: AsyncClient) -> None:
    response = await client.post("/Users/Info", json={"role": "mom"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_features_follow_family_and_premium_status(client: AsyncClient, session) -> None:
    user = await register_user(client, "features@example.com")
    headers = auth_headers(user)

    response = await client.get("/features", headers=headers)
    assert response.status_code == 200
    features = {item["key"]: item for item in response.json()["feature_list"]}
    assert [item["order"] for item in response.json()["feature_list"]] == sorted(
        item["order"] for item in features.values()
    )
    assert features["tasks"]["enabled"] is True
    assert features["chat"]["enabled"] is False
    assert features["password_manager"]["enabled"] is False

    await client.post("/families", json={"name": "Feature Family"}, headers=headers)
    db_user = await session.get(User, UUID(user["user"]["id"]))
    db_user.is_premium = True
    session.add(db_user)
    await session.commit()

    response = await client.get("/features", headers=headers)
    features = {item["key"]: item for item in response.json()["feature_list"]}
    assert features["chat"]["enabled"] is True
    assert features["password_manager"]["enabled"] is True

import pytest
from httpx import AsyncClient

from famcare.services.chat_service import clamp_take
from helpers import auth_headers, register_user


async def family_with_two_members(client: AsyncClient) -> tuple[dict, dict, dict]:
    admin = await register_user(client, "chat.admin@example.com", first_name="Olga")
    member = await register_user(client, "chat.member@example.com", first_name="Ivan")
    family_res = await client.post(
        "/families",
        json={"name": "Chatty Family"},
        headers=auth_headers(admin),
    )
    family = family_res.json()
    join_res = await client.post(
        "/families/join-by-code",
        json={"invite_code": family["invite_code"]},
        headers=auth_headers(member),
    )
    assert join_res.status_code == 200
    return family, admin, member


async def send(client: AsyncClient, family_id: str, auth: dict, text: str) -> dict:
    response = await client.post(
        f"/families/{family_id}/messages",
        json={"text": text},
        headers=auth_headers(auth),
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_clamp_take_bounds() -> None:
    assert clamp_take(None) == 50
    assert clamp_take(0) == 1
    assert clamp_take(-5) == 1
    assert clamp_take(75) == 75
    assert clamp_take(10_000) == 200


@pytest.mark.asyncio
async def test_messages_are_listed_oldest_first_with_before_cursor(client: AsyncClient) -> None:
    family, admin, member = await family_with_two_members(client)
    url = f"/families/{family['id']}/messages"

    first = await send(client, family["id"], admin, "  Good morning  ")
    second = await send(client, family["id"], member, "Morning!")
    third = await send(client, family["id"], admin, "Pills taken?")
    assert first["text"] == "Good morning"
    assert second["author_user_id"] == member["user"]["id"]

    listed = await client.get(url, headers=auth_headers(member))
    assert listed.status_code == 200
    assert [m["id"] for m in listed.json()] == [first["id"], second["id"], third["id"]]

    older = await client.get(
        url,
        params={"before": third["sent_at"]},
        headers=auth_headers(member),
    )
    assert [m["id"] for m in older.json()] == [first["id"], second["id"]]

    latest_only = await client.get(url, params={"take": 0}, headers=auth_headers(member))
    assert [m["id"] for m in latest_only.json()] == [third["id"]]

    page = await client.get(url, params={"take": 2}, headers=auth_headers(member))
    assert [m["id"] for m in page.json()] == [second["id"], third["id"]]


@pytest.mark.asyncio
async def test_outsider_cannot_read_or_post(client: AsyncClient) -> None:
    family, _, _ = await family_with_two_members(client)
    outsider = await register_user(client, "outsider.chat@example.com")
    url = f"/families/{family['id']}/messages"

    read = await client.get(url, headers=auth_headers(outsider))
    assert read.status_code == 403
    post = await client.post(url, json={"text": "hi"}, headers=auth_headers(outsider))
    assert post.status_code == 403


@pytest.mark.asyncio
async def test_blank_or_oversized_text_is_rejected(client: AsyncClient) -> None:
    family, admin, _ = await family_with_two_members(client)
    url = f"/families/{family['id']}/messages"

    blank = await client.post(url, json={"text": "   "}, headers=auth_headers(admin))
    assert blank.status_code == 422
    assert "text" in blank.json()["errors"]

    too_long = await client.post(url, json={"text": "x" * 4001}, headers=auth_headers(admin))
    assert too_long.status_code == 422


@pytest.mark.asyncio
async def test_only_author_can_edit_or_delete(client: AsyncClient) -> None:
    family, admin, member = await family_with_two_members(client)
    message = await send(client, family["id"], member, "Buy milk")
    url = f"/families/{family['id']}/messages/{message['id']}"

    admin_edit = await client.patch(url, json={"text": "Buy bread"}, headers=auth_headers(admin))
    assert admin_edit.status_code == 403
    admin_delete = await client.delete(url, headers=auth_headers(admin))
    assert admin_delete.status_code == 403

    edited = await client.patch(url, json={"text": "Buy oat milk"}, headers=auth_headers(member))
    assert edited.status_code == 200
    assert edited.json()["text"] == "Buy oat milk"
    assert edited.json()["edited_at"] is not None
    assert edited.json()["sent_at"] == message["sent_at"]


@pytest.mark.asyncio
async def test_deleted_message_disappears(client: AsyncClient) -> None:
    family, admin, member = await family_with_two_members(client)
    keep = await send(client, family["id"], admin, "Keep me")
    gone = await send(client, family["id"], member, "Oops")
    url = f"/families/{family['id']}/messages/{gone['id']}"

    deleted = await client.delete(url, headers=auth_headers(member))
    assert deleted.status_code == 204

    listed = await client.get(f"/families/{family['id']}/messages", headers=auth_headers(admin))
    assert [m["id"] for m in listed.json()] == [keep["id"]]

    edit_deleted = await client.patch(url, json={"text": "Back"}, headers=auth_headers(member))
    assert edit_deleted.status_code == 404
    delete_again = await client.delete(url, headers=auth_headers(member))
    assert delete_again.status_code == 404

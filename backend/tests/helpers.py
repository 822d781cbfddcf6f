from httpx import AsyncClient

DEFAULT_PASSWORD = "testpass123"


async def register_user(
    client: AsyncClient,
    email: str,
    *,
    first_name: str = "Anna",
    last_name: str = "Ivanova",
    password: str = DEFAULT_PASSWORD,
    **extra,
) -> dict:
    response = await client.post(
        "/Auth/Registration",
        json={
            "email": email,
            "password": password,
            "first_name": first_name,
            "last_name": last_name,
            **extra,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def auth_headers(auth: dict) -> dict[str, str]:
    return {"Authorization": f"Bearer {auth['token']['access_token']}"}

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, FastAPI, Header, HTTPException, Query
from fastapi.testclient import TestClient
from pydantic import BaseModel, Field

from typedid import TypeIDError, parse

from .conftest import OrgId, OrgIdFactory, UserId, UserIdFactory


parse_user_id = parse(UserId)
parse_org_id = parse(OrgId)


# FastAPI validators - parameter names must match route parameters
def validate_user_id(user_id: str) -> UserId:
    try:
        return parse_user_id(user_id)
    except TypeIDError as e:
        raise HTTPException(422, f"Invalid user ID: {e}") from None


def validate_org_id(org_id: str) -> OrgId:
    try:
        return parse_org_id(org_id)
    except TypeIDError as e:
        raise HTTPException(422, f"Invalid org ID: {e}") from None


class UserRecord(BaseModel):
    id: UserId = Field(default_factory=UserIdFactory)
    name: str
    org_id: OrgId | None = None


app = FastAPI()
users: dict[str, UserRecord] = {}


@app.post("/users")
def create_user(name: str, org_id: str | None = None) -> UserRecord:
    parsed_org_id = validate_org_id(org_id) if org_id else None
    user = UserRecord(name=name, org_id=parsed_org_id)
    users[str(user.id)] = user
    return user


@app.post("/users/from-json")
def create_user_from_json(user: UserRecord) -> UserRecord:
    """Create user from JSON body - TypeID validated by Pydantic."""
    users[str(user.id)] = user
    return user


@app.get("/users/{user_id}")
def get_user(user_id: Annotated[UserId, Depends(validate_user_id)]) -> UserRecord:
    if str(user_id) not in users:
        raise HTTPException(404, "User not found")
    return users[str(user_id)]


@app.get("/users")
def list_users(org_id: Annotated[str | None, Query()] = None) -> list[UserRecord]:
    if org_id is None:
        return list(users.values())
    parsed_org_id = validate_org_id(org_id)
    return [u for u in users.values() if u.org_id == parsed_org_id]


def validate_user_id_header(x_user_id: Annotated[str, Header()]) -> UserId:
    return validate_user_id(x_user_id)


@app.get("/me")
def get_current_user(
    user_id: Annotated[UserId, Depends(validate_user_id_header)],
) -> UserRecord:
    if str(user_id) not in users:
        raise HTTPException(404, "User not found")
    return users[str(user_id)]


client = TestClient(app)


class TestFastAPIPathParams:
    def setup_method(self) -> None:
        users.clear()

    def test_valid_user_id_in_path(self) -> None:
        user_id = client.post("/users?name=Alice").json()["id"]

        response = client.get(f"/users/{user_id}")
        assert response.status_code == 200
        assert response.json()["name"] == "Alice"

    def test_invalid_user_id_format_returns_422(self) -> None:
        response = client.get("/users/not_a_valid_id")
        assert response.status_code == 422

    def test_wrong_prefix_returns_422(self) -> None:
        response = client.get(f"/users/{OrgIdFactory()}")
        assert response.status_code == 422
        assert "Expected prefix 'user', got 'org'" in response.text

    def test_user_not_found_returns_404(self) -> None:
        response = client.get(f"/users/{UserIdFactory()}")
        assert response.status_code == 404


class TestFastAPIQueryParams:
    def setup_method(self) -> None:
        users.clear()

    def test_filter_by_org_id(self) -> None:
        org1 = OrgIdFactory()
        org2 = OrgIdFactory()

        client.post(f"/users?name=Alice&org_id={org1}")
        client.post(f"/users?name=Bob&org_id={org1}")
        client.post(f"/users?name=Charlie&org_id={org2}")

        assert len(client.get(f"/users?org_id={org1}").json()) == 2
        assert len(client.get(f"/users?org_id={org2}").json()) == 1

    def test_invalid_org_id_returns_422(self) -> None:
        response = client.get("/users?org_id=invalid")
        assert response.status_code == 422


class TestFastAPIJsonBody:
    def setup_method(self) -> None:
        users.clear()

    def test_generated_id_is_canonical_string(self) -> None:
        data = client.post("/users?name=Alice").json()
        assert data["id"].startswith("user_")
        assert len(data["id"]) == len("user_") + 26

    def test_valid_typeid_in_json_body(self) -> None:
        user_id = UserIdFactory()
        org_id = OrgIdFactory()

        response = client.post(
            "/users/from-json",
            json={"id": str(user_id), "name": "Alice", "org_id": str(org_id)},
        )

        assert response.status_code == 200
        assert response.json() == {"id": str(user_id), "name": "Alice", "org_id": str(org_id)}

    def test_invalid_typeid_in_body_returns_422(self) -> None:
        response = client.post("/users/from-json", json={"id": "not_valid", "name": "Bob"})
        assert response.status_code == 422
        assert "id" in response.text

    def test_wrong_entity_in_body_returns_422(self) -> None:
        user_id = UserIdFactory()
        response = client.post(
            "/users/from-json",
            json={"id": str(user_id), "name": "Dave", "org_id": str(UserIdFactory())},
        )
        assert response.status_code == 422


class TestFastAPIHeaders:
    def setup_method(self) -> None:
        users.clear()

    def test_valid_user_id_in_header(self) -> None:
        user_id = client.post("/users?name=Alice").json()["id"]

        response = client.get("/me", headers={"X-User-Id": user_id})
        assert response.status_code == 200
        assert response.json()["name"] == "Alice"

    def test_wrong_prefix_in_header_returns_422(self) -> None:
        response = client.get("/me", headers={"X-User-Id": str(OrgIdFactory())})
        assert response.status_code == 422

    def test_missing_header_returns_422(self) -> None:
        assert client.get("/me").status_code == 422

"""Integration tests for complete workflows through the HTTP API."""
from fastapi import status
from catalog_service import crud
from catalog_service.services.permissions import Permission
from tests.conftest import client, login_headers, make_user


def new_book(isbn, title="Neuromancer", author="William Gibson", year=1984):
    return {"title": title, "author": author, "publication_year": year, "isbn": isbn}


class TestCatalogWorkflows:
    """Book lifecycle as seen by an authenticated client."""

    def test_complete_book_lifecycle(self, admin_headers):
        # Step 1: Add
        response = client.post("/books/", json=new_book("978-0441569595"), headers=admin_headers)
        assert response.status_code == status.HTTP_201_CREATED
        created = response.json()
        assert created["created_at"] == created["updated_at"]
        book_id = created["id"]

        # Step 2: Read back by id and isbn
        response = client.get(f"/books/{book_id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == created
        response = client.get("/books/isbn/978-0441569595", headers=admin_headers)
        assert response.json() == created

        # Step 3: Update; client timestamps are ignored
        update = dict(created, title="Neuromancer (Anniversary Edition)", created_at="2000-01-01T00:00:00")
        response = client.put(f"/books/{book_id}", json=update, headers=admin_headers)
        assert response.status_code == 200
        updated = response.json()
        assert updated["title"] == "Neuromancer (Anniversary Edition)"
        assert updated["created_at"] == created["created_at"]
        assert updated["updated_at"] > created["updated_at"]

        # Step 4: Drop
        response = client.delete(f"/books/{book_id}", headers=admin_headers)
        assert response.status_code == status.HTTP_204_NO_CONTENT
        response = client.get(f"/books/{book_id}", headers=admin_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "IdNotFound"

    def test_duplicate_isbn(self, admin_headers):
        client.post("/books/", json=new_book("978-0553283686"), headers=admin_headers)
        response = client.post("/books/", json=new_book("978-0553283686"), headers=admin_headers)
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"] == "IsbnExists"

    def test_isbn_change_rejected(self, admin_headers):
        created = client.post("/books/", json=new_book("978-0553380958"), headers=admin_headers).json()
        response = client.put(
            f"/books/{created['id']}",
            json=dict(created, isbn="978-0000000000"),
            headers=admin_headers,
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "IsbnMismatch"

    def test_listing_with_pagination_and_search(self, admin_headers):
        isbns = [f"978-11111111{i:02d}" for i in range(4)]
        ids = [
            client.post("/books/", json=new_book(isbn, title=f"Sprawl {i}"), headers=admin_headers).json()["id"]
            for i, isbn in enumerate(isbns)
        ]

        response = client.get("/books/", params={"title": "sprawl", "per_page": 2}, headers=admin_headers)
        assert response.status_code == 200
        assert [b["id"] for b in response.json()["books"]] == ids[2:]

        response = client.get("/books/", params={"title": "sprawl", "page": 1, "per_page": 2}, headers=admin_headers)
        assert [b["id"] for b in response.json()["books"]] == ids[:2]

        response = client.get("/books/", params={"title": "sprawl", "page": 3, "per_page": 2}, headers=admin_headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"] == "PaginationInvalid"


class TestAccessControl:
    """Token and permission checks in front of the catalog."""

    def test_missing_and_invalid_tokens(self):
        response = client.get("/books/")
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

        response = client.get("/books/", headers={"Authorization": "Bearer tok_invalid"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["error"] == "Unauthorized"

    def test_login_failures_are_indistinguishable(self, admin_headers):
        wrong_password = client.post("/auth/login", data={"username": "admin", "password": "nope"})
        unknown_user = client.post("/auth/login", data={"username": "ghost", "password": "nope"})

        assert wrong_password.status_code == unknown_user.status_code == status.HTTP_401_UNAUTHORIZED
        assert wrong_password.json() == unknown_user.json()

    def test_drop_without_permission_never_reaches_store(self, session, admin_headers, monkeypatch):
        make_user(session, "reader_one", "pw", actions=[Permission.BOOK_ADD])
        headers = login_headers("reader_one", "pw")
        created = client.post("/books/", json=new_book("978-0000000042"), headers=headers).json()

        calls = []
        monkeypatch.setattr(crud, "delete_book_by_id", lambda *args: calls.append(args))

        response = client.delete(f"/books/{created['id']}", headers=headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error"] == "Forbidden"
        assert calls == []

    def test_reader_can_list_but_not_add(self, session, admin_headers):
        make_user(session, "reader_two", "pw")
        headers = login_headers("reader_two", "pw")

        assert client.get("/books/", headers=headers).status_code == 200
        response = client.post("/books/", json=new_book("978-0000000043"), headers=headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestUserManagement:
    """User and permission administration."""

    def test_new_user_is_disabled_until_enabled(self, admin_headers):
        response = client.post("/users/", json={"username": "newcomer", "password": "pw"}, headers=admin_headers)
        assert response.status_code == status.HTTP_201_CREATED
        user_id = response.json()["user_id"]

        response = client.post("/auth/login", data={"username": "newcomer", "password": "pw"})
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

        response = client.put(f"/users/{user_id}", json={"enabled": True}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["enabled"] is True

        headers = login_headers("newcomer", "pw")
        response = client.get(f"/users/{user_id}/permissions", headers=headers)
        assert response.json() == {"user_id": user_id, "granted_actions": 0, "actions": []}

    def test_duplicate_username(self, admin_headers):
        client.post("/users/", json={"username": "twin", "password": "pw"}, headers=admin_headers)
        response = client.post("/users/", json={"username": "twin", "password": "pw"}, headers=admin_headers)
        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"] == "UsernameExists"

    def test_set_permissions_grants_actions(self, admin_headers):
        user_id = client.post("/users/", json={"username": "promoted", "password": "pw"}, headers=admin_headers).json()["user_id"]
        client.put(f"/users/{user_id}", json={"enabled": True}, headers=admin_headers)
        headers = login_headers("promoted", "pw")

        assert client.post("/books/", json=new_book("978-0000000044"), headers=headers).status_code == 403

        response = client.put(
            f"/users/{user_id}/permissions",
            json={"granted_actions": Permission.BOOK_ADD.value},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["actions"] == ["BOOK_ADD"]

        assert client.post("/books/", json=new_book("978-0000000044"), headers=headers).status_code == 201

    def test_unknown_permission_bits_rejected(self, admin_headers):
        user_id = client.post("/users/", json={"username": "bits", "password": "pw"}, headers=admin_headers).json()["user_id"]
        response = client.put(f"/users/{user_id}/permissions", json={"granted_actions": 1 << 10}, headers=admin_headers)
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_users_cannot_read_others_permissions_without_permission(self, session, admin_headers):
        make_user(session, "nosy", "pw")
        headers = login_headers("nosy", "pw")
        response = client.get("/users/1/permissions", headers=headers)
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_change_own_password(self, session, admin_headers):
        user = make_user(session, "rotator", "old-pw")
        headers = login_headers("rotator", "old-pw")

        response = client.put(
            f"/users/{user.id}/password",
            json={"old_password": "wrong", "new_password": "new-pw"},
            headers=headers,
        )
        assert response.status_code == status.HTTP_401_UNAUTHORIZED

        response = client.put(
            f"/users/{user.id}/password",
            json={"old_password": "old-pw", "new_password": "new-pw"},
            headers=headers,
        )
        assert response.status_code == status.HTTP_204_NO_CONTENT
        login_headers("rotator", "new-pw")

    def test_delete_user(self, admin_headers):
        user_id = client.post("/users/", json={"username": "leaver", "password": "pw"}, headers=admin_headers).json()["user_id"]
        response = client.delete(f"/users/{user_id}", headers=admin_headers)
        assert response.status_code == status.HTTP_204_NO_CONTENT
        response = client.delete(f"/users/{user_id}", headers=admin_headers)
        assert response.status_code == status.HTTP_404_NOT_FOUND

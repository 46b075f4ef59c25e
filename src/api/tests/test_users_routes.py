"""Tests for /users CRUD routes."""

import unittest
import uuid
from unittest.mock import patch

from fastapi.testclient import TestClient

from adapter.fake.user_repository import FakeUserRepository
from adapter.jwt.token_provider import JoseTokenProvider
from api.dependencies import get_token_provider, get_user_repo
from api.main import app
from api.security import get_current_user_required
from domain.model.user import User
from domain.model.validation import EMAIL_ERROR_MESSAGE
from utils.config import Settings

VALID_USER = {
    "name": "Juan S",
    "email": "juan@example.com",
    "password": "Juan!1sa",
    "phones": [{"number": "1234567", "city_code": "1", "country_code": "57"}],
}


class UsersRouteTestCase(unittest.TestCase):

    def setUp(self):
        self.client = TestClient(app)
        self.repo = FakeUserRepository()
        self.tokens = JoseTokenProvider('route-test-secret')
        app.dependency_overrides[get_user_repo] = lambda: self.repo
        app.dependency_overrides[get_token_provider] = lambda: self.tokens

    def tearDown(self):
        app.dependency_overrides.clear()

    def _create(self, payload=None):
        return self.client.post("/users", json=payload or VALID_USER)

    def _auth_headers(self, created: dict) -> dict:
        return {"Authorization": f"Bearer {created['token']}"}


class TestCreateUser(UsersRouteTestCase):

    def test_create_returns_201_without_password(self):
        response = self._create()

        self.assertEqual(response.status_code, 201)
        data = response.json()
        self.assertEqual(data["email"], "juan@example.com")
        self.assertTrue(data["active"])
        self.assertIsNotNone(data["token"])
        self.assertEqual(len(data["phones"]), 1)
        self.assertNotIn("password", data)
        self.assertNotIn("password_hash", data)

    def test_bad_email_then_duplicate_scenario(self):
        bad = self._create({**VALID_USER, "email": "bad-email"})
        self.assertEqual(bad.status_code, 400)
        self.assertEqual(bad.json()["errors"], [EMAIL_ERROR_MESSAGE])

        self.assertEqual(self._create().status_code, 201)
        self.assertEqual(self._create().status_code, 409)

    def test_create_wrong_typed_field_returns_400(self):
        response = self._create({**VALID_USER, "active": "maybe"})

        self.assertEqual(response.status_code, 400)
        self.assertTrue(response.json()["errors"][0].startswith("active: "))
        self.assertEqual(self.repo.find_all(), [])

    def test_failed_write_returns_503(self):
        with patch.object(self.repo, 'save', return_value=None):
            response = self._create()

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["detail"], "Failed to save user")

    def test_documented_error_shapes(self):
        responses = app.openapi()["paths"]["/users"]["post"]["responses"]

        self.assertTrue(responses["400"]["content"]["application/json"]["schema"]["$ref"].endswith("/ValidationErrorResponse"))
        self.assertTrue(responses["409"]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorMessage"))

    def test_create_requires_token_when_public_creation_disabled(self):
        with patch('api.security.get_settings', return_value=Settings(public_user_creation=False)):
            response = self._create()

        self.assertEqual(response.status_code, 401)


class TestReadUsers(UsersRouteTestCase):

    def test_list_requires_bearer_token(self):
        self.assertEqual(self.client.get("/users").status_code, 401)

    def test_invalid_token_returns_401(self):
        response = self.client.get("/users", headers={"Authorization": "Bearer not-a-token"})

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.headers["WWW-Authenticate"], "Bearer")

    def test_list_and_get(self):
        created = self._create().json()
        headers = self._auth_headers(created)

        listed = self.client.get("/users", headers=headers)
        fetched = self.client.get(f"/users/{created['id']}", headers=headers)

        self.assertEqual(listed.status_code, 200)
        self.assertEqual([u["id"] for u in listed.json()], [created["id"]])
        self.assertEqual(fetched.status_code, 200)
        self.assertEqual(fetched.json()["name"], "Juan S")

    def test_list_empty_store_returns_404(self):
        app.dependency_overrides[get_current_user_required] = lambda: User.create(
            name="Ghost", email="ghost@example.com", password_hash="h")

        response = self.client.get("/users")

        self.assertEqual(response.status_code, 404)

    def test_get_unknown_user_returns_404(self):
        headers = self._auth_headers(self._create().json())

        response = self.client.get(f"/users/{uuid.uuid4()}", headers=headers)

        self.assertEqual(response.status_code, 404)

    def test_token_of_deleted_user_is_rejected(self):
        created = self._create().json()
        self.repo.delete(created["id"])

        response = self.client.get("/users", headers=self._auth_headers(created))

        self.assertEqual(response.status_code, 401)


class TestUpdateUsers(UsersRouteTestCase):

    def setUp(self):
        super().setUp()
        self.created = self._create().json()
        self.headers = self._auth_headers(self.created)

    def test_put_replaces_user(self):
        phone_id = self.created["phones"][0]["id"]
        response = self.client.put(
            f"/users/{self.created['id']}",
            headers=self.headers,
            json={
                "name": "Juan Updated",
                "email": "juan@example.com",
                "active": False,
                "phones": [{"id": phone_id, "number": "7654321", "city_code": "2", "country_code": "57"}],
            },
        )

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["name"], "Juan Updated")
        self.assertFalse(data["active"])
        self.assertEqual(data["created_at"], self.created["created_at"])
        self.assertEqual(data["phones"][0]["number"], "7654321")

    def test_put_unknown_user_returns_404(self):
        response = self.client.put(f"/users/{uuid.uuid4()}", headers=self.headers, json=VALID_USER)

        self.assertEqual(response.status_code, 404)

    def test_put_invalid_email_returns_400(self):
        response = self.client.put(
            f"/users/{self.created['id']}", headers=self.headers, json={"email": "bad-email"})

        self.assertEqual(response.status_code, 400)

    def test_put_email_of_other_user_returns_409(self):
        self._create({**VALID_USER, "email": "other@example.com"})

        response = self.client.put(
            f"/users/{self.created['id']}", headers=self.headers, json={"email": "other@example.com"})

        self.assertEqual(response.status_code, 409)

    def test_put_foreign_phone_returns_409(self):
        other = self._create({**VALID_USER, "email": "other@example.com"}).json()

        response = self.client.put(
            f"/users/{self.created['id']}",
            headers=self.headers,
            json={"email": "juan@example.com", "phones": [{"id": other["phones"][0]["id"], "number": "1"}]},
        )

        self.assertEqual(response.status_code, 409)

    def test_patch_changes_only_supplied_fields(self):
        response = self.client.patch(
            f"/users/{self.created['id']}", headers=self.headers, json={"name": "X"})

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["name"], "X")
        self.assertEqual(data["email"], self.created["email"])
        self.assertEqual(data["phones"], self.created["phones"])
        self.assertEqual(data["created_at"], self.created["created_at"])

    def test_patch_unknown_user_returns_404(self):
        response = self.client.patch(f"/users/{uuid.uuid4()}", headers=self.headers, json={"name": "X"})

        self.assertEqual(response.status_code, 404)

    def test_patch_weak_password_returns_400(self):
        response = self.client.patch(
            f"/users/{self.created['id']}", headers=self.headers, json={"password": "weak"})

        self.assertEqual(response.status_code, 400)

    def test_patch_wrong_typed_field_returns_400_and_keeps_user(self):
        response = self.client.patch(
            f"/users/{self.created['id']}", headers=self.headers, json={"name": "X", "active": "maybe"})

        self.assertEqual(response.status_code, 400)
        self.assertTrue(response.json()["errors"][0].startswith("active: "))
        stored = self.client.get(f"/users/{self.created['id']}", headers=self.headers).json()
        self.assertEqual(stored["name"], self.created["name"])


class TestDeleteUser(UsersRouteTestCase):

    def test_delete_removes_user_and_phones(self):
        admin = self._create({**VALID_USER, "email": "admin@example.com", "phones": []}).json()
        target = self._create({
            **VALID_USER,
            "phones": [{"number": "1"}, {"number": "2"}, {"number": "3"}],
        }).json()
        headers = self._auth_headers(admin)

        response = self.client.delete(f"/users/{target['id']}", headers=headers)

        self.assertEqual(response.status_code, 204)
        self.assertEqual(self.client.get(f"/users/{target['id']}", headers=headers).status_code, 404)
        for phone in target["phones"]:
            self.assertIsNone(self.repo.get_phone(phone["id"]))

    def test_delete_unknown_user_returns_404(self):
        headers = self._auth_headers(self._create().json())

        response = self.client.delete(f"/users/{uuid.uuid4()}", headers=headers)

        self.assertEqual(response.status_code, 404)


if __name__ == '__main__':
    unittest.main()

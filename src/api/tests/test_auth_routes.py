"""Tests for /api/auth login and registration routes."""

import unittest

from fastapi.testclient import TestClient

from adapter.fake.user_repository import FakeUserRepository
from adapter.jwt.token_provider import JoseTokenProvider
from api.dependencies import get_token_provider, get_user_repo
from api.main import app
from domain.model.validation import EMAIL_ERROR_MESSAGE, PASSWORD_ERROR_MESSAGE


class TestAuthRoutes(unittest.TestCase):

    def setUp(self):
        self.client = TestClient(app)
        self.repo = FakeUserRepository()
        self.tokens = JoseTokenProvider('route-test-secret')
        app.dependency_overrides[get_user_repo] = lambda: self.repo
        app.dependency_overrides[get_token_provider] = lambda: self.tokens

    def tearDown(self):
        app.dependency_overrides.clear()

    def _register(self, email='ana@x.com', password='Abcdef1!', name='Ana'):
        return self.client.post(
            "/api/auth/registro",
            json={"name": name, "email": email, "password": password},
        )

    def test_register_then_login_scenario(self):
        registered = self._register()
        self.assertEqual(registered.status_code, 200)
        first_token = registered.json()["token"]
        self.assertEqual(self.tokens.subject_of(first_token), 'ana@x.com')

        logged_in = self.client.post(
            "/api/auth/login", json={"email": "ana@x.com", "password": "Abcdef1!"})
        self.assertEqual(logged_in.status_code, 200)
        self.assertEqual(self.tokens.subject_of(logged_in.json()["token"]), 'ana@x.com')

        rejected = self.client.post(
            "/api/auth/login", json={"email": "ana@x.com", "password": "wrong"})
        self.assertEqual(rejected.status_code, 401)
        self.assertEqual(rejected.json()["detail"], "Invalid email or password")

    def test_register_duplicate_email_returns_409(self):
        self._register()

        response = self._register()

        self.assertEqual(response.status_code, 409)

    def test_register_invalid_input_returns_400_with_all_errors(self):
        response = self._register(email='bad-email', password='weak')

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["errors"], [EMAIL_ERROR_MESSAGE, PASSWORD_ERROR_MESSAGE])

    def test_login_missing_fields_returns_400(self):
        response = self.client.post("/api/auth/login", json={})

        self.assertEqual(response.status_code, 400)
        self.assertIn(EMAIL_ERROR_MESSAGE, response.json()["errors"])

    def test_login_wrong_typed_body_returns_400(self):
        response = self.client.post("/api/auth/login", json={"email": 123, "password": "x"})

        self.assertEqual(response.status_code, 400)
        errors = response.json()["errors"]
        self.assertEqual(len(errors), 1)
        self.assertTrue(errors[0].startswith("email: "))

    def test_login_unreadable_body_returns_400(self):
        response = self.client.post(
            "/api/auth/login", content="not json", headers={"Content-Type": "application/json"})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(len(response.json()["errors"]), 1)

    def test_login_unknown_user_returns_401(self):
        response = self.client.post(
            "/api/auth/login", json={"email": "nobody@x.com", "password": "Abcdef1!"})

        self.assertEqual(response.status_code, 401)


if __name__ == '__main__':
    unittest.main()

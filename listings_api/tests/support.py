"""
Shared fixtures for API tests: an app wired to in-memory backends.
"""

import unittest

from fastapi.testclient import TestClient

from listings_api.app import create_app
from listings_api.config import Settings
from listings_api.db import InMemoryDbClient
from listings_api.dependencies import get_db_client, get_identity_verifier
from listings_api.identity import InMemoryIdentityVerifier


class ApiTestCase(unittest.TestCase):
    environment = "development"

    def setUp(self):
        self.db = InMemoryDbClient()
        self.identity = InMemoryIdentityVerifier()
        self.identity.add_user(
            "u1",
            token="token-u1",
            email="u1@example.com",
            display_name="User One",
            phone_number="+15550001",
        )
        self.identity.add_user("u2", token="token-u2", email="u2@example.com")

        self.app = create_app(
            Settings(use_in_memory_backends=True, environment=self.environment)
        )
        self.app.dependency_overrides[get_db_client] = lambda: self.db
        self.app.dependency_overrides[get_identity_verifier] = lambda: self.identity
        self.client = TestClient(self.app)

    def headers(self, token="token-u1"):
        return {"Authorization": f"Bearer {token}"}

    def create_property(self, token="token-u1", **fields):
        payload = {
            "name": "Flat A",
            "type": "apartment",
            "location": "City",
            "price": 1000,
        }
        payload.update(fields)
        response = self.client.post(
            "/api/properties", json=payload, headers=self.headers(token)
        )
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()

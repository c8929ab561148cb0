"""Shared fixtures for the API tests.

Every test gets a fresh SQLite file and a new application instance.
Users are created directly through ``UserService`` and authenticate
with a Bearer session token, the same token the sign-in callback puts
in the session cookie.
"""

import asyncio
import os
import tempfile
import unittest
from unittest import mock

from fastapi.testclient import TestClient

from studio_api.app.core.config import settings
from studio_api.app.core.db import init_db
from studio_api.app.core.policy import ADMIN, CUSTOMER, TEAM
from studio_api.app.core.security import session_for
from studio_api.app.core.store import CollectionStore
from studio_api.app.main import create_app
from studio_api.app.services.user_service import UserService

BOOKING = {
    "packageId": "pkg-1",
    "eventType": "Wedding",
    "eventName": "A & B",
    "date": "2025-01-01",
    "venue": "Hall",
}


class StudioTestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self._database_url = settings.database_url
        settings.database_url = os.path.join(self._tmp.name, "studio.db")
        init_db()
        self.client = TestClient(create_app())

    def tearDown(self):
        self.client.close()
        settings.database_url = self._database_url
        self._tmp.cleanup()

    def make_user(self, email, role=CUSTOMER, name=None):
        return asyncio.run(UserService.create_user(email=email, name=name or email.split("@")[0], role=role))

    def make_admin(self, email="owner@studio.test"):
        return self.make_user(email, role=ADMIN)

    def make_team(self, email="shooter@studio.test"):
        return self.make_user(email, role=TEAM)

    def auth(self, user):
        token = session_for({"id": user.id, "role": user.role})
        return {"Authorization": f"Bearer {token}"}

    def create_booking(self, user, **overrides):
        body = dict(BOOKING, **overrides)
        response = self.client.post("/api/admin/booking", json=body, headers=self.auth(user))
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()["booking"]

    def racing_writes(self, collection):
        """Patch the store so another writer updates ``collection`` right after every read.

        Any read-modify-write on that collection then loses the race.
        """
        read = CollectionStore.get

        def get_then_overwrite(name, doc_id):
            doc = read(name, doc_id)
            if doc is not None and name == collection:
                CollectionStore.replace(name, doc_id, dict(doc.data), doc.version)
            return doc

        return mock.patch.object(CollectionStore, "get", side_effect=get_then_overwrite)

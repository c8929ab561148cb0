import asyncio
import unittest

from studio_api.app.core.config import settings
from studio_api.app.core.security import create_session_token, decode_session_token
from studio_api.app.services.user_service import UserService

from tests.base import StudioTestCase


class SessionTokenTests(unittest.TestCase):
    def test_round_trip(self):
        token = create_session_token({"sub": "u1", "role": "team"})
        claims = decode_session_token(token)
        self.assertEqual(claims["sub"], "u1")
        self.assertEqual(claims["role"], "team")
        self.assertIn("exp", claims)

    def test_tampered_token_is_rejected(self):
        header, payload, signature = create_session_token({"sub": "u1", "role": "customer"}).split(".")
        forged = create_session_token({"sub": "u1", "role": "admin"}).split(".")[1]
        self.assertIsNone(decode_session_token(f"{header}.{forged}.{signature}"))
        self.assertIsNone(decode_session_token("not-a-token"))
        self.assertIsNone(decode_session_token("a.b.c"))

    def test_expired_token_is_rejected(self):
        self.assertIsNone(decode_session_token(create_session_token({"sub": "u1"}, expires_delta=-10)))


class AuthenticationTests(StudioTestCase):
    def test_missing_token(self):
        response = self.client.get("/api/admin/booking")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Unauthorized"})

    def test_invalid_token(self):
        response = self.client.get("/api/admin/booking", headers={"Authorization": "Bearer garbage"})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Invalid or expired session"})

    def test_token_for_deleted_user(self):
        admin = self.make_admin()
        customer = self.make_user("gone@example.com")
        headers = self.auth(customer)
        self.client.delete(f"/api/admin/users/{customer.id}", headers=self.auth(admin))

        response = self.client.get("/api/auth/session", headers=headers)
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "User no longer exists"})

    def test_session_reports_current_user(self):
        customer = self.make_user("jane@example.com", name="Jane")
        response = self.client.get("/api/auth/session", headers=self.auth(customer))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json()["user"],
            {"id": customer.id, "email": "jane@example.com", "name": "Jane", "image": None, "role": "customer"},
        )

    def test_role_change_applies_to_existing_session(self):
        user = self.make_user("later-admin@example.com")
        headers = self.auth(user)
        self.assertEqual(self.client.get("/api/admin/users", headers=headers).status_code, 403)

        asyncio.run(UserService.set_role(user.id, "admin"))
        self.assertEqual(self.client.get("/api/admin/users", headers=headers).status_code, 200)

    def test_bearer_is_used_when_cookie_is_stale(self):
        customer = self.make_user("jane@example.com")
        self.client.cookies.set(settings.session_cookie_name, "garbage")
        response = self.client.get("/api/auth/session", headers=self.auth(customer))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["id"], customer.id)

        response = self.client.get("/api/auth/session")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Invalid or expired session"})

    def test_stale_session_does_not_block_public_routes(self):
        self.client.cookies.set(settings.session_cookie_name, "garbage")
        message = {"name": "Priya", "email": "priya@example.com", "message": "Hello"}
        response = self.client.post("/api/contact", json=message)
        self.assertEqual(response.status_code, 201)

        response = self.client.post("/api/contact", json=message, headers={"Authorization": "Bearer garbage"})
        self.assertEqual(response.status_code, 201)

        response = self.client.get("/dashboard", follow_redirects=False)
        self.assertEqual(response.status_code, 307)
        self.assertEqual(response.headers["location"], "/signin")

    def test_forbidden_role(self):
        team = self.make_team()
        response = self.client.delete("/api/admin/package/p1", headers=self.auth(team))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json(), {"error": "Insufficient permissions"})


if __name__ == "__main__":
    unittest.main()

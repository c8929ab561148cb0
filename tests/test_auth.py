import unittest
from unittest import mock
from urllib.parse import parse_qs, urlparse

from studio_api.app.core import oauth
from studio_api.app.core.config import settings

from tests.base import StudioTestCase

PROFILE = {"email": "new@example.com", "name": "New Customer", "picture": "https://img/new.png"}


class SignInTests(StudioTestCase):
    def setUp(self):
        super().setUp()
        self._client_id = settings.oauth_client_id
        settings.oauth_client_id = "studio-client"

    def tearDown(self):
        settings.oauth_client_id = self._client_id
        super().tearDown()

    def start_signin(self):
        response = self.client.get("/api/auth/signin", follow_redirects=False)
        self.assertEqual(response.status_code, 302)
        location = response.headers["location"]
        self.assertTrue(location.startswith(settings.oauth_authorize_url))
        query = parse_qs(urlparse(location).query)
        self.assertEqual(query["client_id"], ["studio-client"])
        self.assertEqual(query["response_type"], ["code"])
        self.assertIn("oauth_state", response.cookies)
        self.client.cookies.set("oauth_state", response.cookies["oauth_state"])
        return query["state"][0]

    def callback(self, state, code="auth-code"):
        return self.client.get(
            "/api/auth/callback", params={"code": code, "state": state}, follow_redirects=False
        )

    def test_signin_requires_configuration(self):
        settings.oauth_client_id = ""
        response = self.client.get("/api/auth/signin", follow_redirects=False)
        self.assertEqual(response.status_code, 503)

    @mock.patch.object(oauth, "fetch_userinfo", return_value=PROFILE)
    @mock.patch.object(oauth, "exchange_code", return_value={"access_token": "provider-token"})
    def test_first_signin_creates_customer(self, exchange_code, fetch_userinfo):
        state = self.start_signin()
        response = self.callback(state)

        self.assertEqual(response.status_code, 303)
        self.assertEqual(response.headers["location"], "/customer/dashboard")
        exchange_code.assert_called_once_with("auth-code")
        fetch_userinfo.assert_called_once_with("provider-token")
        self.assertIn(settings.session_cookie_name, response.cookies)

        self.client.cookies.set(settings.session_cookie_name, response.cookies[settings.session_cookie_name])
        session = self.client.get("/api/auth/session")
        self.assertEqual(session.status_code, 200)
        user = session.json()["user"]
        self.assertEqual(user["email"], "new@example.com")
        self.assertEqual(user["name"], "New Customer")
        self.assertEqual(user["image"], "https://img/new.png")
        self.assertEqual(user["role"], "customer")

    @mock.patch.object(oauth, "fetch_userinfo", return_value={"email": "owner@studio.test", "name": "Someone"})
    @mock.patch.object(oauth, "exchange_code", return_value={"access_token": "provider-token"})
    def test_existing_admin_lands_on_admin_dashboard(self, exchange_code, fetch_userinfo):
        admin = self.make_admin()
        response = self.callback(self.start_signin())
        self.assertEqual(response.headers["location"], "/admin/dashboard")

        users = self.client.get("/api/admin/users?role=all", headers=self.auth(admin)).json()["users"]
        self.assertEqual(len(users), 1)
        self.assertEqual(users[0]["name"], "owner")

    @mock.patch.object(oauth, "fetch_userinfo", return_value=PROFILE)
    @mock.patch.object(oauth, "exchange_code", return_value={"access_token": "provider-token"})
    def test_profile_fill_that_loses_a_race(self, exchange_code, fetch_userinfo):
        self.make_user("new@example.com")
        state = self.start_signin()
        with self.racing_writes("users"):
            response = self.callback(state)
        self.assertEqual(response.status_code, 409)
        self.assertIn("modified concurrently", response.json()["error"])
        self.assertNotIn(settings.session_cookie_name, response.cookies)

    @mock.patch.object(oauth, "exchange_code")
    def test_state_must_match(self, exchange_code):
        self.start_signin()
        response = self.callback("forged-state")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Invalid sign-in state"})
        exchange_code.assert_not_called()

    def test_callback_without_signin(self):
        response = self.callback("whatever")
        self.assertEqual(response.status_code, 400)

    def test_provider_error_is_reported(self):
        response = self.client.get("/api/auth/callback?error=access_denied", follow_redirects=False)
        self.assertEqual(response.status_code, 400)

    @mock.patch.object(oauth, "exchange_code", side_effect=oauth.OAuthError("Identity provider rejected the token request"))
    def test_token_exchange_failure(self, exchange_code):
        response = self.callback(self.start_signin())
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json(), {"error": "Identity provider rejected the token request"})


class SessionRoutesTests(StudioTestCase):
    def test_dashboard_redirects_by_role(self):
        response = self.client.get("/dashboard", follow_redirects=False)
        self.assertEqual(response.status_code, 307)
        self.assertEqual(response.headers["location"], "/signin")

        for user, path in (
            (self.make_admin(), "/admin/dashboard"),
            (self.make_team(), "/team/dashboard"),
            (self.make_user("jane@example.com"), "/customer/dashboard"),
        ):
            response = self.client.get("/dashboard", headers=self.auth(user), follow_redirects=False)
            self.assertEqual(response.headers["location"], path)

    def test_signout_clears_cookie(self):
        response = self.client.post("/api/auth/signout")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True})
        self.assertIn(f"{settings.session_cookie_name}=", response.headers["set-cookie"])

    def test_session_requires_sign_in(self):
        self.assertEqual(self.client.get("/api/auth/session").status_code, 401)

    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")


if __name__ == "__main__":
    unittest.main()

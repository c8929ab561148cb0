import unittest

from tests.base import StudioTestCase


class UserManagementTests(StudioTestCase):
    def setUp(self):
        super().setUp()
        self.admin = self.make_admin()
        self.other_admin = self.make_admin("partner@studio.test")
        self.customer = self.make_user("jane@example.com", name="Jane")
        self.team = self.make_team()

    def url(self, user_id, suffix=""):
        return f"/api/admin/users/{user_id}{suffix}"

    def test_lists_team_by_default(self):
        response = self.client.get("/api/admin/users", headers=self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.assertEqual([u["id"] for u in response.json()["users"]], [self.team.id])

        everyone = self.client.get("/api/admin/users?role=all", headers=self.auth(self.admin)).json()["users"]
        self.assertEqual(len(everyone), 4)

        customers = self.client.get(
            "/api/admin/users", params={"role": "customer", "search": "jane"}, headers=self.auth(self.admin)
        ).json()["users"]
        self.assertEqual([u["email"] for u in customers], ["jane@example.com"])

    def test_unknown_role_filter(self):
        response = self.client.get("/api/admin/users?role=owner", headers=self.auth(self.admin))
        self.assertEqual(response.status_code, 400)

    def test_non_admins_are_refused(self):
        for user in (self.customer, self.team):
            self.assertEqual(self.client.get("/api/admin/users", headers=self.auth(user)).status_code, 403)

    def test_get_user(self):
        response = self.client.get(self.url(self.team.id), headers=self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        user = response.json()["user"]
        self.assertEqual(user["role"], "team")
        self.assertEqual(user["teamProfile"]["progress"], "0%")
        self.assertNotIn("department", user["teamProfile"])
        self.assertEqual(self.client.get(self.url("ghost"), headers=self.auth(self.admin)).status_code, 404)

    def test_promote_customer_to_team(self):
        response = self.client.patch(
            self.url(self.customer.id, "/role"), json={"role": "team"}, headers=self.auth(self.admin)
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["user"]["role"], "team")
        self.assertIsNotNone(body["user"]["teamProfile"])

    def test_cannot_change_own_role(self):
        response = self.client.patch(
            self.url(self.admin.id, "/role"), json={"role": "team"}, headers=self.auth(self.admin)
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "You cannot change your own role"})

    def test_only_team_role_can_be_granted(self):
        for role in ("admin", "customer", None):
            response = self.client.patch(
                self.url(self.customer.id, "/role"), json={"role": role}, headers=self.auth(self.admin)
            )
            self.assertEqual(response.status_code, 400, role)
            self.assertEqual(response.json(), {"error": "Admins can only assign team role"})

    def test_cannot_change_another_admins_role(self):
        response = self.client.patch(
            self.url(self.other_admin.id, "/role"), json={"role": "team"}, headers=self.auth(self.admin)
        )
        self.assertEqual(response.status_code, 400)

    def test_role_change_for_missing_user(self):
        response = self.client.patch(self.url("ghost", "/role"), json={"role": "team"}, headers=self.auth(self.admin))
        self.assertEqual(response.status_code, 404)

    def test_edit_team_profile(self):
        response = self.client.patch(
            self.url(self.team.id),
            json={"name": "Sam", "specialization": "Drone", "bio": "Aerial shots", "photo": "https://img/sam.jpg"},
            headers=self.auth(self.admin),
        )
        self.assertEqual(response.status_code, 200)
        user = response.json()["user"]
        self.assertEqual(user["name"], "Sam")
        self.assertEqual(user["image"], "https://img/sam.jpg")
        self.assertEqual(user["teamProfile"]["specialization"], "Drone")
        self.assertEqual(user["teamProfile"]["bio"], "Aerial shots")

        found = self.client.get("/api/admin/users?search=drone", headers=self.auth(self.admin)).json()["users"]
        self.assertEqual([u["id"] for u in found], [self.team.id])

    def test_profile_edit_can_promote(self):
        response = self.client.patch(
            self.url(self.customer.id),
            json={"role": "team", "specialization": "Video"},
            headers=self.auth(self.admin),
        )
        self.assertEqual(response.status_code, 200)
        user = response.json()["user"]
        self.assertEqual(user["role"], "team")
        self.assertEqual(user["teamProfile"]["specialization"], "Video")

    def test_profile_edit_ignores_other_roles(self):
        response = self.client.patch(
            self.url(self.team.id), json={"role": "admin", "name": "Sam"}, headers=self.auth(self.admin)
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["role"], "team")
        self.assertEqual(response.json()["user"]["name"], "Sam")

    def test_refused_edit_changes_nothing(self):
        response = self.client.patch(
            self.url(self.customer.id),
            json={"role": "team", "email": "shooter@studio.test", "name": "Changed"},
            headers=self.auth(self.admin),
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Email is already used by another account"})

        user = self.client.get(self.url(self.customer.id), headers=self.auth(self.admin)).json()["user"]
        self.assertEqual(user["role"], "customer")
        self.assertEqual(user["name"], "Jane")
        self.assertIsNone(user["teamProfile"])

    def test_team_tracking_fields(self):
        response = self.client.patch(
            self.url(self.team.id),
            json={"assignment": ["Sharma wedding", "Rao pre-wedding"], "progress": "50%", "attendance": "90%"},
            headers=self.auth(self.admin),
        )
        self.assertEqual(response.status_code, 200)
        profile = response.json()["user"]["teamProfile"]
        self.assertEqual(profile["assignment"], ["Sharma wedding", "Rao pre-wedding"])
        self.assertEqual(profile["progress"], "50%")
        self.assertEqual(profile["attendance"], "90%")

        stats = self.client.get("/api/admin/users/stats", headers=self.auth(self.admin)).json()
        self.assertEqual(stats["teamAssignments"], 2)
        self.assertEqual(stats["activeTeamMembers"], 1)

        response = self.client.patch(self.url(self.team.id), json={"progress": "half"}, headers=self.auth(self.admin))
        self.assertEqual(response.status_code, 422)

    def test_cannot_edit_another_admin(self):
        response = self.client.patch(self.url(self.other_admin.id), json={"name": "X"}, headers=self.auth(self.admin))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Cannot modify another admin"})

    def test_email_must_stay_unique(self):
        response = self.client.patch(
            self.url(self.team.id), json={"email": "jane@example.com"}, headers=self.auth(self.admin)
        )
        self.assertEqual(response.status_code, 400)

    def test_delete_rules(self):
        response = self.client.delete(self.url(self.admin.id), headers=self.auth(self.admin))
        self.assertEqual(response.status_code, 400)
        response = self.client.delete(self.url(self.other_admin.id), headers=self.auth(self.admin))
        self.assertEqual(response.status_code, 400)
        response = self.client.delete(self.url("ghost"), headers=self.auth(self.admin))
        self.assertEqual(response.status_code, 404)

        response = self.client.delete(self.url(self.customer.id), headers=self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"success": True, "message": "User deleted successfully"})
        self.assertEqual(self.client.get(self.url(self.customer.id), headers=self.auth(self.admin)).status_code, 404)

    def test_stats(self):
        response = self.client.get("/api/admin/users/stats", headers=self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        stats = response.json()
        self.assertEqual(stats["total"], 4)
        self.assertEqual(stats["admins"], 2)
        self.assertEqual(stats["team"], 1)
        self.assertEqual(stats["customers"], 1)
        self.assertEqual(stats["teamAssignments"], 0)


if __name__ == "__main__":
    unittest.main()

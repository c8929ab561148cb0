import unittest

from studio_api.app.core.policy import (
    ADMIN,
    CUSTOMER,
    POLICY,
    ROLES,
    TEAM,
    dashboard_path,
    is_allowed,
)


class PolicyTests(unittest.TestCase):
    def test_booking_rules(self):
        for role in ROLES:
            self.assertTrue(is_allowed(role, "booking", "read"))
        self.assertTrue(is_allowed(CUSTOMER, "booking", "create"))
        self.assertFalse(is_allowed(TEAM, "booking", "create"))
        self.assertTrue(is_allowed(TEAM, "booking", "update"))
        self.assertFalse(is_allowed(CUSTOMER, "booking", "update"))
        self.assertFalse(is_allowed(TEAM, "booking", "delete"))
        self.assertTrue(is_allowed(ADMIN, "booking", "delete"))

    def test_packages_are_admin_managed(self):
        self.assertTrue(is_allowed(CUSTOMER, "package", "read"))
        for action in ("create", "update", "delete", "stats"):
            self.assertTrue(is_allowed(ADMIN, "package", action))
            self.assertFalse(is_allowed(CUSTOMER, "package", action))
            self.assertFalse(is_allowed(TEAM, "package", action))

    def test_users_are_admin_only(self):
        for action in ("read", "update", "delete", "stats"):
            self.assertTrue(is_allowed(ADMIN, "user", action))
            self.assertFalse(is_allowed(TEAM, "user", action))
            self.assertFalse(is_allowed(CUSTOMER, "user", action))

    def test_anonymous_can_only_send_contact_messages(self):
        allowed = [key for key in POLICY if is_allowed(None, *key)]
        self.assertEqual(allowed, [("contact", "create")])

    def test_unknown_pairs_are_denied(self):
        self.assertFalse(is_allowed(ADMIN, "invoice", "read"))
        self.assertFalse(is_allowed(ADMIN, "booking", "archive"))
        self.assertFalse(is_allowed("superuser", "booking", "read"))

    def test_dashboard_path(self):
        self.assertEqual(dashboard_path(ADMIN), "/admin/dashboard")
        self.assertEqual(dashboard_path(CUSTOMER), "/customer/dashboard")
        self.assertEqual(dashboard_path(TEAM), "/team/dashboard")
        self.assertEqual(dashboard_path(None), "/signin")


if __name__ == "__main__":
    unittest.main()

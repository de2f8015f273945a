from campus_connect.extensions import db
from campus_connect.models import User
from tests.base import BaseTestCase


class ProfileTests(BaseTestCase):
    def test_update_profile_fields(self):
        self.login_user()
        r = self.client.put("/users/profile", json={
            "bio": "I like compilers.",
            "contactInfo": "alice@campus.edu",
            "academicYear": "Senior",
            "firstname": "Alicia",
            "socialLinks.github": "https://github.com/alicia",
            "interests": ["Research", "Music"],
            "role": "admin",
        })
        self.assertEqual(r.status_code, 200)

        user = r.get_json()["user"]
        self.assertEqual(user["bio"], "I like compilers.")
        self.assertEqual(user["contactInfo"], "alice@campus.edu")
        self.assertEqual(user["academicYear"], "Senior")
        self.assertEqual(user["fullname"]["firstname"], "Alicia")
        self.assertEqual(user["socialLinks"]["github"], "https://github.com/alicia")
        self.assertEqual(user["interests"], ["Research", "Music"])
        # role is not a profile field
        self.assertEqual(user["role"], "user")

    def test_update_profile_accepts_nested_social_links(self):
        self.login_user()
        r = self.client.put("/users/profile", json={"socialLinks": {"linkedin": "in/alice"}})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.get_json()["user"]["socialLinks"]["linkedin"], "in/alice")

    def test_update_profile_validates_enums(self):
        self.login_user()
        r = self.client.put("/users/profile", json={"academicYear": "Fifth"})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.get_json()["message"], "Invalid academic year")

    def test_update_profile_rejects_non_string_text_fields(self):
        self.login_user()
        cases = [
            ({"bio": {"x": 1}}, "Bio must be a string"),
            ({"contactInfo": ["555-0100"]}, "Contact info must be a string"),
            ({"studentID": {"id": 7}}, "Student ID must be a string"),
        ]
        for body, message in cases:
            with self.subTest(body=body):
                r = self.client.put("/users/profile", json=body)
                self.assertEqual(r.status_code, 400)
                self.assertEqual(r.get_json()["message"], message)

    def test_update_avatar(self):
        self.login_user()
        r = self.client.put("/users/profile/avatar", json={"url": "https://cdn.test/a.png"})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.get_json()["user"]["avatar"], "https://cdn.test/a.png")

    def test_update_avatar_requires_url(self):
        self.login_user()
        r = self.client.put("/users/profile/avatar", json={})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.get_json()["message"], "Image URL is required")


class ConnectionTests(BaseTestCase):
    def test_connection_is_mutual_and_removable(self):
        self.login_user()
        r = self.client.post("/users/connections/send", json={"targetUserId": self.other_id})
        self.assertEqual(r.status_code, 200)

        with self.app.app_context():
            me = db.session.get(User, self.user_id)
            other = db.session.get(User, self.other_id)
            self.assertIn(other, me.connections)
            self.assertIn(me, other.connections)

        r2 = self.client.get("/users/connections")
        self.assertEqual([c["_id"] for c in r2.get_json()["connections"]], [self.other_id])

        r3 = self.client.delete(f"/users/connections/remove/{self.other_id}")
        self.assertEqual(r3.status_code, 200)

        with self.app.app_context():
            self.assertEqual(db.session.get(User, self.user_id).connections, [])
            self.assertEqual(db.session.get(User, self.other_id).connections, [])

    def test_cannot_connect_twice(self):
        self.login_user()
        self.client.post("/users/connections/send", json={"targetUserId": self.other_id})
        r = self.client.post("/users/connections/send", json={"targetUserId": self.other_id})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.get_json()["message"], "Already connected with this user.")

    def test_cannot_connect_to_self(self):
        self.login_user()
        r = self.client.post("/users/connections/send", json={"targetUserId": self.user_id})
        self.assertEqual(r.status_code, 400)

    def test_cannot_connect_to_self_with_other_id_spellings(self):
        self.login_user()
        for raw in (float(self.user_id), f" {self.user_id} ", f"0{self.user_id}"):
            r = self.client.post("/users/connections/send", json={"targetUserId": raw})
            self.assertEqual(r.status_code, 400)
            self.assertEqual(r.get_json()["message"], "Cannot send connection request to yourself.")

        r = self.client.get("/users/connections")
        self.assertEqual(r.get_json()["connections"], [])

    def test_connect_requires_target(self):
        self.login_user()
        r = self.client.post("/users/connections/send", json={})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.get_json()["message"], "Target user ID is required")

    def test_connect_unknown_user(self):
        self.login_user()
        r = self.client.post("/users/connections/send", json={"targetUserId": 9999})
        self.assertEqual(r.status_code, 404)

    def test_remove_when_not_connected(self):
        self.login_user()
        r = self.client.delete(f"/users/connections/remove/{self.other_id}")
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.get_json()["message"], "Not connected with this user.")

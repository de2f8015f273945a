from campus_connect.extensions import db
from campus_connect.models import Club
from tests.base import BaseTestCase


def club_payload(**overrides):
    payload = {
        "name": "Chess Society",
        "description": "Weekly blitz tournaments and lessons.",
        "category": "Social",
        "socialLinks": {"discord": "https://discord.gg/chess"},
    }
    payload.update(overrides)
    return payload


class ClubCrudTests(BaseTestCase):
    def test_all_club_routes_need_auth(self):
        self.assertEqual(self.client.get("/clubs").status_code, 401)
        self.assertEqual(self.client.post("/clubs", json=club_payload()).status_code, 401)

    def test_create_club(self):
        self.login_user()
        r = self.client.post("/clubs", json=club_payload())
        self.assertEqual(r.status_code, 201)

        club = r.get_json()["club"]
        self.assertEqual(club["status"], "pending")
        self.assertEqual(club["organizer"]["_id"], self.user_id)
        self.assertEqual([m["_id"] for m in club["members"]], [self.user_id])
        self.assertEqual(club["socialLinks"]["discord"], "https://discord.gg/chess")
        self.assertTrue(club["imageUrl"])

    def test_create_club_duplicate_name(self):
        self.make_club(self.other_id, name="Chess Society")
        self.login_user()
        r = self.client.post("/clubs", json=club_payload())
        self.assertEqual(r.status_code, 400)

    def test_create_club_validation(self):
        self.login_user()
        r = self.client.post("/clubs", json=club_payload(category="Cooking"))
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.get_json()["message"], "Invalid club category")

    def test_list_shows_only_approved(self):
        self.make_club(self.other_id, name="Approved Club")
        self.make_club(self.other_id, name="Waiting Club", status="pending")
        self.login_user()

        r = self.client.get("/clubs")
        data = r.get_json()
        self.assertEqual([c["name"] for c in data["clubs"]], ["Approved Club"])
        self.assertEqual(data["total"], 1)

    def test_list_search_and_category(self):
        self.make_club(self.other_id, name="Robotics Club", category="Technology")
        self.make_club(self.other_id, name="Hiking Club", category="Sports",
                       description="Trail walks in the hills on Sundays.")
        self.login_user()

        r = self.client.get("/clubs?search=robot")
        self.assertEqual([c["name"] for c in r.get_json()["clubs"]], ["Robotics Club"])

        r_desc = self.client.get("/clubs?search=TRAIL")
        self.assertEqual([c["name"] for c in r_desc.get_json()["clubs"]], ["Hiking Club"])

        r2 = self.client.get("/clubs?category=Sports")
        self.assertEqual([c["name"] for c in r2.get_json()["clubs"]], ["Hiking Club"])

    def test_detail_includes_approved_club_events(self):
        club_id = self.make_club(self.other_id)
        self.make_event(self.other_id, title="Robot Wars", club_id=club_id)
        self.make_event(self.other_id, title="Secret Draft", club_id=club_id, status="pending")
        self.login_user()

        r = self.client.get(f"/clubs/{club_id}")
        self.assertEqual(r.status_code, 200)
        self.assertEqual([e["title"] for e in r.get_json()["club"]["events"]], ["Robot Wars"])

    def test_pending_club_hidden_from_others(self):
        club_id = self.make_club(self.other_id, status="pending")
        self.login_user()
        self.assertEqual(self.client.get(f"/clubs/{club_id}").status_code, 404)
        self.logout()

        self.login_other()
        self.assertEqual(self.client.get(f"/clubs/{club_id}").status_code, 200)

    def test_update_club_owner_only(self):
        club_id = self.make_club(self.other_id)
        self.login_user()
        r = self.client.put(f"/clubs/{club_id}", json={"description": "Taken over by someone else."})
        self.assertEqual(r.status_code, 403)
        self.logout()

        self.login_other()
        r2 = self.client.put(f"/clubs/{club_id}", json={"description": "Now with drones as well."})
        self.assertEqual(r2.status_code, 200)
        self.assertEqual(r2.get_json()["club"]["description"], "Now with drones as well.")

    def test_update_club_rejects_non_string_image(self):
        club_id = self.make_club(self.other_id)
        self.login_other()
        r = self.client.put(f"/clubs/{club_id}", json={"imageUrl": {"src": "a.png"}})
        self.assertEqual(r.status_code, 400)
        self.assertEqual(r.get_json()["errors"], [{"field": "imageUrl", "msg": "Image URL must be a string"}])

    def test_delete_club_soft(self):
        club_id = self.make_club(self.other_id)
        self.login_other()
        self.assertEqual(self.client.delete(f"/clubs/{club_id}").status_code, 200)

        with self.app.app_context():
            self.assertFalse(db.session.get(Club, club_id).is_active)

        self.assertEqual(self.client.get(f"/clubs/{club_id}").status_code, 404)


class MembershipTests(BaseTestCase):
    def setUp(self):
        super().setUp()
        self.club_id = self.make_club(self.other_id)

    def test_join_and_leave(self):
        self.login_user()
        r = self.client.post(f"/clubs/{self.club_id}/join")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.get_json()["message"], "Successfully joined club")

        r2 = self.client.post(f"/clubs/{self.club_id}/join")
        self.assertEqual(r2.status_code, 400)
        self.assertEqual(r2.get_json()["message"], "Already a member of this club")

        r3 = self.client.post(f"/clubs/{self.club_id}/leave")
        self.assertEqual(r3.status_code, 200)

        r4 = self.client.post(f"/clubs/{self.club_id}/leave")
        self.assertEqual(r4.status_code, 400)
        self.assertEqual(r4.get_json()["message"], "Not a member of this club")

    def test_cannot_join_pending_club(self):
        pending_id = self.make_club(self.other_id, name="Not Yet Club", status="pending")
        self.login_user()
        self.assertEqual(self.client.post(f"/clubs/{pending_id}/join").status_code, 404)

    def test_organizer_cannot_leave(self):
        self.login_other()
        r = self.client.post(f"/clubs/{self.club_id}/leave")
        self.assertEqual(r.status_code, 400)

    def test_user_clubs(self):
        own_id = self.make_club(self.user_id, name="My Own Club", status="pending")
        self.login_user()
        self.client.post(f"/clubs/{self.club_id}/join")

        r = self.client.get(f"/clubs/user/{self.user_id}")
        self.assertEqual(r.status_code, 200)
        ids = [c["_id"] for c in r.get_json()["clubs"]]
        self.assertEqual(set(ids), {own_id, self.club_id})

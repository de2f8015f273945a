import smtplib
from unittest import mock

from tests.base import BaseTestCase


class NotificationTests(BaseTestCase):
    def setUp(self):
        super().setUp()
        self.app.config.update({
            "EMAIL_HOST": "smtp.test",
            "EMAIL_PORT": 587,
            "EMAIL_USER": "mailer",
            "EMAIL_PASS": "mailer-pass",
            "ADMIN_EMAIL": "moderators@test.com",
        })
        patcher = mock.patch("campus_connect.services.email_service.smtplib.SMTP")
        self.smtp_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.smtp = self.smtp_cls.return_value

    def sent(self):
        return [c.args[0] for c in self.smtp.send_message.call_args_list]

    def test_rsvp_sends_confirmation(self):
        self.login_user()
        self.client.post(f"/events/{self.event_id}/join")

        self.smtp_cls.assert_called_with("smtp.test", 587, timeout=10)
        self.smtp.starttls.assert_called_once()
        self.smtp.login.assert_called_once_with("mailer", "mailer-pass")

        msg = self.sent()[-1]
        self.assertEqual(msg["To"], "user@test.com")
        self.assertEqual(msg["Subject"], '[RSVP CONFIRMED] You\'re Attending "Seed Event"!')
        html = msg.get_body(preferencelist=("html",)).get_content()
        self.assertIn("http://frontend.test/events/", html)

    def test_leaving_sends_cancellation(self):
        self.login_user()
        self.client.post(f"/events/{self.event_id}/join")
        self.client.post(f"/events/{self.event_id}/leave")
        self.assertEqual(self.sent()[-1]["Subject"], '[RSVP CANCELLED] Event "Seed Event"')

    def test_new_event_notifies_admin(self):
        self.login_user()
        self.client.post("/events", json=self.event_payload())

        msg = self.sent()[-1]
        self.assertEqual(msg["To"], "moderators@test.com")
        self.assertTrue(msg["Subject"].startswith("[ADMIN ACTION REQUIRED] New Event Pending Approval"))

    def test_rejection_email_includes_reason(self):
        pending_id = self.make_event(self.user_id, title="Loud Party", status="pending")
        self.login_admin()
        self.client.patch(
            f"/admin/events/{pending_id}/reject", json={"reason": "Noise rules forbid this <b>venue</b>."}
        )

        msg = self.sent()[-1]
        self.assertEqual(msg["To"], "user@test.com")
        self.assertEqual(msg["Subject"], '[REJECTED] Update on Your Event "Loud Party"')
        html = msg.get_body(preferencelist=("html",)).get_content()
        self.assertIn("Noise rules forbid this &lt;b&gt;venue&lt;/b&gt;.", html)

    def test_club_join_notifies_organizer(self):
        club_id = self.make_club(self.other_id)
        self.login_user()
        self.client.post(f"/clubs/{club_id}/join")

        msg = self.sent()[-1]
        self.assertEqual(msg["To"], "other@test.com")
        self.assertEqual(msg["Subject"], "New Member Joined Your Club: Robotics Club")

    def test_smtp_failure_does_not_fail_request(self):
        self.smtp.send_message.side_effect = smtplib.SMTPException("relay down")
        self.login_user()
        r = self.client.post(f"/events/{self.event_id}/join")
        self.assertEqual(r.status_code, 200)

    def test_no_mail_without_smtp_host(self):
        self.app.config["EMAIL_HOST"] = ""
        self.login_user()
        self.client.post(f"/events/{self.event_id}/join")
        self.smtp_cls.assert_not_called()

    def test_editing_approved_event_notifies_admin_again(self):
        event_id = self.make_event(self.user_id, title="Board Games")
        self.login_user()
        r = self.client.put(f"/events/{event_id}", json={"location": "Library"})
        self.assertEqual(r.status_code, 200)

        msg = self.sent()[-1]
        self.assertEqual(msg["To"], "moderators@test.com")
        self.assertEqual(msg["Subject"], "[ADMIN ACTION REQUIRED] New Event Pending Approval: Board Games")

    def test_new_club_notifies_admin(self):
        self.login_user()
        self.client.post("/clubs", json={
            "name": "Film Society",
            "description": "Screenings every Friday night.",
            "category": "Arts",
        })

        msg = self.sent()[-1]
        self.assertEqual(msg["To"], "moderators@test.com")
        self.assertEqual(msg["Subject"], "[ADMIN ACTION REQUIRED] New Club Pending Approval: Film Society")

    def test_club_approval_emails_organizer(self):
        club_id = self.make_club(self.user_id, name="Film Society", status="pending")
        self.login_admin()
        self.client.patch(f"/admin/clubs/{club_id}/approve")

        msg = self.sent()[-1]
        self.assertEqual(msg["To"], "user@test.com")
        self.assertEqual(msg["Subject"], '[APPROVED] Your Club "Film Society" Is Now Live!')
        html = msg.get_body(preferencelist=("html",)).get_content()
        self.assertIn(f"http://frontend.test/clubs/{club_id}", html)

    def test_club_rejection_emails_organizer_with_reason(self):
        club_id = self.make_club(self.user_id, name="Film Society", status="pending")
        self.login_admin()
        self.client.put(f"/admin/clubs/{club_id}/reject", json={"reason": "Duplicates an existing club."})

        msg = self.sent()[-1]
        self.assertEqual(msg["To"], "user@test.com")
        self.assertEqual(msg["Subject"], '[REJECTED] Update on Your Club "Film Society"')
        html = msg.get_body(preferencelist=("html",)).get_content()
        self.assertIn("Duplicates an existing club.", html)

import unittest
from types import SimpleNamespace as Obj
from unittest.mock import patch
from datetime import date, datetime, timezone

from fastapi import HTTPException
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from main import app
from core.database import get_db
from auth.services.auth_service import get_current_active_user
from signup.eligibility import BookedSlot, RejectionReason, Verdict
from signup.service import SignupRejected


def signup_obj(**kw):
    base = dict(id=1, shift_id=5, worker_id=123, occurrence_date=None, status="CONFIRMED", created_at=None)
    base.update(kw)
    return Obj(**base)


class SignupRouterTests(unittest.TestCase):
    def setUp(self):
        class FakeDB:
            def __init__(self):
                self.rolled_back = False
            def rollback(self):
                self.rolled_back = True
        self.fake_db = FakeDB()

        def _fake_db():
            yield self.fake_db

        app.dependency_overrides[get_db] = _fake_db
        app.dependency_overrides[get_current_active_user] = lambda: Obj(id=123, is_supervisor=False)
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_current_active_user, None)

    # ---------- CREATE ----------
    @patch("signup.router.service.create_signup")
    def test_signup_uses_caller_id(self, mock_create):
        mock_create.return_value = signup_obj(occurrence_date=date(2025, 10, 15))
        resp = self.client.post("/api/shifts/5/signups", json={"occurrence_date": "2025-10-15"})
        self.assertEqual(resp.status_code, 201, resp.text)
        self.assertEqual(resp.json()["status"], "CONFIRMED")
        dto = mock_create.call_args[0][1]
        self.assertEqual((dto.shift_id, dto.worker_id, dto.occurrence_date), (5, 123, date(2025, 10, 15)))

    @patch("signup.router.service.create_signup")
    def test_signup_rejects_worker_id_in_payload(self, mock_create):
        resp = self.client.post("/api/shifts/5/signups", json={"worker_id": 7})
        self.assertEqual(resp.status_code, 422)
        mock_create.assert_not_called()

    @patch("signup.router.service.create_signup")
    def test_rejection_is_structured_409(self, mock_create):
        clash = BookedSlot(
            shift_id=9,
            occurrence_date=None,
            start_at=datetime(2025, 10, 15, 10, 0, tzinfo=timezone.utc),
            end_at=datetime(2025, 10, 15, 12, 0, tzinfo=timezone.utc),
            title="Other",
        )
        mock_create.side_effect = SignupRejected(Verdict(RejectionReason.time_conflict, conflicts=(clash,)))
        resp = self.client.post("/api/shifts/5/signups", json={})
        self.assertEqual(resp.status_code, 409)
        detail = resp.json()["detail"]
        self.assertEqual(detail["reason"], "time_conflict")
        self.assertEqual(detail["message"], "Time conflict with another confirmed shift")
        self.assertEqual(detail["conflicts"][0]["shift_id"], 9)

    @patch("signup.router.service.create_signup")
    def test_unique_index_violation_maps_to_already_signed_up(self, mock_create):
        mock_create.side_effect = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed"))
        resp = self.client.post("/api/shifts/5/signups", json={})
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["detail"]["reason"], "already_signed_up")
        self.assertTrue(self.fake_db.rolled_back)

    @patch("signup.router.service.create_signup")
    def test_missing_occurrence_passes_through(self, mock_create):
        mock_create.side_effect = HTTPException(status_code=404, detail="occurrence not found")
        resp = self.client.post("/api/shifts/5/signups", json={"occurrence_date": "2025-10-14"})
        self.assertEqual(resp.status_code, 404)

    # ---------- LIST / CANCEL ----------
    @patch("signup.router.service.get_signups")
    def test_list_signups(self, mock_list):
        mock_list.return_value = [signup_obj(), signup_obj(id=2, worker_id=77)]
        resp = self.client.get("/api/shifts/5/signups?occurrence_date=2025-10-15")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual([s["worker_id"] for s in resp.json()], [123, 77])
        _, kwargs = mock_list.call_args
        self.assertEqual(kwargs["occurrence_date"], date(2025, 10, 15))

    @patch("signup.router.service.cancel_signup")
    def test_cancel(self, mock_cancel):
        mock_cancel.return_value = signup_obj(status="CANCELLED")
        resp = self.client.delete("/api/shifts/5/signups")
        self.assertEqual(resp.status_code, 200, resp.text)
        _, kwargs = mock_cancel.call_args
        self.assertEqual((kwargs["shift_id"], kwargs["worker_id"], kwargs["occurrence_date"]), (5, 123, None))

    @patch("signup.router.service.cancel_signup")
    def test_cancel_recurring_without_date_422(self, mock_cancel):
        mock_cancel.side_effect = HTTPException(status_code=422, detail="occurrence_date is required for recurring shifts")
        resp = self.client.delete("/api/shifts/5/signups")
        self.assertEqual(resp.status_code, 422)

    @patch("signup.router.service.cancel_signup")
    def test_cancel_404(self, mock_cancel):
        mock_cancel.side_effect = HTTPException(status_code=404, detail="Signup not found")
        resp = self.client.delete("/api/shifts/5/signups")
        self.assertEqual(resp.status_code, 404)

    # ---------- MY SHIFTS ----------
    @patch("signup.router.service.get_worker_signups")
    def test_my_shifts(self, mock_mine):
        mock_mine.return_value = [{
            "id": 1,
            "shift_id": 5,
            "worker_id": 123,
            "status": "CONFIRMED",
            "title": "Bench",
            "station_id": 2,
            "start_at": "2025-10-15T09:00:00Z",
            "end_at": "2025-10-15T12:00:00Z",
        }]
        resp = self.client.get("/api/my-shifts")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()[0]["title"], "Bench")
        mock_mine.assert_called_once()
        self.assertEqual(mock_mine.call_args[0][1], 123)


if __name__ == "__main__":
    unittest.main()

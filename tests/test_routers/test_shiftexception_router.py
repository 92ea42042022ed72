import unittest
from types import SimpleNamespace as Obj
from unittest.mock import patch
from datetime import date

from fastapi import HTTPException
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from main import app
from core.database import get_db
from auth.services.auth_service import get_current_active_user


class ShiftExceptionRouterTests(unittest.TestCase):
    def setUp(self):
        class FakeDB:
            def rollback(self): ...
        def _fake_db():
            yield FakeDB()

        app.dependency_overrides[get_db] = _fake_db
        self.user = Obj(id=1, is_supervisor=True)
        app.dependency_overrides[get_current_active_user] = lambda: self.user
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.pop(get_db, None)
        app.dependency_overrides.pop(get_current_active_user, None)

    @patch("shiftexception.router.service.get_exceptions")
    def test_list(self, mock_list):
        mock_list.return_value = [Obj(id=1, shift_id=4, occurrence_date=date(2025, 10, 20), is_cancelled=True, notes=None)]
        resp = self.client.get("/api/shifts/4/exceptions?start_date=2025-10-01")
        self.assertEqual(resp.status_code, 200, resp.text)
        self.assertEqual(resp.json()[0]["occurrence_date"], "2025-10-20")
        _, kwargs = mock_list.call_args
        self.assertEqual(kwargs["shift_id"], 4)
        self.assertEqual(kwargs["start_date"], date(2025, 10, 1))

    @patch("shiftexception.router.service.create_exception")
    def test_create(self, mock_create):
        mock_create.return_value = Obj(id=2, shift_id=4, occurrence_date=date(2025, 10, 20), is_cancelled=True, notes="holiday")
        resp = self.client.post("/api/shifts/4/exceptions", json={"occurrence_date": "2025-10-20", "notes": "holiday"})
        self.assertEqual(resp.status_code, 201, resp.text)
        dto = mock_create.call_args[0][1]
        self.assertEqual(dto.shift_id, 4)

    @patch("shiftexception.router.service.create_exception")
    def test_create_duplicate_409(self, mock_create):
        mock_create.side_effect = IntegrityError("INSERT", {}, Exception("UNIQUE"))
        resp = self.client.post("/api/shifts/4/exceptions", json={"occurrence_date": "2025-10-20"})
        self.assertEqual(resp.status_code, 409)

    @patch("shiftexception.router.service.create_exception")
    def test_create_422_passthrough(self, mock_create):
        mock_create.side_effect = HTTPException(status_code=422, detail="exceptions only apply to recurring shifts")
        resp = self.client.post("/api/shifts/4/exceptions", json={"occurrence_date": "2025-10-20"})
        self.assertEqual(resp.status_code, 422)

    @patch("shiftexception.router.service.create_exception")
    def test_create_requires_supervisor(self, mock_create):
        self.user.is_supervisor = False
        resp = self.client.post("/api/shifts/4/exceptions", json={"occurrence_date": "2025-10-20"})
        self.assertEqual(resp.status_code, 403)
        mock_create.assert_not_called()

    @patch("shiftexception.router.service.delete_exception")
    def test_delete(self, mock_delete):
        mock_delete.return_value = True
        resp = self.client.delete("/api/shifts/4/exceptions/2")
        self.assertEqual(resp.status_code, 200)
        mock_delete.return_value = False
        resp = self.client.delete("/api/shifts/4/exceptions/2")
        self.assertEqual(resp.status_code, 404)


if __name__ == "__main__":
    unittest.main()

import unittest
from datetime import date, datetime, timedelta, timezone

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from fastapi import HTTPException

from core.database import Base
from station.models import WorkStation
from shift.models import Shift
from shiftexception import service
from shiftexception.schema import ShiftExceptionCreate
import models_bootstrap

UTC = timezone.utc
MONDAY = datetime(2025, 10, 13, 9, 0, tzinfo=UTC)


class ShiftExceptionServiceTests(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine("sqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        TestingSession = sessionmaker(bind=self.engine, future=True)
        self.db = TestingSession()

        bench = WorkStation(name="Bench", category="assembly", capacity=2, required_skills=[])
        self.db.add(bench)
        self.db.flush()

        weekly = Shift(title="Weekly", station_id=bench.id, start_at=MONDAY, end_at=MONDAY + timedelta(hours=4),
                       capacity=2, is_recurring=True, recurrence_rule="FREQ=WEEKLY;BYDAY=MO")
        once = Shift(title="Once", station_id=bench.id, start_at=MONDAY, end_at=MONDAY + timedelta(hours=4),
                     capacity=2)
        self.db.add_all([weekly, once])
        self.db.commit()
        self.weekly_id, self.once_id = weekly.id, once.id

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_create_and_list(self):
        row = service.create_exception(self.db, ShiftExceptionCreate(
            shift_id=self.weekly_id, occurrence_date=date(2025, 10, 20), notes="holiday",
        ))
        self.assertTrue(row.is_cancelled)
        self.assertEqual(row.notes, "holiday")

        service.create_exception(self.db, ShiftExceptionCreate(shift_id=self.weekly_id, occurrence_date=date(2025, 11, 3)))
        rows = service.get_exceptions(self.db, shift_id=self.weekly_id)
        self.assertEqual([r.occurrence_date for r in rows], [date(2025, 10, 20), date(2025, 11, 3)])

        rows = service.get_exceptions(self.db, shift_id=self.weekly_id, start_date=date(2025, 10, 21))
        self.assertEqual([r.occurrence_date for r in rows], [date(2025, 11, 3)])

    def test_lookup_by_date(self):
        service.create_exception(self.db, ShiftExceptionCreate(shift_id=self.weekly_id, occurrence_date=date(2025, 10, 20)))
        self.assertIsNotNone(service.get_exception_for_date(self.db, self.weekly_id, date(2025, 10, 20)))
        self.assertIsNone(service.get_exception_for_date(self.db, self.weekly_id, date(2025, 10, 27)))

    def test_one_time_shift_rejected(self):
        with self.assertRaises(HTTPException) as ctx:
            service.create_exception(self.db, ShiftExceptionCreate(shift_id=self.once_id, occurrence_date=date(2025, 10, 13)))
        self.assertEqual(ctx.exception.status_code, 422)

    def test_date_without_occurrence_rejected(self):
        with self.assertRaises(HTTPException) as ctx:
            service.create_exception(self.db, ShiftExceptionCreate(shift_id=self.weekly_id, occurrence_date=date(2025, 10, 21)))
        self.assertEqual(ctx.exception.status_code, 422)

    def test_unknown_shift_404(self):
        with self.assertRaises(HTTPException) as ctx:
            service.create_exception(self.db, ShiftExceptionCreate(shift_id=9999, occurrence_date=date(2025, 10, 20)))
        self.assertEqual(ctx.exception.status_code, 404)

    def test_duplicate_date_raises_integrity_error(self):
        dto = ShiftExceptionCreate(shift_id=self.weekly_id, occurrence_date=date(2025, 10, 20))
        service.create_exception(self.db, dto)
        with self.assertRaises(IntegrityError):
            service.create_exception(self.db, dto)
        self.db.rollback()

    def test_delete(self):
        row = service.create_exception(self.db, ShiftExceptionCreate(shift_id=self.weekly_id, occurrence_date=date(2025, 10, 20)))
        self.assertFalse(service.delete_exception(self.db, self.once_id, row.id))
        self.assertTrue(service.delete_exception(self.db, self.weekly_id, row.id))
        self.assertFalse(service.delete_exception(self.db, self.weekly_id, row.id))


if __name__ == "__main__":
    unittest.main()

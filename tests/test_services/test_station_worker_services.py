import unittest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from pydantic import ValidationError

from core.database import Base
from station import service as station_service
from station.models import StationStatus
from station.schema import StationCreate, StationUpdate, normalize_skills
from worker import service as worker_service
from worker.models import WorkerRole
from worker.schema import WorkerCreate, WorkerUpdate
import models_bootstrap


class SkillNormalizationTests(unittest.TestCase):
    def test_normalize(self):
        self.assertEqual(normalize_skills([" cnc", "welding", "cnc", ""]), ["cnc", "welding"])
        self.assertEqual(normalize_skills(None), [])

    def test_rejects_non_lists(self):
        with self.assertRaises(ValueError):
            normalize_skills("cnc")
        with self.assertRaises(ValueError):
            normalize_skills(["cnc", 3])

    def test_dto_boundary(self):
        dto = StationCreate(name="Mill", category="machining", required_skills=["cnc ", "cnc"])
        self.assertEqual(dto.required_skills, ["cnc"])
        with self.assertRaises(ValidationError):
            StationCreate(name="Mill", category="machining", required_skills="cnc")
        with self.assertRaises(ValidationError):
            WorkerCreate(name="Ana", email="not-an-email")


class StationServiceTests(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine("sqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        TestingSession = sessionmaker(bind=self.engine, future=True)
        self.db: Session = TestingSession()

        self.mill = station_service.create_station(self.db, StationCreate(
            name="Mill", category="machining", capacity=2, required_skills=["cnc"],
        ))
        self.bench = station_service.create_station(self.db, StationCreate(
            name="Bench", category="assembly", status=StationStatus.MAINTENANCE,
        ))

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_filters(self):
        self.assertEqual([s.name for s in station_service.get_stations(self.db)], ["Bench", "Mill"])
        self.assertEqual([s.name for s in station_service.get_stations(self.db, category="machining")], ["Mill"])
        rows = station_service.get_stations(self.db, status=StationStatus.MAINTENANCE)
        self.assertEqual([s.name for s in rows], ["Bench"])

    def test_required_skill_set(self):
        self.assertEqual(self.mill.required_skill_set, frozenset({"cnc"}))
        self.assertEqual(self.bench.required_skill_set, frozenset())

    def test_update_and_delete(self):
        row = station_service.update_station(self.db, self.mill.id, StationUpdate(required_skills=["lathe", "cnc"]))
        self.assertEqual(row.required_skills, ["cnc", "lathe"])
        self.assertIsNone(station_service.update_station(self.db, 9999, StationUpdate(capacity=3)))
        # explicit null on a required column is ignored
        row = station_service.update_station(self.db, self.mill.id, StationUpdate(name=None, location="Hall B"))
        self.assertEqual((row.name, row.location), ("Mill", "Hall B"))
        self.assertTrue(station_service.delete_station(self.db, self.bench.id))
        self.assertIsNone(station_service.get_station(self.db, self.bench.id))
        self.assertFalse(station_service.delete_station(self.db, self.bench.id))


class WorkerServiceTests(unittest.TestCase):
    def setUp(self):
        self.engine = create_engine("sqlite:///:memory:", future=True)
        Base.metadata.create_all(self.engine)
        TestingSession = sessionmaker(bind=self.engine, future=True)
        self.db: Session = TestingSession()

        self.ana = worker_service.create_worker(self.db, WorkerCreate(
            name="Ana", email="ana@example.com", role=WorkerRole.SUPERVISOR, skills=["welding", "cnc"],
        ))
        self.ben = worker_service.create_worker(self.db, WorkerCreate(name="Ben", email="ben@example.com"))

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_lookup(self):
        self.assertEqual(worker_service.get_worker_by_email(self.db, "ben@example.com").id, self.ben.id)
        self.assertIsNone(worker_service.get_worker_by_email(self.db, "nobody@example.com"))
        self.assertEqual(worker_service.get_worker_by_email(self.db, " Ben@Example.com ").id, self.ben.id)
        self.assertEqual(worker_service.get_worker(self.db, self.ana.id).skill_set, frozenset({"cnc", "welding"}))

    def test_roles(self):
        self.assertTrue(self.ana.is_supervisor)
        self.assertFalse(self.ben.is_supervisor)
        rows = worker_service.get_workers(self.db, role=WorkerRole.WORKER)
        self.assertEqual([w.name for w in rows], ["Ben"])

    def test_deactivate(self):
        worker_service.update_worker(self.db, self.ben.id, WorkerUpdate(is_active=False))
        self.assertEqual([w.name for w in worker_service.get_workers(self.db, is_active=True)], ["Ana"])


if __name__ == "__main__":
    unittest.main()

"""Unit tests for the Audit Logger."""

import csv
import io
import json
import uuid
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from cdm_trade_intake.audit import AuditLogger, DatabaseManager, get_database_url
from cdm_trade_intake.interfaces.audit import AuditEvent, AuditEventType


class MockSession:
    """Mock SQLAlchemy session for testing."""

    def __init__(self):
        self.added = []
        self.committed = False
        self.rolled_back = False
        self.closed = False
        self._execute_results = []

    def add(self, obj):
        self.added.append(obj)

    def commit(self):
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True

    def execute(self, query):
        result = MagicMock()
        result.scalars.return_value.all.return_value = list(self._execute_results)
        return result

    def set_execute_results(self, results):
        self._execute_results = results


class MockDatabaseManager:
    """Mock DatabaseManager for testing."""

    def __init__(self):
        self._session = MockSession()
        self.closed = False

    def get_session(self):
        return MockContextManager(self._session)

    def close(self):
        self.closed = True


class MockContextManager:
    """Mock context manager for session."""

    def __init__(self, session):
        self._session = session

    def __enter__(self):
        return self._session

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self._session.commit()
        else:
            self._session.rollback()
        self._session.close()
        return False


def make_event(event_type=AuditEventType.DOCUMENT_CLASSIFIED, document_id="trade.json",
               timestamp=None, details=None):
    return AuditEvent(
        id=str(uuid.uuid4()),
        event_type=event_type,
        timestamp=timestamp or datetime.now(timezone.utc),
        document_id=document_id,
        run_id=str(uuid.uuid4()),
        details=details if details is not None else {"kind": "trade_record_with_state"},
    )


class TestAuditLogger:
    """Tests for AuditLogger against a mocked session."""

    def test_log_event_adds_to_session(self):
        """Test that log_event adds an event to the database session."""
        db_manager = MockDatabaseManager()
        logger = AuditLogger(db_manager=db_manager)

        logger.log_event(make_event())

        assert len(db_manager._session.added) == 1
        assert db_manager._session.committed
        assert db_manager._session.closed

    def test_model_conversion(self):
        """Test that events are stored with string event types and UUID ids."""
        db_manager = MockDatabaseManager()
        logger = AuditLogger(db_manager=db_manager)
        event = make_event(
            AuditEventType.EXTRACTION_FAILED,
            details={"attempt_count": 5, "reasons": ["direct: trade payload is null at trade"]},
        )

        logger.log_event(event)

        model = db_manager._session.added[0]
        assert model.event_type == "extraction_failed"
        assert model.id == uuid.UUID(event.id)
        assert model.run_id == uuid.UUID(event.run_id)
        assert model.details["attempt_count"] == 5

    def test_get_events_converts_models(self):
        db_manager = MockDatabaseManager()
        logger = AuditLogger(db_manager=db_manager)
        model = logger._to_model(make_event(AuditEventType.FIELDS_DERIVED))
        db_manager._session.set_execute_results([model])

        events = logger.get_events(document_id="trade.json")

        assert len(events) == 1
        assert events[0].event_type == AuditEventType.FIELDS_DERIVED
        assert events[0].id == str(model.id)

    def test_export_unsupported_format(self):
        logger = AuditLogger(db_manager=MockDatabaseManager())

        with pytest.raises(ValueError, match="Unsupported export format"):
            logger.export_log("trade.json", format="xml")

    def test_close_keeps_injected_manager_open(self):
        db_manager = MockDatabaseManager()
        AuditLogger(db_manager=db_manager).close()
        assert not db_manager.closed


class TestAuditLoggerWithSqlite:
    """Tests for querying and exporting against a real SQLite database."""

    @pytest.fixture
    def db_manager(self, tmp_path):
        manager = DatabaseManager(database_url=f"sqlite:///{tmp_path / 'audit.db'}")
        manager.init_database()
        yield manager
        manager.close()

    @pytest.fixture
    def audit_logger(self, db_manager):
        base = datetime(2024, 3, 15, 9, 0, tzinfo=timezone.utc)
        logger = AuditLogger(db_manager=db_manager)
        logger.log_event(make_event(AuditEventType.DOCUMENT_CLASSIFIED, timestamp=base))
        logger.log_event(make_event(
            AuditEventType.TRADE_EXTRACTED,
            timestamp=base + timedelta(seconds=1),
            details={"strategy": "direct", "source_path": "$"},
        ))
        logger.log_event(make_event(
            AuditEventType.REPORT_GENERATED,
            timestamp=base + timedelta(seconds=2),
            details={"summary": {"ok": 10, "warning": 2, "critical": 0}},
        ))
        logger.log_event(make_event(
            AuditEventType.DOCUMENT_CLASSIFIED,
            document_id="other.json",
            timestamp=base + timedelta(seconds=3),
        ))
        return logger

    def test_health_check(self, db_manager):
        assert db_manager.health_check()

    def test_get_events_newest_first(self, audit_logger):
        events = audit_logger.get_events(document_id="trade.json")

        assert [e.event_type for e in events] == [
            AuditEventType.REPORT_GENERATED,
            AuditEventType.TRADE_EXTRACTED,
            AuditEventType.DOCUMENT_CLASSIFIED,
        ]
        assert events[1].details == {"strategy": "direct", "source_path": "$"}

    def test_filter_by_event_type(self, audit_logger):
        events = audit_logger.get_events(event_type=AuditEventType.DOCUMENT_CLASSIFIED)

        assert len(events) == 2
        assert {e.document_id for e in events} == {"trade.json", "other.json"}

    def test_export_json(self, audit_logger):
        data = json.loads(audit_logger.export_log("trade.json", format="json"))

        assert data["document_id"] == "trade.json"
        assert data["event_count"] == 3
        assert data["event_summary"] == {
            "document_classified": 1,
            "report_generated": 1,
            "trade_extracted": 1,
        }
        assert data["events"][0]["details"]["summary"]["critical"] == 0

    def test_export_csv(self, audit_logger):
        rows = list(csv.reader(io.StringIO(audit_logger.export_log("trade.json", format="csv"))))

        assert rows[0] == ["id", "event_type", "timestamp", "document_id", "run_id", "details"]
        assert len(rows) == 4
        assert rows[1][1] == "report_generated"
        assert json.loads(rows[2][5]) == {"source_path": "$", "strategy": "direct"}


class TestDatabaseUrl:
    """Tests for audit database URL resolution."""

    def test_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("CDM_INTAKE_DATABASE_URL", "postgresql://intake@db/audit")
        assert get_database_url() == "postgresql://intake@db/audit"

    def test_defaults_to_local_sqlite(self, monkeypatch):
        monkeypatch.delenv("CDM_INTAKE_DATABASE_URL", raising=False)

        assert get_database_url() == "sqlite:///cdm_intake_audit.db"
        assert get_database_url(default="sqlite://") == "sqlite://"

    def test_manager_uses_environment_url(self, monkeypatch, tmp_path):
        url = f"sqlite:///{tmp_path / 'env.db'}"
        monkeypatch.setenv("CDM_INTAKE_DATABASE_URL", url)

        manager = DatabaseManager()

        assert manager.database_url == url
        manager.init_database()
        assert manager.health_check()
        manager.close()

from datetime import timedelta
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy import insert
from models import engine, db, get_db_sync, get_db_sync_for_test
from models.AdminUser import AdminUser
from models.Participant import Participant
from models.Reference import Reference
from models.Ticket import Ticket
from core.helper import get_current_time_in_timezone
from core.security import generate_hash_password, generate_token_from_admin
from main import app
import alembic.config
import uuid
from unittest import TestCase

PASSWORD_HASH = generate_hash_password("secret123")


def make_participant(name, reference_code, tickets, created_at):
    return Participant(
        reference_code=reference_code,
        name=name,
        email=f"{name.lower()}@example.com",
        phone="04141234567",
        national_id="12345678",
        tickets=tickets,
        generated_at=created_at,
        created_at=created_at,
    )


class TestAnalytics(TestCase):
    @classmethod
    def setUpClass(cls):
        alembic_args = ["upgrade", "head"]
        alembic.config.main(argv=alembic_args)

    def setUp(self):
        self.connection = engine.connect()
        self.trans = self.connection.begin()
        self.session = db(
            bind=self.connection, join_transaction_mode="create_savepoint"
        )

        now = get_current_time_in_timezone()
        admin = AdminUser(
            username="analyticsadmin", email="admin@rifa.com", password=PASSWORD_HASH
        )
        self.session.add_all(
            [
                admin,
                Reference(
                    code="100001",
                    ticket_count=5,
                    ticket_value=Decimal("2"),
                    used=True,
                    used_at=now - timedelta(seconds=2),
                ),
                Reference(code="100002", ticket_count=3, ticket_value=Decimal("10")),
                Reference(
                    code="100003",
                    ticket_count=2,
                    ticket_value=Decimal("0"),
                    used=True,
                    used_at=now - timedelta(seconds=1),
                ),
            ]
        )
        self.session.flush()
        self.session.add_all(
            [
                make_participant(
                    "Ana",
                    "100001",
                    ["0001", "0002", "0003", "0004", "0005"],
                    now - timedelta(seconds=2),
                ),
                make_participant(
                    "Beto", "100003", ["0006", "0007"], now - timedelta(seconds=1)
                ),
                make_participant("Carla", None, ["0008"], now - timedelta(days=10)),
            ]
        )
        self.session.execute(
            insert(Ticket),
            [
                {"id": uuid.uuid4(), "number": f"{n:04d}", "used": True}
                for n in range(1, 9)
            ],
        )
        self.session.commit()

        self.headers = {"Authorization": f"Bearer {generate_token_from_admin(admin)}"}

        app.dependency_overrides[get_db_sync] = get_db_sync_for_test(db=self.session)
        self.client = TestClient(app)

    def tearDown(self):
        self.session.close()
        self.trans.rollback()
        self.connection.close()

    def test_requires_admin(self):
        for path in [
            "/admin/analytics/dashboard",
            "/admin/analytics/participants",
            "/admin/analytics/tickets",
            "/admin/analytics/activity",
        ]:
            assert self.client.get(path).status_code == 401, path

    def test_dashboard(self):
        response = self.client.get("/admin/analytics/dashboard", headers=self.headers)
        assert response.status_code == 200
        data = response.json()

        assert data["total_participants"] == 3
        assert data["active_participants"] == 3
        assert data["total_references"] == 3
        assert data["used_references"] == 2
        assert data["available_references"] == 1
        assert data["total_tickets"] == 10000
        assert data["used_tickets"] == 8
        assert data["available_tickets"] == 9992
        self.assertAlmostEqual(data["conversion_rate"], 200 / 3)

        assert data["total_value"] == 40.0
        assert data["used_value"] == 10.0
        assert data["available_value"] == 30.0
        assert data["average_ticket_value"] == 4.0
        assert data["total_tickets_with_value"] == 10
        assert data["used_tickets_with_value"] == 7

        assert data["revenue_today"] == 10.0
        assert data["revenue_this_week"] == 10.0
        assert data["revenue_this_month"] == 10.0
        assert data["total_revenue"] == 10.0
        assert data["projected_revenue"] == 15.0

    def test_participant_stats(self):
        response = self.client.get(
            "/admin/analytics/participants", headers=self.headers
        )
        assert response.status_code == 200
        assert response.json() == {
            "total": 3,
            "today": 2,
            "this_week": 2,
            "this_month": 3,
        }

    def test_ticket_stats(self):
        response = self.client.get("/admin/analytics/tickets", headers=self.headers)
        assert response.status_code == 200
        assert response.json() == {
            "total": 10000,
            "used": 8,
            "available": 9992,
            "percentage_used": 0.08,
        }

    def test_activity(self):
        response = self.client.get("/admin/analytics/activity", headers=self.headers)
        assert response.status_code == 200
        results = response.json()["results"]
        assert len(results) == 5

        types = [item["type"] for item in results]
        assert types.count("participant_registered") == 3
        assert types.count("reference_used") == 2

        timestamps = [item["timestamp"] for item in results]
        assert timestamps == sorted(timestamps, reverse=True)
        assert results[-1]["description"] == "Carla registered without reference"

        beto = next(
            item
            for item in results
            if item["type"] == "participant_registered"
            and item["metadata"]["reference"] == "100003"
        )
        assert beto["description"] == "Beto registered with reference 100003"
        assert beto["id"] == f"participant-{beto['metadata']['participant_id']}"

    def test_activity_limit(self):
        response = self.client.get(
            "/admin/analytics/activity?limit=2", headers=self.headers
        )
        results = response.json()["results"]
        assert len(results) == 2

        response = self.client.get(
            "/admin/analytics/activity?limit=0", headers=self.headers
        )
        assert response.status_code == 422

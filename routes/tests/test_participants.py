import csv
import io
from datetime import timedelta
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy import func, select
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

PARTICIPANT = {
    "name": "Carlos Rojas",
    "email": "carlos@example.com",
    "phone": "04241234567",
    "national_id": "E-8765432",
}


class TestParticipants(TestCase):
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

        self.admin = AdminUser(
            username="participantadmin", email="admin@rifa.com", password=PASSWORD_HASH
        )
        self.session.add_all(
            [
                self.admin,
                Reference(code="700001", ticket_count=3, ticket_value=Decimal("5")),
                Reference(
                    code="700002",
                    ticket_count=3,
                    used=True,
                    used_at=get_current_time_in_timezone(),
                ),
            ]
        )
        self.session.commit()

        self.headers = {"Authorization": f"Bearer {generate_token_from_admin(self.admin)}"}

        app.dependency_overrides[get_db_sync] = get_db_sync_for_test(db=self.session)
        self.client = TestClient(app)

    def tearDown(self):
        self.session.close()
        self.trans.rollback()
        self.connection.close()

    def create_participant(self, **overrides):
        payload = dict(PARTICIPANT, ticket_count=2)
        payload.update(overrides)
        response = self.client.post(
            "/admin/participants/", json=payload, headers=self.headers
        )
        assert response.status_code == 200, response.text
        return response.json()

    def used_numbers(self):
        return set(
            self.session.execute(
                select(Ticket.number).where(Ticket.used.is_(True))
            ).scalars()
        )

    def test_requires_admin(self):
        assert self.client.get("/admin/participants/").status_code == 401
        response = self.client.post("/admin/participants/", json=dict(PARTICIPANT, ticket_count=1))
        assert response.status_code == 401

    def test_create_participant_without_reference(self):
        data = self.create_participant(ticket_count=4)
        assert data["reference"] is None
        assert data["name"] == "Carlos Rojas"
        assert len(data["tickets"]) == 4
        assert self.used_numbers() == set(data["tickets"])

    def test_create_participant_with_reference(self):
        # admins may pick a count different from the reference's
        data = self.create_participant(ticket_count=1, reference="700001")
        assert data["reference"] == "700001"
        assert len(data["tickets"]) == 1

        reference = self.session.execute(
            select(Reference).where(Reference.code == "700001")
        ).scalar()
        self.session.refresh(reference)
        assert reference.used is True
        assert reference.used_at is not None

    def test_create_participant_used_reference(self):
        response = self.client.post(
            "/admin/participants/",
            json=dict(PARTICIPANT, ticket_count=2, reference="700002"),
            headers=self.headers,
        )
        assert response.status_code == 400
        assert response.json()["reason"] == "ALREADY_USED"
        assert self.used_numbers() == set()

    def test_create_participant_unknown_reference(self):
        response = self.client.post(
            "/admin/participants/",
            json=dict(PARTICIPANT, ticket_count=2, reference="799999"),
            headers=self.headers,
        )
        assert response.status_code == 404
        assert response.json()["reason"] == "NOT_FOUND"

    def test_create_participant_invalid(self):
        for payload in [
            dict(PARTICIPANT, ticket_count=0),
            dict(PARTICIPANT, ticket_count=2, reference="12"),
            dict(PARTICIPANT, ticket_count=2, email="carlos"),
        ]:
            response = self.client.post(
                "/admin/participants/", json=payload, headers=self.headers
            )
            assert response.status_code == 422, payload
            assert response.json()["reason"] == "VALIDATION_FAILED"

    def test_get_participant(self):
        created = self.create_participant()
        response = self.client.get(
            f"/admin/participants/{created['id']}", headers=self.headers
        )
        assert response.status_code == 200
        assert response.json()["tickets"] == created["tickets"]

    def test_get_participant_not_found(self):
        response = self.client.get(
            f"/admin/participants/{uuid.uuid4()}", headers=self.headers
        )
        assert response.status_code == 404

    def test_list_participants(self):
        self.create_participant(reference="700001")
        self.create_participant(name="Luisa Mendez", email="luisa@example.com")

        response = self.client.get("/admin/participants/", headers=self.headers)
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert data["page"] == 1

        response = self.client.get(
            "/admin/participants/?search=luisa", headers=self.headers
        )
        data = response.json()
        assert data["total"] == 1
        assert data["participants"][0]["name"] == "Luisa Mendez"

        response = self.client.get(
            "/admin/participants/?reference=700001", headers=self.headers
        )
        data = response.json()
        assert data["total"] == 1
        assert data["participants"][0]["reference"] == "700001"

    def test_list_participants_date_range(self):
        created = self.create_participant()
        participant = self.session.get(Participant, uuid.UUID(created["id"]))
        participant.created_at = get_current_time_in_timezone() - timedelta(days=3)
        self.session.commit()
        self.create_participant(name="Luisa Mendez", email="luisa@example.com")

        today = get_current_time_in_timezone().date()
        response = self.client.get(
            f"/admin/participants/?date_from={today.isoformat()}", headers=self.headers
        )
        data = response.json()
        assert data["total"] == 1
        assert data["participants"][0]["name"] == "Luisa Mendez"

        two_days_ago = (today - timedelta(days=2)).isoformat()
        response = self.client.get(
            f"/admin/participants/?date_to={two_days_ago}", headers=self.headers
        )
        data = response.json()
        assert data["total"] == 1
        assert data["participants"][0]["name"] == "Carlos Rojas"

    def test_search_participants(self):
        self.create_participant(reference="700001")
        self.create_participant(name="Luisa Mendez", email="luisa@example.com")

        response = self.client.get(
            "/admin/participants/search?q=7000", headers=self.headers
        )
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["reference"] == "700001"

        response = self.client.get(
            "/admin/participants/search?q=8765432", headers=self.headers
        )
        assert len(response.json()) == 2

        response = self.client.get("/admin/participants/search", headers=self.headers)
        assert response.json() == []

    def test_add_tickets(self):
        created = self.create_participant()
        response = self.client.patch(
            f"/admin/participants/{created['id']}/tickets",
            json={"add_tickets": 3},
            headers=self.headers,
        )
        assert response.status_code == 200
        tickets = response.json()["tickets"]
        assert len(tickets) == 5
        assert tickets[:2] == created["tickets"]
        assert self.used_numbers() == set(tickets)

    def test_remove_tickets(self):
        created = self.create_participant(ticket_count=3)
        removed = created["tickets"][0]
        response = self.client.patch(
            f"/admin/participants/{created['id']}/tickets",
            json={"remove_tickets": [removed]},
            headers=self.headers,
        )
        assert response.status_code == 200
        tickets = response.json()["tickets"]
        assert tickets == created["tickets"][1:]
        assert removed not in self.used_numbers()

    def test_remove_foreign_ticket(self):
        first = self.create_participant()
        second = self.create_participant(name="Luisa Mendez", email="luisa@example.com")
        response = self.client.patch(
            f"/admin/participants/{first['id']}/tickets",
            json={"remove_tickets": [second["tickets"][0]]},
            headers=self.headers,
        )
        assert response.status_code == 400
        assert response.json()["reason"] == "VALIDATION_FAILED"
        assert self.used_numbers() == set(first["tickets"]) | set(second["tickets"])

    def test_update_tickets_invalid_body(self):
        created = self.create_participant()
        for payload in [{}, {"remove_tickets": ["12"]}, {"add_tickets": 0}]:
            response = self.client.patch(
                f"/admin/participants/{created['id']}/tickets",
                json=payload,
                headers=self.headers,
            )
            assert response.status_code == 422, payload

    def test_update_tickets_not_found(self):
        response = self.client.patch(
            f"/admin/participants/{uuid.uuid4()}/tickets",
            json={"add_tickets": 1},
            headers=self.headers,
        )
        assert response.status_code == 404

    def test_export_participants(self):
        created = self.create_participant(reference="700001")
        response = self.client.get("/admin/participants/export", headers=self.headers)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        assert "attachment; filename=participants-" in response.headers[
            "content-disposition"
        ]

        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[0] == [
            "Name",
            "Email",
            "Phone",
            "National ID",
            "Reference",
            "Tickets",
            "Generated At",
        ]
        assert len(rows) == 2
        assert rows[1][:5] == [
            "Carlos Rojas",
            "carlos@example.com",
            "04241234567",
            "E-8765432",
            "700001",
        ]
        assert rows[1][5] == "; ".join(created["tickets"])

    def test_participant_count_unchanged_on_failure(self):
        self.create_participant(reference="700001")
        response = self.client.post(
            "/admin/participants/",
            json=dict(PARTICIPANT, ticket_count=1, reference="700001"),
            headers=self.headers,
        )
        assert response.status_code == 400
        total = self.session.execute(
            select(func.count()).select_from(Participant)
        ).scalar()
        assert total == 1

from fastapi.testclient import TestClient
from sqlalchemy import insert
from models import engine, db, get_db_sync, get_db_sync_for_test
from models.AdminUser import AdminUser
from models.Ticket import Ticket
from core.security import generate_hash_password, generate_token_from_admin
from main import app
import alembic.config
import uuid
from unittest import TestCase

PASSWORD_HASH = generate_hash_password("secret123")


class TestTickets(TestCase):
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

        admin = AdminUser(
            username="ticketadmin", email="admin@rifa.com", password=PASSWORD_HASH
        )
        self.session.add(admin)
        self.session.execute(
            insert(Ticket),
            [
                {"id": uuid.uuid4(), "number": number, "used": True}
                for number in ["0007", "0070", "1234", "9999"]
            ]
            + [{"id": uuid.uuid4(), "number": "5000", "used": False}],
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
        for path in ["/admin/tickets/", "/admin/tickets/stats", "/admin/tickets/0007"]:
            assert self.client.get(path).status_code == 401, path

    def test_stats(self):
        response = self.client.get("/admin/tickets/stats", headers=self.headers)
        assert response.status_code == 200
        assert response.json() == {
            "total": 10000,
            "used": 4,
            "available": 9996,
            "percentage_used": 0.04,
        }

    def test_distribution(self):
        response = self.client.get("/admin/tickets/distribution", headers=self.headers)
        assert response.status_code == 200
        assert response.json() == [
            {"name": "used", "value": 4},
            {"name": "available", "value": 9996},
        ]

    def test_list_tickets(self):
        response = self.client.get("/admin/tickets/", headers=self.headers)
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 5
        assert data["limit"] == 50

        response = self.client.get("/admin/tickets/?used=true", headers=self.headers)
        assert response.json()["total"] == 4

        response = self.client.get("/admin/tickets/?search=07", headers=self.headers)
        numbers = {t["number"] for t in response.json()["tickets"]}
        assert numbers == {"0007", "0070"}

    def test_get_ticket(self):
        response = self.client.get("/admin/tickets/1234", headers=self.headers)
        assert response.status_code == 200
        data = response.json()
        assert data["number"] == "1234"
        assert data["used"] is True

    def test_get_ticket_bad_format(self):
        for number in ["123", "12345", "abcd"]:
            response = self.client.get(f"/admin/tickets/{number}", headers=self.headers)
            assert response.status_code == 400, number

    def test_get_ticket_not_found(self):
        response = self.client.get("/admin/tickets/4321", headers=self.headers)
        assert response.status_code == 404

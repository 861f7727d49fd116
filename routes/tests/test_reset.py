from fastapi.testclient import TestClient
from sqlalchemy import func, select
from models import engine, db, get_db_sync, get_db_sync_for_test
from models.AdminUser import AdminUser
from models.Participant import Participant
from models.Reference import Reference
from models.Ticket import Ticket
from core.security import generate_hash_password, generate_token_from_admin
from main import app
import alembic.config
from unittest import TestCase


USER_DATA = {
    "name": "Pedro Suarez",
    "email": "pedro@example.com",
    "phone": "(0414) 123 4567",
    "national_id": "V12345678",
}


class TestReset(TestCase):
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
            username="resetadmin",
            email="admin@rifa.com",
            password=generate_hash_password("secret123"),
        )
        self.session.add_all(
            [
                self.admin,
                Reference(code="800001", ticket_count=2),
                Reference(code="800002", ticket_count=3),
                Reference(code="800003", ticket_count=1),
            ]
        )
        self.session.commit()

        app.dependency_overrides[get_db_sync] = get_db_sync_for_test(db=self.session)
        self.client = TestClient(app)

    def tearDown(self):
        self.session.close()
        self.trans.rollback()
        self.connection.close()

    def count(self, model, *criteria):
        stmt = select(func.count()).select_from(model)
        if criteria:
            stmt = stmt.where(*criteria)
        return self.session.execute(stmt).scalar()

    def test_reset_requires_admin(self):
        response = self.client.post("/admin/reset")
        assert response.status_code == 401

    def test_reset(self):
        for code in ["800001", "800002"]:
            response = self.client.post(
                "/generate-tickets", json={"reference": code, "user_data": USER_DATA}
            )
            assert response.status_code == 200, response.text
        assert self.count(Ticket) == 5

        token = generate_token_from_admin(self.admin)
        response = self.client.post(
            "/admin/reset", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["deleted"] == {"participants": 2, "tickets": 5, "references": 2}

        assert self.count(Participant) == 0
        assert self.count(Ticket) == 0
        assert self.count(Reference) == 3
        assert self.count(Reference, Reference.used.is_(True)) == 0
        assert self.count(Reference, Reference.used_at.is_not(None)) == 0

        # references can be redeemed again
        response = self.client.post(
            "/generate-tickets", json={"reference": "800001", "user_data": USER_DATA}
        )
        assert response.status_code == 200

    def test_reset_empty_raffle(self):
        token = generate_token_from_admin(self.admin)
        response = self.client.post(
            "/admin/reset", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 200
        assert response.json()["deleted"] == {
            "participants": 0,
            "tickets": 0,
            "references": 0,
        }

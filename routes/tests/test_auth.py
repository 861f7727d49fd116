import alembic.config
from unittest import IsolatedAsyncioTestCase
from datetime import datetime, timedelta
import jwt
import pytz

from fastapi.testclient import TestClient
from core.security import generate_hash_password, generate_token_from_admin
from models import engine, db, get_db_sync, get_db_sync_for_test
from models.AdminUser import AdminUser
from main import app
from settings import SECRET_KEY, ALGORITHM


class TestAuth(IsolatedAsyncioTestCase):
    def setUp(self) -> None:
        alembic_args = ["upgrade", "head"]
        alembic.config.main(argv=alembic_args)
        # connect to the database
        self.connection = engine.connect()

        # begin a non-ORM transaction
        self.trans = self.connection.begin()

        # bind an individual Session to the connection, selecting
        # "create_savepoint" join_transaction_mode
        self.db = db(bind=self.connection, join_transaction_mode="create_savepoint")

        self.admin = AdminUser(
            username="rifaadmin",
            email="rifaadmin@example.com",
            password=generate_hash_password("password"),
        )
        self.db.add(self.admin)
        self.db.commit()
        app.dependency_overrides[get_db_sync] = get_db_sync_for_test(db=self.db)

    async def test_login_then_me(self):
        # Given
        client = TestClient(app)

        # When
        response = client.post(
            "/admin/login", json={"username": "rifaadmin", "password": "password"}
        )

        # Then
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["user"]["username"] == "rifaadmin"
        assert data["user"]["email"] == "rifaadmin@example.com"
        assert data["user"]["role"] == "admin"
        assert "password" not in data["user"]

        # When
        response = client.get(
            "/admin/me", headers={"Authorization": f"Bearer {data['token']}"}
        )

        # Then
        assert response.status_code == 200
        assert response.json()["user"]["id"] == str(self.admin.id)

    async def test_login_wrong_password(self):
        # Given
        client = TestClient(app)

        # When
        response = client.post(
            "/admin/login", json={"username": "rifaadmin", "password": "wrong"}
        )

        # Then
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid Credentials"

    async def test_login_unknown_user(self):
        client = TestClient(app)
        response = client.post(
            "/admin/login", json={"username": "nobody", "password": "password"}
        )
        assert response.status_code == 401

    async def test_login_empty_credentials(self):
        client = TestClient(app)
        response = client.post("/admin/login", json={"username": "", "password": ""})
        assert response.status_code == 400

    async def test_swagger_token(self):
        # Given
        client = TestClient(app)

        # When
        response = client.post(
            "/admin/token/", data={"username": "rifaadmin", "password": "password"}
        )

        # Then
        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        response = client.get(
            "/admin/me", headers={"Authorization": f"Bearer {data['access_token']}"}
        )
        assert response.status_code == 200

        response = client.post(
            "/admin/token/", data={"username": "rifaadmin", "password": "nope"}
        )
        assert response.status_code == 400

    async def test_me_without_token(self):
        client = TestClient(app)
        response = client.get("/admin/me")
        assert response.status_code == 401

    async def test_me_with_expired_token(self):
        # Given
        client = TestClient(app)
        payload = {
            "id": str(self.admin.id),
            "username": self.admin.username,
            "role": self.admin.role,
            "exp": datetime.now(tz=pytz.timezone("UTC")) - timedelta(minutes=1),
        }
        token = jwt.encode(payload, SECRET_KEY, algorithm=ALGORITHM)

        # When
        response = client.get("/admin/me", headers={"Authorization": f"Bearer {token}"})

        # Then
        assert response.status_code == 401

    async def test_me_with_foreign_signature(self):
        client = TestClient(app)
        payload = {
            "id": str(self.admin.id),
            "username": self.admin.username,
            "role": self.admin.role,
            "exp": datetime.now(tz=pytz.timezone("UTC")) + timedelta(minutes=5),
        }
        token = jwt.encode(payload, "another-secret", algorithm=ALGORITHM)
        response = client.get("/admin/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    async def test_token_of_deleted_admin(self):
        # Given
        client = TestClient(app)
        token = generate_token_from_admin(self.admin)
        self.db.delete(self.admin)
        self.db.commit()

        # When
        response = client.get("/admin/me", headers={"Authorization": f"Bearer {token}"})

        # Then
        assert response.status_code == 401

    def tearDown(self) -> None:
        self.db.close()

        # rollback - everything that happened with the
        # Session above (including calls to commit())
        # is rolled back.
        self.trans.rollback()

        # return connection to the Engine
        self.connection.close()

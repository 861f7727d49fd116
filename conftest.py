import os
import tempfile

# settings are read at import time, so the test database has to be chosen
# before any application module is imported
_test_db_dir = tempfile.mkdtemp(prefix="rifa-test-")
os.environ.setdefault(
    "DATABASE_URL", f"sqlite:///{os.path.join(_test_db_dir, 'rifa.db')}"
)
os.environ.setdefault("RATE_LIMIT_ENABLED", "False")
os.environ.setdefault("SECRET_KEY", "rifa-test-secret")

import os
from core.log import logger

if os.environ.get("ENVIRONTMENT") != "os":
    logger.info("load env from file")
    from dotenv import load_dotenv

    load_dotenv()
else:
    logger.info("load env from os")


def str_to_bool(string: str) -> bool:
    if string in ["true", "TRUE", "True"]:
        return True
    elif string in ["false", "FALSE", "False"]:
        return False
    else:
        raise Exception(
            f"{string} is not boolean, ex input true -> true, True, TRUE, ex input false -> false, False, FALSE"
        )


def str_to_list(string: str) -> list[str]:
    return [item.strip() for item in string.split(",") if item.strip()]


# Environtment
ENVIRONTMENT = os.environ.get("ENVIRONTMENT")

# Deployment mode
DEPLOYMENT_MODE = os.environ.get("DEPLOYMENT_MODE", "development")

# JWT conf
JWT_PREFIX = os.environ.get("JWT_PREFIX", "Bearer")
SECRET_KEY = os.environ.get("SECRET_KEY", "rifa_secret")
ALGORITHM = os.environ.get("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 720))

# Timezone
TZ = os.environ.get("TZ", "America/Caracas")

# Postgresql conf
POSTGRES_USER = os.environ.get("POSTGRES_USER")
POSTGRES_PASSWORD = os.environ.get("POSTGRES_PASSWORD")
POSTGRES_HOST = os.environ.get("POSTGRES_HOST")
POSTGRES_PORT = os.environ.get("POSTGRES_PORT")
POSTGRES_DATABASE = os.environ.get("POSTGRES_DATABASE")

# DATABASE_URL wins over the POSTGRES_* variables, sqlite:/// urls are allowed
# for local development and tests
DATABASE_URL = os.environ.get(
    "DATABASE_URL",
    f"postgresql+psycopg://{POSTGRES_USER}:{POSTGRES_PASSWORD}@{POSTGRES_HOST}:{POSTGRES_PORT}/{POSTGRES_DATABASE}",
)

# CORS
CORS_ORIGINS = str_to_list(os.environ.get("CORS_ORIGINS", "*"))

# Rate limit conf
RATE_LIMIT_ENABLED = str_to_bool(os.environ.get("RATE_LIMIT_ENABLED", "True"))
RATE_LIMIT_PER_MINUTE = int(os.environ.get("RATE_LIMIT_PER_MINUTE", 60))
RATE_LIMIT_WINDOW = int(os.environ.get("RATE_LIMIT_WINDOW", 60))
RATE_LIMIT_EXCLUDED_PATHS = str_to_list(
    os.environ.get("RATE_LIMIT_EXCLUDED_PATHS", "/health,/docs,/openapi.json")
)

# Default admin, used by the seed command
ADMIN_USERNAME = os.environ.get("ADMIN_USERNAME", "admin")
ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "admin@rifa.com")
ADMIN_PASSWORD = os.environ.get("ADMIN_PASSWORD", "admin123")

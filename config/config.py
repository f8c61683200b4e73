import os


def env_flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


def db_config_from_env(*, default_password: str = "") -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", default_password),
        "database": os.getenv("DB_NAME", "employee_portal"),
    }


# Identity provider metadata API. Empty URL disables mirroring.
IDENTITY_API_URL = os.getenv("IDENTITY_API_URL", "")
IDENTITY_API_KEY = os.getenv("IDENTITY_API_KEY", "")
IDENTITY_TIMEOUT_SECONDS = float(os.getenv("IDENTITY_TIMEOUT_SECONDS", "5"))
IDENTITY_MIRROR_RETRIES = int(os.getenv("IDENTITY_MIRROR_RETRIES", "2"))

NOTIFY_ACTOR_ON_TRANSITION = env_flag("NOTIFY_ACTOR_ON_TRANSITION", "1")

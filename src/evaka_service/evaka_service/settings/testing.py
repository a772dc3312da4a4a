import os

SECRET_KEY = "test-secret-key"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "evaka_test"),
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = False

ADMIN_USERNAME = None
ADMIN_PASSWORD = None

LOG_JSON = False
LOG_LEVEL = "WARNING"

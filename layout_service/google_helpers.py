import logging
import os
from google.cloud import secretmanager
from google.oauth2 import service_account
from google.auth import default as google_auth_default
from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import sessionmaker

from dotenv import load_dotenv

load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
)

logger = logging.getLogger("layout_service")

# --- Configuration ---
PROJECT_ID = os.getenv("GOOGLE_CLOUD_PROJECT", "your-project-id")

DATABASE_URL        = os.getenv("DATABASE_URL", "")
DB_HOST             = os.getenv("DB_HOST", "localhost")
DB_PORT             = int(os.getenv("DB_PORT", "5432"))
DB_NAME             = os.getenv("DB_NAME", "layouts")
DB_USER             = os.getenv("DB_USER", "")
DB_PASSWORD         = os.getenv("DB_PASSWORD")
DB_SECRET_ID        = os.getenv("DB_SECRET_ID")
SQLITE_PATH         = os.getenv("LAYOUT_SQLITE_PATH", "layouts.db")

LAYOUT_TABLE        = os.getenv("LAYOUT_TABLE", "layout_record")
DEFAULT_OWNER       = os.getenv("LAYOUT_DEFAULT_OWNER", "user")
DEFAULT_TAGS        = [t.strip() for t in os.getenv("LAYOUT_DEFAULT_TAGS", "").split(",") if t.strip()]

IS_LOCAL_DB = (DB_HOST == "localhost")


def _build_creds():
    key_path = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
    scopes = ["https://www.googleapis.com/auth/cloud-platform"]
    if key_path and os.path.exists(key_path):
        return service_account.Credentials.from_service_account_file(key_path, scopes=scopes)
    creds, _ = google_auth_default(scopes=scopes)
    return creds


def get_db_password() -> str:
    global DB_PASSWORD

    if DB_PASSWORD:
        return DB_PASSWORD

    if DB_SECRET_ID:
        creds = _build_creds()
        client = secretmanager.SecretManagerServiceClient(credentials=creds)
        name = client.secret_version_path(PROJECT_ID, DB_SECRET_ID, "latest")
        resp = client.access_secret_version(request={"name": name})
        DB_PASSWORD = resp.payload.data.decode("utf-8")
        return DB_PASSWORD

    raise RuntimeError("No DB_PASSWORD and no Secret Manager configured")


def get_database_url() -> str:
    if DATABASE_URL:
        return DATABASE_URL
    if IS_LOCAL_DB:
        return f"sqlite:///{SQLITE_PATH}"
    password = get_db_password()
    return f"postgresql+pg8000://{DB_USER}:{password}@{DB_HOST}:{DB_PORT}/{DB_NAME}"


def get_db_engine(url: str | None = None):
    url = url or get_database_url()
    masked = make_url(url).render_as_string(hide_password=True)

    if url.startswith("sqlite"):
        logger.info(f"[DB] Using SQLite URL: {masked}")
        return create_engine(url)

    logger.info(f"[DB] Connecting to Postgres URL: {masked}")

    # pg8000 supports 'timeout' in seconds
    connect_args = {"timeout": 10} if "pg8000" in url else {}
    return create_engine(url, connect_args=connect_args, pool_pre_ping=True)


def create_session_factory(engine=None) -> sessionmaker:
    engine = engine or get_db_engine()
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

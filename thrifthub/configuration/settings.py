import logging
import os
from dotenv import load_dotenv

# Logging configuration
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")

# Load environment variables
load_dotenv(dotenv_path=".env", encoding="utf-8")

# Silence SQLAlchemy logs
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def _as_bool(value, default: bool = False) -> bool:
    if value is None:
        return default
    return str(value).strip().lower() in ("1", "true", "yes", "on")


class Configuration:
    def __init__(self):

        # Base url (used for payment callbacks)
        self.base_url = os.getenv("APP_URL", "http://localhost:3000")

        # Environment and database
        self.environment = os.getenv("ENVIRONMENT", "development").lower()
        self.database_url = os.getenv("DATABASE_URL")
        self.seed_database = _as_bool(os.getenv("SEED_DATABASE"), default=False)
        self.scheduler_enabled = _as_bool(os.getenv("SCHEDULER_ENABLED"), default=True)
        self.cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",") if o.strip()]

        # JWT
        self.jwt_secret = os.getenv("JWT_SECRET", "thrifthub-dev-access-secret")
        self.jwt_refresh_secret = os.getenv("JWT_REFRESH_SECRET", "thrifthub-dev-refresh-secret")
        self.jwt_access_minutes = int(os.getenv("JWT_ACCESS_MINUTES", 15))
        self.jwt_refresh_days = int(os.getenv("JWT_REFRESH_DAYS", 7))
        self.cookie_secure = _as_bool(os.getenv("COOKIE_SECURE"), default=self.environment == "production")

        # Seeded admin account
        self.admin_email = os.getenv("ADMIN_EMAIL", "admin@thrifthub.edu.gh")
        self.admin_password = os.getenv("ADMIN_PASSWORD", "thrifthub-admin")

        # Internal calls (cron, assignment)
        self.internal_api_key = os.getenv("INTERNAL_API_KEY")

        # Email
        self.email_enabled = _as_bool(os.getenv("EMAIL_ENABLED"), default=False)
        self.email_user = os.getenv("EMAIL_USER")
        self.email_password = os.getenv("EMAIL_PASSWORD")
        self.smtp_host = os.getenv("SMTP_HOST", "smtp.gmail.com")
        self.smtp_port = int(os.getenv("SMTP_PORT", 587))

        # POSTGRES
        self.db_user = os.getenv("DB_USER")
        self.db_password = os.getenv("DB_PASSWORD")
        self.db_host = os.getenv("DB_HOST")
        self.db_port = os.getenv("DB_PORT", "5432")
        self.db_name = os.getenv("DB_NAME")

        # Object storage (S3 compatible)
        self.storage_endpoint_url = os.getenv("STORAGE_ENDPOINT_URL")
        self.aws_access_key_id = os.getenv("AWS_ACCESS_KEY_ID")
        self.aws_secret_access_key = os.getenv("AWS_SECRET_ACCESS_KEY")
        self.aws_region = os.getenv("AWS_REGION", "auto")
        self.storage_bucket_name = os.getenv("STORAGE_BUCKET_NAME")
        self.storage_public_url = os.getenv("STORAGE_PUBLIC_URL")

        # Paystack
        self.paystack_secret_key = os.getenv("PAYSTACK_SECRET_KEY", "")
        self.paystack_base_url = os.getenv("PAYSTACK_BASE_URL", "https://api.paystack.co")

        # Embeddings
        self.embedding_api_url = os.getenv("EMBEDDING_API_URL", "https://api.openai.com/v1/embeddings")
        self.embedding_api_key = os.getenv("OPENAI_API_KEY")
        self.embedding_model = os.getenv("EMBEDDING_MODEL", "text-embedding-3-small")

    def connect_to_postgresql(self):
        db_url = f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"
        logging.info(f"DATABASE >>> PostgreSQL selected at {self.db_host}:{self.db_port}/{self.db_name}")
        return db_url

    def get_database_url(self):
        if self.database_url:
            return self.database_url
        if self.environment == "production":
            return self.connect_to_postgresql()
        logging.info("DATABASE >>> DATABASE_URL not set, using local SQLite file")
        return "sqlite:///./thrifthub.db"

import os

DEFAULT_SQLITE = "sqlite:///local.db"


def build_db_uri() -> str:
    conn_name = os.environ.get("CLOUD_SQL_CONNECTION_NAME")
    db_name = os.environ.get("DB_NAME")
    db_user = os.environ.get("DB_USER")
    db_pass = os.environ.get("DB_PASS")

    # App Engine (Cloud SQL unix socket)
    if conn_name and db_name and db_user and db_pass:
        return (
            f"postgresql+psycopg2://{db_user}:{db_pass}@/{db_name}"
            f"?host=/cloudsql/{conn_name}"
        )

    # Local dev (optional DATABASE_URL), otherwise sqlite
    return os.environ.get("DATABASE_URL", DEFAULT_SQLITE)


class Config:
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-change-me")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = build_db_uri()

    JWT_SECRET = os.environ.get("JWT_SECRET") or SECRET_KEY
    JWT_EXPIRES_HOURS = int(os.environ.get("JWT_EXPIRES_HOURS", "24"))

    APP_ENV = os.environ.get("APP_ENV", "development")
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    FRONTEND_ORIGIN = os.environ.get("FRONTEND_ORIGIN", "http://localhost:5173")
    ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "")

    EMAIL_HOST = os.environ.get("EMAIL_HOST", "")
    EMAIL_PORT = int(os.environ.get("EMAIL_PORT", "587"))
    EMAIL_USER = os.environ.get("EMAIL_USER", "")
    EMAIL_PASS = os.environ.get("EMAIL_PASS", "")
    EMAIL_FROM = os.environ.get("EMAIL_FROM", '"Campus Connect" <no-reply@campusconnect.com>')

    CLOUDINARY_CLOUD_NAME = os.environ.get("CLOUDINARY_CLOUD_NAME", "")
    CLOUDINARY_API_KEY = os.environ.get("CLOUDINARY_API_KEY", "")
    CLOUDINARY_API_SECRET = os.environ.get("CLOUDINARY_API_SECRET", "")
    CLOUDINARY_FOLDER = os.environ.get("CLOUDINARY_FOLDER", "campus-connect")

    FIRESTORE_PROJECT = os.environ.get("GOOGLE_CLOUD_PROJECT") or os.environ.get("GCP_PROJECT")
    FIRESTORE_DB = os.environ.get("FIRESTORE_DB")

"""Application configuration using Pydantic Settings."""
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # App
    app_name: str = "Nursery Admin"
    debug: bool = False

    # Nursery
    nursery_timezone: str = "UTC"  # IANA name; "today" and scan windows use this clock
    admin_email: str = ""  # identity that is granted the admin profile on startup

    # Firebase (Realtime Database + Authentication)
    firebase_credentials_path: str = ""
    firebase_database_url: str = ""
    firebase_web_api_key: str = ""  # Identity Toolkit key used for password sign-in
    firebase_auth_url: str = "https://identitytoolkit.googleapis.com/v1"

    # CORS (comma-separated origins)
    cors_origins: str = "http://localhost:5173"

    @model_validator(mode="after")
    def _validate_firebase(self):
        if not self.debug:
            if not self.firebase_database_url:
                raise ValueError(
                    "FIREBASE_DATABASE_URL must be set when DEBUG is not enabled "
                    "(e.g. https://<project>-default-rtdb.firebaseio.com/)."
                )
        return self


settings = Settings()

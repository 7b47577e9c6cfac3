from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional

class Settings(BaseSettings):
    # MongoDB
    mongodb_uri: str = "mongodb://localhost:27017"
    mongodb_database: str = "resume_analyzer"

    # AWS
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    s3_bucket_name: str = "resume-analyzer-uploads"
    presigned_url_expiry: int = 3600

    # Firebase
    firebase_project_id: str = ""
    firebase_private_key: str = ""
    firebase_client_email: str = ""
    firebase_api_key: str = ""
    firebase_auth_domain: str = ""

    # Analysis
    max_upload_bytes: int = 10 * 1024 * 1024
    text_extractor: str = "mock"  # mock | document
    scoring_seed: Optional[int] = None

    # Web
    session_cookie_name: str = "session"
    session_cookie_days: int = 5
    log_level: str = "INFO"

    class Config:
        env_file = ".env"

@lru_cache()
def get_settings():
    return Settings()

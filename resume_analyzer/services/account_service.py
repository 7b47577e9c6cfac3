import logging
from typing import Optional, Tuple

from resume_analyzer.errors import AuthError, ValidationError
from resume_analyzer.models import UserProfile
from resume_analyzer.services.auth_service import validate_signup

logger = logging.getLogger(__name__)

MAX_PHOTO_SIZE = 10 * 1024 * 1024

class AccountService:
    """Signup, login and profile photo flows on top of Firebase, MongoDB and S3."""

    def __init__(self, auth_service, record_service, storage_service):
        self.auth_service = auth_service
        self.record_service = record_service
        self.storage_service = storage_service

    def signup(self, name: str, email: str, password: str, phone: str = "") -> Tuple[str, UserProfile]:
        """
        Create the account and its profile, then sign in.
        Returns: (id token, profile)
        """
        email = email.strip().lower()
        validate_signup(name, email, password)

        uid = self.auth_service.create_account(email, password, name.strip())
        profile = self.record_service.create_profile(uid, name.strip(), email, phone.strip())
        token = self.auth_service.sign_in(email, password)
        return token, profile

    def login(self, email: str, password: str) -> str:
        if not email or not password:
            raise AuthError("Email and password are required.")
        return self.auth_service.sign_in(email.strip().lower(), password)

    def upload_profile_photo(self, uid: str, file_bytes: bytes, content_type: str) -> str:
        """
        Store a new profile photo and point the account at it.
        Returns: download URL of the photo
        """
        if not (content_type or "").startswith("image/"):
            raise ValidationError("Please upload an image file")
        if len(file_bytes) > MAX_PHOTO_SIZE:
            raise ValidationError("File size must be less than 10MB")

        object_key = self.storage_service.upload_profile_photo(file_bytes, uid, content_type)
        self.record_service.set_profile_photo(uid, object_key)
        photo_url = self.storage_service.get_download_url(object_key)
        logger.info("Updated profile photo for %s", uid)
        return photo_url

    def load_profile(self, uid: str) -> Optional[UserProfile]:
        """Profile with a freshly signed photo URL, or None if there is no profile."""
        profile = self.record_service.get_profile(uid)
        if profile is None or not profile.photo_key:
            return profile
        photo_url = self.storage_service.get_download_url(profile.photo_key)
        return profile.model_copy(update={'photo_url': photo_url})

    def start_session(self, id_token: str) -> str:
        """Exchange a sign-in ID token for a long-lived session cookie value."""
        return self.auth_service.create_session_cookie(id_token)

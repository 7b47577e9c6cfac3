import logging
from datetime import timedelta

import firebase_admin
import httpx
from firebase_admin import credentials, auth

from resume_analyzer.config import get_settings
from resume_analyzer.errors import AuthError, ValidationError

logger = logging.getLogger(__name__)

SIGN_IN_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"

SIGN_IN_ERRORS = {
    "EMAIL_NOT_FOUND": "No account found with this email.",
    "INVALID_PASSWORD": "Incorrect password.",
    "INVALID_LOGIN_CREDENTIALS": "Invalid email or password.",
    "USER_DISABLED": "This account has been disabled.",
}

def initialize_firebase():
    """Initialize the default Firebase Admin app once per process."""
    try:
        firebase_admin.get_app()
        return
    except ValueError:
        pass
    settings = get_settings()
    cred_dict = {
        "type": "service_account",
        "project_id": settings.firebase_project_id,
        "private_key": settings.firebase_private_key.replace('\\n', '\n'),
        "client_email": settings.firebase_client_email,
        "token_uri": "https://oauth2.googleapis.com/token",
    }
    cred = credentials.Certificate(cred_dict)
    firebase_admin.initialize_app(cred)

def validate_signup(name: str, email: str, password: str):
    if len(name.strip()) < 2:
        raise ValidationError("Name must be at least 2 characters.")
    if "@" not in email:
        raise ValidationError("Please enter a valid email address.")
    if len(password) < 6:
        raise ValidationError("Password must be at least 6 characters.")

class AuthService:
    def __init__(self, http_client: httpx.Client = None):
        initialize_firebase()
        settings = get_settings()
        self.api_key = settings.firebase_api_key
        self.session_lifetime = timedelta(days=settings.session_cookie_days)
        self.http_client = http_client or httpx.Client(timeout=10.0)

    @staticmethod
    def verify_token(id_token: str) -> dict:
        """
        Verify Firebase ID token.
        Returns: User info dict
        """
        try:
            decoded_token = auth.verify_id_token(id_token)
            return {
                'uid': decoded_token['uid'],
                'email': decoded_token.get('email'),
                'name': decoded_token.get('name')
            }
        except Exception as e:
            raise AuthError(f"Token verification failed: {str(e)}")

    def create_session_cookie(self, id_token: str) -> str:
        """Mint a Firebase session cookie that outlives the one-hour ID token."""
        try:
            return auth.create_session_cookie(id_token, expires_in=self.session_lifetime)
        except Exception as e:
            raise AuthError(f"Session creation failed: {str(e)}")

    @staticmethod
    def verify_session_cookie(session_cookie: str) -> dict:
        try:
            decoded = auth.verify_session_cookie(session_cookie)
            return {
                'uid': decoded['uid'],
                'email': decoded.get('email'),
                'name': decoded.get('name')
            }
        except Exception as e:
            raise AuthError(f"Session verification failed: {str(e)}")

    @staticmethod
    def create_account(email: str, password: str, name: str) -> str:
        """Create a Firebase user and return its uid."""
        try:
            user = auth.create_user(email=email, password=password, display_name=name)
        except auth.EmailAlreadyExistsError:
            raise AuthError("An account with this email already exists. Please sign in.")
        except Exception as e:
            raise AuthError(f"Account creation failed: {str(e)}")
        logger.info("Created account %s", user.uid)
        return user.uid

    def sign_in(self, email: str, password: str) -> str:
        """
        Verify credentials against Firebase Authentication.
        Returns: ID token for the session
        """
        try:
            response = self.http_client.post(
                SIGN_IN_URL,
                params={'key': self.api_key},
                json={'email': email, 'password': password, 'returnSecureToken': True}
            )
            data = response.json()
        except Exception as e:
            raise AuthError(f"Sign in failed: {str(e)}")

        if 'error' in data:
            code = data['error'].get('message', '').split(' ')[0]
            raise AuthError(SIGN_IN_ERRORS.get(code, f"Sign in failed: {code}"))

        return data['idToken']

    @staticmethod
    def update_display_name(uid: str, display_name: str):
        try:
            auth.update_user(uid, display_name=display_name)
        except Exception as e:
            raise AuthError(f"Profile update failed: {str(e)}")

import random
from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from resume_analyzer import main
from resume_analyzer.errors import AuthError, PersistenceError, StorageError
from resume_analyzer.models import AnalysisRecord, AnalysisStatus, UserProfile
from resume_analyzer.services.extraction_service import MockTextExtractor
from resume_analyzer.services.scoring_service import ScoringService


class FakeRecordService:
    def __init__(self):
        self.analyses = {}
        self.profiles = {}
        self.clock = datetime(2024, 1, 1, 12, 0, 0)
        self.fail_writes = False
        self.fail_reads = False

    def create_analysis(self, owner_id, file_name, file_reference, result):
        if self.fail_writes:
            raise PersistenceError("Saving analysis failed: connection refused")
        self.clock += timedelta(minutes=1)
        analysis_id = f"analysis-{len(self.analyses) + 1}"
        self.analyses[analysis_id] = AnalysisRecord(
            id=analysis_id,
            owner_id=owner_id,
            file_name=file_name,
            file_reference=file_reference,
            score=result.score,
            keywords_found=result.keywords_found,
            strengths=result.strengths,
            improvements=result.improvements,
            section_feedback=result.section_feedback,
            uploaded_at=self.clock,
            status=AnalysisStatus.COMPLETED,
        )
        return analysis_id

    def add(self, record):
        self.analyses[record.id] = record

    def get_analysis(self, analysis_id):
        return self.analyses.get(analysis_id)

    def list_analyses(self, owner_id):
        records = [r for r in self.analyses.values() if r.owner_id == owner_id]
        return sorted(records, key=lambda r: r.uploaded_at, reverse=True)

    def create_profile(self, uid, name, email, phone=""):
        profile = UserProfile(uid=uid, name=name, email=email, phone=phone, created_at=datetime(2024, 1, 1))
        self.profiles[uid] = profile
        return profile

    def get_profile(self, uid):
        if self.fail_reads:
            raise PersistenceError("Loading profile failed: connection refused")
        return self.profiles.get(uid)

    def set_profile_photo(self, uid, photo_key):
        profile = self.profiles.get(uid)
        if profile is None:
            return None
        profile = profile.model_copy(update={'photo_key': photo_key})
        self.profiles[uid] = profile
        return profile


class FakeStorageService:
    def __init__(self):
        self.objects = {}
        self.calls = []
        self.fail = False

    def upload_resume(self, file_bytes, user_id, filename, content_type):
        self.calls.append(('upload_resume', user_id, filename))
        if self.fail:
            raise StorageError("S3 upload failed: bucket unavailable")
        key = f"resumes/{user_id}/{len(self.objects)}_{filename}"
        self.objects[key] = file_bytes
        return key

    def upload_profile_photo(self, file_bytes, user_id, content_type):
        self.calls.append(('upload_profile_photo', user_id))
        key = f"profile-photos/{user_id}"
        self.objects[key] = file_bytes
        return key

    def get_download_url(self, object_key):
        self.calls.append(('get_download_url', object_key))
        return f"https://bucket.example.com/{object_key}"


class FakeAuthService:
    def __init__(self):
        self.accounts = {}
        self.tokens = {}
        self.sessions = {}

    def add_account(self, uid, email, password, name=None):
        self.accounts[email] = {'uid': uid, 'email': email, 'password': password, 'name': name}
        token = f"token-{uid}"
        self.tokens[token] = {'uid': uid, 'email': email, 'name': name}
        return token

    def verify_token(self, id_token):
        if id_token not in self.tokens:
            raise AuthError("Token verification failed: invalid token")
        return self.tokens[id_token]

    def create_session_cookie(self, id_token):
        user = self.verify_token(id_token)
        session_cookie = f"session-{id_token}"
        self.sessions[session_cookie] = user
        return session_cookie

    def verify_session_cookie(self, session_cookie):
        if session_cookie not in self.sessions:
            raise AuthError("Session verification failed: invalid cookie")
        return self.sessions[session_cookie]

    def create_account(self, email, password, name):
        if email in self.accounts:
            raise AuthError("An account with this email already exists. Please sign in.")
        uid = f"uid-{len(self.accounts) + 1}"
        self.add_account(uid, email, password, name)
        return uid

    def sign_in(self, email, password):
        account = self.accounts.get(email)
        if account is None or account['password'] != password:
            raise AuthError("Invalid email or password.")
        return f"token-{account['uid']}"


@pytest.fixture
def record_service():
    return FakeRecordService()


@pytest.fixture
def storage_service():
    return FakeStorageService()


@pytest.fixture
def auth_service():
    return FakeAuthService()


@pytest.fixture
def scoring_service():
    return ScoringService(rng=random.Random(7))


@pytest.fixture
def client(record_service, storage_service, auth_service, scoring_service):
    main.app.dependency_overrides[main.get_record_service] = lambda: record_service
    main.app.dependency_overrides[main.get_storage_service] = lambda: storage_service
    main.app.dependency_overrides[main.get_auth_service] = lambda: auth_service
    main.app.dependency_overrides[main.get_scoring_service] = lambda: scoring_service
    main.app.dependency_overrides[main.get_extractor] = MockTextExtractor
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()


@pytest.fixture
def user_token(auth_service, record_service):
    token = auth_service.add_account("uid-jane", "jane@example.com", "secret123", "Jane Roe")
    record_service.create_profile("uid-jane", "Jane Roe", "jane@example.com", "555-0100")
    return token


@pytest.fixture
def user_cookie(auth_service, user_token):
    return auth_service.create_session_cookie(user_token)

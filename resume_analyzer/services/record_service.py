import logging
import uuid
from datetime import datetime
from typing import List, Optional

from pymongo import DESCENDING, MongoClient, ReturnDocument

from resume_analyzer.config import get_settings
from resume_analyzer.errors import PersistenceError
from resume_analyzer.models import (
    AnalysisRecord,
    AnalysisResult,
    AnalysisStatus,
    UserProfile,
)

logger = logging.getLogger(__name__)


class RecordService:
    """
    MongoDB-backed store for analysis records and user profiles.

    Analysis records are insert-only: no method here updates or
    deletes one.
    """

    def __init__(self, db=None):
        if db is None:
            settings = get_settings()
            mongo_client = MongoClient(settings.mongodb_uri)
            db = mongo_client[settings.mongodb_database]
        self.analyses_collection = db["resume_analyses"]
        self.users_collection = db["users"]

    # Analyses

    def create_analysis(
        self,
        owner_id: str,
        file_name: str,
        file_reference: str,
        result: AnalysisResult,
    ) -> str:
        """
        Insert a completed analysis and return its id.

        ``uploaded_at`` comes from the database server clock via an upsert
        with ``$currentDate``.
        """
        analysis_id = uuid.uuid4().hex
        doc = {
            'owner_id': owner_id,
            'file_name': file_name,
            'file_reference': file_reference,
            'score': result.score,
            'keywords_found': result.keywords_found,
            'strengths': result.strengths,
            'improvements': result.improvements,
            'section_feedback': {
                name: section.model_dump() for name, section in result.section_feedback.items()
            },
            'status': AnalysisStatus.COMPLETED.value,
        }
        try:
            self.analyses_collection.update_one(
                {'_id': analysis_id},
                {'$setOnInsert': doc, '$currentDate': {'uploaded_at': True}},
                upsert=True
            )
        except Exception as e:
            raise PersistenceError(f"Saving analysis failed: {str(e)}")

        logger.info("Stored analysis %s for %s (score %d)", analysis_id, owner_id, result.score)
        return analysis_id

    def get_analysis(self, analysis_id: str) -> Optional[AnalysisRecord]:
        try:
            doc = self.analyses_collection.find_one({'_id': analysis_id})
        except Exception as e:
            raise PersistenceError(f"Loading analysis failed: {str(e)}")
        return self._to_record(doc) if doc else None

    def list_analyses(self, owner_id: str) -> List[AnalysisRecord]:
        """All of an owner's analyses, newest first."""
        try:
            docs = list(self.analyses_collection.find(
                {'owner_id': owner_id}
            ).sort('uploaded_at', DESCENDING))
        except Exception as e:
            raise PersistenceError(f"Loading analyses failed: {str(e)}")
        return [self._to_record(doc) for doc in docs]

    @staticmethod
    def _to_record(doc: dict) -> AnalysisRecord:
        data = dict(doc)
        data['id'] = str(data.pop('_id'))
        data.pop('file_url', None)
        return AnalysisRecord(**data)

    # Profiles

    def create_profile(self, uid: str, name: str, email: str, phone: str = "") -> UserProfile:
        profile = UserProfile(
            uid=uid,
            name=name,
            email=email,
            phone=phone,
            created_at=datetime.now(),
        )
        doc = profile.model_dump(exclude={'photo_url'})
        doc['_id'] = uid
        try:
            self.users_collection.insert_one(doc)
        except Exception as e:
            raise PersistenceError(f"Saving profile failed: {str(e)}")
        return profile

    def get_profile(self, uid: str) -> Optional[UserProfile]:
        try:
            doc = self.users_collection.find_one({'_id': uid})
        except Exception as e:
            raise PersistenceError(f"Loading profile failed: {str(e)}")
        if not doc:
            return None
        doc.pop('_id', None)
        doc.pop('photo_url', None)
        return UserProfile(**doc)

    def set_profile_photo(self, uid: str, photo_key: str) -> Optional[UserProfile]:
        try:
            doc = self.users_collection.find_one_and_update(
                {'_id': uid},
                {'$set': {'photo_key': photo_key}},
                return_document=ReturnDocument.AFTER
            )
        except Exception as e:
            raise PersistenceError(f"Updating profile photo failed: {str(e)}")
        if not doc:
            return None
        doc.pop('_id', None)
        doc.pop('photo_url', None)
        return UserProfile(**doc)

import logging

from resume_analyzer.errors import NotFoundError, UploadFailedError, ValidationError
from resume_analyzer.models import AnalysisRecord
from resume_analyzer.services.extraction_service import DOC_TYPE, DOCX_TYPE, PDF_TYPE

logger = logging.getLogger(__name__)

ALLOWED_TYPES = (PDF_TYPE, DOC_TYPE, DOCX_TYPE)
MAX_FILE_SIZE = 10 * 1024 * 1024

def validate_upload(content_type: str, size: int, max_size: int = MAX_FILE_SIZE):
    """Reject unsupported or oversized files before any I/O happens."""
    if content_type not in ALLOWED_TYPES:
        raise ValidationError("Please upload a PDF, DOC, or DOCX file")
    if size > max_size:
        raise ValidationError("File size must be less than 10MB")

class AnalysisService:
    def __init__(self, storage_service, record_service, scoring_service, extractor, max_file_size: int = MAX_FILE_SIZE):
        self.storage_service = storage_service
        self.record_service = record_service
        self.scoring_service = scoring_service
        self.extractor = extractor
        self.max_file_size = max_file_size

    def submit(self, owner_id: str, file_name: str, content_type: str, file_bytes: bytes) -> str:
        """
        Store, score and record an uploaded resume.
        Returns: id of the new analysis record

        The record is written only after scoring succeeds. If a later step
        fails the uploaded blob stays behind in the bucket.
        """
        validate_upload(content_type, len(file_bytes), self.max_file_size)

        try:
            file_reference = self.storage_service.upload_resume(file_bytes, owner_id, file_name, content_type)
            text = self.extractor.extract(file_bytes, content_type)
            result = self.scoring_service.analyze(text, file_name)
            return self.record_service.create_analysis(
                owner_id=owner_id,
                file_name=file_name,
                file_reference=file_reference,
                result=result,
            )
        except Exception as e:
            logger.exception("Upload of %s for %s failed: %s", file_name, owner_id, e)
            raise UploadFailedError() from e

    def get_for_owner(self, analysis_id: str, owner_id: str) -> AnalysisRecord:
        """
        Load an analysis, treating someone else's record as missing.

        The stored record holds only the object key. ``file_url`` is a
        freshly presigned URL for it.
        """
        record = self.record_service.get_analysis(analysis_id)
        if record is None or record.owner_id != owner_id:
            raise NotFoundError("Analysis Not Found")
        file_url = self.storage_service.get_download_url(record.file_reference)
        return record.model_copy(update={'file_url': file_url})

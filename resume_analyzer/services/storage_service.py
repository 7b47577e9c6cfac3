import boto3
from datetime import datetime

from resume_analyzer.config import get_settings
from resume_analyzer.errors import StorageError

class StorageService:
    def __init__(self, s3_client=None, bucket: str = None):
        settings = get_settings()
        self.s3_client = s3_client or boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket = bucket or settings.s3_bucket_name
        self.url_expiry = settings.presigned_url_expiry

    def _put(self, object_key: str, file_bytes: bytes, content_type: str) -> str:
        try:
            self.s3_client.put_object(
                Bucket=self.bucket,
                Key=object_key,
                Body=file_bytes,
                ContentType=content_type
            )
            return object_key
        except Exception as e:
            raise StorageError(f"S3 upload failed: {str(e)}")

    def upload_resume(self, file_bytes: bytes, user_id: str, filename: str, content_type: str) -> str:
        """
        Upload resume to S3 under a per-user, time-qualified key so repeated
        uploads of the same file name never collide.
        Returns: S3 object key (path)
        """
        timestamp = int(datetime.now().timestamp() * 1000)
        object_key = f"resumes/{user_id}/{timestamp}_{filename}"
        return self._put(object_key, file_bytes, content_type)

    def upload_profile_photo(self, file_bytes: bytes, user_id: str, content_type: str) -> str:
        """Upload a profile photo, replacing any previous one."""
        return self._put(f"profile-photos/{user_id}", file_bytes, content_type)

    def get_download_url(self, object_key: str) -> str:
        """Generate presigned URL for download."""
        try:
            return self.s3_client.generate_presigned_url(
                'get_object',
                Params={'Bucket': self.bucket, 'Key': object_key},
                ExpiresIn=self.url_expiry
            )
        except Exception as e:
            raise StorageError(f"Presigned URL generation failed: {str(e)}")

"""
File storage abstraction layer supporting both local filesystem and AWS S3.

Job seeker profile photos and resumes go through this interface, so switching
between local storage (development) and S3 (production) is a settings change.
"""

import logging
import os
import uuid
from functools import lru_cache
from io import BytesIO
from typing import BinaryIO
import boto3
from botocore.exceptions import ClientError
from app.core.config import settings

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the storage backend cannot complete an operation."""
    pass


CONTENT_TYPES = {
    'pdf': 'application/pdf',
    'docx': 'application/vnd.openxmlformats-officedocument.wordprocessingml.document',
    'doc': 'application/msword',
    'jpg': 'image/jpeg',
    'jpeg': 'image/jpeg',
    'png': 'image/png',
    'webp': 'image/webp',
}


def content_type_for(filename: str) -> str:
    """Determine content type based on file extension"""
    extension = filename.lower().rsplit('.', 1)[-1]
    return CONTENT_TYPES.get(extension, 'application/octet-stream')


class StorageBackend:
    """Abstract base class for storage backends"""

    def upload_file(self, file: BinaryIO, filename: str, folder: str) -> str:
        """Upload file under `folder` and return storage path/URL"""
        raise NotImplementedError

    def download_file(self, file_path: str) -> BytesIO:
        """Download file and return as BytesIO object"""
        raise NotImplementedError

    def delete_file(self, file_path: str) -> bool:
        """Delete file from storage"""
        raise NotImplementedError

    def file_exists(self, file_path: str) -> bool:
        """Check if file exists"""
        raise NotImplementedError


class LocalStorage(StorageBackend):
    """Local filesystem storage backend"""

    def __init__(self, base_dir: str = "uploads"):
        self.base_dir = base_dir
        os.makedirs(self.base_dir, exist_ok=True)

    def upload_file(self, file: BinaryIO, filename: str, folder: str) -> str:
        directory = os.path.join(self.base_dir, folder)
        os.makedirs(directory, exist_ok=True)

        # Unique prefix prevents collisions between uploads with the same name
        file_path = os.path.join(directory, f"{uuid.uuid4()}_{os.path.basename(filename)}")

        with open(file_path, "wb") as buffer:
            buffer.write(file.read())

        return file_path

    def download_file(self, file_path: str) -> BytesIO:
        with open(file_path, "rb") as f:
            return BytesIO(f.read())

    def delete_file(self, file_path: str) -> bool:
        try:
            if os.path.exists(file_path):
                os.remove(file_path)
                return True
            return False
        except OSError as e:
            logger.error(f"Error deleting file {file_path}: {e}")
            return False

    def file_exists(self, file_path: str) -> bool:
        return os.path.exists(file_path)


class S3Storage(StorageBackend):
    """AWS S3 storage backend"""

    def __init__(self):
        self.bucket_name = settings.S3_BUCKET_NAME

        # Without explicit keys boto3 falls back to IAM roles (EC2/ECS)
        if settings.AWS_ACCESS_KEY_ID and settings.AWS_SECRET_ACCESS_KEY:
            self.s3_client = boto3.client(
                's3',
                aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
                region_name=settings.AWS_REGION
            )
        else:
            self.s3_client = boto3.client('s3', region_name=settings.AWS_REGION)

    def upload_file(self, file: BinaryIO, filename: str, folder: str) -> str:
        s3_key = f"{folder}/{uuid.uuid4()}_{os.path.basename(filename)}"

        try:
            self.s3_client.upload_fileobj(
                file,
                self.bucket_name,
                s3_key,
                ExtraArgs={
                    'ContentType': content_type_for(filename),
                    'ServerSideEncryption': 'AES256'
                }
            )
        except ClientError as e:
            logger.error(f"Error uploading to S3: {e}")
            raise StorageError("Failed to upload file") from e

        return f"s3://{self.bucket_name}/{s3_key}"

    def download_file(self, file_path: str) -> BytesIO:
        s3_key = self._parse_s3_uri(file_path)

        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=s3_key)
        except ClientError as e:
            logger.error(f"Error downloading from S3: {e}")
            raise StorageError("Failed to download file") from e

        return BytesIO(response['Body'].read())

    def delete_file(self, file_path: str) -> bool:
        s3_key = self._parse_s3_uri(file_path)

        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=s3_key)
            return True
        except ClientError as e:
            logger.error(f"Error deleting from S3: {e}")
            return False

    def file_exists(self, file_path: str) -> bool:
        s3_key = self._parse_s3_uri(file_path)

        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=s3_key)
            return True
        except ClientError:
            return False

    def _parse_s3_uri(self, s3_uri: str) -> str:
        """Parse S3 URI and extract key

        Supports formats:
        - s3://bucket-name/key/path
        - photos/uuid_filename.png (assumes default bucket)
        """
        if s3_uri.startswith("s3://"):
            parts = s3_uri.replace("s3://", "").split("/", 1)
            if len(parts) == 2:
                return parts[1]
            raise ValueError(f"Invalid S3 URI format: {s3_uri}")
        return s3_uri


@lru_cache
def get_storage() -> StorageBackend:
    """
    Get storage backend based on USE_S3 setting.

    Used as a FastAPI dependency so tests can override it.
    """
    if settings.USE_S3:
        if not settings.S3_BUCKET_NAME:
            raise ValueError("S3_BUCKET_NAME must be set when USE_S3=True")
        return S3Storage()
    return LocalStorage(settings.UPLOAD_DIR)

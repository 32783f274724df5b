from functools import lru_cache
from io import BytesIO
from minio import Minio
from minio.error import S3Error
import logging
import os

logger = logging.getLogger(__name__)

MINIO_ENDPOINT = os.getenv("MINIO_ENDPOINT", "localhost:9000")
MINIO_ACCESS_KEY = os.getenv("MINIO_ACCESS_KEY", "minioadmin")
MINIO_SECRET_KEY = os.getenv("MINIO_SECRET_KEY", "minioadmin")
MINIO_BUCKET = os.getenv("MINIO_BUCKET", "showcase")
MINIO_SECURE = os.getenv("MINIO_SECURE", "false").lower() == "true"


class MediaStorage:
    """Uploaded-file store wrapping a MinIO (S3 compatible) client."""

    def __init__(self, client: Minio, bucket: str, public_endpoint: str, secure: bool = False):
        self.client = client
        self.bucket = bucket
        self.public_endpoint = public_endpoint
        self.secure = secure
        self._bucket_ready = False

    def ensure_bucket(self):
        if self._bucket_ready:
            return
        if not self.client.bucket_exists(self.bucket):
            self.client.make_bucket(self.bucket)
            logger.info("Created bucket %s", self.bucket)
        self._bucket_ready = True

    def public_url(self, object_name: str) -> str:
        scheme = "https" if self.secure else "http"
        return f"{scheme}://{self.public_endpoint}/{self.bucket}/{object_name}"

    def upload(self, object_name: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        self.ensure_bucket()
        try:
            self.client.put_object(
                self.bucket,
                object_name,
                BytesIO(data),
                length=len(data),
                content_type=content_type,
            )
        except S3Error:
            logger.exception("Upload of %s failed", object_name)
            raise
        return self.public_url(object_name)

    def delete(self, object_name: str):
        try:
            self.client.remove_object(self.bucket, object_name)
        except S3Error as exc:
            logger.warning("Could not delete %s: %s", object_name, exc)


def build_storage() -> MediaStorage:
    client = Minio(
        MINIO_ENDPOINT,
        access_key=MINIO_ACCESS_KEY,
        secret_key=MINIO_SECRET_KEY,
        secure=MINIO_SECURE,
    )
    return MediaStorage(client, MINIO_BUCKET, MINIO_ENDPOINT, secure=MINIO_SECURE)


@lru_cache(maxsize=1)
def get_storage() -> MediaStorage:
    return build_storage()

"""
Receipt storage. Local disk (served by the app under RECEIPTS_URL_PREFIX) or
Cloudflare R2 (S3-compatible, served from STORAGE_PUBLIC_BASE_URL).
Both name receipts deterministically from the bill id, so re-saving a
bill's receipt overwrites the previous copy.
"""
import asyncio
import logging
from io import BytesIO
from pathlib import Path

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.config import settings
from app.core.exceptions import ArtifactError
from app.services.receipt_service import receipt_filename

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


class LocalReceiptStorage:
    """Writes receipts into a directory that the app mounts as static files"""

    def __init__(self, directory: str = None, url_prefix: str = None):
        self.directory = Path(directory or settings.RECEIPTS_DIR)
        self.url_prefix = (url_prefix or settings.RECEIPTS_URL_PREFIX).rstrip("/")

    def path_for(self, bill_id) -> Path:
        return self.directory / receipt_filename(bill_id)

    async def save(self, bill_id, content: bytes) -> str:
        path = self.path_for(bill_id)

        def _write():
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(content)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            raise ArtifactError(f"Could not store receipt: {e}", {"bill_id": str(bill_id)}) from e
        return f"{self.url_prefix}/{receipt_filename(bill_id)}"


def _r2_client():
    if not settings.R2_ACCOUNT_ID or not settings.R2_ACCESS_KEY_ID or not settings.R2_SECRET_ACCESS_KEY:
        raise RuntimeError(
            "R2 storage not configured: set R2_ACCOUNT_ID, R2_ACCESS_KEY_ID, R2_SECRET_ACCESS_KEY"
        )
    return boto3.client(
        service_name="s3",
        endpoint_url=f"https://{settings.R2_ACCOUNT_ID}.r2.cloudflarestorage.com",
        aws_access_key_id=settings.R2_ACCESS_KEY_ID,
        aws_secret_access_key=settings.R2_SECRET_ACCESS_KEY,
        region_name="auto",
        config=boto3.session.Config(
            signature_version="s3v4",
            s3={"addressing_style": "path"},
        ),
    )


def public_url(key: str) -> str:
    """Build public URL for an object key (custom domain or R2 dev URL)."""
    base = settings.STORAGE_PUBLIC_BASE_URL.rstrip("/")
    key = key.lstrip("/")
    return f"{base}/{key}" if key else base


class R2ReceiptStorage:
    """Uploads receipts to an R2 bucket under bills/"""

    key_prefix = "bills"

    def __init__(self, client=None, bucket: str = None):
        self._client = client
        self.bucket = bucket or settings.R2_BUCKET_NAME

    async def save(self, bill_id, content: bytes) -> str:
        object_name = f"{self.key_prefix}/{receipt_filename(bill_id)}"

        def _put():
            client = self._client or _r2_client()
            client.upload_fileobj(
                BytesIO(content),
                self.bucket,
                object_name,
                ExtraArgs={"ContentType": PDF_CONTENT_TYPE},
            )

        try:
            await asyncio.to_thread(_put)
        except (ClientError, BotoCoreError, RuntimeError) as e:
            raise ArtifactError(f"Storage upload failed: {e}", {"bill_id": str(bill_id)}) from e
        return public_url(object_name)


def build_receipt_storage():
    """Pick the receipt backend from RECEIPT_STORAGE"""
    if settings.RECEIPT_STORAGE == "r2":
        return R2ReceiptStorage()
    return LocalReceiptStorage()

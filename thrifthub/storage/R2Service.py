import logging
import uuid
from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from thrifthub.configuration.settings import Configuration
from thrifthub.core.exceptions.app_exception import GatewayException

configuration = Configuration()


class R2Service:
    """S3 compatible object storage (Cloudflare R2 or AWS S3) for product images."""

    def __init__(self, client=None):
        self.client = client or boto3.client(
            's3',
            endpoint_url=configuration.storage_endpoint_url,
            aws_access_key_id=configuration.aws_access_key_id,
            aws_secret_access_key=configuration.aws_secret_access_key,
            config=Config(signature_version='s3v4'),
            region_name=configuration.aws_region,
        )
        self.bucket_name = configuration.storage_bucket_name
        self.public_url = (configuration.storage_public_url or "").rstrip("/")

    @staticmethod
    def build_key(file_name: str, folder: str = "products") -> str:
        return f"{folder}/{uuid.uuid4().hex}-{file_name}"

    def key_from_url(self, url: str) -> Optional[str]:
        prefix = f"{self.public_url}/"
        if self.public_url and url.startswith(prefix):
            return url[len(prefix):]
        return None

    async def upload_file(self, file_content: bytes, file_name: str, content_type: str) -> str:
        try:
            self.client.put_object(
                Bucket=self.bucket_name,
                Key=file_name,
                Body=file_content,
                ContentType=content_type
            )
            logging.info(f"STORAGE >>> Uploaded {file_name}")
            return f"{self.public_url}/{file_name}"
        except (BotoCoreError, ClientError) as e:
            logging.error(f"STORAGE >>> Upload failed for {file_name}: {e}")
            raise GatewayException("Failed to upload image")

    async def delete_file(self, file_name: str) -> bool:
        try:
            self.client.delete_object(
                Bucket=self.bucket_name,
                Key=file_name
            )
            return True
        except (BotoCoreError, ClientError) as e:
            logging.error(f"STORAGE >>> Delete failed for {file_name}: {e}")
            return False


def get_storage() -> R2Service:
    return R2Service()

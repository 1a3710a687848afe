import logging
import os
from urllib.parse import quote, unquote

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError
from werkzeug.utils import secure_filename

from ..errors import InvalidAudioReference, StorageError

logger = logging.getLogger(__name__)

PUBLIC_PATH_MARKER = '/storage/v1/object/public/'


def parse_public_url(url: str):
    """Return ``(bucket, path)`` from ``.../storage/v1/object/public/<bucket>/<path>``."""
    if not url:
        raise InvalidAudioReference('audio URL is empty')
    parts = url.split(PUBLIC_PATH_MARKER)
    if len(parts) != 2:
        raise InvalidAudioReference(f'unsupported audio URL format: {url}')
    remainder = unquote(parts[1].split('?', 1)[0])
    bucket, _, path = remainder.partition('/')
    if not bucket or not path:
        raise InvalidAudioReference(f'audio URL has no bucket/object path: {url}')
    return bucket, path


class StorageService:
    def __init__(self, settings):
        self.settings = settings
        self.backend = settings.storage_backend
        self._s3 = None

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self.settings.storage_public_base_url}{PUBLIC_PATH_MARKER}{bucket}/{quote(path)}"

    def _s3_client(self):
        if self._s3 is None:
            s3_kwargs = {}
            if self.settings.s3_endpoint:
                s3_kwargs['endpoint_url'] = self.settings.s3_endpoint
            if self.settings.s3_region:
                s3_kwargs['region_name'] = self.settings.s3_region
            self._s3 = boto3.client(
                's3',
                aws_access_key_id=self.settings.s3_access_key,
                aws_secret_access_key=self.settings.s3_secret_key,
                config=Config(signature_version='s3v4', s3={'addressing_style': 'path'}),
                **s3_kwargs,
            )
        return self._s3

    def _local_path(self, bucket: str, path: str) -> str:
        base = os.path.realpath(os.path.join(self.settings.local_storage_dir, bucket))
        full = os.path.realpath(os.path.join(base, path))
        if os.path.commonpath([base, full]) != base:
            raise StorageError(f'object path escapes bucket {bucket!r}: {path}')
        return full

    def download(self, bucket: str, path: str) -> bytes:
        logger.info('Downloading %s/%s from %s storage', bucket, path, self.backend)
        if self.backend == 's3':
            try:
                obj = self._s3_client().get_object(Bucket=bucket, Key=path)
                return obj['Body'].read()
            except (BotoCoreError, ClientError) as exc:
                raise StorageError(f'failed to download {bucket}/{path}: {exc}') from exc
        elif self.backend == 'local':
            try:
                with open(self._local_path(bucket, path), 'rb') as f:
                    return f.read()
            except OSError as exc:
                raise StorageError(f'failed to download {bucket}/{path}: {exc}') from exc
        raise StorageError(f'unsupported storage backend: {self.backend}')

    def upload(self, bucket: str, path: str, data: bytes, content_type: str = 'application/octet-stream') -> str:
        """Store ``data`` and return its public URL."""
        folder, _, name = path.rpartition('/')
        name = secure_filename(name)
        if not name:
            raise StorageError(f'invalid object name: {path}')
        key = f'{folder}/{name}' if folder else name

        if self.backend == 's3':
            try:
                self._s3_client().put_object(Bucket=bucket, Key=key, Body=data, ContentType=content_type)
            except (BotoCoreError, ClientError) as exc:
                raise StorageError(f'failed to upload {bucket}/{key}: {exc}') from exc
        elif self.backend == 'local':
            target = self._local_path(bucket, key)
            try:
                os.makedirs(os.path.dirname(target), exist_ok=True)
                with open(target, 'wb') as f:
                    f.write(data)
            except OSError as exc:
                raise StorageError(f'failed to upload {bucket}/{key}: {exc}') from exc
        else:
            raise StorageError(f'unsupported storage backend: {self.backend}')

        logger.info('Uploaded %d bytes to %s/%s', len(data), bucket, key)
        return self.public_url(bucket, key)

import pytest

from callqa.errors import InvalidAudioReference, StorageError
from callqa.services.storage import StorageService, parse_public_url


def test_parse_public_url():
    url = 'https://proj.supabase.co/storage/v1/object/public/call-recordings/user-1/My%20Call.mp3?t=1'
    assert parse_public_url(url) == ('call-recordings', 'user-1/My Call.mp3')


@pytest.mark.parametrize('url', [
    '',
    'https://example.com/files/call.mp3',
    'https://x/storage/v1/object/public/bucket-only',
    'https://x/storage/v1/object/public//path.mp3',
])
def test_parse_public_url_rejects_unsupported(url):
    with pytest.raises(InvalidAudioReference):
        parse_public_url(url)


def test_local_upload_download_roundtrip(settings):
    storage = StorageService(settings)
    url = storage.upload('call-recordings', 'user-1/../weird name?.wav', b'abc', content_type='audio/wav')
    bucket, path = parse_public_url(url)
    assert bucket == 'call-recordings'
    assert storage.download(bucket, path) == b'abc'


def test_local_download_missing_object(settings):
    with pytest.raises(StorageError):
        StorageService(settings).download('call-recordings', 'nope.wav')


def test_local_path_cannot_escape_bucket(settings):
    with pytest.raises(StorageError):
        StorageService(settings).download('call-recordings', '../../etc/passwd')


def test_s3_backend_uses_boto3(settings, monkeypatch):
    from dataclasses import replace
    from botocore.exceptions import ClientError

    class Body:
        def read(self):
            return b'from-s3'

    class FakeS3:
        def __init__(self):
            self.requests = []

        def get_object(self, Bucket, Key):
            self.requests.append((Bucket, Key))
            if Key == 'missing.wav':
                raise ClientError({'Error': {'Code': 'NoSuchKey', 'Message': 'missing'}}, 'GetObject')
            return {'Body': Body()}

    fake = FakeS3()
    created = {}

    def fake_client(service, **kwargs):
        created.update(kwargs, service=service)
        return fake
    monkeypatch.setattr('callqa.services.storage.boto3.client', fake_client)

    s3_settings = replace(settings, storage_backend='s3', s3_endpoint='http://minio:9000', s3_region='us-east-1')
    storage = StorageService(s3_settings)
    assert storage.download('bucket', 'a/b.wav') == b'from-s3'
    assert fake.requests == [('bucket', 'a/b.wav')]
    assert created['service'] == 's3'
    assert created['endpoint_url'] == 'http://minio:9000'

    with pytest.raises(StorageError):
        storage.download('bucket', 'missing.wav')


def test_unknown_backend(settings):
    from dataclasses import replace
    with pytest.raises(StorageError):
        StorageService(replace(settings, storage_backend='ftp')).download('b', 'p')

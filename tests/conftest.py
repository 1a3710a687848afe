import json
import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from callqa import create_app
from callqa.extensions import db
from callqa.models import Call
from callqa.services.storage import StorageService

BUCKET = 'call-recordings'


class FakeResponse:
    def __init__(self, status_code=200, json_data=None, text=None):
        self.status_code = status_code
        self._json = json_data
        if text is None:
            text = json.dumps(json_data) if json_data is not None else ''
        self.text = text

    def json(self):
        if self._json is None:
            raise ValueError('no JSON body')
        return self._json


def chat_response(payload):
    """A 200 chat completion whose message content is ``payload`` (dict -> JSON text)."""
    content = payload if isinstance(payload, str) else json.dumps(payload)
    return FakeResponse(200, {'choices': [{'message': {'content': content}}]})


def good_scores(**overrides):
    data = {
        'overall_satisfaction_score': 4,
        'communication_score': 4,
        'problem_resolution_score': 5,
        'professionalism_score': 4,
        'empathy_score': 3,
        'follow_up_score': 4,
        'sentiment': 'positive',
        'feedback': 'Agent resolved the delivery issue quickly and politely.',
        'improvement_areas': ['follow-up'],
    }
    data.update(overrides)
    return data


class FakeOpenAI:
    """Stand-in for ``requests.post`` routing on the endpoint path.

    ``chat`` is a list consumed in order; the last entry repeats. Entries that
    are exceptions are raised instead of returned; callables are invoked
    first, which lets a test act in the middle of a run.
    """

    def __init__(self, transcription=None, chat=None):
        self.transcription = transcription
        self.chat = list(chat or [])
        self.calls = []

    def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if url.endswith('/audio/transcriptions'):
            resp = self.transcription
        else:
            resp = self.chat.pop(0) if len(self.chat) > 1 else self.chat[0]
        if callable(resp):
            resp = resp()
        if isinstance(resp, Exception):
            raise resp
        return resp

    def urls(self):
        return [u for u, _ in self.calls]


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'RQ_ASYNC': False,
        'STORAGE_BACKEND': 'local',
        'LOCAL_STORAGE_DIR': str(tmp_path / 'storage'),
        'STORAGE_PUBLIC_BASE_URL': 'http://storage.test',
        'OPENAI_API_KEY': 'test-key',
        'OPENAI_BASE_URL': 'https://openai.test/v1',
        'RETRY_SETTLE_SECONDS': 0,
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def settings(app):
    return app.extensions['pipeline_settings']


@pytest.fixture
def no_sleep(monkeypatch):
    delays = []
    monkeypatch.setattr('callqa.services.quality_analysis.time.sleep', delays.append)
    return delays


@pytest.fixture
def fake_openai(monkeypatch):
    def install(transcription=None, chat=None):
        fake = FakeOpenAI(transcription=transcription, chat=chat)
        monkeypatch.setattr('callqa.services.openai_wrap.requests.post', fake)
        return fake
    return install


@pytest.fixture
def make_call(app, settings):
    storage = StorageService(settings)

    def make(audio=b'RIFF' + b'\x00' * 1024, name='call.wav', file_url=None, **fields):
        if file_url is None and audio is not None:
            file_url = storage.upload(BUCKET, f'user-1/{name}', audio, content_type='audio/wav')
        call = Call(user_id='user-1', title='Support call', file_url=file_url, file_name=name, **fields)
        db.session.add(call)
        db.session.commit()
        return call
    return make

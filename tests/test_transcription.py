import pytest
import requests

from callqa.errors import ProviderError
from callqa.services.transcription import TRANSCRIPT_CONFIDENCE, TranscriptionClient, parse_provider_segments

from conftest import FakeResponse


def test_transcribe_returns_text_and_segments(settings, fake_openai):
    fake = fake_openai(transcription=FakeResponse(200, {
        'text': 'Hello, thanks for calling.',
        'segments': [
            {'start': 0.0, 'end': 1.4, 'text': 'Hello,'},
            {'start': 1.4, 'end': 3.0, 'text': 'thanks for calling.'},
        ],
    }))
    result = TranscriptionClient(settings).transcribe(b'audio-bytes', filename='call.wav')

    assert result.content == 'Hello, thanks for calling.'
    assert result.confidence == TRANSCRIPT_CONFIDENCE
    assert [(s.start, s.end) for s in result.segments] == [(0.0, 1.4), (1.4, 3.0)]

    url, kwargs = fake.calls[0]
    assert url == 'https://openai.test/v1/audio/transcriptions'
    assert kwargs['data']['model'] == 'whisper-1'
    assert kwargs['data']['response_format'] == 'verbose_json'
    name, body, content_type = kwargs['files']['file']
    assert (name, body) == ('call.wav', b'audio-bytes')
    assert content_type.startswith('audio/')


@pytest.mark.parametrize('response', [
    FakeResponse(500, text='server error'),
    FakeResponse(401, text='bad key'),
    FakeResponse(200, None, text='<html>'),
    requests.exceptions.Timeout('slow'),
])
def test_provider_failures_raise_provider_error(settings, fake_openai, response):
    fake_openai(transcription=response)
    with pytest.raises(ProviderError):
        TranscriptionClient(settings).transcribe(b'audio')


def test_parse_provider_segments_skips_unreadable_entries():
    segs = parse_provider_segments([
        {'start': '1.5', 'end': 2, 'text': 'ok'},
        'garbage',
        {'start': 3, 'end': 4},
        {'start': None, 'end': 'x', 'text': 'no times'},
    ])
    assert [(s.start, s.end, s.text) for s in segs] == [(1.5, 2.0, 'ok'), (None, None, 'no times')]
    assert parse_provider_segments(None) == []

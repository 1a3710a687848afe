"""Thin HTTP wrappers for the OpenAI transcription and chat completion APIs.

Calls the REST endpoints directly with `requests` and maps HTTP status codes
to the error classes in `callqa.errors`. Nothing here retries; callers own the
retry and fallback policy.
"""

import logging
import mimetypes

import requests

from ..errors import (
    AnalysisFailed,
    AuthError,
    ProviderError,
    ProviderRejected,
    ProviderUnavailable,
    RateLimited,
)

logger = logging.getLogger(__name__)

DEFAULT_AUDIO_FILENAME = 'audio.mp3'


def _auth_headers(api_key):
    return {'Authorization': f'Bearer {api_key}'}


def _body_excerpt(response, limit=500):
    try:
        return (response.text or '')[:limit]
    except Exception:
        return ''


def post_transcription(settings, audio_bytes: bytes, filename: str = None) -> dict:
    """POST audio to the transcription endpoint and return the verbose JSON body."""
    if not settings.openai_api_key:
        raise ProviderError('OPENAI_API_KEY is not configured')

    filename = filename or DEFAULT_AUDIO_FILENAME
    content_type = mimetypes.guess_type(filename)[0] or 'audio/mpeg'
    url = f'{settings.openai_base_url}/audio/transcriptions'
    files = {'file': (filename, audio_bytes, content_type)}
    data = {
        'model': settings.transcription_model,
        'response_format': 'verbose_json',
        'timestamp_granularities[]': 'segment',
    }

    try:
        r = requests.post(url, headers=_auth_headers(settings.openai_api_key), files=files, data=data,
                          timeout=settings.http_timeout_seconds)
    except requests.exceptions.RequestException as exc:
        raise ProviderError(f'transcription request failed: {exc}') from exc

    if r.status_code >= 400:
        logger.error('OpenAI transcription error %s: %s', r.status_code, _body_excerpt(r))
        raise ProviderError(f'transcription failed with HTTP {r.status_code}', status_code=r.status_code)

    try:
        body = r.json()
    except ValueError as exc:
        raise ProviderError('transcription response was not JSON') from exc
    if not isinstance(body, dict):
        raise ProviderError('transcription response had an unexpected shape')
    return body


def chat_completion(settings, system_prompt: str, user_prompt: str) -> str:
    """Run one chat completion and return the assistant text.

    Raises a classified ``QualityAnalysisError``; ``retryable`` on the
    exception tells the caller whether another attempt makes sense.
    """
    if not settings.openai_api_key:
        raise AuthError('OPENAI_API_KEY is not configured')

    url = f'{settings.openai_base_url}/chat/completions'
    headers = _auth_headers(settings.openai_api_key)
    headers['Content-Type'] = 'application/json'
    body = {
        'model': settings.analysis_model,
        'messages': [
            {'role': 'system', 'content': system_prompt},
            {'role': 'user', 'content': user_prompt},
        ],
        'temperature': settings.analysis_temperature,
        'max_tokens': settings.analysis_max_tokens,
    }

    try:
        r = requests.post(url, headers=headers, json=body, timeout=settings.http_timeout_seconds)
    except requests.exceptions.RequestException as exc:
        raise ProviderUnavailable(f'network error: {exc}') from exc

    status = r.status_code
    if status == 429:
        excerpt = _body_excerpt(r)
        # an exhausted quota will not recover by waiting
        if 'insufficient_quota' in excerpt:
            raise ProviderRejected('quota exhausted', status_code=status)
        raise RateLimited('rate limited', status_code=status)
    if status in (401, 403):
        raise AuthError(f'authentication failed with HTTP {status}', status_code=status)
    if status >= 500:
        raise ProviderUnavailable(f'provider unavailable (HTTP {status})', status_code=status)
    if status >= 400:
        logger.error('OpenAI chat completion rejected %s: %s', status, _body_excerpt(r))
        raise ProviderRejected(f'request rejected with HTTP {status}', status_code=status)

    try:
        jr = r.json()
        text = jr['choices'][0]['message']['content']
    except (ValueError, KeyError, IndexError, TypeError) as exc:
        raise AnalysisFailed('chat completion response had an unexpected shape') from exc
    return text or ''

from callqa.extensions import rq
from callqa.jobs.process_call import retry_call_job
from callqa.models import QualityScore

from conftest import FakeResponse, chat_response, good_scores

DIALOGUE = "Customer: My internet keeps dropping.\nAgent: I reset your line, it should be stable now."


def test_process_call_endpoint(client, make_call, fake_openai, no_sleep):
    call = make_call()
    fake_openai(transcription=FakeResponse(200, {'text': DIALOGUE}),
                chat=[chat_response(good_scores(overall_satisfaction_score=2))])

    resp = client.post('/api/process-call', json={'callId': call.id})

    assert resp.status_code == 200
    body = resp.get_json()
    assert body['success'] is True
    assert body['message'] == 'Call processed successfully'
    assert body['callId'] == call.id
    assert body['analysisSource'] == 'ai'
    assert body['transcriptionSource'] == 'provider'
    assert body['segmentsCreated'] == 2
    assert body['transcriptionLength'] == len(DIALOGUE)
    assert body['duration'] == 30
    assert body['analysis']['overall_satisfaction_score'] == 2
    assert body['qualityScoreId'] == QualityScore.query.one().id


def test_process_call_requires_call_id(client):
    for payload in ({}, {'callId': ''}, {'callId': 12}):
        resp = client.post('/api/process-call', json=payload)
        assert resp.status_code == 400
        body = resp.get_json()
        assert body['error'] == 'callId is required'
        assert set(body) == {'error', 'details', 'timestamp', 'callId'}

    resp = client.post('/api/process-call', data='not json', content_type='text/plain')
    assert resp.status_code == 400


def test_process_call_not_found(client):
    resp = client.post('/api/process-call', json={'callId': 'missing'})
    assert resp.status_code == 404
    body = resp.get_json()
    assert body['callId'] == 'missing'
    assert body['details'] == 'NotFound'
    assert body['timestamp']


def test_process_call_failure_is_structured(client, make_call):
    call = make_call(audio=None)
    resp = client.post('/api/process-call', json={'callId': call.id})
    assert resp.status_code == 500
    assert resp.get_json()['details'] == 'MissingAudio'


def test_retry_runs_inline_without_queue(client, make_call, fake_openai, no_sleep):
    call = make_call()
    fake_openai(transcription=FakeResponse(200, {'text': DIALOGUE}), chat=[chat_response(good_scores())])

    resp = client.post(f'/api/calls/{call.id}/retry')

    assert resp.status_code == 200
    assert resp.get_json()['callId'] == call.id


def test_retry_enqueues_when_queue_available(client, make_call, monkeypatch):
    call = make_call()
    enqueued = []

    class FakeJob:
        def get_id(self):
            return 'job-123'

    class FakeQueue:
        def enqueue(self, func, *args, **kwargs):
            enqueued.append((func, args, kwargs))
            return FakeJob()

    monkeypatch.setattr(rq, 'queue', FakeQueue())

    resp = client.post(f'/api/calls/{call.id}/retry')

    assert resp.status_code == 202
    assert resp.get_json() == {'jobId': 'job-123', 'callId': call.id}
    func, args, kwargs = enqueued[0]
    assert func is retry_call_job
    assert args == (call.id,)
    assert kwargs['job_timeout'] == 900


def test_enqueue_failure_falls_back_to_inline(client, make_call, monkeypatch):
    call = make_call(audio=None)

    class BrokenQueue:
        def enqueue(self, *args, **kwargs):
            raise ConnectionError('redis down')

    monkeypatch.setattr(rq, 'queue', BrokenQueue())

    resp = client.post(f'/api/calls/{call.id}/retry')
    assert resp.status_code == 500
    assert resp.get_json()['details'] == 'MissingAudio'


def test_retry_unknown_call_is_not_queued(client, monkeypatch):
    enqueued = []

    class FakeQueue:
        def enqueue(self, *args, **kwargs):
            enqueued.append(args)

    monkeypatch.setattr(rq, 'queue', FakeQueue())

    resp = client.post('/api/calls/missing/retry')

    assert resp.status_code == 404
    body = resp.get_json()
    assert body['details'] == 'NotFound'
    assert body['callId'] == 'missing'
    assert enqueued == []

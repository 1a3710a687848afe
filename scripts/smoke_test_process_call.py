"""Create a call backed by a local audio file and process it synchronously.

Usage:
  python scripts/smoke_test_process_call.py [path/to/audio.wav]

Uses the local storage backend. Without OPENAI_API_KEY the run exercises the
placeholder transcript and the heuristic fallback.
"""
import json
import os
import sys

# ensure project root is on sys.path so `import callqa` works when running this script
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from callqa import create_app
from callqa.extensions import db
from callqa.jobs.process_call import process_call_job
from callqa.models import Call
from callqa.services.storage import StorageService

BUCKET = 'call-recordings'

app = create_app({'STORAGE_BACKEND': 'local', 'RQ_ASYNC': False})
with app.app_context():
    if len(sys.argv) > 1:
        with open(sys.argv[1], 'rb') as f:
            audio = f.read()
        name = os.path.basename(sys.argv[1])
    else:
        audio = b"RIFF" + b"\x00" * 2048
        name = 'smoke_test.wav'

    storage = StorageService(app.extensions['pipeline_settings'])
    url = storage.upload(BUCKET, f'smoke/{name}', audio, content_type='audio/wav')

    call = Call(user_id='smoke-user', title='Smoke test call', file_url=url, file_name=name)
    db.session.add(call)
    db.session.commit()
    print('Created call', call.id, '->', url)

    outcome = process_call_job(call.id)
    print('HTTP', outcome.status_code)
    print(json.dumps(outcome.to_dict(), indent=2, ensure_ascii=False))

    db.session.refresh(call)
    print('Final status:', call.status, 'duration:', call.duration_seconds)

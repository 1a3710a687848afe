# callqa/api/calls.py
from flask import Blueprint, jsonify, request

from ..errors import NotFound
from ..extensions import db, rq
from ..jobs.process_call import retry_call_job, run_process
from ..models import Call
from ..results import ProcessError, ProcessResult

bp = Blueprint("calls", __name__)


def _render(outcome):
    return jsonify(outcome.to_dict()), outcome.status_code


@bp.route("/api/process-call", methods=["POST"])
def process_call():
    payload = request.get_json(silent=True)
    call_id = payload.get("callId") if isinstance(payload, dict) else None
    if not call_id or not isinstance(call_id, str):
        err = ProcessError(error="callId is required", details="Request body must be JSON with a string callId",
                           call_id=None, status_code=400)
        return _render(err)
    return _render(run_process(call_id))


@bp.route("/api/calls/<call_id>/retry", methods=["POST"])
def retry_call(call_id):
    if db.session.get(Call, call_id) is None:
        return _render(ProcessError.from_exception(NotFound(f"Call not found: {call_id}"), call_id))
    result = rq.enqueue(retry_call_job, call_id, job_timeout=900)
    if isinstance(result, (ProcessResult, ProcessError)):
        # ran synchronously (no Redis or RQ_ASYNC off)
        return _render(result)
    return jsonify({"jobId": result.get_id(), "callId": call_id}), 202

import logging

from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis import Redis
from rq import Queue

logger = logging.getLogger(__name__)

# kwargs understood by Queue.enqueue but not by the job function itself
RQ_KEYS = {'job_timeout', 'timeout', 'at_front', 'depends_on', 'result_ttl', 'ttl', 'meta', 'description', 'job_id'}


class RQWrapper:
    def __init__(self):
        self.redis = None
        self.queue = None

    def init_app(self, app):
        if not app.config.get("RQ_ASYNC", True):
            self.redis = None
            self.queue = None
            return
        try:
            self.redis = Redis.from_url(app.config.get("REDIS_URL"))
            self.queue = Queue("default", connection=self.redis)
        except Exception:
            # no usable Redis URL on this machine; jobs run synchronously
            logger.exception('Redis/RQ init failed, falling back to sync execution')
            self.redis = None
            self.queue = None

    def _run_sync(self, func, *args, **kwargs):
        safe_kwargs = {k: v for k, v in kwargs.items() if k not in RQ_KEYS}
        return func(*args, **safe_kwargs)

    def enqueue(self, func, *args, **kwargs):
        """Enqueue on RQ when available, otherwise run the job inline.

        Returns the rq Job when queued, or the job's return value when it ran
        synchronously. Exceptions from a synchronous run propagate.
        """
        if not self.queue:
            return self._run_sync(func, *args, **kwargs)

        try:
            return self.queue.enqueue(func, *args, **kwargs)
        except Exception:
            # Redis unreachable
            logger.exception('RQ enqueue failed, falling back to sync execution')
            return self._run_sync(func, *args, **kwargs)


db = SQLAlchemy()
migrate = Migrate()
rq = RQWrapper()

import uuid

from ..extensions import db


def new_id():
    return str(uuid.uuid4())


class CreatedAtMixin:
    created_at = db.Column(db.DateTime, server_default=db.func.now())


class TimestampMixin(CreatedAtMixin):
    updated_at = db.Column(db.DateTime, server_default=db.func.now(), onupdate=db.func.now())

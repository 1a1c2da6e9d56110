# Overview: Per-store document number allocation (order numbers).

from __future__ import annotations

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from ..errors import InternalError
from ..extensions import db
from ..models import DocumentSequence

ORDER_DOCUMENT_TYPE = "ORDER"
ORDER_PREFIX = "ORD"


def next_document_number(
    *,
    store_id: int,
    document_type: str,
    prefix: str,
    pad: int = 5,
) -> str:
    """
    Allocate the next document number for a store/type inside the caller's transaction.

    Increments with a single UPDATE so concurrent writers serialize on the
    (store_id, document_type) row. The first allocation inserts the row; a
    concurrent first insert loses on the unique constraint and falls back to
    the UPDATE path.

    Returns e.g. "ORD-001-00001".
    """
    if not store_id:
        raise InternalError("store_id is required for document numbering")
    if not document_type:
        raise InternalError("document_type is required for document numbering")

    stmt = (
        update(DocumentSequence)
        .where(
            DocumentSequence.store_id == store_id,
            DocumentSequence.document_type == document_type,
        )
        .values(next_number=DocumentSequence.next_number + 1)
    )

    def _current_minus_one() -> int:
        db.session.flush()
        current = (
            db.session.query(DocumentSequence.next_number)
            .filter_by(store_id=store_id, document_type=document_type)
            .scalar()
        )
        return current - 1

    result = db.session.execute(stmt)
    if result.rowcount:
        next_num = _current_minus_one()
    else:
        savepoint = db.session.begin_nested()
        try:
            db.session.add(DocumentSequence(store_id=store_id, document_type=document_type, next_number=2))
            savepoint.commit()
            next_num = 1
        except IntegrityError:
            savepoint.rollback()
            result = db.session.execute(stmt)
            if not result.rowcount:
                raise
            next_num = _current_minus_one()

    return f"{prefix}-{store_id:03d}-{next_num:0{pad}d}"


def next_order_number(store_id: int) -> str:
    return next_document_number(
        store_id=store_id,
        document_type=ORDER_DOCUMENT_TYPE,
        prefix=ORDER_PREFIX,
    )

# famfin/services/lifecycle.py
"""
Deletion eligibility for accounts and cards.

A row that other rows still point at is archived (status=ARCHIVED) so its
history stays intact; an unreferenced row is deleted for real.
"""

from __future__ import annotations

from typing import Iterable, Union

from sqlalchemy import func
from sqlmodel import Session, SQLModel, select

from famfin.models import BankAccount, Card, RecordStatus, utcnow

Retirable = Union[BankAccount, Card]


def count_where(session: Session, column, value) -> int:
    return session.exec(select(func.count()).where(column == value)).one()


def is_referenced(session: Session, record_id: int, columns: Iterable) -> bool:
    return any(count_where(session, column, record_id) > 0 for column in columns)


def retire(
    session: Session,
    record: Retirable,
    *,
    referenced_by: Iterable,
    dependents: Iterable[SQLModel] = (),
) -> RecordStatus | None:
    """
    Archive or delete `record`. Does not commit.

    referenced_by: FK columns that keep the record alive when any row matches.
    dependents: rows removed together with the record on a hard delete.
    Returns RecordStatus.ARCHIVED, or None when the row was deleted.
    """
    if is_referenced(session, record.id, referenced_by):
        record.status = RecordStatus.ARCHIVED
        record.updated_at = utcnow()
        session.add(record)
        return RecordStatus.ARCHIVED

    for row in dependents:
        session.delete(row)
    session.flush()  # children go before the parent row
    session.delete(record)
    return None

from sqlalchemy.orm import Session
from sqlalchemy import desc, func
from models.verification import VerificationRecord, VerificationStatus


def get_record(db: Session, record_id: str, kind: str | None = None):
    q = db.query(VerificationRecord).filter(VerificationRecord.id == record_id)
    if kind:
        q = q.filter(VerificationRecord.kind == kind)
    return q.first()


def get_latest_for_user(db: Session, user_id: str, kind: str):
    return (
        db.query(VerificationRecord)
        .filter(VerificationRecord.user_id == user_id, VerificationRecord.kind == kind)
        .order_by(desc(VerificationRecord.created_at))
        .first()
    )


def count_for_user(db: Session, user_id: str, kind: str) -> int:
    return (
        db.query(VerificationRecord)
        .filter(VerificationRecord.user_id == user_id, VerificationRecord.kind == kind)
        .count()
    )


def list_records(db: Session, kind: str, status: str | None = None, skip: int = 0, limit: int = 100):
    q = db.query(VerificationRecord).filter(VerificationRecord.kind == kind)
    if status:
        q = q.filter(VerificationRecord.status == status)
    return q.order_by(desc(VerificationRecord.created_at)).offset(skip).limit(limit).all()


def status_counts(db: Session, kind: str) -> dict[str, int]:
    counts = {s.value: 0 for s in VerificationStatus}
    rows = (
        db.query(VerificationRecord.status, func.count(VerificationRecord.id))
        .filter(VerificationRecord.kind == kind)
        .group_by(VerificationRecord.status)
        .all()
    )
    for status, total in rows:
        counts[status] = total
    return counts


def create_record(db: Session, *, user_id: str, kind: str, **fields):
    record = VerificationRecord(
        user_id=user_id,
        kind=kind,
        status=VerificationStatus.PENDING.value,
        **fields,
    )
    db.add(record)
    db.flush()
    return record


def update_status(db: Session, record: VerificationRecord, status: str, remark: str | None):
    record.status = status
    record.remark = remark
    db.flush()
    return record

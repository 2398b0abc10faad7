#queries.py
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from errors import DuplicateEmailError
from models import User, Report, utcnow


def _commit_user(db: Session, user: User) -> User:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise DuplicateEmailError()
    db.refresh(user)
    return user


def query_get_user(db: Session, user_id: str):
    return db.get(User, user_id)


def query_get_user_by_email(db: Session, email: str):
    return db.query(User).filter(User.email == email).first()


def query_get_other_user_by_email(db: Session, email: str, user_id: str):
    return db.query(User).filter(User.email == email, User.id != user_id).first()


def query_create_user(db: Session, name: str, email: str, password_hash: str, is_guest: bool = False):
    user = User(name=name, email=email, password_hash=password_hash, is_guest=is_guest)
    db.add(user)
    return _commit_user(db, user)


def query_get_guest(db: Session, user_id: str):
    return db.query(User).filter(User.id == user_id, User.is_guest.is_(True)).first()


def query_update_user(db: Session, user: User, **fields):
    for name, value in fields.items():
        setattr(user, name, value)
    return _commit_user(db, user)


def query_count_reports(db: Session, user_id: str) -> int:
    return db.query(Report).filter(Report.user_id == user_id).count()


def query_create_report(db: Session, user_id: str, image_url: str, latitude: float, longitude: float,
                        address, detection_result_percentage: float, created_at=None):
    report = Report(
        user_id=user_id,
        image_url=image_url,
        latitude=latitude,
        longitude=longitude,
        address=address,
        detection_result_percentage=detection_result_percentage,
        created_at=created_at or utcnow(),
    )
    db.add(report)
    db.commit()
    db.refresh(report)
    return report


def query_get_reports_for_user(db: Session, user_id: str, limit=None):
    q = (
        db.query(Report)
        .filter(Report.user_id == user_id)
        .order_by(Report.created_at.desc())
    )
    if limit is not None:
        q = q.limit(limit)
    return q.all()


def query_get_user_report(db: Session, report_id: str, user_id: str):
    # ownership is part of the predicate, foreign ids look exactly like missing ones
    return db.query(Report).filter(Report.id == report_id, Report.user_id == user_id).first()

"""
证书签发测试

重点验证幂等性：无论重复调用、并发竞争还是存储故障后重试，
每个 (user, course) 都只会有一张证书。
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy.orm import Session

from startinfo.core.exceptions import ConflictError, IncompleteError, NotFoundError, StorageError
from startinfo.crud.crud_certificate import certificate as certificate_crud
from startinfo.crud.crud_progress import progress as progress_crud
from startinfo.models.certificate import Certificate
from startinfo.schemas.certificate import IssueStatus
from startinfo.services import certificate_issuer
from startinfo.services.certificate_issuer import CERTIFICATE_NUMBER_PATTERN


def _complete_course(db, user, lessons):
    for lesson in lessons:
        progress_crud.upsert(db, user_id=user.id, lesson_id=lesson.id, patch={"completed": True})


def test_incomplete_course_issues_nothing(db: Session, user, make_course):
    course, lessons = make_course(2)
    progress_crud.upsert(db, user_id=user.id, lesson_id=lessons[0].id, patch={"completed": True})

    result = certificate_issuer.issue_if_complete(db, user.id, course.id)

    assert result.status == IssueStatus.NOT_COMPLETE
    assert result.certificate is None
    assert result.course_progress.progress == 50
    assert db.query(Certificate).count() == 0


def test_zero_lesson_course_never_issues(db: Session, user, make_course):
    course, _ = make_course(0)

    result = certificate_issuer.issue_if_complete(db, user.id, course.id)

    assert result.status == IssueStatus.NOT_COMPLETE


def test_issue_once_then_already_issued(db: Session, user, make_course):
    course, lessons = make_course(2, title="Introduction to Robotics")
    _complete_course(db, user, lessons)

    first = certificate_issuer.issue_if_complete(db, user.id, course.id)
    assert first.status == IssueStatus.ISSUED
    assert first.certificate.user_name == "Ada Lovelace"
    assert first.certificate.course_name == "Introduction to Robotics"
    assert first.certificate.issued_at is not None
    number = first.certificate.certificate_number

    for _ in range(5):
        again = certificate_issuer.issue_if_complete(db, user.id, course.id)
        assert again.status == IssueStatus.ALREADY_ISSUED
        assert again.certificate.certificate_number == number

    assert db.query(Certificate).count() == 1


def test_certificate_number_format(db: Session, user, make_course):
    course, lessons = make_course(1)
    _complete_course(db, user, lessons)

    number = certificate_issuer.issue_if_complete(db, user.id, course.id).certificate.certificate_number

    assert number.startswith("CERT-")
    assert CERTIFICATE_NUMBER_PATTERN.match(number)


def test_generated_numbers_are_unique():
    numbers = {certificate_issuer.generate_certificate_number() for _ in range(500)}
    assert len(numbers) == 500


def test_strict_create_conflicts_when_certificate_exists(db: Session, user, make_course):
    course, lessons = make_course(1)
    _complete_course(db, user, lessons)
    certificate_issuer.issue_if_complete(db, user.id, course.id, idempotent=False)

    with pytest.raises(ConflictError):
        certificate_issuer.issue_if_complete(db, user.id, course.id, idempotent=False)


def test_request_certificate_requires_completion(db: Session, user, make_course):
    course, _ = make_course(2)

    with pytest.raises(IncompleteError):
        certificate_issuer.request_certificate(db, user.id, course.id)


def test_unknown_user_is_not_found(db: Session, user, make_course):
    from startinfo.models.lesson_progress import LessonProgress

    course, lessons = make_course(1)
    # 进度记录指向一个不存在的用户
    db.add(LessonProgress(user_id=4242, lesson_id=lessons[0].id, completed=True, time_spent=0, attempts=1))
    db.commit()

    with pytest.raises(NotFoundError):
        certificate_issuer.issue_if_complete(db, 4242, course.id)


def test_lost_race_returns_winner_certificate(db: Session, user, make_course, monkeypatch):
    """检查时还没有证书、插入时却违反唯一约束：返回对方已写入的证书"""
    course, lessons = make_course(1)
    _complete_course(db, user, lessons)
    winner = certificate_issuer.issue_if_complete(db, user.id, course.id).certificate
    winner_number = winner.certificate_number

    original_lookup = certificate_crud.get_by_user_and_course
    calls = {"count": 0}

    def stale_lookup(*args, **kwargs):
        calls["count"] += 1
        if calls["count"] == 1:
            return None
        return original_lookup(*args, **kwargs)

    monkeypatch.setattr(certificate_crud, "get_by_user_and_course", stale_lookup)

    result = certificate_issuer.issue_if_complete(db, user.id, course.id)

    assert result.status == IssueStatus.ALREADY_ISSUED
    assert result.certificate.certificate_number == winner_number
    assert db.query(Certificate).count() == 1


def test_retry_after_storage_failure_issues_exactly_once(db: Session, user, make_course, monkeypatch):
    course, lessons = make_course(2)
    _complete_course(db, user, lessons)

    def failing_create(*args, **kwargs):
        raise StorageError("Storage unavailable during create certificates, please retry")

    with monkeypatch.context() as m:
        m.setattr(certificate_crud, "create", failing_create)
        with pytest.raises(StorageError):
            certificate_issuer.issue_if_complete(db, user.id, course.id)

    assert db.query(Certificate).count() == 0

    retried = certificate_issuer.issue_if_complete(db, user.id, course.id)
    assert retried.status == IssueStatus.ISSUED
    assert certificate_issuer.issue_if_complete(db, user.id, course.id).status == IssueStatus.ALREADY_ISSUED
    assert db.query(Certificate).count() == 1


def test_concurrent_issuance_creates_one_certificate(db: Session, session_factory, user, make_course):
    course, lessons = make_course(2)
    _complete_course(db, user, lessons)
    user_id, course_id = user.id, course.id
    barrier = threading.Barrier(2)

    def issue():
        session = session_factory()
        try:
            barrier.wait(timeout=10)
            result = certificate_issuer.issue_if_complete(session, user_id, course_id)
            return result.status, result.certificate.certificate_number
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=2) as pool:
        futures = [pool.submit(issue) for _ in range(2)]
        outcomes = [f.result(timeout=60) for f in futures]

    statuses = sorted(status.value for status, _ in outcomes)
    assert statuses == [IssueStatus.ALREADY_ISSUED.value, IssueStatus.ISSUED.value]
    assert outcomes[0][1] == outcomes[1][1]
    assert db.query(Certificate).count() == 1


def test_list_for_user(db: Session, user, make_course):
    first_course, first_lessons = make_course(1, title="Introduction to Arduino")
    second_course, second_lessons = make_course(1, title="Introduction to Robotics")
    _complete_course(db, user, first_lessons + second_lessons)
    certificate_issuer.issue_if_complete(db, user.id, first_course.id)
    certificate_issuer.issue_if_complete(db, user.id, second_course.id)

    certificates = certificate_issuer.list_for_user(db, user.id)

    assert {c.course_name for c in certificates} == {"Introduction to Arduino", "Introduction to Robotics"}


def test_get_unknown_certificate_raises_not_found(db: Session):
    with pytest.raises(NotFoundError):
        certificate_issuer.get_certificate(db, 12345)

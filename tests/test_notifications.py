import pytest

from intern_portal.documents.models import DocumentType, VerificationAction
from intern_portal.errors import Forbidden, NotFound, ValidationFailed
from intern_portal.notifications.models import Notification, NotificationPriority, NotificationType
from intern_portal.notifications.repositories.notification_repository import NotificationRepository
from intern_portal.notifications.services import (
    DocumentStatusChangedNotification, NotificationDispatcher
)
from intern_portal.users.models import UserRole
from intern_portal.users.services import UserService


@pytest.fixture
def dispatcher(db):
    return NotificationDispatcher(NotificationRepository(db))


def announce(dispatcher, **targets):
    return dispatcher.send(
        NotificationType.SYSTEM_ANNOUNCEMENT,
        "Office closed",
        "The office is closed on Friday",
        **targets,
    )


def test_send_to_role_reaches_every_active_member(dispatcher, make_user, hr, admin):
    interns = [make_user(UserRole.INTERN) for _ in range(3)]

    notifications, targets = announce(dispatcher, role=UserRole.INTERN)

    assert len(notifications) == 3
    assert sorted(u.id for u in targets) == sorted(u.id for u in interns)
    assert all(n.priority == NotificationPriority.MEDIUM for n in notifications)


def test_send_skips_deactivated_role_members(db, dispatcher, admin, make_user):
    active = make_user(UserRole.HR)
    gone = make_user(UserRole.HR)
    UserService.deactivate(db, admin, gone.id)

    _, targets = announce(dispatcher, role=UserRole.HR)

    assert [u.id for u in targets] == [active.id]


def test_send_skips_deactivated_explicit_targets(db, dispatcher, admin, intern, other_intern, hr):
    UserService.deactivate(db, admin, other_intern.id)
    UserService.deactivate(db, admin, hr.id)

    _, targets = announce(dispatcher, user_ids=[hr.id], intern_ids=[intern.intern_id, other_intern.intern_id])

    assert [u.id for u in targets] == [intern.id]


def test_send_only_to_deactivated_users_fails(db, dispatcher, admin, hr):
    UserService.deactivate(db, admin, hr.id)

    with pytest.raises(ValidationFailed):
        announce(dispatcher, user_ids=[hr.id])


def test_send_deduplicates_targets(dispatcher, intern, hr):
    notifications, targets = announce(
        dispatcher,
        user_ids=[intern.id, hr.id, intern.id],
        intern_ids=[intern.intern_id],
        role=UserRole.HR,
    )

    assert len(notifications) == 2
    assert sorted(u.id for u in targets) == sorted([intern.id, hr.id])
    by_user = {n.user_id: n for n in notifications}
    assert by_user[intern.id].intern_id == intern.intern_id
    assert by_user[hr.id].intern_id is None


def test_send_without_targets_fails(dispatcher):
    with pytest.raises(ValidationFailed) as exc:
        announce(dispatcher, user_ids=[404])
    assert exc.value.code == "NO_TARGET_USERS"
    assert exc.value.status_code == 400


def test_get_notifications_filters_and_counts(dispatcher, intern):
    for _ in range(3):
        announce(dispatcher, user_ids=[intern.id])
    first, *_ = dispatcher.get_notifications(intern)[0]
    dispatcher.mark_read(first.id, intern)

    unread, total, unread_count = dispatcher.get_notifications(intern, is_read=False)
    assert total == 2
    assert unread_count == 2
    assert all(not n.is_read for n in unread)

    page, total, _ = dispatcher.get_notifications(intern, offset=0, limit=1)
    assert len(page) == 1
    assert total == 3

    typed, total, _ = dispatcher.get_notifications(intern, notification_type=NotificationType.BILL_DUE)
    assert typed == []
    assert total == 0


def test_mark_read_is_idempotent(dispatcher, intern):
    notifications, _ = announce(dispatcher, user_ids=[intern.id])
    notification_id = notifications[0].id

    once = dispatcher.mark_read(notification_id, intern)
    first_state = (once.is_read, once.read_at)
    twice = dispatcher.mark_read(notification_id, intern)

    assert (twice.is_read, twice.read_at) == first_state
    assert twice.is_read is True
    assert dispatcher.get_notifications(intern)[2] == 0


def test_mark_read_of_someone_elses_notification(dispatcher, intern, other_intern):
    notifications, _ = announce(dispatcher, user_ids=[intern.id])

    with pytest.raises(Forbidden):
        dispatcher.mark_read(notifications[0].id, other_intern)


def test_mark_read_of_missing_notification(dispatcher, intern):
    with pytest.raises(NotFound) as exc:
        dispatcher.mark_read(999, intern)
    assert exc.value.code == "NOTIFICATION_NOT_FOUND"


def test_mark_all_read_only_touches_reader(dispatcher, intern, other_intern):
    announce(dispatcher, user_ids=[intern.id, other_intern.id])
    announce(dispatcher, user_ids=[intern.id])

    assert dispatcher.mark_all_read(intern) == 2
    assert dispatcher.mark_all_read(intern) == 0
    assert dispatcher.get_notifications(intern)[2] == 0
    assert dispatcher.get_notifications(other_intern)[2] == 1


def test_delete_notification(db, dispatcher, intern, other_intern):
    notifications, _ = announce(dispatcher, user_ids=[intern.id])
    notification_id = notifications[0].id

    with pytest.raises(Forbidden):
        dispatcher.delete(notification_id, other_intern)
    dispatcher.delete(notification_id, intern)

    assert db.get(Notification, notification_id) is None


def test_status_change_skipped_for_profile_without_account(db, dispatcher, manager, intern, hr, pdf_bytes):
    doc = manager.upload(intern, DocumentType.CV, "cv.pdf", "application/pdf", pdf_bytes)
    doc.intern.user_id = None
    db.commit()

    assert dispatcher.notify_status_changed(doc, "approve") is None


@pytest.mark.parametrize("action,notification_type,priority,title", [
    ("approve", NotificationType.DOCUMENT_VERIFIED, NotificationPriority.MEDIUM, "Document Approved"),
    ("reject", NotificationType.DOCUMENT_REJECTED, NotificationPriority.HIGH, "Document Rejected"),
    ("request_revision", NotificationType.DOCUMENT_REJECTED, NotificationPriority.MEDIUM,
     "Document Revision Requested"),
])
def test_status_change_templates(manager, intern, pdf_bytes, action, notification_type, priority, title):
    doc = manager.upload(intern, DocumentType.INSURANCE, "policy.pdf", "application/pdf", pdf_bytes)

    notification = DocumentStatusChangedNotification(doc, action, "note").for_user(intern.id)

    assert notification.type == notification_type
    assert notification.priority == priority
    assert notification.title == title
    assert "INSURANCE" in notification.message
    assert notification.data == {
        "documentId": doc.id,
        "documentType": "INSURANCE",
        "action": action,
        "comments": "note",
    }


def test_stats(dispatcher, manager, intern, hr, pdf_bytes):
    doc = manager.upload(intern, DocumentType.CV, "cv.pdf", "application/pdf", pdf_bytes)
    manager.transition(doc.id, VerificationAction.REJECT, hr, "blurry")

    stats = dispatcher.stats()

    counts = {(t, p): c for t, p, c in stats["by_type_priority"]}
    assert counts[(NotificationType.DOCUMENT_UPLOADED, NotificationPriority.MEDIUM)] == 1
    assert counts[(NotificationType.DOCUMENT_REJECTED, NotificationPriority.HIGH)] == 1
    assert dict(stats["unread_by_type"])[NotificationType.DOCUMENT_REJECTED] == 1
    assert len(stats["recent"]) == 2

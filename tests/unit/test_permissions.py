"""Unit tests for the permission evaluator.

The evaluator is pure, so every (role, ownership, status, intent) combination
is checked without a database.
"""

import pytest

from hostcert.core.exceptions import AccessDenied, InvalidStateError
from hostcert.domain.enums import AccessIntent, ApplicationStatus, UserRole
from hostcert.services.permissions import ApplicationSnapshot, can_access, check_access

OWNER = "host-1"
STRANGER = "host-2"

ALL_STATUSES = list(ApplicationStatus)
MUTABLE = {ApplicationStatus.DRAFT, ApplicationStatus.UNDER_REVIEW}


def _snapshot(status: ApplicationStatus) -> ApplicationSnapshot:
    return ApplicationSnapshot(id="app-1", owner_id=OWNER, status=status)


class TestNonOwner:
    @pytest.mark.parametrize("intent", list(AccessIntent))
    @pytest.mark.parametrize("status", ALL_STATUSES)
    def test_other_host_is_denied_everything(self, intent, status):
        with pytest.raises(AccessDenied) as exc_info:
            check_access(UserRole.HOST, STRANGER, _snapshot(status), intent)
        assert exc_info.value.details["applicationId"] == "app-1"
        assert not can_access(UserRole.HOST, STRANGER, _snapshot(status), intent)

    def test_denial_message_names_the_operation(self):
        with pytest.raises(AccessDenied) as exc_info:
            check_access(UserRole.HOST, STRANGER, _snapshot(ApplicationStatus.DRAFT), AccessIntent.WRITE_CREATE)
        assert "upload" in exc_info.value.message


class TestOwner:
    @pytest.mark.parametrize("status", ALL_STATUSES)
    def test_owner_can_always_read(self, status):
        assert can_access(UserRole.HOST, OWNER, _snapshot(status), AccessIntent.READ)

    @pytest.mark.parametrize("status", ALL_STATUSES)
    def test_owner_creates_only_while_mutable(self, status):
        allowed = can_access(UserRole.HOST, OWNER, _snapshot(status), AccessIntent.WRITE_CREATE)
        assert allowed is (status in MUTABLE)

    @pytest.mark.parametrize("status", ALL_STATUSES)
    def test_owner_deletes_only_in_draft(self, status):
        allowed = can_access(UserRole.HOST, OWNER, _snapshot(status), AccessIntent.WRITE_DELETE)
        assert allowed is (status is ApplicationStatus.DRAFT)

    def test_create_on_submitted_application_is_invalid_state(self):
        with pytest.raises(InvalidStateError) as exc_info:
            check_access(UserRole.HOST, OWNER, _snapshot(ApplicationStatus.SUBMITTED), AccessIntent.WRITE_CREATE)
        assert exc_info.value.details["status"] == "submitted"

    def test_delete_under_review_is_invalid_state(self):
        # Still mutable for uploads, but documents under review are frozen.
        with pytest.raises(InvalidStateError):
            check_access(UserRole.HOST, OWNER, _snapshot(ApplicationStatus.UNDER_REVIEW), AccessIntent.WRITE_DELETE)


class TestPrivileged:
    @pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.SUPER_ADMIN])
    @pytest.mark.parametrize("status", ALL_STATUSES)
    def test_reviewers_can_read_any_application(self, role, status):
        assert can_access(role, "admin-1", _snapshot(status), AccessIntent.READ)

    @pytest.mark.parametrize("role", [UserRole.ADMIN, UserRole.SUPER_ADMIN])
    @pytest.mark.parametrize("intent", [AccessIntent.WRITE_CREATE, AccessIntent.WRITE_DELETE])
    def test_reviewers_cannot_write_without_elevation(self, role, intent):
        with pytest.raises(AccessDenied):
            check_access(role, "admin-1", _snapshot(ApplicationStatus.DRAFT), intent)

    def test_elevated_reviewer_can_write_in_draft(self):
        for intent in (AccessIntent.WRITE_CREATE, AccessIntent.WRITE_DELETE):
            assert can_access(
                UserRole.ADMIN, "admin-1", _snapshot(ApplicationStatus.DRAFT), intent,
                privileged_writes=True,
            )

    def test_elevated_reviewer_still_bound_by_lifecycle(self):
        with pytest.raises(InvalidStateError):
            check_access(
                UserRole.SUPER_ADMIN, "admin-1", _snapshot(ApplicationStatus.APPROVED),
                AccessIntent.WRITE_CREATE, privileged_writes=True,
            )

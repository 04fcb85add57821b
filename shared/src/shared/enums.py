from enum import StrEnum


class TemplateType(StrEnum):
    REGISTRATION_APPROVED = "registration_approved"
    CREDENTIALS_DISTRIBUTION = "credentials_distribution"
    TEST_START_REMINDER = "test_start_reminder"
    RESULT_PUBLISHED = "result_published"
    ADMIN_NOTIFICATION = "admin_notification"


class AuditStatus(StrEnum):
    SENT = "sent"
    FAILED = "failed"


class UserRole(StrEnum):
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    PARTICIPANT = "participant"


class TransportMode(StrEnum):
    LIVE = "live"
    LOGGED = "logged"

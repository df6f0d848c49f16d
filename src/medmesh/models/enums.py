"""Closed value sets stored on MedMesh records."""

from enum import StrEnum


class ModelStatus(StrEnum):
    """Moderation state of a submitted model."""

    VERIFICATION = "verification"
    PUBLISHED = "published"
    REJECTED = "rejected"


class Visibility(StrEnum):
    """Who may discover a model once it is published."""

    PUBLIC = "public"
    PRIVATE = "private"


class UserRole(StrEnum):
    """Account role; only admins may moderate."""

    USER = "USER"
    ADMIN = "ADMIN"


def enum_values(enum_cls: type[StrEnum]) -> list[str]:
    """Persist enum values rather than member names."""
    return [member.value for member in enum_cls]

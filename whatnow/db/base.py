"""Centralized SQLModel imports to ensure metadata is populated."""

from whatnow.models import user as _user  # noqa: F401
from whatnow.models import task as _task  # noqa: F401

"""Instance interrogators derived from the live/draft link.

Work on any mapped instance: types without an approved_version_id column
are always approved and never have a draft.
"""

from typing import Any, Optional

APPROVED_VERSION_COLUMN = "approved_version_id"


def is_draft(instance: Any) -> bool:
    """True if ``instance`` is a draft of some live entity."""
    return getattr(instance, APPROVED_VERSION_COLUMN, None) is not None


def is_approved(instance: Any) -> bool:
    """True if ``instance`` is a live (approved) entity."""
    return not is_draft(instance)


def has_draft(instance: Any) -> bool:
    """True if a live ``instance`` has an outstanding draft.

    Loads the ``draft`` relationship when the type has one.
    """
    if is_draft(instance):
        return False
    return getattr(instance, "draft", None) is not None


def live_version(instance: Any) -> Optional[Any]:
    """The live entity for a draft, or the instance itself when approved."""
    if not is_draft(instance):
        return instance
    return getattr(instance, "approved_version", None)

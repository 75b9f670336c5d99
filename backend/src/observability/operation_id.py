"""Operation ID management for draft correlation.

Every top-level create_draft call runs under one operation ID so that the
log lines of a whole cloned subgraph can be grouped.
"""

import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional

# Context variable for operation_id (async-safe)
operation_id_var: ContextVar[Optional[str]] = ContextVar("draft_operation_id", default=None)


def generate_operation_id() -> str:
    """Generate a new unique operation ID.

    Returns:
        str: UUID v4 operation ID
    """
    return str(uuid.uuid4())


def get_operation_id() -> str:
    """Get current operation ID from context.

    Returns:
        str: Current operation ID or "no-operation-id" if not set
    """
    return operation_id_var.get() or "no-operation-id"


@contextmanager
def operation_scope() -> Iterator[str]:
    """Run a block under an operation ID.

    Nested scopes reuse the outer ID, so recursive clones share the ID of
    the top-level call.

    Example:
        with operation_scope() as operation_id:
            logger.info("Creating draft")  # carries operation_id
    """
    current = operation_id_var.get()
    if current is not None:
        yield current
        return

    token = operation_id_var.set(generate_operation_id())
    try:
        yield operation_id_var.get()
    finally:
        operation_id_var.reset(token)

"""Utility modules for cross-cutting concerns."""

from utils.timezone import now_utc, to_utc
from utils.identity_context import (
    get_current_identity,
    get_current_identity_or_none,
    set_current_identity,
    clear_current_identity,
    identity_context,
)

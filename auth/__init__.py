"""Authentication and identity modules."""

from auth.exceptions import (
    AuthError,
    AuthenticationRequiredError,
    InvalidTokenError,
)
from auth.types import IdentityContext, Role
from auth.config import AuthConfig

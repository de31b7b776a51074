"""
HashiCorp Vault client for notes service secret management.

Uses AppRole authentication. Fails fast on missing Vault configuration once
Vault is in use. All paths scoped to 'notes/' prefix - no escape to other secrets.

Environment variables take precedence over Vault for the connection URLs, and
both are optional: a missing database URL disables notes, a missing Valkey URL
disables the list cache.
"""

import os
import logging
from typing import Dict

import hvac
from hvac.exceptions import InvalidPath, Unauthorized, Forbidden

logger = logging.getLogger(__name__)

# Project scope - all secrets under this path
_SECRET_PREFIX = "notes"

# Singleton instance and cache
_vault_client_instance: "VaultClient | None" = None
_secret_cache: Dict[str, str] = {}


def _ensure_vault_client() -> "VaultClient":
    global _vault_client_instance
    if _vault_client_instance is None:
        _vault_client_instance = VaultClient()
    return _vault_client_instance


def _vault_enabled() -> bool:
    return bool(os.getenv("VAULT_ADDR"))


class VaultError(Exception):
    """Vault operation failed."""


class VaultClient:
    """Vault client with AppRole auth, env-based config, and fail-fast behavior."""

    def __init__(
        self,
        vault_addr: str | None = None,
        vault_namespace: str | None = None,
    ):
        """Initialize with environment variables. Fails fast on missing config."""
        self.vault_addr = vault_addr or os.getenv("VAULT_ADDR")
        self.vault_namespace = vault_namespace or os.getenv("VAULT_NAMESPACE")
        self.vault_role_id = os.getenv("VAULT_ROLE_ID")
        self.vault_secret_id = os.getenv("VAULT_SECRET_ID")

        if not self.vault_addr:
            raise ValueError("VAULT_ADDR environment variable is required")

        if not self.vault_role_id or not self.vault_secret_id:
            raise ValueError(
                "VAULT_ROLE_ID and VAULT_SECRET_ID environment variables are required"
            )

        client_kwargs = {"url": self.vault_addr}
        if self.vault_namespace:
            client_kwargs["namespace"] = self.vault_namespace

        self.client = hvac.Client(**client_kwargs)
        self._authenticate_approle()

        if not self.client.is_authenticated():
            raise VaultError("Vault authentication failed")

        logger.info(f"Vault client initialized: {self.vault_addr}")

    def _authenticate_approle(self) -> None:
        """Authenticate using AppRole credentials."""
        try:
            auth_response = self.client.auth.approle.login(
                role_id=self.vault_role_id,
                secret_id=self.vault_secret_id,
            )
            self.client.token = auth_response["auth"]["client_token"]
            logger.info("AppRole authentication successful")
        except Exception as e:
            logger.error(f"AppRole authentication failed: {e}")
            raise VaultError(f"AppRole authentication failed: {e}")

    def get_secret(self, path: str, field: str) -> str:
        """
        Retrieve single field from KV v2 secret.

        Path is automatically scoped to 'notes/' prefix.
        Caller passes 'database', we access 'notes/database'.

        Raises:
            PermissionError: Path not accessible or doesn't exist.
            KeyError: Field not found in secret.
        """
        full_path = f"{_SECRET_PREFIX}/{path}"

        try:
            response = self.client.secrets.kv.v2.read_secret_version(
                path=full_path, raise_on_deleted_version=True
            )
            secret_data = response["data"]["data"]

            if field not in secret_data:
                available = list(secret_data.keys())
                raise KeyError(
                    f"Field '{field}' not found in secret '{full_path}'. "
                    f"Available: {', '.join(available)}"
                )

            return secret_data[field]

        except InvalidPath:
            logger.error(f"Secret path not found: {full_path}")
            raise PermissionError(f"Secret path '{full_path}' not found in Vault")

        except (Unauthorized, Forbidden) as e:
            logger.error(f"Access denied to secret {full_path}: {e}")
            raise PermissionError(f"Access denied to secret '{full_path}': {e}")


def _cached_secret(path: str, field: str) -> str:
    cache_key = f"{_SECRET_PREFIX}/{path}/{field}"
    if cache_key not in _secret_cache:
        _secret_cache[cache_key] = _ensure_vault_client().get_secret(path, field)
    return _secret_cache[cache_key]


# Convenience functions


def get_database_url() -> str | None:
    """
    Get PostgreSQL connection URL.

    DATABASE_URL wins; otherwise Vault when configured; otherwise None
    (notes disabled).
    """
    env_value = os.getenv("DATABASE_URL")
    if env_value:
        return env_value
    if not _vault_enabled():
        logger.warning("No database configured; notes are disabled")
        return None
    return _cached_secret("database", "url")


def get_valkey_url() -> str | None:
    """
    Get Valkey (Redis) connection URL.

    VALKEY_URL wins; otherwise Vault when configured; otherwise None
    (list cache disabled).
    """
    env_value = os.getenv("VALKEY_URL")
    if env_value:
        return env_value
    if not _vault_enabled():
        return None
    return _cached_secret("valkey", "url")


def get_identity_config() -> Dict[str, str]:
    """
    Get identity provider configuration.

    Returns:
        Dict with keys: project_id, secret, base_url
    """
    env_values = {
        "project_id": os.getenv("STYTCH_PROJECT_ID"),
        "secret": os.getenv("STYTCH_SECRET"),
        "base_url": os.getenv("STYTCH_DOMAIN"),
    }
    if all(env_values.values()):
        return env_values

    if not _vault_enabled():
        missing = [k for k, v in env_values.items() if not v]
        raise VaultError(
            f"Identity provider config missing ({', '.join(missing)}) and Vault is not configured"
        )

    return {field: _cached_secret("identity", field) for field in ("project_id", "secret", "base_url")}

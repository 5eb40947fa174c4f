"""
Vault Configuration — Cost parameters and validated settings.

Reads settings from environment variables:
    VAULT_ENVIRONMENT = production | development | ...
    VAULT_PEPPER_URL = <base URL of the pepper endpoint>
    VAULT_SCRYPT_N / VAULT_SCRYPT_R / VAULT_SCRYPT_P = <integers>
    VAULT_HKDF_INFO = <domain separation string>
    VAULT_NAME = <record name, "default">
    VAULT_PEPPER_TIMEOUT = <seconds>

Security Note:
    Never log passphrases, peppers or derived keys. Only log user ids,
    vault names and cost parameters.
"""
import os
import logging

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger("seed_vault.vault")

SALT_SIZE = 16
HKDF_INFO = "hihodl/v1"
DEFAULT_VAULT_NAME = "default"
DEFAULT_PEPPER_URL = "https://api.hihodl.xyz"

# Environments allowed to fall back to the published development pepper.
DEVELOPMENT_ENVIRONMENTS = frozenset({"development", "dev", "local", "test"})


def is_power_of_two(value: int) -> bool:
    return value >= 1 and (value & (value - 1)) == 0


class ScryptParams(BaseModel):
    """scrypt cost parameters, persisted next to every cipher blob."""

    N: int = Field(default=16384)
    r: int = Field(default=8, ge=1)
    p: int = Field(default=1, ge=1)

    model_config = {"frozen": True}

    @field_validator("N")
    @classmethod
    def validate_n(cls, v: int) -> int:
        """N must be a power of two."""
        if not is_power_of_two(v):
            raise ValueError(f"scrypt N must be a power of two, got {v}")
        return v


DEFAULT_SCRYPT = ScryptParams()


class VaultConfig(BaseModel):
    """Validated vault configuration."""

    environment: str = Field(default="production")
    pepper_url: str = Field(default=DEFAULT_PEPPER_URL)
    pepper_timeout: float = Field(default=10.0, gt=0)
    scrypt: ScryptParams = Field(default=DEFAULT_SCRYPT)
    hkdf_info: str = Field(default=HKDF_INFO, min_length=1)
    vault_name: str = Field(default=DEFAULT_VAULT_NAME, min_length=1)

    @field_validator("environment")
    @classmethod
    def normalize_environment(cls, v: str) -> str:
        """Lowercase the environment name."""
        return v.strip().lower()

    @field_validator("pepper_url")
    @classmethod
    def validate_pepper_url(cls, v: str) -> str:
        """Pepper endpoint must be http(s); trailing slash is dropped."""
        if not v.startswith(("https://", "http://")):
            raise ValueError(f"Unsupported pepper URL scheme: {v}")
        return v.rstrip("/")

    @model_validator(mode="after")
    def require_tls_in_production(self) -> "VaultConfig":
        """Only development builds may talk to a plain-http pepper endpoint."""
        if not self.is_development and self.pepper_url.startswith("http://"):
            raise ValueError(
                "pepper_url must use https outside development environments"
            )
        return self

    @property
    def is_development(self) -> bool:
        return self.environment in DEVELOPMENT_ENVIRONMENTS

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Create VaultConfig by loading values from environment.

        Returns:
            Populated VaultConfig instance.
        """
        scrypt = ScryptParams(
            N=int(os.environ.get("VAULT_SCRYPT_N", DEFAULT_SCRYPT.N)),
            r=int(os.environ.get("VAULT_SCRYPT_R", DEFAULT_SCRYPT.r)),
            p=int(os.environ.get("VAULT_SCRYPT_P", DEFAULT_SCRYPT.p)),
        )
        config = cls(
            environment=os.environ.get("VAULT_ENVIRONMENT", "production"),
            pepper_url=os.environ.get("VAULT_PEPPER_URL", DEFAULT_PEPPER_URL),
            pepper_timeout=float(os.environ.get("VAULT_PEPPER_TIMEOUT", 10.0)),
            scrypt=scrypt,
            hkdf_info=os.environ.get("VAULT_HKDF_INFO", HKDF_INFO),
            vault_name=os.environ.get("VAULT_NAME", DEFAULT_VAULT_NAME),
        )
        logger.debug(
            "Loaded vault config: environment=%s scrypt=(N=%d, r=%d, p=%d)",
            config.environment, scrypt.N, scrypt.r, scrypt.p,
        )
        return config

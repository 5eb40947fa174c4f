"""
Cipher Blob — the persisted unit of an encrypted mnemonic.

Wire format (the ``cipher_blob`` JSON column)::

    {"v": 1, "params": {"N": 16384, "r": 8, "p": 1},
     "saltPB64": "...", "ivB64": "...", "ctB64": "..."}

Salt, cost parameters and ciphertext always travel together; a blob is
never read or written partially.
"""
import base64
import binascii
from typing import Any, Union

import orjson
from pydantic import BaseModel, Field, ValidationError, field_validator

from .config import SALT_SIZE, ScryptParams
from .crypto import IV_SIZE, TAG_SIZE, EncryptedPayload
from .exceptions import InvalidParameter

BLOB_VERSION = 1
SUPPORTED_VERSIONS = frozenset({BLOB_VERSION})


def b64e(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64d(data: str) -> bytes:
    return base64.b64decode(data, validate=True)


class CipherBlob(BaseModel):
    """Schema version, cost parameters, salt, IV and ciphertext of one vault."""

    v: int = Field(default=BLOB_VERSION)
    params: ScryptParams
    saltPB64: str
    ivB64: str
    ctB64: str

    model_config = {"frozen": True}

    @field_validator("v")
    @classmethod
    def validate_version(cls, v: int) -> int:
        if v not in SUPPORTED_VERSIONS:
            raise ValueError(f"Unsupported cipher blob version: {v}")
        return v

    @field_validator("saltPB64")
    @classmethod
    def validate_salt(cls, v: str) -> str:
        if len(_decode_field(v, "saltPB64")) != SALT_SIZE:
            raise ValueError(f"salt must decode to {SALT_SIZE} bytes")
        return v

    @field_validator("ivB64")
    @classmethod
    def validate_iv(cls, v: str) -> str:
        if len(_decode_field(v, "ivB64")) != IV_SIZE:
            raise ValueError(f"IV must decode to {IV_SIZE} bytes")
        return v

    @field_validator("ctB64")
    @classmethod
    def validate_ciphertext(cls, v: str) -> str:
        if len(_decode_field(v, "ctB64")) < TAG_SIZE:
            raise ValueError("ciphertext is shorter than the authentication tag")
        return v

    @property
    def salt(self) -> bytes:
        return b64d(self.saltPB64)

    @property
    def iv(self) -> bytes:
        return b64d(self.ivB64)

    @property
    def ciphertext(self) -> bytes:
        return b64d(self.ctB64)

    @classmethod
    def build(
        cls, params: ScryptParams, salt: bytes, payload: EncryptedPayload
    ) -> "CipherBlob":
        """Assemble a blob from freshly encrypted material."""
        return cls.from_record({
            "v": BLOB_VERSION,
            "params": params.model_dump(),
            "saltPB64": b64e(salt),
            "ivB64": b64e(payload.iv),
            "ctB64": b64e(payload.ciphertext),
        })

    @classmethod
    def from_record(cls, record: Union[str, bytes, dict[str, Any]]) -> "CipherBlob":
        """Parse a stored ``cipher_blob`` value (JSON text or decoded mapping).

        Raises:
            InvalidParameter: If the record is malformed.
        """
        try:
            if isinstance(record, (str, bytes)):
                record = orjson.loads(record)
            return cls.model_validate(record)
        except orjson.JSONDecodeError as err:
            raise InvalidParameter("Malformed cipher blob: not valid JSON") from err
        except ValidationError as err:
            # field names only; input values stay out of the message
            fields = ", ".join(
                ".".join(str(part) for part in error["loc"]) or "record"
                for error in err.errors()
            )
            raise InvalidParameter(f"Malformed cipher blob: invalid {fields}") from err

    def to_record(self) -> dict[str, Any]:
        return self.model_dump()

    def to_json(self) -> str:
        return orjson.dumps(self.to_record()).decode("utf-8")


def _decode_field(value: str, name: str) -> bytes:
    try:
        return b64d(value)
    except (binascii.Error, ValueError) as err:
        raise ValueError(f"{name} is not valid base64") from err

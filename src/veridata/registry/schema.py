# src/veridata/registry/schema.py
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from veridata.errors import InvalidTimestampError


def validate_timestamp(now) -> int:
    """Return ``now`` if it is a usable Unix timestamp, else raise."""
    if isinstance(now, bool) or not isinstance(now, int) or now < 0:
        raise InvalidTimestampError(
            f"Timestamp must be a non-negative integer, got {now!r}"
        )
    return now


class DataSourceRecord(BaseModel):
    content_hash: str = Field(..., description="Content hash identifying the dataset")
    name: str = Field(default="", description="Display name (free text)")
    owner: str = Field(..., description="Submitting account, fixed at creation")
    created_at: int = Field(ge=0, description="Unix timestamp of submission")
    verified: bool = Field(default=False, description="One-way verification flag")
    verified_by: Optional[str] = Field(None, description="Account that verified")
    verified_at: Optional[int] = Field(None, ge=0, description="Verification time")
    reward: int = Field(default=0, ge=0, description="Tokens paid at verification")
    average_rating: int = Field(default=0, ge=0, description="Truncated mean rating")
    rating_count: int = Field(default=0, ge=0, description="Ratings received")

    @field_validator("content_hash")
    @classmethod
    def validate_content_hash(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("content_hash must not be empty")
        if v != v.strip():
            raise ValueError("content_hash must not carry surrounding whitespace")
        return v

    @field_validator("owner")
    @classmethod
    def validate_owner(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("owner must not be empty")
        return v.strip()

    class Config:
        frozen = True


class VerifierRecord(BaseModel):
    account: str = Field(..., description="Verifier account reference")
    active: bool = Field(default=True, description="One-way activation flag")
    reputation: int = Field(default=0, ge=0, description="Non-decreasing score")
    added_at: int = Field(default=0, ge=0, description="Unix timestamp of registration")
    verifications: int = Field(default=0, ge=0, description="Successful verifications")

    @field_validator("account")
    @classmethod
    def validate_account(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("account must not be empty")
        return v.strip()

    class Config:
        frozen = True

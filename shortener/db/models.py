"""
Data Model for the URL Shortener Service

ShortUrlMapping is the only persisted entity. It is a plain SQLModel (not a
table model) so every store backend can share it; the SQL backend maps it onto
a Core table whose name comes from configuration.

Design Decisions:
- Timestamps are Unix seconds (integers), so expiry checks are integer compares
- short_code is the primary key; uniqueness is enforced by the store
- click_count is denormalized on the row and only changed by atomic increments
"""

from typing import Optional

from pydantic import model_validator
from sqlalchemy import BigInteger, Column, Integer, MetaData, String, Table, Text
from sqlmodel import SQLModel, Field

SHORT_CODE_MAX_LENGTH = 32
CLICK_COUNT_FIELD = "click_count"


class ShortUrlMapping(SQLModel):
    """
    Mapping between a short code and its destination.

    Fields:
    - short_code: Fixed-length base62 code (primary key)
    - original_url: Normalized destination, always with an http(s) scheme
    - created_at: Unix seconds, set once at creation
    - expires_at: Unix seconds, created_at + ttl_minutes * 60; None never expires
    - click_count: Number of successful resolutions
    """

    short_code: str = Field(min_length=1, max_length=SHORT_CODE_MAX_LENGTH)
    original_url: str = Field(min_length=1)
    created_at: int
    expires_at: Optional[int] = None
    click_count: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def check_expiry_after_creation(self) -> "ShortUrlMapping":
        if self.expires_at is not None and self.expires_at <= self.created_at:
            raise ValueError("expires_at must be later than created_at")
        return self

    def is_expired(self, now: int) -> bool:
        """A mapping is live up to and including its expiry second."""
        if self.expires_at is None:
            return False
        return now > self.expires_at


def build_mapping_table(table_name: str, metadata: Optional[MetaData] = None) -> Table:
    """
    Build the Core table for mappings under a configurable name.

    Indexes:
    - short_code: primary key, serves every lookup
    - expires_at: for external purge jobs scanning dead rows
    """
    return Table(
        table_name,
        metadata if metadata is not None else MetaData(),
        Column("short_code", String(SHORT_CODE_MAX_LENGTH), primary_key=True),
        Column("original_url", Text, nullable=False),
        Column("created_at", BigInteger, nullable=False),
        Column("expires_at", BigInteger, nullable=True, index=True),
        Column(CLICK_COUNT_FIELD, Integer, nullable=False, default=0, server_default="0"),
    )

"""Mapping profile — Frozen configuration for the result-to-feed translator.

A profile is a plain value object: two profiles with the same settings
compare equal, and any number of profiles can coexist in one process.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

REQUIRED_FIELDS_DEFAULT: tuple[str, ...] = ("id", "subject", "sender", "body", "date")
RECORD_FIELDS: frozenset[str] = frozenset(
    {"id", "subject", "body", "sender", "date", "receivers", "tags"}
)


class FailureMode(str, Enum):
    """What to do when a record fails translation.

    - STRICT: abort the whole document.
    - LENIENT: skip the record, log it and keep going.
    """

    STRICT = "strict"
    LENIENT = "lenient"


class FieldMap(BaseModel):
    """Native (Solr) field names for each record attribute."""

    model_config = ConfigDict(frozen=True)

    id: str = "id"
    subject: str = "subject"
    body: str = "body"
    sender: str = "sender"
    date: str = "date"
    receivers: str = "receivers"
    tags: str = "tags"

    def native_fields(self) -> list[str]:
        """Return the native field list, suitable for a Solr ``fl`` parameter."""
        return [getattr(self, name) for name in ("id", "subject", "body", "sender", "date", "receivers", "tags")]


class MappingProfile(BaseModel):
    """Translator configuration.

    ``flatten_delimiter`` defaults to the empty string, which concatenates
    multi-valued fields with no separator.  Set it to e.g. ``", "`` for a
    readable join.
    """

    model_config = ConfigDict(frozen=True)

    fields: FieldMap = Field(default_factory=FieldMap, description="Native field names per record attribute")
    required_fields: tuple[str, ...] = Field(
        default=REQUIRED_FIELDS_DEFAULT,
        description="Record attributes that must be present and non-empty",
    )
    flatten_delimiter: str = Field(default="", description="Separator used to flatten multi-valued fields")
    failure_mode: FailureMode = Field(default=FailureMode.STRICT, description="strict or lenient")
    record_type: str = Field(default="Email", description="Constant emitted as the vendor recordType")
    vendor_prefix: str = Field(default="sfdc", description="XML prefix for vendor extension elements")
    vendor_namespace: str = Field(
        default="http://salesforce.com/2016/federatedsearch/",
        description="XML namespace URI for vendor extension elements",
    )

    @field_validator("required_fields")
    @classmethod
    def _known_fields(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        unknown = sorted(set(v) - RECORD_FIELDS)
        if unknown:
            raise ValueError(f"Unknown record fields in required_fields: {unknown}")
        return v

    def flatten(self, values: list[str]) -> str:
        """Join a multi-valued field into one scalar string, preserving order."""
        return self.flatten_delimiter.join(values)

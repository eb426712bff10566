"""Pydantic schemas for request/response validation.

Schema Hierarchy
=================
::
    LinkCreate (Input, JSON or form)
    ├─ url: str (validated URL)
    └─ hidden: bool = False

    LinkResponse (Output)
    ├─ slug: str
    ├─ url: str
    ├─ short_url: str (computed by the route)
    └─ hidden: bool

    ReverseResponse (Output)
    ├─ slug: str
    └─ url: str

    LinkRecord (Output, one NDJSON line of /admin/links)

    HealthResponse (Output)
    ├─ status: HealthStatus
    └─ database: HealthStatus

Key Behaviours
===============
- URL validation uses the validators library for RFC compliance.
- LinkRecord reads straight from ORM rows (from_attributes).
"""

import validators
from pydantic import BaseModel, field_validator

from linker.enums import HealthStatus

__all__ = [
    "HealthResponse",
    "LinkCreate",
    "LinkRecord",
    "LinkResponse",
    "ReverseResponse",
]


class LinkCreate(BaseModel):
    url: str
    hidden: bool = False

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not validators.url(v):
            raise ValueError("Invalid URL provided")
        return v


class LinkResponse(BaseModel):
    slug: str
    url: str
    short_url: str
    hidden: bool


class ReverseResponse(BaseModel):
    slug: str
    url: str


class LinkRecord(BaseModel):
    slug: str
    url: str
    hidden: bool

    model_config = {"from_attributes": True}


class HealthResponse(BaseModel):
    status: HealthStatus
    database: HealthStatus

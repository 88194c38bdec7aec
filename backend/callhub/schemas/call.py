"""Call Schemas - Pydantic request bodies for the dispatch and inspection endpoints.

Invariants:
    - ExecuteRequest accepts the wire name `callString` (and call_string)
    - QueryRequest.sql must be non-blank; read-only checking happens in the store
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExecuteRequest(BaseModel):
    """Body of POST /execute."""
    model_config = ConfigDict(populate_by_name=True)

    call_string: str = Field(alias="callString", max_length=10_000)


class QueryRequest(BaseModel):
    """Body of POST /api/db/query."""
    sql: str = Field(max_length=10_000)

    @field_validator("sql")
    @classmethod
    def strip_sql(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("sql cannot be empty or whitespace")
        return v

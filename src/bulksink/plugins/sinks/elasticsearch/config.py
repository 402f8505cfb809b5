from __future__ import annotations

from typing import Annotated, Any, Literal

import orjson
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import NoDecode

from ...codecs.json import JsonCodecConfig


class RenderIndexFailedPolicy(BaseModel):
    """What to do with an event whose index pattern cannot be rendered.

    ``default_index`` takes precedence over ``drop_event``; with neither set
    the whole batch fails.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    ignore_error: bool = Field(
        default=False,
        description="Do not log index render failures",
    )
    default_index: str = Field(
        default="",
        description="Fallback index pattern, rendered non-strictly",
    )
    drop_event: bool = Field(
        default=True,
        description="Drop the event when no default index is configured",
    )


class ElasticsearchSinkConfig(BaseModel):
    """Connection and routing options for the Elasticsearch bulk sink."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    # Connection settings
    # Environment values arrive raw; _split_hosts takes a JSON list or a comma list
    hosts: Annotated[list[str], NoDecode] = Field(min_length=1)
    username: str | None = None
    password: str | None = None
    scheme: Literal["http", "https"] | None = Field(
        default=None,
        description="Force this scheme on every host",
    )
    sniff: bool | None = Field(
        default=None,
        description="Discover cluster nodes at start; disabled when unset",
    )
    gzip: bool | None = Field(
        default=None,
        description="Gzip-compress bulk request bodies",
    )
    timeout_seconds: float = Field(default=30.0, gt=0.0)

    # Routing settings
    index: str = Field(min_length=1)
    etype: str = Field(default="", description="Legacy document type")
    op_type: Literal["", "index", "create", "update"] = ""
    document_id: str = Field(default="", description="Document id pattern")
    if_render_index_failed: RenderIndexFailedPolicy = Field(
        default_factory=RenderIndexFailedPolicy
    )

    codec: JsonCodecConfig = Field(default_factory=JsonCodecConfig)

    @field_validator("hosts", mode="before")
    @classmethod
    def _split_hosts(cls, value: Any) -> Any:
        if isinstance(value, str):
            if value.lstrip().startswith("["):
                return orjson.loads(value)
            return [h.strip() for h in value.split(",") if h.strip()]
        return value

    @field_validator("hosts")
    @classmethod
    def _strip_hosts(cls, value: list[str]) -> list[str]:
        hosts = [h.strip() for h in value if h and h.strip()]
        if not hosts:
            raise ValueError("hosts must contain at least one address")
        return hosts

    @model_validator(mode="after")
    def _update_requires_id(self) -> ElasticsearchSinkConfig:
        if self.op_type == "update" and not self.document_id:
            raise ValueError("op_type 'update' requires a document_id pattern")
        return self


# Mark Pydantic validators as used for vulture
_VULTURE_USED: tuple[object, ...] = (
    ElasticsearchSinkConfig._split_hosts,
    ElasticsearchSinkConfig._strip_hosts,
)

__all__ = ["ElasticsearchSinkConfig", "RenderIndexFailedPolicy"]

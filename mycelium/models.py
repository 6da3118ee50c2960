from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class DesiredServer(BaseModel):
    """One backend the control plane wants this proxy to route to."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., description="Backend name, unique within one fetch")
    address: str = Field(..., description="Host the backend listens on (port is always 25565)")
    forced_host: str | None = Field(None, alias="host", description="Virtual host routed to this backend")
    priority: int | None = Field(None, strict=True, description="Lower is tried earlier; absent sorts last")


DESIRED_SERVERS = TypeAdapter(list[DesiredServer])

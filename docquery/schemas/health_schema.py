"""Backend health schemas."""

from pydantic import BaseModel, ConfigDict, Field


class ComponentHealth(BaseModel):
    model_config = ConfigDict(frozen=True, extra="allow")

    status: str


class DetailedHealth(BaseModel):
    """Response of the detailed health check."""

    model_config = ConfigDict(frozen=True)

    status: str
    services: dict[str, ComponentHealth] = Field(default_factory=dict)

    @property
    def backend_healthy(self) -> bool:
        # A degraded backend still answers requests.
        return self.status in ("healthy", "degraded")

    @property
    def milvus_healthy(self) -> bool:
        milvus = self.services.get("milvus")
        return milvus is not None and milvus.status == "healthy"


class ServiceHealth(BaseModel):
    """What the client currently knows about backend readiness."""

    model_config = ConfigDict(frozen=True)

    backend: bool = False
    milvus: bool = False

    @property
    def all_healthy(self) -> bool:
        return self.backend and self.milvus

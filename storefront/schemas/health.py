"""Response body of GET /health."""

from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"] = Field(
        default="ok", description="degraded while the database is unreachable"
    )
    environment: str = Field(description="APP_ENV of the running service (dev or prod)")
    database: Literal["connected", "disconnected"]
    mail: Literal["api", "log", "unconfigured"] = Field(
        description="Where password reset emails go: the mail API, the log, or nowhere"
    )

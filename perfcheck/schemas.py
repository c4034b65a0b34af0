from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CheckRequest(BaseModel):
    # Validated by the service so every failure shares one error shape
    url: Optional[Any] = None


class ReportOut(BaseModel):
    id: int
    url: str
    performance: float
    accessibility: float
    best_practices: float
    seo: float
    load_time: float
    resource_size: float
    request_count: int
    timestamp: datetime

    # Wire names are camelCase (bestPractices, loadTime, ...)
    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    @field_validator("timestamp")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        return v if v.tzinfo else v.replace(tzinfo=timezone.utc)


class ErrorOut(BaseModel):
    error: str
    kind: str = Field(default="error")

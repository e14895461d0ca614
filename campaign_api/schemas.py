from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class DashboardFiltersModel(BaseModel):
    top_n: int = 5
    provider_query: str = ""
    metric: str = "enrollments"


class MetaProvidersResponse(BaseModel):
    providers: List[str]


class MetaSourceResponse(BaseModel):
    files: List[str]
    source: Optional[str] = None

"""Search, filter and import/export schemas."""
from typing import List, Optional
from pydantic import ConfigDict, Field
from catalog.schemas.application import Application
from catalog.schemas.base import CatalogModel


class FilterState(CatalogModel):
    """Filter selections. An empty list means no filter on that facet."""
    model_config = ConfigDict(frozen=True)

    domains: List[str] = Field(default_factory=list)
    statuses: List[str] = Field(default_factory=list)
    # Carried for clients; not used when filtering
    stakeholders: List[str] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not (self.domains or self.statuses or self.stakeholders)


class BrowseResult(CatalogModel):
    query: str
    filters: FilterState
    total: int
    items: List[Application]


class SuggestionResult(CatalogModel):
    query: str
    suggestions: List[str]


class ImportFailure(CatalogModel):
    app_code: Optional[str] = None
    error: str


class ImportResult(CatalogModel):
    created: List[Application] = Field(default_factory=list)
    failed: List[ImportFailure] = Field(default_factory=list)

    @property
    def created_count(self) -> int:
        return len(self.created)

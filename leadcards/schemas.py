"""
Lead Cards - Pydantic Data Schemas

Core data models for extracted person records and the request/response
envelopes exchanged with the page-side scraper (scrapePage, getTotalPages,
navigateToPage).
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Variant(str, Enum):
    """Markup family of the search results page being scraped."""
    PRIMARY = "primary"      # regular people search
    SECONDARY = "secondary"  # Sales Navigator lead search

    @classmethod
    def from_url(cls, url: Optional[str]) -> Optional["Variant"]:
        """Detect the variant from a page address; None when unsupported."""
        u = (url or "").lower()
        if "linkedin.com/search/results" in u:
            return cls.PRIMARY
        if "linkedin.com/sales/search" in u:
            return cls.SECONDARY
        return None

    @classmethod
    def from_str(cls, s: Optional[str]) -> "Variant":
        key = str(s or "").strip().lower().replace("-", "_")
        mapping = {
            "primary": cls.PRIMARY,
            "regular": cls.PRIMARY,
            "search": cls.PRIMARY,
            "secondary": cls.SECONDARY,
            "navigator": cls.SECONDARY,
            "sales_navigator": cls.SECONDARY,
        }
        if key not in mapping:
            raise ValueError(f"unknown variant: {s!r}")
        return mapping[key]


CONNECTION_DEGREES = ("", "1st", "2nd", "3rd")


class Record(BaseModel):
    """
    One person extracted from a search results card.

    Every field is a plain string; fields the extractors could not resolve
    stay empty. A Record is only emitted when name or profile_url is set.
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(default="", description="Person's display name")
    profile_url: str = Field(default="", alias="profileUrl", description="Absolute profile link")
    title: str = Field(default="", description="Current job title / headline")
    company: str = Field(default="", description="Current company")
    location: str = Field(default="", description="Location line")
    industry: str = Field(default="", description="Industry (Sales Navigator only)")
    connection_degree: str = Field(default="", alias="connectionDegree", description="'', '1st', '2nd' or '3rd'")
    shared_connections: str = Field(default="", alias="sharedConnections", description="e.g. '12 shared connections'")

    @field_validator('connection_degree')
    @classmethod
    def validate_connection_degree(cls, v):
        """Only the three network-proximity labels (or nothing) are allowed."""
        if v not in CONNECTION_DEGREES:
            raise ValueError(f"connection_degree must be one of {CONNECTION_DEGREES}")
        return v

    @field_validator('name', 'profile_url', 'title', 'company', 'location', 'industry', 'shared_connections')
    @classmethod
    def strip_strings(cls, v):
        return (v or "").strip()

    def is_identifiable(self) -> bool:
        """Inclusion rule: a record needs a name or a profile link."""
        return bool(self.name or self.profile_url)

    def to_message(self) -> dict:
        """camelCase dict, as carried in scrapePage responses."""
        return self.model_dump(by_alias=True)


class ScrapeResponse(BaseModel):
    """Response to a scrapePage request."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    records: List[Record] = Field(default_factory=list)
    error: Optional[str] = None
    debug_snapshot: Optional[str] = Field(default=None, alias="debugSnapshot")

    def to_message(self) -> dict:
        msg: dict = {"success": self.success}
        if self.success:
            msg["records"] = [r.to_message() for r in self.records]
        else:
            msg["error"] = self.error or "Unknown error"
        if self.debug_snapshot:
            msg["debugSnapshot"] = self.debug_snapshot
        return msg


class TotalPagesResponse(BaseModel):
    """Response to a getTotalPages request."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    total_pages: int = Field(default=1, alias="totalPages", ge=1)
    error: Optional[str] = None

    def to_message(self) -> dict:
        if self.success:
            return {"success": True, "totalPages": self.total_pages}
        return {"success": False, "error": self.error or "Unknown error"}


class NavigateResponse(BaseModel):
    """Acknowledgment of a navigateToPage request."""
    success: bool
    url: Optional[str] = None
    error: Optional[str] = None

    def to_message(self) -> dict:
        if self.success:
            return {"success": True}
        return {"success": False, "error": self.error or "Unknown error"}

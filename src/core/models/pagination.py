"""Pagination model."""

from pydantic import BaseModel, Field, StrictBool, StrictInt


class PaginationInfo(BaseModel):
    """Page-based pagination metadata for list responses."""

    page: StrictInt = Field(..., description="Current page number (1-based)")
    limit: StrictInt = Field(..., description="Maximum number of items per page")
    total: StrictInt = Field(..., description="Total number of items matching the query")
    total_pages: StrictInt = Field(..., description="Number of pages for this limit")
    has_more: StrictBool = Field(..., description="Whether more items are available after this page")

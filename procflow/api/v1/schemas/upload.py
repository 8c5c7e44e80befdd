"""Upload and menu API schemas."""

from typing import List, Optional

from pydantic import BaseModel, Field


class UploadRequest(BaseModel):
    """File content as a base64 data URL."""

    filename: str
    content: str
    type: Optional[str] = None


class UploadResponse(BaseModel):
    filename: str
    url: str


class MenuItemResponse(BaseModel):
    key: str
    label: str
    path: str


class MenuResponse(BaseModel):
    """Navigation visible to the current actor."""

    role: str
    capabilities: List[str] = Field(default_factory=list)
    items: List[MenuItemResponse] = Field(default_factory=list)
    service_processes: List[MenuItemResponse] = Field(default_factory=list)
    production_processes: List[MenuItemResponse] = Field(default_factory=list)

"""Reference records served by the vocabulary endpoints."""

from typing import Optional
from pydantic import BaseModel, ConfigDict


class ResourceTypeReference(BaseModel):
    """Resource type as returned by the resource-type endpoint."""
    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    slug: Optional[str] = None


class TitleTypeReference(BaseModel):
    """Stored title type record."""
    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    name: str
    slug: str

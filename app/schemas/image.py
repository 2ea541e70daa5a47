"""Image upload schemas"""
from typing import Optional
from app.schemas.common import CamelModel


class ImageDeleteRequest(CamelModel):
    url: Optional[str] = None

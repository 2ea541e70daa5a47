"""Reverse geocoding payloads"""
from pydantic import BaseModel


class FullAddress(BaseModel):
    """Structured reverse-geocode result; every field may be empty"""
    area: str = ""
    address: str = ""
    name: str = ""

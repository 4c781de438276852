"""Pydantic data models for submitted records."""

from cdmgate.models.contact import ContactRecord

__all__ = [
    "ContactRecord",
]

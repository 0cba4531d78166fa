"""Pydantic models for validating the model's shotlist output."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator


class ShotlistEntry(BaseModel):
    """One ``{"name", "searchTerm"}`` object from the model's JSON array."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1)
    search_term: str | None = Field(default=None, alias="searchTerm")

    @field_validator("name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class ShotlistOutput(RootModel[list[ShotlistEntry]]):
    """The complete JSON array returned by the model."""

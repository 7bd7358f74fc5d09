"""User preference schemas."""

from pydantic import BaseModel, ConfigDict, Field


class Preferences(BaseModel):
    """Application preferences persisted with the ledger."""

    theme: str = Field("light", pattern="^(light|dark)$")
    currency: str = "BRL"
    language: str = "pt-BR"
    auto_backup: bool = True


class PreferencesUpdate(BaseModel):
    """Partial preferences update."""

    model_config = ConfigDict(extra="forbid")

    theme: str | None = Field(None, pattern="^(light|dark)$")
    currency: str | None = Field(None, min_length=3, max_length=3)
    language: str | None = Field(None, min_length=2)
    auto_backup: bool | None = None

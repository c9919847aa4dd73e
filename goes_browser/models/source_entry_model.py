# goes_browser/models/source_entry_model.py
from pydantic import BaseModel, ConfigDict, Field


class SourceEntry(BaseModel):
    """One entry of a source directory listing (never persisted)."""

    filename: str
    relative_path: str = Field(
        ..., serialization_alias="path", description="Forward-slash relative path"
    )
    is_directory: bool = Field(..., serialization_alias="isDirectory")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

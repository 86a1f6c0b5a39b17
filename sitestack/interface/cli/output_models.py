from typing import Literal
from pydantic import BaseModel, Field


class BaseOutput(BaseModel):
    schema_version: int = 1
    command: Literal["build", "list"]
    exit_code: int
    error: str | None = None


class WrittenFile(BaseModel):
    """One written output document."""
    path: str
    sha256: str


class BuildOutput(BaseOutput):
    command: Literal["build"] = "build"
    # On build errors, output_dir may be unknown; omit it from JSON via exclude_none.
    output_dir: str | None = None
    files: list[WrittenFile] = Field(default_factory=list)
    total: int = 0


class ListOutput(BaseOutput):
    command: Literal["list"] = "list"
    source_dir: str | None = None
    templates: list[str] = Field(default_factory=list)
    outputs: list[str] = Field(default_factory=list)
    total: int = 0

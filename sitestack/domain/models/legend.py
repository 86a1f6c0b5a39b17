import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Legend(BaseModel):
    """Per-file entry in a directory's metadata, matched to a file by ``name``.

    Any field besides ``name`` and ``echo`` is kept as an extension field and
    merged into the render context together with the recognised ones.
    """

    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)
    echo: str | None = None

    def fields(self) -> dict[str, Any]:
        """Explicitly supplied fields, recognised and extension, as a plain dict."""
        data = self.model_dump(exclude_unset=True)
        data.update(self.model_extra or {})
        return data


class Metadata(BaseModel):
    """Parsed descriptor attached to a directory.

    Extension fields are named echo groups and stay raw until a legend
    references one; see ``EchoExpander``.
    """

    model_config = ConfigDict(extra="allow")

    ignore: str | None = None
    files: list[Legend] = Field(default_factory=list)

    @field_validator("ignore")
    @classmethod
    def _compiles(cls, value: str | None) -> str | None:
        if value:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"Invalid ignore pattern '{value}': {e}") from e
        return value

    def group(self, name: str) -> Any:
        if name in type(self).model_fields:
            return getattr(self, name)
        return (self.model_extra or {}).get(name)

    def legend_for(self, name: str) -> Legend | None:
        for legend in self.files:
            if legend.name == name:
                return legend
        return None

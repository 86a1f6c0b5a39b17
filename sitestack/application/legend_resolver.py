import re

from sitestack.application.registries import MetadataRegistry
from sitestack.domain import paths
from sitestack.domain.models import Legend, Metadata
from sitestack.domain.validation import validate_string


class LegendResolver:
    """Finds the metadata and legend that apply to a template path."""

    def __init__(self, metadata: MetadataRegistry) -> None:
        self.metadata = metadata

    def meta_at_path(self, path: str) -> Metadata | None:
        """Metadata of a file's directory.

        A trailing ``/`` marks ``path`` as the directory itself.
        """
        validate_string(path, "path")
        if path.endswith("/"):
            directory = paths.normalize(path.rstrip("/"))
        else:
            directory = paths.dirname(path)
        return self.metadata.get(directory)

    def file_legend(self, path: str) -> Legend | None:
        """Legend whose ``name`` equals the file's basename, if its directory has one."""
        validate_string(path, "path")
        meta = self.meta_at_path(path)
        if meta is None:
            return None
        return meta.legend_for(paths.basename(path))

    def is_ignored(self, path: str) -> bool:
        """True if the basename matches the ``ignore`` pattern of its directory."""
        meta = self.meta_at_path(path)
        if meta is None or not meta.ignore:
            return False
        return re.search(meta.ignore, paths.basename(path)) is not None

import fnmatch
import hashlib
import logging
from pathlib import Path
from typing import Iterable, Mapping

from pydantic import BaseModel, ConfigDict

from sitestack.domain.validation.path_validator import PathValidator

logger = logging.getLogger(__name__)


class SourceFile(BaseModel):
    """One file of the source tree, addressed by its posix path under the root."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: str
    content: str


class OutputFile(BaseModel):
    """Metadata for one written output document."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    path: str
    sha256: str


def is_excluded(rel_path: str, exclude: Iterable[str]) -> bool:
    """True if any segment of ``rel_path`` matches one of the glob patterns."""
    segments = rel_path.split("/")
    for pattern in exclude:
        if fnmatch.fnmatchcase(rel_path, pattern):
            return True
        if any(fnmatch.fnmatchcase(segment, pattern) for segment in segments):
            return True
    return False


def collect_sources(root: Path, exclude: Iterable[str] = ()) -> list[SourceFile]:
    """Read the source tree.

    Contract:
    - Returns every regular file under ``root`` not matched by ``exclude``.
    - Paths are relative to ``root`` and use ``/`` separators.
    - Order is deterministic (sorted by path), so later registrations of the
      same output path win predictably.
    - Files are decoded as UTF-8.
    """
    root = PathValidator.validate_directory(root)
    patterns = list(exclude)

    sources: list[SourceFile] = []
    for file_path in sorted(root.rglob("*")):
        if not file_path.is_file():
            continue
        rel = file_path.relative_to(root).as_posix()
        if is_excluded(rel, patterns):
            logger.debug(f"Excluded source file: {rel}")
            continue
        sources.append(SourceFile(path=rel, content=file_path.read_text(encoding="utf-8")))

    sources.sort(key=lambda s: s.path)
    return sources


def write_outputs(output_dir: Path, outputs: Mapping[str, str]) -> list[OutputFile]:
    """Write rendered documents under ``output_dir`` and return their metadata.

    Contract:
    - Creates parent directories as needed.
    - Writes text exactly as provided (UTF-8).
    - Rejects unsafe paths (absolute paths, '..' traversal) before writing anything.
    - Returns files in deterministic order (sorted by path).
    """
    output_dir = Path(output_dir)
    validated = {PathValidator.validate_output_path(path): content for path, content in outputs.items()}

    output_dir.mkdir(parents=True, exist_ok=True)

    written: list[OutputFile] = []
    for rel in sorted(validated):
        content = validated[rel]
        target = PathValidator.validate_within_root(output_dir / rel, output_dir)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8", newline="")

        written.append(
            OutputFile(path=rel, sha256=hashlib.sha256(content.encode("utf-8")).hexdigest())
        )
        logger.debug(f"Wrote output: {rel}")

    return written

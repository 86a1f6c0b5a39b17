"""Filesystem front-end: load a source tree into a SiteEngine and write the result."""

import logging
from pathlib import Path
from typing import Any

from sitestack.application.config_models import BuildConfig, build_rename
from sitestack.application.site_engine import SiteEngine
from sitestack.domain.events import RenderEventEmitter, RenderEventType
from sitestack.domain.models import RenderContext
from sitestack.engine.file_io import OutputFile, collect_sources, write_outputs

logger = logging.getLogger(__name__)


class SiteBuilder:
    """Builds a site from ``config.source_dir`` into ``config.output_dir``.

    Relative directories in the config are resolved against ``project_root``.
    """

    def __init__(
        self,
        config: BuildConfig,
        *,
        project_root: Path | None = None,
        emitter: RenderEventEmitter | None = None,
        imports: dict[str, Any] | None = None,
    ) -> None:
        self.config = config
        self.project_root = Path(project_root) if project_root is not None else Path.cwd()
        self.emitter = emitter
        self.imports = imports
        self._engine: SiteEngine | None = None

    @property
    def source_dir(self) -> Path:
        return (self.project_root / self.config.source_dir).resolve()

    @property
    def output_dir(self) -> Path:
        return (self.project_root / self.config.output_dir).resolve()

    @property
    def engine(self) -> SiteEngine:
        if self._engine is None:
            self._engine = self.load()
        return self._engine

    def load(self) -> SiteEngine:
        """Register every source file under the source directory into a fresh engine."""
        root = self.source_dir
        engine = SiteEngine(
            imports=self.imports,
            rename=build_rename(self.config),
            cwd=root,
            emitter=self.emitter,
        )

        sources = collect_sources(root, self.config.exclude)
        for source in sources:
            engine.register(source.content, str(root / source.path))

        logger.info(f"Loaded {len(sources)} source files from {root}")
        self._engine = engine
        return engine

    def context(self, data: RenderContext | None = None) -> RenderContext:
        """Config data overlaid by the per-call data."""
        return {**self.config.data, **(data or {})}

    def render(self, data: RenderContext | None = None) -> dict[str, str]:
        return self.engine.render(self.context(data))

    def build(self, data: RenderContext | None = None) -> list[OutputFile]:
        """Render the site and write every document under the output directory."""
        outputs = self.render(data)
        written = write_outputs(self.output_dir, outputs)

        if self.emitter is not None:
            for output in written:
                self.emitter.notify(
                    RenderEventType.OUTPUT_WRITTEN,
                    output_path=output.path,
                    metadata={"sha256": output.sha256},
                )

        logger.info(f"Wrote {len(written)} files to {self.output_dir}")
        return written

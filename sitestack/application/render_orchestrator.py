import logging

from sitestack.application.hierarchical_renderer import HierarchicalRenderer
from sitestack.application.legend_resolver import LegendResolver
from sitestack.application.registries import TemplateRegistry
from sitestack.domain.events import RenderEventEmitter, RenderEventType
from sitestack.domain.models import RenderContext

logger = logging.getLogger(__name__)


class RenderOrchestrator:
    """Drives one render pass over every registered template.

    Templates are visited in registration order. Two templates that produce
    the same virtual path overwrite each other; the later one wins and a
    warning is logged. The first render error aborts the pass.
    """

    def __init__(
        self,
        templates: TemplateRegistry,
        resolver: LegendResolver,
        renderer: HierarchicalRenderer,
        emitter: RenderEventEmitter | None = None,
    ) -> None:
        self.templates = templates
        self.resolver = resolver
        self.renderer = renderer
        self.emitter = emitter

    def render_all(self, data: RenderContext | None = None) -> dict[str, str]:
        """Render all non-ignored templates.

        Args:
            data: Base context; each template renders with its own copy.

        Returns:
            Mapping of virtual output path to rendered document.
        """
        outputs: dict[str, str] = {}
        sources: dict[str, str] = {}

        for path in self.templates.paths():
            if self.resolver.is_ignored(path):
                logger.debug(f"Ignoring template: {path}")
                self._notify(RenderEventType.TEMPLATE_IGNORED, template_path=path)
                continue

            try:
                rendered = self.renderer.render_template(path, data)
            except Exception as e:
                self._notify(
                    RenderEventType.TEMPLATE_FAILED,
                    template_path=path,
                    metadata={"error": str(e)},
                )
                raise

            for output_path, content in rendered.items():
                if output_path in sources:
                    logger.warning(
                        f"Output path '{output_path}' from '{path}' overwrites the one from '{sources[output_path]}'"
                    )
                outputs[output_path] = content
                sources[output_path] = path
                self._notify(
                    RenderEventType.TEMPLATE_RENDERED,
                    template_path=path,
                    output_path=output_path,
                )

        return outputs

    def _notify(self, event_type: RenderEventType, **fields) -> None:
        if self.emitter is not None:
            self.emitter.notify(event_type, **fields)

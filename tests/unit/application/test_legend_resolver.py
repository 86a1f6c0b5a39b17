"""Tests for LegendResolver."""

import pytest

from sitestack.application.legend_resolver import LegendResolver
from sitestack.application.registries import MetadataRegistry
from sitestack.domain.errors import ContextValidationError
from sitestack.domain.models import Metadata


@pytest.fixture
def resolver() -> LegendResolver:
    registry = MetadataRegistry()
    registry.add(".", Metadata.model_validate({"files": [{"name": "index", "title": "Home"}]}))
    registry.add(
        "docs",
        Metadata.model_validate(
            {"ignore": "^_", "files": [{"name": "intro", "title": "Intro"}]}
        ),
    )
    registry.add("blog", Metadata.model_validate({"ignore": ""}))
    return LegendResolver(registry)


class TestMetaAtPath:
    def test_file_path_uses_parent_directory(self, resolver: LegendResolver) -> None:
        assert resolver.meta_at_path("docs/intro").ignore == "^_"
        assert resolver.meta_at_path("index").files[0].name == "index"

    def test_trailing_slash_means_directory(self, resolver: LegendResolver) -> None:
        assert resolver.meta_at_path("docs/").ignore == "^_"
        assert resolver.meta_at_path("docs/intro/") is None

    def test_unknown_directory(self, resolver: LegendResolver) -> None:
        assert resolver.meta_at_path("other/page") is None

    def test_non_string_path_rejected(self, resolver: LegendResolver) -> None:
        with pytest.raises(ContextValidationError):
            resolver.meta_at_path(None)


class TestFileLegend:
    def test_legend_matched_by_basename(self, resolver: LegendResolver) -> None:
        legend = resolver.file_legend("docs/intro")

        assert legend is not None
        assert legend.fields() == {"name": "intro", "title": "Intro"}

    def test_no_matching_legend(self, resolver: LegendResolver) -> None:
        assert resolver.file_legend("docs/other") is None
        assert resolver.file_legend("other/intro") is None


class TestIsIgnored:
    def test_pattern_matches_basename(self, resolver: LegendResolver) -> None:
        assert resolver.is_ignored("docs/_partial") is True
        assert resolver.is_ignored("docs/intro") is False

    def test_pattern_searches_anywhere_in_basename(self) -> None:
        registry = MetadataRegistry()
        registry.add(".", Metadata(ignore="draft"))
        resolver = LegendResolver(registry)

        assert resolver.is_ignored("my-draft-post") is True

    def test_empty_pattern_ignores_nothing(self, resolver: LegendResolver) -> None:
        assert resolver.is_ignored("blog/anything") is False

    def test_no_metadata_ignores_nothing(self, resolver: LegendResolver) -> None:
        assert resolver.is_ignored("other/_partial") is False

    def test_pattern_applies_only_to_own_directory(self, resolver: LegendResolver) -> None:
        assert resolver.is_ignored("docs/sub/_partial") is False

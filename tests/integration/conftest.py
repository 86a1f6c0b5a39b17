from pathlib import Path

import pytest


SITE_FILES: dict[str, str] = {
    "index.html": (
        "<< $entitle(site, $) >>"
        "<html><head><title>{{ $title }}</title></head><body>"
        "<nav><a {{ $act('docs', $) }}>Docs</a><a {{ $act('shop', $) }}>Shop</a></nav>"
        "{{ $content }}"
        "</body></html>"
    ),
    "meta.yaml": "ignore: '^_'\nfiles:\n  - name: index\n    section: home\n",
    "_footer.html": "<footer>{{ site }}</footer>",
    "docs/index.html": "<< $entitle('Docs', $) >><article>{{ $content }}</article>{{ $include('_footer', $) }}",
    "docs/meta.yml": "files:\n  - name: intro\n    title: Introduction\n",
    "docs/intro.html": "<< $entitle(title, $) >><h1>{{ title }}</h1>",
    "docs/faq.html": (
        "<< for q in questions or [] >><p>{{ q }}</p><< else >><p>none</p><< end >>"
    ),
    "shop/meta.json": (
        '{"files": [{"name": "product", "echo": "products"}],'
        ' "products": [{"name": "tea", "price": 3}, {"name": "cake", "price": 5}]}'
    ),
    "shop/product.html": "<< $entitle(name, $) >>{{ name }}: {{ price }} EUR",
}


@pytest.fixture
def site_project(tmp_path: Path, write_tree, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A complete project on disk: sources under src/, config under .sitestack/."""
    write_tree(tmp_path / "src", SITE_FILES)
    write_tree(
        tmp_path,
        {
            ".sitestack/config.yml": (
                "output_extension: html\n"
                "data:\n"
                "  site: Demo\n"
                "rename:\n"
                "  - pattern: '^index$'\n"
                "    replacement: 'index.html'\n"
            )
        },
    )
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    return tmp_path

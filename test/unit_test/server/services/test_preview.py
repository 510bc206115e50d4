"""
Unit tests for preview document compilation.
"""

from ona_ui.core.database.entities import ComponentVersion, CssFramework, FrameworkType
from ona_ui.server.services.preview import TAILWIND_CDN, compile_preview_html, compile_version


def test_plain_html_preview():
    document = compile_preview_html("<section>Hero</section>", title="Split Hero")

    assert document.startswith("<!DOCTYPE html>")
    assert "<title>Split Hero</title>" in document
    assert "<section>Hero</section>" in document
    assert TAILWIND_CDN in document
    assert "preview-dark-toggle\"" not in document.split("<body>")[1]


def test_framework_scripts_and_inline_assets():
    document = compile_preview_html(
        "<div id='root'></div>",
        framework=FrameworkType.REACT,
        css_framework=CssFramework.VANILLA_CSS,
        css=".hero { color: red; }",
        js="console.log('hi')",
    )

    assert "react.production.min.js" in document
    assert TAILWIND_CDN not in document
    assert "<style>.hero { color: red; }</style>" in document
    assert "<script>console.log('hi')</script>" in document


def test_version_prefers_full_code_and_adds_dark_mode():
    version = ComponentVersion(
        component_id="c1",
        version_number="1.0.0",
        framework=FrameworkType.VUE,
        css_framework=CssFramework.TAILWIND_V3,
        code_preview="<p>preview</p>",
        code_full="<p>full</p>",
        supports_dark_mode=True,
        dark_mode_code="<style>.dark p { color: white; }</style>",
        files={"css": "p { margin: 0; }", "js": ["not", "inline"]},
    )

    document = compile_version(version)

    assert "<p>full</p>" in document
    assert "<p>preview</p>" not in document
    assert ".dark p { color: white; }" in document
    assert "Toggle dark mode" in document
    assert "vue.global.js" in document
    assert "<style>p { margin: 0; }</style>" in document
    assert "<script>not" not in document


def test_version_falls_back_to_preview_code():
    version = ComponentVersion(
        component_id="c1",
        version_number="1.0.0",
        framework=FrameworkType.HTML,
        css_framework=CssFramework.TAILWIND_V4,
        code_preview="<p>preview</p>",
    )

    assert "<p>preview</p>" in compile_version(version)

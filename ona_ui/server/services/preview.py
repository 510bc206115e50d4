"""
Preview HTML compilation.

Wraps the code of a component version into a standalone HTML document that
the dashboards load in an iframe.
"""

from __future__ import annotations

from typing import Optional

from ona_ui.core.database.entities import ComponentVersion, CssFramework, FrameworkType

TAILWIND_CDN = '<script src="https://cdn.tailwindcss.com"></script>'

CSS_FRAMEWORK_LINKS = {
    CssFramework.TAILWIND_V3: TAILWIND_CDN,
    CssFramework.TAILWIND_V4: TAILWIND_CDN,
    CssFramework.VANILLA_CSS: "",
}

FRAMEWORK_SCRIPTS = {
    FrameworkType.HTML: "",
    FrameworkType.REACT: (
        '<script crossorigin src="https://unpkg.com/react@18/umd/react.production.min.js"></script>\n'
        '<script crossorigin src="https://unpkg.com/react-dom@18/umd/react-dom.production.min.js"></script>'
    ),
    FrameworkType.VUE: '<script src="https://unpkg.com/vue@3/dist/vue.global.js"></script>',
    FrameworkType.ALPINE: '<script defer src="https://unpkg.com/alpinejs@3.x.x/dist/cdn.min.js"></script>',
    FrameworkType.SVELTE: "<!-- Svelte components need to be compiled -->",
    FrameworkType.ANGULAR: "<!-- Angular components need to be compiled -->",
}

DARK_MODE_TOGGLE = """<button type="button" class="preview-dark-toggle"
        onclick="document.documentElement.classList.toggle('dark')">Toggle dark mode</button>"""

PREVIEW_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    {css_links}
    {css}
    <style>
        body {{ margin: 0; padding: 20px; font-family: system-ui, -apple-system, sans-serif; }}
        .preview-container {{ max-width: 1200px; margin: 0 auto; }}
        .preview-dark-toggle {{ position: fixed; top: 8px; right: 8px; }}
    </style>
</head>
<body>
    {toggle}
    <div class="preview-container">
        {html}
    </div>
    {framework_scripts}
    {js}
</body>
</html>"""


def compile_preview_html(
    html: str,
    framework: FrameworkType = FrameworkType.HTML,
    css_framework: CssFramework = CssFramework.TAILWIND_V4,
    css: Optional[str] = None,
    js: Optional[str] = None,
    dark_mode: bool = False,
    title: str = "Component Preview",
) -> str:
    return PREVIEW_TEMPLATE.format(
        title=title,
        css_links=CSS_FRAMEWORK_LINKS.get(css_framework, TAILWIND_CDN),
        css=f"<style>{css}</style>" if css else "",
        toggle=DARK_MODE_TOGGLE if dark_mode else "",
        html=html,
        framework_scripts=FRAMEWORK_SCRIPTS.get(framework, ""),
        js=f"<script>{js}</script>" if js else "",
    )


def compile_version(version: ComponentVersion, title: str = "Component Preview") -> str:
    """Preview document of a version; full code when present, otherwise the preview snippet."""
    files = version.files or {}
    code = version.code_full or version.code_preview or ""
    if version.supports_dark_mode and version.dark_mode_code:
        code = f"{code}\n{version.dark_mode_code}"
    return compile_preview_html(
        html=code,
        framework=version.framework,
        css_framework=version.css_framework,
        css=files.get("css") if isinstance(files.get("css"), str) else None,
        js=files.get("js") if isinstance(files.get("js"), str) else None,
        dark_mode=version.supports_dark_mode,
        title=title,
    )

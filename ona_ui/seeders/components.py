"""Components and their framework versions."""

from typing import List

from ona_ui.core.database.entities import (
    AccessType,
    Component,
    ComponentStatus,
    ComponentVersion,
    CssFramework,
    FrameworkType,
    LicenseTier,
)
from ona_ui.core.utils import generate_slug

from .base import BaseSeeder, seed_id
from .catalog import SUBCATEGORIES

STYLES = ("Simple", "Modern", "Animated")
PREMIUM_TIERS = (LicenseTier.PRO, LicenseTier.TEAM)
COMPANIES = ("Stripe", "Linear", "Vercel", "Notion", "Figma", "Airbnb", "Shopify", "Slack")

HTML_TEMPLATE = """<section class="py-12 px-6">
  <div class="max-w-5xl mx-auto">
    <h2 class="text-3xl font-bold">{name}</h2>
    <p class="mt-4 text-gray-600">{description}</p>
  </div>
</section>"""

REACT_TEMPLATE = """export default function {identifier}() {{
  return (
    <section className="py-12 px-6">
      <div className="max-w-5xl mx-auto">
        <h2 className="text-3xl font-bold">{name}</h2>
        <p className="mt-4 text-gray-600">{description}</p>
      </div>
    </section>
  );
}}"""

VUE_TEMPLATE = """<template>
  <section class="py-12 px-6">
    <div class="max-w-5xl mx-auto">
      <h2 class="text-3xl font-bold">{name}</h2>
      <p class="mt-4 text-gray-600">{description}</p>
    </div>
  </section>
</template>"""


def singular(name: str) -> str:
    if name.endswith("ies"):
        return name[:-3] + "y"
    if name.endswith("s") and not name.endswith("ss"):
        return name[:-1]
    return name


class ComponentSeeder(BaseSeeder):
    """Three components per subcategory; the first of each is free."""

    name = "components"

    async def run(self) -> int:
        subcategories = self.require("subcategories")
        rows: List[Component] = []
        for category_slug, entries in SUBCATEGORIES.items():
            for sub_slug, sub_name, _description in entries:
                for index, style in enumerate(STYLES):
                    rows.append(self._build(category_slug, subcategories[sub_slug], sub_name, style, index))

        self.context["components"] = rows
        self.context["free_component_ids"] = [row.id for row in rows if row.is_free]
        return await self.upsert(rows)

    def _build(self, category_slug: str, subcategory_id: str, sub_name: str, style: str, index: int) -> Component:
        name = f"{style} {singular(sub_name)}"
        slug = generate_slug(name)
        is_free = index == 0
        return Component(
            id=seed_id("component", subcategory_id, slug),
            subcategory_id=subcategory_id,
            name=name,
            slug=slug,
            description=f"{name} ready to drop into a {category_slug} page",
            is_free=is_free,
            required_tier=LicenseTier.FREE if is_free else PREMIUM_TIERS[index % 2],
            access_type=AccessType.FULL_ACCESS if is_free else AccessType.COPY,
            status=ComponentStatus.PUBLISHED,
            is_new=index == 2,
            is_featured=index == 1 and self.random.random() < 0.5,
            conversion_rate=round(self.random.uniform(1.5, 12.0), 2),
            tested_companies=self.random.sample(COMPANIES, 3),
            preview_image_large=f"/images/components/{slug}-large.jpg",
            preview_image_small=f"/images/components/{slug}-small.jpg",
            tags=[category_slug, style.lower()],
            sort_order=index + 1,
            view_count=self.random.randint(100, 3000),
            copy_count=self.random.randint(10, 800),
            published_at=self.days_after_epoch(0, 180),
        )


class ComponentVersionSeeder(BaseSeeder):
    """HTML (default) and React versions for every component, plus Vue for premium ones."""

    name = "component_versions"

    async def run(self) -> int:
        components: List[Component] = self.require("components")
        rows: List[ComponentVersion] = []
        for component in components:
            variants = [
                (FrameworkType.HTML, CssFramework.TAILWIND_V4, True),
                (FrameworkType.REACT, CssFramework.TAILWIND_V4, False),
            ]
            if not component.is_free:
                variants.append((FrameworkType.VUE, CssFramework.TAILWIND_V3, False))
            for framework, css_framework, is_default in variants:
                rows.append(self._build(component, framework, css_framework, is_default))
        return await self.upsert(rows)

    @staticmethod
    def _build(
        component: Component, framework: FrameworkType, css_framework: CssFramework, is_default: bool
    ) -> ComponentVersion:
        fields = {"name": component.name, "description": component.description}
        if framework == FrameworkType.REACT:
            code = REACT_TEMPLATE.format(identifier=component.name.replace(" ", ""), **fields)
            dependencies = {"react": "^18.0.0"}
        elif framework == FrameworkType.VUE:
            code = VUE_TEMPLATE.format(**fields)
            dependencies = {"vue": "^3.4.0"}
        else:
            code = HTML_TEMPLATE.format(**fields)
            dependencies = None
        return ComponentVersion(
            id=seed_id("version", component.id, framework.value, css_framework.value, "1.0.0"),
            component_id=component.id,
            version_number="1.0.0",
            framework=framework,
            css_framework=css_framework,
            code_preview=code,
            code_full=code,
            dependencies=dependencies,
            supports_dark_mode=framework != FrameworkType.HTML,
            is_default=is_default,
        )

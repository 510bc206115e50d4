"""Products, categories and subcategories."""

from ona_ui.core.database.entities import Category, Product, Subcategory

from .base import BaseSeeder, seed_id

PRODUCTS = [
    ("ona-ui-components", "Ona UI Components", "Premium UI components taken from successful startups with high conversion rates"),
    ("ona-templates", "Ona Templates", "Complete landing page and web application templates optimized for conversion"),
    ("ona-blocks", "Ona Blocks", "Reusable content blocks to build modern interfaces quickly"),
]

# slug -> (name, icon, description)
CATEGORIES = {
    "navigation": ("Navigation", "navigation", "Headers, menus, sidebars and navigation bars"),
    "forms": ("Forms", "forms", "Login, contact, newsletter and checkout forms"),
    "layout": ("Layout", "layout", "Grids, containers, sections and responsive wrappers"),
    "ecommerce": ("E-commerce", "shopping-cart", "Product cards, carts, pricing and checkout"),
    "marketing": ("Marketing", "megaphone", "Hero sections, calls to action and testimonials"),
    "content": ("Content", "document-text", "Articles, blogs, galleries and media"),
    "dashboard": ("Dashboard", "chart-bar", "Tables, charts, statistics and admin controls"),
    "authentication": ("Authentication", "lock-closed", "Sign in, sign up and password recovery screens"),
}

# category slug -> [(subcategory slug, name, description)]
SUBCATEGORIES = {
    "navigation": [
        ("headers", "Headers", "Site headers with main navigation"),
        ("footers", "Footers", "Footers with links and company information"),
        ("menus", "Menus", "Navigation menus and dropdowns"),
    ],
    "forms": [
        ("login-forms", "Login Forms", "Sign-in forms"),
        ("contact-forms", "Contact Forms", "Contact forms with validation"),
        ("newsletter-forms", "Newsletter Forms", "Email capture forms"),
    ],
    "layout": [
        ("grids", "Grids", "Responsive grid layouts"),
        ("sections", "Sections", "Page sections and containers"),
    ],
    "ecommerce": [
        ("product-cards", "Product Cards", "Product listings and cards"),
        ("pricing-tables", "Pricing Tables", "Plans and pricing comparison"),
    ],
    "marketing": [
        ("hero-sections", "Hero Sections", "Above-the-fold hero sections"),
        ("cta-sections", "CTA Sections", "Calls to action"),
        ("testimonials", "Testimonials", "Customer quotes and logos"),
    ],
    "content": [
        ("blog-posts", "Blog Posts", "Article layouts"),
        ("galleries", "Galleries", "Image and video galleries"),
    ],
    "dashboard": [
        ("stats", "Stats", "KPI cards and statistics"),
        ("tables", "Tables", "Data tables"),
    ],
    "authentication": [
        ("sign-in", "Sign In", "Sign-in pages"),
        ("sign-up", "Sign Up", "Registration pages"),
    ],
}


class ProductSeeder(BaseSeeder):
    name = "products"

    async def run(self) -> int:
        rows = [
            Product(id=seed_id("product", slug), name=name, slug=slug, description=description, sort_order=index)
            for index, (slug, name, description) in enumerate(PRODUCTS, start=1)
        ]
        self.context["product_ids"] = [row.id for row in rows]
        self.context["main_product_id"] = rows[0].id
        return await self.upsert(rows)


class CategorySeeder(BaseSeeder):
    name = "categories"

    async def run(self) -> int:
        product_id = self.require("main_product_id")
        rows = []
        for index, (slug, (name, icon, description)) in enumerate(CATEGORIES.items(), start=1):
            rows.append(
                Category(
                    id=seed_id("category", slug),
                    product_id=product_id,
                    name=name,
                    slug=slug,
                    description=description,
                    icon_name=icon,
                    sort_order=index,
                )
            )
        self.context["categories"] = {row.slug: row.id for row in rows}
        return await self.upsert(rows)


class SubcategorySeeder(BaseSeeder):
    name = "subcategories"

    async def run(self) -> int:
        categories = self.require("categories")
        rows = []
        for category_slug, entries in SUBCATEGORIES.items():
            for index, (slug, name, description) in enumerate(entries, start=1):
                rows.append(
                    Subcategory(
                        id=seed_id("subcategory", category_slug, slug),
                        category_id=categories[category_slug],
                        name=name,
                        slug=slug,
                        description=description,
                        sort_order=index,
                    )
                )
        self.context["subcategories"] = {row.slug: row.id for row in rows}
        return await self.upsert(rows)

"""Test users with their licenses."""

from ona_ui.core.database.entities import (
    CssFramework,
    FrameworkType,
    License,
    LicenseTier,
    PaymentStatus,
    User,
    UserRole,
)
from ona_ui.server.services.licenses import DEFAULT_SEATS

from .base import SEED_EPOCH, BaseSeeder, seed_id

SEED_EMAIL_DOMAIN = "ona-ui.com"

# username -> (role, name, preferred framework, tier of the license to issue)
USERS = {
    "admin": (UserRole.SUPER_ADMIN, "Admin Super", FrameworkType.REACT, None),
    "editor": (UserRole.ADMIN, "Editor Admin", FrameworkType.VUE, None),
    "pro": (UserRole.USER, "Pro User", FrameworkType.REACT, LicenseTier.PRO),
    "team": (UserRole.USER, "Team User", FrameworkType.SVELTE, LicenseTier.TEAM),
    "free": (UserRole.USER, "Free User", FrameworkType.HTML, None),
}

# Fixed keys so demo accounts keep working across reseeds
LICENSE_KEYS = {
    LicenseTier.PRO: ("ONA-5EED-0000-0001", 14900),
    LicenseTier.TEAM: ("ONA-5EED-0000-0002", 49900),
}


class UserSeeder(BaseSeeder):
    name = "users"

    async def run(self) -> int:
        rows = []
        for username, (role, name, framework, _tier) in USERS.items():
            rows.append(
                User(
                    id=seed_id("user", username),
                    email=f"{username}@{SEED_EMAIL_DOMAIN}",
                    name=name,
                    username=username,
                    full_name=name,
                    role=role,
                    email_verified=True,
                    email_verified_at=SEED_EPOCH,
                    company="Ona UI" if role != UserRole.USER else None,
                    preferred_framework=framework,
                    preferred_css=CssFramework.TAILWIND_V4,
                )
            )
        self.context["users"] = {row.username: row.id for row in rows}
        return await self.upsert(rows)


class LicenseSeeder(BaseSeeder):
    name = "licenses"

    async def run(self) -> int:
        users = self.require("users")
        rows = []
        for username, (_role, _name, _framework, tier) in USERS.items():
            if tier is None:
                continue
            key, amount = LICENSE_KEYS[tier]
            rows.append(
                License(
                    id=seed_id("license", username, tier.value),
                    user_id=users[username],
                    license_key=key,
                    tier=tier,
                    amount_paid=amount,
                    currency="USD",
                    payment_status=PaymentStatus.COMPLETED,
                    seats_allowed=DEFAULT_SEATS[tier],
                    seats_used=1,
                    valid_from=SEED_EPOCH,
                    is_lifetime=True,
                    is_active=True,
                    notes="Seeded demo license",
                )
            )
        return await self.upsert(rows)

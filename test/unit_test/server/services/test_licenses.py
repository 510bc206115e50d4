"""
Unit tests for license keys, tier ordering and license issuance.
"""

import re

import pytest

from ona_ui.core.database.entities import LicenseTier, PaymentStatus
from ona_ui.core.errors import ConflictError, NotFoundError
from ona_ui.server.services.licenses import DEFAULT_SEATS, LicenseService, format_license_key, tier_satisfies
from ona_ui.server.services.payment_processing import determine_license_tier

LICENSE_KEY_PATTERN = re.compile(r"^ONA-[0-9A-F]{4}-[0-9A-F]{4}-[0-9A-F]{4}$")


class TestLicenseKeys:
    def test_format(self):
        for _ in range(20):
            assert LICENSE_KEY_PATTERN.match(format_license_key())

    def test_keys_are_random(self):
        assert len({format_license_key() for _ in range(50)}) == 50


class TestTiers:
    @pytest.mark.parametrize(
        "user_tier,required,expected",
        [
            (None, LicenseTier.PRO, False),
            (LicenseTier.FREE, LicenseTier.PRO, False),
            (LicenseTier.PRO, LicenseTier.PRO, True),
            (LicenseTier.TEAM, LicenseTier.PRO, True),
            (LicenseTier.PRO, LicenseTier.ENTERPRISE, False),
            (LicenseTier.ENTERPRISE, LicenseTier.TEAM, True),
        ],
    )
    def test_tier_satisfies(self, user_tier, required, expected):
        assert tier_satisfies(user_tier, required) is expected

    def test_metadata_tier_wins(self):
        assert determine_license_tier(1000, {"tier": "Enterprise"}) == LicenseTier.ENTERPRISE

    @pytest.mark.parametrize(
        "amount_total,expected",
        [(14900, LicenseTier.PRO), (19999, LicenseTier.PRO), (20000, LicenseTier.TEAM), (50000, LicenseTier.ENTERPRISE)],
    )
    def test_tier_from_amount(self, amount_total, expected):
        assert determine_license_tier(amount_total) == expected

    def test_unknown_metadata_tier_falls_back_to_amount(self):
        assert determine_license_tier(29900, {"tier": "free"}) == LicenseTier.TEAM


@pytest.mark.asyncio
class TestLicenseService:
    async def test_create_license(self, session, regular_user):
        license = await LicenseService(session).create_license(
            regular_user.id, LicenseTier.TEAM, stripe_payment_id="pi_1", amount_paid=29900, currency="usd"
        )

        assert LICENSE_KEY_PATTERN.match(license.license_key)
        assert license.seats_allowed == DEFAULT_SEATS[LicenseTier.TEAM]
        assert license.currency == "USD"
        assert license.valid_until is None

    async def test_unknown_user(self, session):
        with pytest.raises(NotFoundError):
            await LicenseService(session).create_license("missing", LicenseTier.PRO)

    async def test_same_payment_conflicts(self, session, regular_user):
        service = LicenseService(session)
        await service.create_license(regular_user.id, LicenseTier.PRO, stripe_payment_id="pi_dup")

        with pytest.raises(ConflictError):
            await service.create_license(regular_user.id, LicenseTier.PRO, stripe_payment_id="pi_dup")

    async def test_validate_license(self, session, regular_user):
        service = LicenseService(session)
        pending = await service.create_license(regular_user.id, LicenseTier.PRO)

        assert (await service.validate_license(pending.license_key))["reason"] == "Payment not completed"
        await service.update_payment_status(pending.id, PaymentStatus.COMPLETED)
        assert (await service.validate_license(pending.license_key))["is_valid"] is True
        assert (await service.validate_license("ONA-0000-0000-0000"))["reason"] == "License not found"

    async def test_highest_license_and_access(self, session, regular_user):
        service = LicenseService(session)
        await service.create_license(regular_user.id, LicenseTier.PRO, payment_status=PaymentStatus.COMPLETED)
        await service.create_license(regular_user.id, LicenseTier.TEAM, payment_status=PaymentStatus.COMPLETED)
        await service.create_license(regular_user.id, LicenseTier.ENTERPRISE, payment_status=PaymentStatus.PENDING)

        highest = await service.get_highest_license(regular_user.id)

        assert highest.tier == LicenseTier.TEAM
        assert await service.has_access(regular_user.id, LicenseTier.TEAM) is True
        assert await service.has_access(regular_user.id, LicenseTier.ENTERPRISE) is False

    async def test_deactivate_appends_reason(self, session, regular_user):
        service = LicenseService(session)
        license = await service.create_license(
            regular_user.id, LicenseTier.PRO, payment_status=PaymentStatus.COMPLETED, notes="bought at launch"
        )

        license = await service.deactivate_license(license.id, "refunded")

        assert license.is_active is False
        assert license.notes.startswith("bought at launch\n[")
        assert license.notes.endswith("Deactivated: refunded")
        assert await service.has_access(regular_user.id, LicenseTier.PRO) is False

    async def test_stats(self, session, regular_user):
        service = LicenseService(session)
        await service.create_license(
            regular_user.id, LicenseTier.PRO, amount_paid=14900, payment_status=PaymentStatus.COMPLETED
        )
        await service.create_license(regular_user.id, LicenseTier.TEAM, amount_paid=29900)

        stats = await service.get_stats()

        assert stats["total"] == 2
        assert stats["active"] == 1
        assert stats["total_revenue"] == 14900
        assert stats["by_tier"]["team"] == 1

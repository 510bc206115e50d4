"""
License entity models.

A license is created for each completed Stripe checkout and grants its
owner access to the components of its tier and below.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, EnumValue, new_id, utc_now
from .enums import LicenseTier, PaymentStatus


class LicenseBase(Base):
    """Base fields for a license."""

    user_id: str = Field(foreign_key="users.id", index=True, max_length=36)
    license_key: str = Field(max_length=32, unique=True, index=True, description="ONA-XXXX-XXXX-XXXX")
    tier: LicenseTier = Field(sa_type=EnumValue(LicenseTier))

    # Payment
    stripe_payment_id: Optional[str] = Field(default=None, max_length=255, unique=True)
    stripe_customer_id: Optional[str] = Field(default=None, max_length=255)
    stripe_invoice_id: Optional[str] = Field(default=None, max_length=255)
    amount_paid: int = Field(default=0, ge=0, description="Amount paid in cents")
    currency: str = Field(default="USD", max_length=3)
    payment_status: PaymentStatus = Field(default=PaymentStatus.PENDING, sa_type=EnumValue(PaymentStatus))

    # Seats
    seats_allowed: int = Field(default=1, ge=1)
    seats_used: int = Field(default=0, ge=0)

    # Validity
    valid_from: datetime = Field(default_factory=utc_now)
    valid_until: Optional[datetime] = Field(default=None)
    is_lifetime: bool = Field(default=True)
    is_active: bool = Field(default=True)

    # Promotion
    is_early_bird: bool = Field(default=False)
    discount_percentage: int = Field(default=0, ge=0, le=100)
    discount_code: Optional[str] = Field(default=None, max_length=50)

    notes: Optional[str] = Field(default=None)


class License(LicenseBase, table=True):
    """Persistent license.

    Table: licenses
    """

    __tablename__ = "licenses"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=36)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def is_valid_at(self, now: datetime) -> bool:
        """Active, paid and not expired."""
        if not self.is_active or self.payment_status != PaymentStatus.COMPLETED:
            return False
        if self.is_lifetime or self.valid_until is None:
            return True
        return self.valid_until > now

    def __repr__(self) -> str:
        return f"License(key={self.license_key}, tier={self.tier}, status={self.payment_status})"

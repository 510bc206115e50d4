"""
Product catalog mapping.

Maps the simple public product ids used by the frontend (``pro``, ``team``,
``enterprise``) to their Stripe product ids and display metadata.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .config import settings


class ProductConfig(BaseModel):
    """A purchasable license product."""

    public_id: str
    stripe_product_id: str
    name: str
    description: str
    default_price: Optional[int] = Field(default=None, description="Display price in cents")
    currency: str = "eur"
    metadata: Dict[str, str] = Field(default_factory=dict)


def _build_mapping() -> Dict[str, ProductConfig]:
    stripe_config = settings.stripe
    return {
        "pro": ProductConfig(
            public_id="pro",
            stripe_product_id=stripe_config.product_id_pro,
            name="Pro License",
            description="Professional license with full access",
            default_price=7000,
            metadata={"tier": "pro", "lifetime": "true"},
        ),
        "team": ProductConfig(
            public_id="team",
            stripe_product_id=stripe_config.product_id_team,
            name="Team License",
            description="Team license for several developers",
            default_price=19900,
            metadata={"tier": "team", "lifetime": "true", "seats": "5"},
        ),
        "enterprise": ProductConfig(
            public_id="enterprise",
            stripe_product_id=stripe_config.product_id_enterprise,
            name="Enterprise License",
            description="Enterprise license with priority support",
            default_price=49900,
            metadata={"tier": "enterprise", "lifetime": "true", "seats": "unlimited", "support": "priority"},
        ),
    }


PRODUCT_MAPPING: Dict[str, ProductConfig] = _build_mapping()


def get_product_config(public_id: str) -> Optional[ProductConfig]:
    return PRODUCT_MAPPING.get(public_id)


def is_valid_public_id(public_id: str) -> bool:
    return public_id in PRODUCT_MAPPING


def get_available_public_ids() -> List[str]:
    return list(PRODUCT_MAPPING.keys())

"""Curated solution catalog.

A read-only mapping of problem category → known third-party solutions,
plus a small pool of generic, category-agnostic entries used to backfill
thin categories.

The catalog is an immutable value.  Extending it goes through
:meth:`SolutionCatalog.with_solution`, which returns a NEW catalog; the
administrative route then swaps the active reference.  Requests that are
already running keep the catalog they started with.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..schemas.solution_schema import Solution

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Default catalog data.  ``last_updated`` is stamped at load time.
# ---------------------------------------------------------------------------
_DEFAULT_ENTRIES: Dict[str, List[dict]] = {
    "payment": [
        {
            "name": "ReConvert",
            "description": "Post-purchase upsell and checkout optimization for Shopify",
            "website_url": "https://reconvert.com",
            "pricing_text": "$4.95-$199/month",
            "rating": 4.8,
            "review_count": 1200,
            "category": "Payment Processing",
            "source_kind": "shopify-apps",
            "tags": ["checkout", "upsell", "conversion"],
        },
        {
            "name": "Bold Cashier",
            "description": "Advanced checkout customization and payment processing",
            "website_url": "https://boldcommerce.com",
            "pricing_text": "$29-$299/month",
            "rating": 4.3,
            "review_count": 800,
            "category": "Payment Processing",
            "source_kind": "shopify-apps",
            "tags": ["checkout", "payment", "customization"],
        },
        {
            "name": "Stripe",
            "description": "Complete payment processing platform with global reach",
            "website_url": "https://stripe.com",
            "pricing_text": "2.9% + 30¢ per transaction",
            "rating": 4.5,
            "review_count": 15000,
            "category": "Payment Processing",
            "source_kind": "manual",
            "tags": ["payment", "gateway", "global", "api"],
        },
    ],
    "inventory": [
        {
            "name": "QuickBooks Commerce",
            "description": "Comprehensive inventory management and B2B wholesale platform",
            "website_url": "https://quickbooks.intuit.com/commerce",
            "pricing_text": "$39-$189/month",
            "rating": 4.5,
            "review_count": 2500,
            "category": "Inventory Management",
            "source_kind": "saas-directory",
            "tags": ["inventory", "wholesale", "b2b", "forecasting"],
        },
        {
            "name": "Cin7",
            "description": "Multi-channel inventory management with POS and ecommerce sync",
            "website_url": "https://cin7.com",
            "pricing_text": "$299-$999/month",
            "rating": 4.2,
            "review_count": 1800,
            "category": "Inventory Management",
            "source_kind": "saas-directory",
            "tags": ["inventory", "pos", "multi-channel", "sync"],
        },
        {
            "name": "StockTrim",
            "description": "AI-powered demand forecasting and inventory optimization",
            "website_url": "https://stocktrim.com",
            "pricing_text": "$99-$499/month",
            "rating": 4.6,
            "review_count": 600,
            "category": "Inventory Management",
            "source_kind": "saas-directory",
            "tags": ["inventory", "forecasting", "ai", "optimization"],
        },
    ],
    "shipping": [
        {
            "name": "ShipStation",
            "description": "Multi-carrier shipping software with automation and tracking",
            "website_url": "https://shipstation.com",
            "pricing_text": "$9-$159/month",
            "rating": 4.7,
            "review_count": 5000,
            "category": "Shipping & Fulfillment",
            "source_kind": "saas-directory",
            "tags": ["shipping", "automation", "tracking", "multi-carrier"],
        },
        {
            "name": "Easyship",
            "description": "Global shipping platform with discounted rates and tracking",
            "website_url": "https://easyship.com",
            "pricing_text": "Free + per shipment fees",
            "rating": 4.4,
            "review_count": 3200,
            "category": "Shipping & Fulfillment",
            "source_kind": "saas-directory",
            "tags": ["shipping", "global", "rates", "tracking"],
        },
        {
            "name": "Route",
            "description": "Package tracking and shipping protection for customers",
            "website_url": "https://route.com",
            "pricing_text": "Free for merchants",
            "rating": 4.8,
            "review_count": 2100,
            "category": "Shipping & Fulfillment",
            "source_kind": "shopify-apps",
            "tags": ["tracking", "protection", "customer-experience"],
        },
    ],
    "customer_service": [
        {
            "name": "Zendesk",
            "description": "Complete customer service platform with ticketing and live chat",
            "website_url": "https://zendesk.com",
            "pricing_text": "$19-$199/agent/month",
            "rating": 4.3,
            "review_count": 8000,
            "category": "Customer Service",
            "source_kind": "saas-directory",
            "tags": ["support", "ticketing", "chat", "knowledge-base"],
        },
        {
            "name": "Gorgias",
            "description": "Ecommerce-focused customer service platform with automation",
            "website_url": "https://gorgias.com",
            "pricing_text": "$40-$900/month",
            "rating": 4.6,
            "review_count": 1500,
            "category": "Customer Service",
            "source_kind": "saas-directory",
            "tags": ["support", "ecommerce", "automation", "shopify"],
        },
        {
            "name": "Intercom",
            "description": "Conversational customer service with chatbots and automation",
            "website_url": "https://intercom.com",
            "pricing_text": "$39-$999/month",
            "rating": 4.5,
            "review_count": 12000,
            "category": "Customer Service",
            "source_kind": "saas-directory",
            "tags": ["chat", "automation", "conversation", "support"],
        },
    ],
    "marketing": [
        {
            "name": "Klaviyo",
            "description": "Advanced email marketing and automation for ecommerce",
            "website_url": "https://klaviyo.com",
            "pricing_text": "Free up to 250 contacts, then $20+/month",
            "rating": 4.6,
            "review_count": 4500,
            "category": "Marketing & Advertising",
            "source_kind": "saas-directory",
            "tags": ["email", "automation", "ecommerce", "segmentation"],
        },
        {
            "name": "Facebook Ads Manager",
            "description": "Meta's advertising platform for Facebook and Instagram",
            "website_url": "https://business.facebook.com",
            "pricing_text": "Pay per click/impression",
            "rating": 4.1,
            "review_count": 25000,
            "category": "Marketing & Advertising",
            "source_kind": "manual",
            "tags": ["ads", "facebook", "instagram", "social-media"],
        },
        {
            "name": "Privy",
            "description": "Email capture, pop-ups, and conversion optimization tools",
            "website_url": "https://privy.com",
            "pricing_text": "Free up to 100 mailable contacts, then $30+/month",
            "rating": 4.4,
            "review_count": 2800,
            "category": "Marketing & Advertising",
            "source_kind": "shopify-apps",
            "tags": ["email-capture", "popups", "conversion", "shopify"],
        },
    ],
    "analytics": [
        {
            "name": "Google Analytics 4",
            "description": "Comprehensive web analytics and user behavior tracking",
            "website_url": "https://analytics.google.com",
            "pricing_text": "Free (GA4) / $150k+/year (GA360)",
            "rating": 4.2,
            "review_count": 50000,
            "category": "Analytics & Reporting",
            "source_kind": "manual",
            "tags": ["analytics", "tracking", "behavior", "reporting"],
        },
        {
            "name": "Hotjar",
            "description": "User behavior analytics with heatmaps and session recordings",
            "website_url": "https://hotjar.com",
            "pricing_text": "Free up to 35 sessions/day, then $32+/month",
            "rating": 4.3,
            "review_count": 8000,
            "category": "Analytics & Reporting",
            "source_kind": "saas-directory",
            "tags": ["heatmaps", "recordings", "behavior", "ux"],
        },
        {
            "name": "Triple Whale",
            "description": "Ecommerce analytics platform with attribution and reporting",
            "website_url": "https://triplewhale.com",
            "pricing_text": "$129-$999/month",
            "rating": 4.5,
            "review_count": 1200,
            "category": "Analytics & Reporting",
            "source_kind": "saas-directory",
            "tags": ["ecommerce", "attribution", "reporting", "shopify"],
        },
    ],
    "technical": [
        {
            "name": "Zapier",
            "description": "Automation platform connecting 5000+ apps with no-code workflows",
            "website_url": "https://zapier.com",
            "pricing_text": "Free up to 5 Zaps, then $20+/month",
            "rating": 4.4,
            "review_count": 15000,
            "category": "Integration & Automation",
            "source_kind": "saas-directory",
            "tags": ["automation", "integration", "no-code", "workflows"],
        },
        {
            "name": "Make",
            "description": "Visual automation platform for complex integrations",
            "website_url": "https://make.com",
            "pricing_text": "Free up to 1000 operations, then $9+/month",
            "rating": 4.6,
            "review_count": 3500,
            "category": "Integration & Automation",
            "source_kind": "saas-directory",
            "tags": ["automation", "integration", "visual", "workflows"],
        },
        {
            "name": "Shopify Flow",
            "description": "Native Shopify automation for store workflows",
            "website_url": "https://shopify.com/plus/flow",
            "pricing_text": "Free with Shopify Plus",
            "rating": 4.2,
            "review_count": 800,
            "category": "Integration & Automation",
            "source_kind": "shopify-apps",
            "tags": ["shopify", "automation", "workflows", "native"],
        },
    ],
}

_DEFAULT_GENERIC: List[dict] = [
    {
        "name": "Custom Development",
        "description": "Build a custom solution tailored to your specific needs",
        "website_url": "https://upwork.com",
        "pricing_text": "$25-150/hour",
        "rating": 4.0,
        "review_count": 0,
        "category": "Development",
        "source_kind": "manual",
        "tags": ["custom", "development", "bespoke"],
    },
    {
        "name": "Airtable",
        "description": "Flexible database and workflow management platform",
        "website_url": "https://airtable.com",
        "pricing_text": "Free up to 1200 records, then $10+/month",
        "rating": 4.4,
        "review_count": 5000,
        "category": "Productivity",
        "source_kind": "saas-directory",
        "tags": ["database", "workflow", "organization", "no-code"],
    },
]


def _stamp(solution: Solution, loaded_at: datetime) -> Solution:
    if solution.last_updated is not None:
        return solution
    return solution.model_copy(update={"last_updated": loaded_at})


class SolutionCatalog:
    """Immutable category → solutions lookup."""

    def __init__(
        self,
        by_category: Mapping[str, Iterable[Solution]],
        generic: Iterable[Solution] = (),
        loaded_at: Optional[datetime] = None,
    ):
        loaded_at = loaded_at or datetime.now(timezone.utc)
        self._by_category: Mapping[str, Tuple[Solution, ...]] = MappingProxyType(
            {
                category: tuple(_stamp(s, loaded_at) for s in solutions)
                for category, solutions in by_category.items()
            }
        )
        self._generic: Tuple[Solution, ...] = tuple(_stamp(s, loaded_at) for s in generic)

    def solutions_for(self, category: str) -> List[Solution]:
        """Solutions cataloged under *category* (empty when unknown)."""
        return list(self._by_category.get(category, ()))

    def generic_solutions(self) -> List[Solution]:
        """Category-agnostic entries used for backfill."""
        return list(self._generic)

    def categories(self) -> List[str]:
        return list(self._by_category)

    def stats(self) -> Dict[str, int]:
        """Number of solutions per category."""
        return {category: len(solutions) for category, solutions in self._by_category.items()}

    def with_solution(self, category: str, solution: Solution) -> "SolutionCatalog":
        """Return a new catalog with *solution* appended under *category*."""
        stamped = solution.model_copy(update={"last_updated": datetime.now(timezone.utc)})
        updated = {key: list(values) for key, values in self._by_category.items()}
        updated.setdefault(category, []).append(stamped)
        return SolutionCatalog(updated, self._generic)


def load_default_catalog() -> SolutionCatalog:
    """Build the curated catalog shipped with the service."""
    return SolutionCatalog(
        {
            category: [Solution(**entry) for entry in entries]
            for category, entries in _DEFAULT_ENTRIES.items()
        },
        [Solution(**entry) for entry in _DEFAULT_GENERIC],
    )


# ---------------------------------------------------------------------------
# Active catalog reference.  Replaced wholesale, never mutated.
# ---------------------------------------------------------------------------
_active_catalog: Optional[SolutionCatalog] = None


def get_active_catalog() -> SolutionCatalog:
    """Return the catalog new requests should use."""
    global _active_catalog
    if _active_catalog is None:
        _active_catalog = load_default_catalog()
    return _active_catalog


def replace_active_catalog(catalog: SolutionCatalog) -> SolutionCatalog:
    """Swap the active catalog (administrative path only)."""
    global _active_catalog
    _active_catalog = catalog
    logger.info("[SOLUTIONS] Active catalog replaced: %s", catalog.stats())
    return catalog


def reset_active_catalog() -> None:
    """Drop the active catalog so the default is reloaded on next use."""
    global _active_catalog
    _active_catalog = None

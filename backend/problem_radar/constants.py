"""Centralized lookup tables shared across the research pipeline.

This module is the SINGLE SOURCE OF TRUTH for every fixed English-language
table the pipeline consults.  Reused by:
  - Query Interpreter (audience / intent / time patterns, vocabularies)
  - Problem Clustering Engine (problem vocabulary, sentiment, urgency, titles)
  - Solution Discovery (category terms, search confidence)

Tables are plain data.  Extending a table never requires touching the
algorithms that read it.
"""

from __future__ import annotations

# ── Audience patterns ───────────────────────────────────────────────────
# Ordered: first match wins.  ``pattern`` is a regex alternation matched
# case-insensitively against the raw request text.

AUDIENCE_PATTERNS: list[dict] = [
    {
        "pattern": "shopify store owners|shopify owners|shopify merchants",
        "target": "Shopify store owners",
        "sources": ["shopify", "ecommerce", "dropship", "entrepreneur", "smallbusiness"],
    },
    {
        "pattern": "saas founders|saas entrepreneurs|saas builders|saas creators",
        "target": "SaaS founders",
        "sources": ["saas", "startups", "entrepreneur", "indiehackers", "smallbusiness"],
    },
    {
        "pattern": "dropshippers|drop shippers|dropship business",
        "target": "Dropshippers",
        "sources": ["dropship", "ecommerce", "shopify", "amazon", "entrepreneur"],
    },
    {
        "pattern": "ecommerce owners|e-commerce business|online store owners",
        "target": "Ecommerce business owners",
        "sources": ["ecommerce", "shopify", "amazon", "entrepreneur", "smallbusiness"],
    },
    {
        "pattern": "digital marketers|marketing agencies|marketers",
        "target": "Digital marketers",
        "sources": ["marketing", "digitalmarketing", "ppc", "socialmedia", "entrepreneur"],
    },
    {
        "pattern": "developers|programmers|software engineers",
        "target": "Developers",
        "sources": ["programming", "webdev", "javascript", "react", "node"],
    },
    {
        "pattern": (
            "recruitment firms|recruiting agencies|recruitment companies|"
            "recruitment employees|recruiter|recruiters|talent acquisition|"
            "hr professionals|human resources"
        ),
        "target": "Recruitment professionals",
        "sources": ["recruiting", "humanresources", "jobs", "recruiting", "talentacquisition"],
        # Domain queries: intent-specific ones first, then the always-on list.
        "queries_by_intent": {
            "find_problems": [
                "ATS problems",
                "recruiting software issues",
                "candidate sourcing problems",
                "interview scheduling",
                "applicant tracking system",
                "job posting issues",
            ],
        },
        "queries": [
            "recruitment challenges",
            "hiring difficulties",
            "candidate experience",
            "sourcing candidates",
        ],
    },
    {
        "pattern": "real estate agents|realtors|real estate professionals|property agents",
        "target": "Real estate professionals",
        "sources": ["realestate", "realtor", "realestateinvesting", "entrepreneur", "smallbusiness"],
    },
    {
        "pattern": "freelancers|freelance professionals|independent contractors|solopreneurs",
        "target": "Freelancers",
        "sources": ["freelance", "entrepreneur", "digitalnomad", "solopreneur", "smallbusiness"],
    },
]

DEFAULT_AUDIENCE: str = "Business owners"
DEFAULT_SOURCES: list[str] = ["entrepreneur", "smallbusiness", "startups", "business"]

# ── Intent patterns ─────────────────────────────────────────────────────
INTENT_PATTERNS: list[tuple[str, str]] = [
    ("bothered|frustrated|annoyed|struggling|hate|problems|issues|pain|difficulty", "find_problems"),
    ("opportunities|gaps|missing|lacking|need|want|wish|solutions needed", "find_opportunities"),
    ("solutions|tools|software|apps|services|platforms", "find_solutions"),
    ("trends|popular|growing|hot|trending|latest", "find_trends"),
]

DEFAULT_INTENT: str = "find_problems"

# Generic seed phrases appended after any audience-specific queries.
INTENT_QUERIES: dict[str, list[str]] = {
    "find_problems": [
        "problem with",
        "issue with",
        "frustrated with",
        "hate when",
        "difficult to",
        "struggling with",
        "need help with",
        "broken",
        "not working",
    ],
    "find_opportunities": [
        "wish there was",
        "need a tool",
        "missing feature",
        "looking for",
        "does anyone know",
        "is there a way",
    ],
    "find_solutions": [
        "what tool",
        "best software",
        "recommend",
        "alternatives to",
        "how do you",
    ],
    # Curated addition, not mined from observed queries: without generic seeds
    # a trends request with no domain queries would never be usable.
    "find_trends": [
        "trending",
        "anyone else noticing",
        "new tool",
        "everyone is switching to",
        "what changed",
    ],
}

INTENT_DESCRIPTIONS: dict[str, str] = {
    "find_problems": "problems and pain points",
    "find_opportunities": "opportunities and gaps",
    "find_solutions": "solutions and tools",
    "find_trends": "trends and popular topics",
}

# ── Time patterns ───────────────────────────────────────────────────────
TIME_PATTERNS: list[tuple[str, str]] = [
    ("lately|recently|now|current|today|these days", "week"),
    ("this week|past week", "week"),
    ("this month|past month|monthly", "month"),
    ("trending|hot|right now|today", "day"),
    ("always|generally|overall|historically", "all"),
]

DEFAULT_TIME_WINDOW: str = "week"

# ── Keyword vocabularies (query interpretation) ─────────────────────────
PROBLEM_KEYWORDS: list[str] = [
    "problem", "issue", "bug", "error", "fail", "broken", "slow", "expensive",
    "difficult", "hard", "complicated", "confusing", "frustrated", "annoying",
    "hate", "terrible", "awful", "sucks", "worst", "pain", "struggle",
    "lacking", "missing", "need", "wish", "want", "help", "solution",
]

BUSINESS_KEYWORDS: list[str] = [
    "inventory", "shipping", "payment", "customer service", "marketing",
    "analytics", "conversion", "retention", "acquisition", "automation",
    "integration", "scalability", "performance", "security", "pricing",
]

MIN_QUERY_LENGTH: int = 10
MAX_SEED_QUERIES: int = 10
MAX_KEYWORDS: int = 10
MIN_USABLE_CONFIDENCE: float = 0.3

# ── Clustering vocabulary ───────────────────────────────────────────────
# Declared order matters: category ties resolve to the earlier group.
PROBLEM_CATEGORY_GROUPS: dict[str, list[str]] = {
    "payment": ["payment", "checkout", "billing", "subscription", "refund", "charge"],
    "inventory": ["inventory", "stock", "supplier", "warehouse", "fulfillment"],
    "shipping": ["shipping", "delivery", "tracking", "customs", "logistics"],
    "customer_service": ["customer", "support", "service", "complaint", "return", "dispute"],
    "marketing": ["marketing", "ads", "conversion", "traffic", "seo", "social"],
    "analytics": ["analytics", "data", "tracking", "metrics", "reports", "dashboard"],
    "technical": ["integration", "api", "sync", "export", "import", "automation", "performance", "slow"],
    "security": ["security", "fraud", "hack", "breach", "privacy", "compliance"],
    "pricing": ["pricing", "cost", "expensive", "budget", "fee", "commission"],
}

# Flat vocabulary scanned per result.  Superset of the group terms.
PROBLEM_VOCABULARY: list[str] = [
    "payment", "checkout", "billing", "subscription", "refund", "charge",
    "inventory", "stock", "supplier", "warehouse", "fulfillment",
    "shipping", "delivery", "tracking", "customs", "logistics",
    "customer", "support", "service", "complaint", "return", "dispute",
    "marketing", "ads", "conversion", "traffic", "seo", "social",
    "analytics", "data", "metrics", "reports", "dashboard",
    "integration", "api", "sync", "export", "import", "automation",
    "performance", "slow", "speed", "loading", "downtime", "crash",
    "security", "fraud", "hack", "breach", "privacy", "compliance",
    "pricing", "cost", "expensive", "budget", "fee", "commission",
]

GENERAL_CATEGORY: str = "general"

NEGATIVE_WORDS: list[str] = ["hate", "terrible", "awful", "worst", "broken", "frustrated", "annoying", "sucks"]
POSITIVE_WORDS: list[str] = ["love", "great", "amazing", "best", "awesome", "perfect", "excellent"]

URGENCY_INDICATORS: list[str] = [
    "urgent", "asap", "immediately", "critical", "emergency", "broken", "down", "not working",
]

CATEGORY_TITLES: dict[str, str] = {
    "payment": "Payment Processing Issues",
    "inventory": "Inventory Management Problems",
    "shipping": "Shipping and Fulfillment Challenges",
    "customer_service": "Customer Service Difficulties",
    "marketing": "Marketing and Advertising Issues",
    "analytics": "Analytics and Reporting Problems",
    "technical": "Technical Integration Issues",
    "security": "Security and Fraud Concerns",
    "pricing": "Pricing and Cost Issues",
    "general": "General Business Challenges",
}

# (field, needle, label): a pattern is "common" when any member matches.
COMMON_PATTERNS: list[tuple[str, str, str]] = [
    ("title", "slow", "performance issues"),
    ("title", "expensive", "cost concerns"),
    ("body_text", "integration", "integration difficulties"),
]

SIMILARITY_THRESHOLD: float = 0.6
MIN_CLUSTER_SIZE: int = 2
MAX_CLUSTERS: int = 10
RECENT_WINDOW_SECONDS: int = 7 * 24 * 60 * 60

# ── Solution discovery ──────────────────────────────────────────────────
SOLUTION_CATEGORY_TERMS: dict[str, list[str]] = {
    "payment": ["payment", "checkout", "billing", "stripe", "paypal", "transaction", "gateway"],
    "inventory": ["inventory", "stock", "warehouse", "supplier", "product", "sku", "forecasting"],
    "shipping": ["shipping", "delivery", "fulfillment", "carrier", "tracking", "logistics"],
    "customer_service": ["customer", "support", "service", "chat", "ticket", "help", "complaint"],
    "marketing": ["marketing", "email", "ads", "campaign", "conversion", "traffic", "seo"],
    "analytics": ["analytics", "data", "report", "metric", "tracking", "dashboard", "insight"],
    "technical": ["integration", "api", "sync", "automation", "workflow", "connect", "export"],
}

CATEGORY_SEARCH_CONFIDENCE: dict[str, float] = {
    "payment": 0.9,
    "inventory": 0.8,
    "shipping": 0.8,
    "customer_service": 0.9,
    "marketing": 0.9,
    "analytics": 0.7,
    "technical": 0.6,
}
DEFAULT_SEARCH_CONFIDENCE: float = 0.5

MAX_SOLUTIONS: int = 6
MIN_SOLUTIONS_BEFORE_BACKFILL: int = 4
RECENT_UPDATE_DAYS: int = 30

# ── Insights ────────────────────────────────────────────────────────────
EMPTY_RECOMMENDATIONS: list[str] = [
    "Try a different search term or expand your timeframe",
    "Consider researching a broader audience segment",
]

"""
Services Layer for the Benefit Adjudication Engine.

Exports the adjudicator and its collaborators: coverage catalog, waiting
period gate, usage ledger, usage limiter and money splitter, plus the
authoring and reporting services built on top of them.
"""

from petcover.services.waiting_period import WaitingPeriodGate
from petcover.services.usage_limiter import UNLIMITED, LimitCheck, UsageLimiter
from petcover.services.money_splitter import MoneySplitter
from petcover.services.coverage_catalog import (
    CoverageCatalog,
    CoverageStore,
    InMemoryCoverageCatalog,
    DatabaseCoverageCatalog,
)
from petcover.services.usage_ledger import (
    UsageKey,
    UsageLedger,
    InMemoryUsageLedger,
    DatabaseUsageLedger,
)
from petcover.services.adjudicator import (
    Adjudicator,
    get_adjudicator,
    create_adjudicator,
)
from petcover.services.coverage_authoring import (
    CoverageAuthoringService,
    parse_annual_limit,
    parse_waiting_period,
)
from petcover.services.usage_report import UsageReportService
from petcover.services.messages import describe_decision

__all__ = [
    # Waiting Period Gate
    "WaitingPeriodGate",
    # Usage Limiter
    "UNLIMITED",
    "LimitCheck",
    "UsageLimiter",
    # Money Splitter
    "MoneySplitter",
    # Coverage Catalog
    "CoverageCatalog",
    "CoverageStore",
    "InMemoryCoverageCatalog",
    "DatabaseCoverageCatalog",
    # Usage Ledger
    "UsageKey",
    "UsageLedger",
    "InMemoryUsageLedger",
    "DatabaseUsageLedger",
    # Adjudicator
    "Adjudicator",
    "get_adjudicator",
    "create_adjudicator",
    # Authoring
    "CoverageAuthoringService",
    "parse_annual_limit",
    "parse_waiting_period",
    # Reporting
    "UsageReportService",
    "describe_decision",
]

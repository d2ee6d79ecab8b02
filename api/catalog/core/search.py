"""Client-side search and filtering over a loaded application list.

Everything here is a pure function of its arguments so it can be
re-derived from the current store state on every change. Search is a
linear scan: a case-insensitive substring test with an in-order
subsequence fallback for typo tolerance. Short queries therefore match
broadly; that is intended.
"""
import random
import string
from collections import Counter
from typing import Iterable, List, Optional, Sequence, Set, TYPE_CHECKING

from catalog.core.config import settings
from catalog.core.constants import ApplicationStatus
from catalog.schemas.application import Application, CatalogStats
from catalog.schemas.search import FilterState

if TYPE_CHECKING:
    from catalog.core.store import AppState


def fuzzy_match(text: str, query: str) -> bool:
    """True if ``query`` is a substring of ``text`` or an in-order subsequence of it."""
    text_lower = text.lower()
    query_lower = query.lower()

    if query_lower in text_lower:
        return True

    query_index = 0
    for char in text_lower:
        if query_index >= len(query_lower):
            break
        if char == query_lower[query_index]:
            query_index += 1

    return query_index == len(query_lower)


def build_search_text(app: Application) -> str:
    """Space-joined blob of every searchable field of an application."""
    parts = [
        app.app_code,
        app.name,
        app.description,
        *app.functional_domains,
        *app.technical_stack,
        app.status,
        *app.stakeholders.names(),
    ]
    return " ".join(parts)


def search_applications(applications: List[Application], query: str) -> List[Application]:
    """Stable filter of ``applications`` by fuzzy match against ``query``.

    A blank query returns the input list itself.
    """
    if not query.strip():
        return applications

    return [app for app in applications if fuzzy_match(build_search_text(app), query)]


def get_search_suggestions(
    applications: Iterable[Application],
    query: str,
    limit: Optional[int] = None,
) -> List[str]:
    """Up to ``limit`` distinct codes, names, domains or stack entries containing ``query``."""
    if not query.strip():
        return []
    if limit is None:
        limit = settings.SUGGESTION_LIMIT

    query_lower = query.lower()
    # dict keeps first-seen order
    suggestions: dict = {}

    for app in applications:
        candidates = [app.app_code, app.name, *app.functional_domains, *app.technical_stack]
        for candidate in candidates:
            if query_lower in candidate.lower():
                suggestions.setdefault(candidate, None)

    return list(suggestions)[:limit]


def apply_filters(applications: List[Application], filters: FilterState) -> List[Application]:
    """Domain filter (any overlap) AND status filter (membership); empty facets pass all."""
    apps = applications

    if filters.domains:
        wanted_domains = set(filters.domains)
        apps = [app for app in apps if wanted_domains.intersection(app.functional_domains)]

    if filters.statuses:
        wanted_statuses = set(filters.statuses)
        apps = [app for app in apps if app.status in wanted_statuses]

    return apps


def filter_applications(
    applications: List[Application],
    query: str,
    filters: FilterState,
) -> List[Application]:
    """Text search followed by facet filters."""
    return apply_filters(search_applications(applications, query), filters)


def visible_applications(state: "AppState") -> List[Application]:
    """The list a catalog view shows for the given state."""
    return filter_applications(state.applications, state.search_query, state.filters)


def generate_app_code(existing_codes: Optional[Set[str]] = None, rng: Optional[random.Random] = None) -> str:
    """Random two letters + one digit, avoiding codes already in use when possible."""
    rng = rng or random.Random()
    existing_codes = existing_codes or set()
    total = len(string.ascii_uppercase) ** 2 * len(string.digits)

    code = ""
    for _ in range(total):
        code = (
            rng.choice(string.ascii_uppercase)
            + rng.choice(string.ascii_uppercase)
            + rng.choice(string.digits)
        )
        if code not in existing_codes:
            return code
    return code


def summarize_applications(applications: Sequence[Application]) -> CatalogStats:
    status_counts = Counter(app.status for app in applications)
    domain_counts = Counter(domain for app in applications for domain in set(app.functional_domains))
    stack = {tech for app in applications for tech in app.technical_stack}

    return CatalogStats(
        total_apps=len(applications),
        active_apps=status_counts.get(ApplicationStatus.ACTIVE.value, 0),
        in_development=status_counts.get(ApplicationStatus.UNDER_DEVELOPMENT.value, 0),
        deprecated=status_counts.get(ApplicationStatus.DEPRECATED.value, 0),
        total_domains=len(domain_counts),
        total_tech_stack=len(stack),
        by_domain=dict(domain_counts),
        by_status=dict(status_counts),
    )

from __future__ import annotations

from linkhub.errors import ValidationFailed

FILTER_FIELDS = ("title", "url", "category")
FALLBACK_CATEGORY = "Other"


def project(
    links: list[dict],
    search_term: str = "",
    filter_field: str = "title",
    category_filter: str = "",
) -> list[dict]:
    if filter_field not in FILTER_FIELDS:
        raise ValidationFailed(f"Cannot filter links by {filter_field}")

    filtered = list(links)
    term = (search_term or "").lower()
    if term:
        filtered = [
            link
            for link in filtered
            if term in str(link.get(filter_field) or "").lower()
        ]
    if category_filter:
        filtered = [
            link for link in filtered if (link.get("category") or "") == category_filter
        ]
    return filtered


def group_by_category(links: list[dict]) -> list[tuple[str, list[dict]]]:
    buckets: dict[str, list[dict]] = {}
    for link in links:
        buckets.setdefault(link.get("category") or FALLBACK_CATEGORY, []).append(link)
    return sorted(buckets.items(), key=lambda item: item[0])

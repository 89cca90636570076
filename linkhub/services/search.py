from __future__ import annotations

from rapidfuzz import fuzz


def _safe(value: str | None) -> str:
    return (value or "").strip()


def score_profile(profile: dict, query: str) -> tuple[float, list[str]]:
    q = query.strip().lower()
    username_l = _safe(profile.get("username")).lower()
    links = profile.get("links") or []
    titles_l = " ".join(_safe(link.get("title")) for link in links).lower()
    categories_l = " ".join(_safe(link.get("category")) for link in links).lower()

    score = 0.0
    reasons: list[str] = []

    if q == username_l:
        score += 150
        reasons.append("exact_username")
    elif username_l.startswith(q):
        score += 120
        reasons.append("username_prefix")
    elif q in username_l:
        score += 100
        reasons.append("username_contains")

    if titles_l and q in titles_l:
        score += 60
        reasons.append("link_title_contains")

    if categories_l and q in categories_l:
        score += 30
        reasons.append("category_match")

    fuzzy_username = fuzz.partial_ratio(q, username_l) if username_l else 0
    if fuzzy_username >= 72:
        score += fuzzy_username * 0.30
        reasons.append("username_fuzzy")

    if titles_l and len(q) >= 4:
        fuzzy_titles = fuzz.partial_ratio(q, titles_l[:6000])
        if fuzzy_titles >= 85:
            score += fuzzy_titles * 0.20
            reasons.append("link_title_fuzzy")

    return score, reasons


def search_profiles(profiles, query: str, limit: int = 20):
    if not query or not query.strip():
        return []

    ranked = []
    for profile in profiles:
        score, reasons = score_profile(profile, query)
        if reasons and score > 0:
            ranked.append(
                {"profile": profile, "score": round(score, 2), "reasons": reasons}
            )

    ranked.sort(key=lambda item: item["score"], reverse=True)
    return ranked[:limit]

"""Recent and known label names for autocomplete."""

from __future__ import annotations

from typing import List

from rapidfuzz import fuzz, process

from core.store import ALL_LABELS_KEY, RECENT_LABELS_KEY, InstanceStore


DEFAULT_RECENT_LIMIT = 20


class LabelSuggestions:
    """Lowercased label lists kept per instance."""

    def __init__(self, store: InstanceStore, recent_limit: int = DEFAULT_RECENT_LIMIT) -> None:
        self.store = store
        self.recent_limit = recent_limit

    def recent(self) -> List[str]:
        return list(self.store.get(RECENT_LABELS_KEY, []))

    def all(self) -> List[str]:
        return list(self.store.get(ALL_LABELS_KEY, []))

    def add(self, label_name: str) -> None:
        """Move a label to the front of the recent list and into the known list."""
        normalized = label_name.strip().lower()
        if not normalized:
            return
        recent = [label for label in self.recent() if label.lower() != normalized]
        recent.insert(0, normalized)
        self.store.set(RECENT_LABELS_KEY, recent[: self.recent_limit])

        known = self.all()
        if not any(label.lower() == normalized for label in known):
            known.append(normalized)
            known.sort()
            self.store.set(ALL_LABELS_KEY, known)

    def suggest(self, query: str, limit: int = 10) -> List[str]:
        """Rank known labels against a partial query.

        Prefix matches come first (in recent order, then alphabetical);
        remaining slots are filled by fuzzy similarity.
        """
        recent = self.recent()
        known = self.all()
        candidates = recent + [label for label in known if label not in recent]
        needle = query.strip().lower()
        if not needle:
            return candidates[:limit]

        prefix = [label for label in candidates if label.startswith(needle)]
        others = [label for label in candidates if label not in prefix]
        fuzzy = process.extract(needle, others, scorer=fuzz.WRatio, limit=limit, score_cutoff=60)
        ranked = prefix + [match for match, _score, _idx in fuzzy]
        return ranked[:limit]

    def clear(self) -> None:
        self.store.remove([RECENT_LABELS_KEY, ALL_LABELS_KEY])

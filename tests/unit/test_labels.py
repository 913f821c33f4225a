from core.labels import LabelSuggestions
from core.store import InstanceStore, MemoryBackend


def _suggestions() -> LabelSuggestions:
    return LabelSuggestions(InstanceStore(MemoryBackend(), lambda: "https://photos.example.com"))


def test_add_is_case_insensitive_and_most_recent_first() -> None:
    labels = _suggestions()
    labels.add("Cat")
    labels.add("dog")
    labels.add("cat")

    assert labels.recent() == ["cat", "dog"]
    assert labels.all() == ["cat", "dog"]


def test_recent_list_is_capped() -> None:
    labels = _suggestions()
    for i in range(25):
        labels.add(f"label-{i:02d}")

    recent = labels.recent()
    assert len(recent) == 20
    assert recent[0] == "label-24"
    assert len(labels.all()) == 25


def test_all_labels_are_sorted() -> None:
    labels = _suggestions()
    for name in ("zebra", "Apple", "mango"):
        labels.add(name)
    assert labels.all() == ["apple", "mango", "zebra"]


def test_blank_label_is_ignored() -> None:
    labels = _suggestions()
    labels.add("   ")
    assert labels.recent() == []


def test_suggest_prefers_prefix_then_fuzzy() -> None:
    labels = _suggestions()
    for name in ("sunset", "sunrise", "beach", "mountains"):
        labels.add(name)

    assert labels.suggest("sun")[:2] == ["sunrise", "sunset"]
    assert "mountains" in labels.suggest("mountian")


def test_suggest_without_query_returns_recent_first() -> None:
    labels = _suggestions()
    labels.add("beach")
    labels.add("alps")
    assert labels.suggest("", limit=2) == ["alps", "beach"]

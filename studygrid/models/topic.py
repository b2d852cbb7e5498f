"""Topic categories and display styles for studygrid.

Topic entities live outside this package; blocks only carry a topic name.
The name is mapped onto a closed set of categories, each with a style.
"""

from enum import Enum
from typing import Dict, List
from pydantic import BaseModel


class TopicCategory(str, Enum):
    """Topic category enumeration."""
    ARRAYS_HASHING = "arrays_hashing"
    TWO_POINTERS = "two_pointers"
    SLIDING_WINDOW = "sliding_window"
    BINARY_SEARCH = "binary_search"
    LINKED_LIST = "linked_list"
    TREES = "trees"
    DYNAMIC_PROGRAMMING = "dynamic_programming"
    BREAK = "break"
    OTHER = "other"


class TopicStyle(BaseModel):
    """Style descriptor for rendering a block."""
    background: str
    border: str
    text: str


TOPIC_STYLES: Dict[TopicCategory, TopicStyle] = {
    TopicCategory.ARRAYS_HASHING: TopicStyle(background="emerald-500/20", border="emerald-500/40", text="emerald-400"),
    TopicCategory.TWO_POINTERS: TopicStyle(background="blue-500/20", border="blue-500/40", text="blue-400"),
    TopicCategory.SLIDING_WINDOW: TopicStyle(background="purple-500/20", border="purple-500/40", text="purple-400"),
    TopicCategory.BINARY_SEARCH: TopicStyle(background="amber-500/20", border="amber-500/40", text="amber-400"),
    TopicCategory.LINKED_LIST: TopicStyle(background="pink-500/20", border="pink-500/40", text="pink-400"),
    TopicCategory.TREES: TopicStyle(background="cyan-500/20", border="cyan-500/40", text="cyan-400"),
    TopicCategory.DYNAMIC_PROGRAMMING: TopicStyle(background="red-500/20", border="red-500/40", text="red-400"),
    TopicCategory.BREAK: TopicStyle(background="secondary", border="border", text="muted-foreground"),
    TopicCategory.OTHER: TopicStyle(background="secondary", border="border", text="foreground"),
}

# Display name -> category. Keys are matched case-insensitively.
_TOPIC_NAMES: Dict[str, TopicCategory] = {
    "arrays & hashing": TopicCategory.ARRAYS_HASHING,
    "two pointers": TopicCategory.TWO_POINTERS,
    "sliding window": TopicCategory.SLIDING_WINDOW,
    "binary search": TopicCategory.BINARY_SEARCH,
    "linked list": TopicCategory.LINKED_LIST,
    "trees": TopicCategory.TREES,
    "dynamic programming": TopicCategory.DYNAMIC_PROGRAMMING,
    "break": TopicCategory.BREAK,
}

DEFAULT_TOPICS: List[str] = [
    "Arrays & Hashing",
    "Two Pointers",
    "Sliding Window",
    "Binary Search",
    "Linked List",
    "Trees",
    "Dynamic Programming",
]


# Display names added through register_topic, in registration order
_REGISTERED_TOPICS: List[str] = []


def _normalize(name: str) -> str:
    return " ".join((name or "").split()).lower()


def category_for_topic(name: str) -> TopicCategory:
    """Map a topic display name to its category, OTHER if unrecognized."""
    return _TOPIC_NAMES.get(_normalize(name), TopicCategory.OTHER)


def style_for_topic(name: str) -> TopicStyle:
    return TOPIC_STYLES[category_for_topic(name)]


def known_topics() -> List[str]:
    """Display names of the default topics, Break, then registered topics."""
    return DEFAULT_TOPICS + ["Break"] + _REGISTERED_TOPICS


def register_topic(name: str, category: TopicCategory) -> None:
    """Register an additional display name for a category."""
    key = _normalize(name)
    if not key:
        raise ValueError("Topic name must not be empty")
    if key not in {_normalize(topic) for topic in known_topics()}:
        _REGISTERED_TOPICS.append(" ".join(name.split()))
    _TOPIC_NAMES[key] = TopicCategory(category)

"""Tests for topic categories and styles."""

import pytest

from studygrid.models.topic import (
    DEFAULT_TOPICS,
    TOPIC_STYLES,
    TopicCategory,
    category_for_topic,
    known_topics,
    register_topic,
    style_for_topic,
)


class TestCategoryForTopic:
    """Test name to category mapping."""

    def test_default_topics_are_known(self):
        for name in DEFAULT_TOPICS:
            assert category_for_topic(name) != TopicCategory.OTHER

    def test_case_and_whitespace_insensitive(self):
        assert category_for_topic("  binary   SEARCH ") == TopicCategory.BINARY_SEARCH

    def test_break(self):
        assert category_for_topic("Break") == TopicCategory.BREAK

    def test_unknown_is_other(self):
        assert category_for_topic("Quantum Chromodynamics") == TopicCategory.OTHER

    def test_empty_is_other(self):
        assert category_for_topic("") == TopicCategory.OTHER


class TestStyles:
    """Test style lookup."""

    def test_every_category_has_style(self):
        assert set(TOPIC_STYLES) == set(TopicCategory)

    def test_style_for_topic(self):
        assert style_for_topic("Trees").text == "cyan-400"

    def test_unknown_topic_gets_neutral_style(self):
        assert style_for_topic("Graphs") == TOPIC_STYLES[TopicCategory.OTHER]


class TestRegisterTopic:
    """Test registering extra topic names."""

    def test_register_alias(self, topic_registry):
        register_topic("DP", TopicCategory.DYNAMIC_PROGRAMMING)
        assert category_for_topic("dp") == TopicCategory.DYNAMIC_PROGRAMMING

    def test_registered_topic_is_listed(self, topic_registry):
        register_topic("  Heap   Basics ", TopicCategory.OTHER)
        assert known_topics()[-1] == "Heap Basics"

    def test_reregistering_does_not_duplicate(self, topic_registry):
        register_topic("Graphs", TopicCategory.OTHER)
        register_topic("graphs", TopicCategory.TREES)
        register_topic("Trees", TopicCategory.TREES)

        assert known_topics().count("Graphs") == 1
        assert "graphs" not in known_topics()
        assert known_topics().count("Trees") == 1
        assert category_for_topic("Graphs") == TopicCategory.TREES

    def test_known_topics_defaults(self):
        assert known_topics()[:len(DEFAULT_TOPICS)] == DEFAULT_TOPICS
        assert "Break" in known_topics()

    def test_register_empty_name(self):
        with pytest.raises(ValueError):
            register_topic("  ", TopicCategory.TREES)

"""Tests for the rule-based fallback schedule and insights."""

import pytest

from studygrid.engine.fallback import generate_fallback_schedule, generate_insights
from studygrid.engine.grid import find_overlap
from studygrid.models.constants import FALLBACK_TOPICS


class TestGenerateFallbackSchedule:
    """Test generate_fallback_schedule()."""

    def test_eleven_blocks(self):
        assert len(generate_fallback_schedule()) == 11

    def test_two_sessions_each_weekday(self):
        schedule = generate_fallback_schedule()
        for day in range(1, 6):
            sessions = [(b.start_hour, b.end_hour) for b in schedule if b.day_of_week == day]
            assert sessions == [(9, 11), (14, 16)]

    def test_nothing_on_sunday(self):
        assert [b for b in generate_fallback_schedule() if b.day_of_week == 0] == []

    def test_saturday_break(self):
        saturday = [b for b in generate_fallback_schedule() if b.day_of_week == 6]
        assert len(saturday) == 1
        assert (saturday[0].topic_name, saturday[0].start_hour, saturday[0].end_hour) == ("Break", 10, 11)

    def test_no_overlaps(self, make_block):
        blocks = [
            make_block(topic_name=p.topic_name, day_of_week=p.day_of_week, start_hour=p.start_hour, end_hour=p.end_hour)
            for p in generate_fallback_schedule()
        ]
        for index, block in enumerate(blocks):
            assert find_overlap(block, blocks[:index]) is None

    def test_default_topics_round_robin(self):
        topics = [b.topic_name for b in generate_fallback_schedule()[:10]]
        assert topics[:6] == FALLBACK_TOPICS
        assert topics[6:] == FALLBACK_TOPICS[:4]

    def test_afternoon_topic_differs_from_morning(self):
        schedule = generate_fallback_schedule(["Graphs", "Tries"])
        monday = [b.topic_name for b in schedule if b.day_of_week == 1]
        assert monday == ["Graphs", "Tries"]

    def test_single_topic(self):
        schedule = generate_fallback_schedule(["Graphs"])
        assert {b.topic_name for b in schedule[:10]} == {"Graphs"}

    def test_blank_topics_use_defaults(self):
        schedule = generate_fallback_schedule(["", "   "])
        assert schedule[0].topic_name == FALLBACK_TOPICS[0]

    def test_empty_list_uses_defaults(self):
        assert generate_fallback_schedule([])[0].topic_name == FALLBACK_TOPICS[0]

    def test_single_string_is_one_topic(self):
        schedule = generate_fallback_schedule("Trees")
        assert {b.topic_name for b in schedule[:10]} == {"Trees"}

    @pytest.mark.parametrize("topics", [5, {"Trees": 1}, object()])
    def test_unusable_input_uses_defaults(self, topics):
        schedule = generate_fallback_schedule(topics)
        assert len(schedule) == 11
        assert schedule[0].topic_name == FALLBACK_TOPICS[0]

    def test_non_string_entries_skipped(self):
        assert generate_fallback_schedule([None, 3, "Graphs"])[0].topic_name == "Graphs"

    def test_deterministic(self):
        assert generate_fallback_schedule(["A", "B", "C"]) == generate_fallback_schedule(["A", "B", "C"])


class TestGenerateInsights:
    """Test generate_insights()."""

    def test_fallback_insights(self):
        insights = generate_insights(generate_fallback_schedule())

        assert insights[0] == "Your optimized schedule includes 21 hours of focused study time."
        # five weekday mornings plus the Saturday break outweigh five afternoons
        assert insights[1] == "Schedule optimized for morning productivity when focus is typically highest."
        assert insights[2] == "Mon is your heaviest day with 4 hours planned."

    def test_morning_heavy(self, make_block):
        blocks = [
            make_block(start_hour=8, end_hour=9),
            make_block(start_hour=9, end_hour=10),
            make_block(start_hour=15, end_hour=16),
        ]
        assert "morning productivity" in generate_insights(blocks)[1]

    def test_balanced(self, make_block):
        blocks = [make_block(start_hour=9, end_hour=10), make_block(start_hour=15, end_hour=16)]
        assert generate_insights(blocks)[1] == "Balanced distribution between morning and afternoon sessions."

    def test_empty_schedule(self):
        assert generate_insights([]) == ["Your optimized schedule includes 0 hours of focused study time."]

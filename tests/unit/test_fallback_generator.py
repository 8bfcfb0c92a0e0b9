import pytest

from src.schemas.enums.content_kind import ContentKind
from src.schemas.enums.specialist_tag import SpecialistTag
from src.schemas.models.common.content_item import BaseContentItem, PAYLOAD_MODELS, QuizItem
from src.services.fallback_generator import (
    FALLBACK_KINDS,
    FALLBACK_TAGS,
    DeterministicFallbackGenerator,
    simplify_query,
)


class TestDeterministicFallbackGenerator:

    @pytest.mark.parametrize("count", [1, 2, 5, 7, 23])
    def test_returns_exactly_requested_count(self, fallback_generator, count):
        """요청 수만큼 정확히 생성"""
        items = fallback_generator.generate("Why do volcanoes erupt?", count, "curio-1")

        assert len(items) == count
        for item in items:
            assert isinstance(item, BaseContentItem)
            assert isinstance(item.payload, PAYLOAD_MODELS[item.kind])
            assert item.container_id == "curio-1"

    def test_kinds_and_tags_cycle_in_order(self, fallback_generator):
        """태그/종류는 랜덤 없이 순환 선택"""
        items = fallback_generator.generate("space", 12)

        assert [item.kind for item in items] == [FALLBACK_KINDS[i % len(FALLBACK_KINDS)] for i in range(12)]
        assert [item.specialist_tag for item in items] == [FALLBACK_TAGS[i % len(FALLBACK_TAGS)] for i in range(12)]

    def test_output_is_reproducible(self, fallback_generator):
        first = fallback_generator.generate("oceans", 6)
        second = fallback_generator.generate("oceans", 6)

        assert [item.payload for item in first] == [item.payload for item in second]
        assert len({item.id for item in first + second}) == 12

    def test_quiz_template_has_four_options_and_fixed_answer(self, fallback_generator):
        quiz = next(item for item in fallback_generator.generate("dinosaurs", 3) if item.kind == ContentKind.QUIZ)

        assert isinstance(quiz, QuizItem)
        assert len(quiz.payload.options) == 4
        assert quiz.payload.correct_index == 3
        assert "dinosaurs" in quiz.payload.question

    def test_templates_interpolate_query(self, fallback_generator):
        items = fallback_generator.generate("Black Holes!", 5)

        for item in items:
            assert "black holes" in " ".join(item.payload.text_fields())

    def test_zero_count_returns_empty_list(self, fallback_generator):
        assert fallback_generator.generate("anything", 0) == []

    def test_custom_cycle(self):
        generator = DeterministicFallbackGenerator(tags=[SpecialistTag.ATLAS], kinds=[ContentKind.QUIZ])
        items = generator.generate("rome", 3)

        assert {item.kind for item in items} == {ContentKind.QUIZ}
        assert {item.specialist_tag for item in items} == {SpecialistTag.ATLAS}

    def test_kind_without_template_is_rejected_at_construction(self):
        with pytest.raises(ValueError):
            DeterministicFallbackGenerator(kinds=[ContentKind.RIDDLE])


class TestSimplifyQuery:

    def test_strips_punctuation_and_lowercases(self):
        assert simplify_query("What are Volcanoes?!") == "what are volcanoes"

    def test_punctuation_only_query_keeps_original(self):
        assert simplify_query("?!") == "?!"

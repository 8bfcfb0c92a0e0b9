import pytest
from pydantic import ValidationError

from src.schemas.enums.content_kind import ContentKind
from src.schemas.enums.specialist_tag import SpecialistTag
from src.schemas.models.common.content_item import (
    ContentItemAdapter,
    FactItem,
    QuizItem,
    is_temporary_id,
    new_generated_id,
    new_placeholder_id,
)
from src.schemas.models.common.content_payload import FactPayload, QuizPayload


def _quiz(**payload_overrides):
    payload = {"question": "Which planet is red?", "options": ["Mars", "Venus"], "correctIndex": 0}
    payload.update(payload_overrides)
    return {"containerId": "curio-1", "kind": "quiz", "specialistTag": "nova", "payload": payload}


class TestContentItem:

    def test_kind_selects_payload_model(self):
        item = ContentItemAdapter.validate_python(_quiz())

        assert isinstance(item, QuizItem)
        assert isinstance(item.payload, QuizPayload)
        assert item.specialist_tag == SpecialistTag.NOVA
        assert item.liked is False and item.bookmarked is False
        assert item.is_temporary

    def test_kind_payload_mismatch_is_rejected(self):
        """kind와 payload 형태가 다르면 생성 시점에 실패"""
        with pytest.raises(ValidationError):
            ContentItemAdapter.validate_python({
                "containerId": "curio-1",
                "kind": "fact",
                "payload": {"question": "Which planet is red?", "options": ["Mars", "Venus"], "correctIndex": 0},
            })

    @pytest.mark.parametrize("correct_index", [-1, 2, 10])
    def test_quiz_correct_index_must_be_in_range(self, correct_index):
        with pytest.raises(ValidationError):
            ContentItemAdapter.validate_python(_quiz(correctIndex=correct_index))

    def test_quiz_needs_two_options(self):
        with pytest.raises(ValidationError):
            ContentItemAdapter.validate_python(_quiz(options=["Mars"]))

    def test_blank_required_text_is_rejected(self):
        with pytest.raises(ValidationError):
            FactPayload(fact="   ", title="Title")

    def test_serializes_with_camel_case_aliases(self):
        item = ContentItemAdapter.validate_python(_quiz())
        dumped = item.model_dump(mode="json", by_alias=True)

        assert dumped["containerId"] == "curio-1"
        assert dumped["specialistTag"] == "nova"
        assert dumped["kind"] == "quiz"
        assert dumped["payload"]["correctIndex"] == 0
        assert ContentItemAdapter.validate_python(dumped) == item

    def test_fun_fact_accepts_fact_key(self):
        item = ContentItemAdapter.validate_python({
            "containerId": "c", "kind": "funFact", "payload": {"fact": "Octopuses have three hearts."},
        })
        assert item.main_text() == "Octopuses have three hearts."

    def test_matches_searches_all_text_fields(self):
        item = FactItem(
            container_id="c",
            payload=FactPayload(fact="Lava is hot.", title="Volcano Basics", rabbit_holes=["Pompeii"]),
        )

        assert item.kind == ContentKind.FACT
        assert item.matches("VOLCANO")
        assert item.matches("pompeii")
        assert item.matches("  ")
        assert not item.matches("glacier")


class TestItemIds:

    def test_temporary_ids(self):
        assert is_temporary_id(new_generated_id())
        assert is_temporary_id(new_placeholder_id())
        assert not is_temporary_id("3f2b1c9e")

    def test_generated_ids_are_unique(self):
        assert len({new_generated_id() for _ in range(100)}) == 100


class TestEnumCoercion:

    @pytest.mark.parametrize("raw, expected", [
        ("funFact", ContentKind.FUN_FACT),
        ("fun_fact", ContentKind.FUN_FACT),
        ("QUIZ", ContentKind.QUIZ),
        ("hologram", ContentKind.FACT),
        (None, ContentKind.FACT),
    ])
    def test_content_kind_coerce(self, raw, expected):
        assert ContentKind.coerce(raw) == expected

    def test_specialist_coerce(self):
        assert SpecialistTag.coerce(" Atlas ") == SpecialistTag.ATLAS
        assert SpecialistTag.coerce("unknown") == SpecialistTag.WHIZZY
        assert SpecialistTag.coerce(7) == SpecialistTag.WHIZZY

"""Tests for edit validation and byte-span splicing."""

import pytest

from doc_engine.editing.edit_applier import splice, validate_edit
from doc_engine.errors import InvalidEdit, RangeOutOfBounds
from doc_engine.types import Edit, EditOp, Selector, Span


class TestValidateEdit:
    def test_delete_with_text_rejected(self):
        with pytest.raises(InvalidEdit):
            validate_edit(Edit("delete", Selector(), text="x"))

    @pytest.mark.parametrize("op", ["insert", "replace"])
    def test_text_required(self, op):
        with pytest.raises(InvalidEdit) as exc_info:
            validate_edit(Edit(op, Selector()))
        assert op in exc_info.value.reason

    def test_empty_text_is_allowed(self):
        validate_edit(Edit("replace", Selector(), text=""))

    def test_unknown_op(self):
        with pytest.raises(InvalidEdit) as exc_info:
            Edit("upsert", Selector(), text="x")
        assert "upsert" in exc_info.value.reason

    def test_unknown_op_passed_to_splice(self):
        with pytest.raises(InvalidEdit):
            splice("abc", Span(0, 1), "bogus", "x")


class TestSplice:
    def test_replace(self):
        assert splice("Hello", Span(0, 5), EditOp.REPLACE, "Hi") == "Hi"

    def test_replace_middle(self):
        assert splice("a-b-c", Span(1, 4), "replace", "+") == "a+c"

    def test_delete(self):
        assert splice("keep drop keep", Span(4, 9), EditOp.DELETE) == "keep keep"

    def test_insert_zero_width(self):
        assert splice("ac", Span(1, 1), EditOp.INSERT, "b") == "abc"

    def test_insert_keeps_spanned_content_after_new_text(self):
        assert splice("# T\nbody\n", Span(0, 9), EditOp.INSERT, "new\n") == "new\n# T\nbody\n"

    def test_multibyte_offsets(self):
        text = "😀 Hello"
        assert splice(text, Span(0, 4), EditOp.REPLACE, "🙂") == "🙂 Hello"
        assert splice(text, Span(5, 10), EditOp.DELETE) == "😀 "

    def test_span_past_end(self):
        with pytest.raises(RangeOutOfBounds):
            splice("abc", Span(0, 4), EditOp.DELETE)

    def test_mismatch_rejected_before_splicing(self):
        with pytest.raises(InvalidEdit):
            splice("abc", Span(0, 99), EditOp.REPLACE)

    @pytest.mark.parametrize("span", [Span(1, 4), Span(0, 2), Span(2, 2), Span(1, 9)])
    def test_span_inside_character_rejected(self, span):
        with pytest.raises(InvalidEdit) as exc_info:
            splice("😀 Hello", span, EditOp.REPLACE, "x")
        assert "splits a UTF-8 character" in exc_info.value.reason

    def test_span_at_character_edges_accepted(self):
        assert splice("é😀", Span(2, 6), EditOp.DELETE) == "é"
        assert splice("é😀", Span(6, 6), EditOp.INSERT, "!") == "é😀!"

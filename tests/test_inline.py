"""InlineBlockDetector unit tests."""

from __future__ import annotations

from sqlshape.inline import InlineBlockDetector
from sqlshape.lexer import tokenize
from sqlshape.tokens import TokenType


def _open_index(tokens, nth: int = 0) -> int:
    opens = [i for i, t in enumerate(tokens) if t.type == TokenType.OPEN_PAREN]
    return opens[nth]


class TestEligibility:
    def test_short_call_is_inline(self) -> None:
        tokens = tokenize("COUNT(*)")
        assert InlineBlockDetector().is_inline_block(tokens, _open_index(tokens))

    def test_empty_parens_are_inline(self) -> None:
        tokens = tokenize("now()")
        assert InlineBlockDetector().is_inline_block(tokens, _open_index(tokens))

    def test_subquery_is_not_inline(self) -> None:
        tokens = tokenize("(SELECT 1)")
        assert not InlineBlockDetector().is_inline_block(tokens, 0)

    def test_newline_keyword_is_not_inline(self) -> None:
        tokens = tokenize("(a AND b)")
        assert not InlineBlockDetector().is_inline_block(tokens, 0)

    def test_comment_is_not_inline(self) -> None:
        tokens = tokenize("(a /* c */)")
        assert not InlineBlockDetector().is_inline_block(tokens, 0)

    def test_semicolon_is_not_inline(self) -> None:
        tokens = tokenize("(a; b)")
        assert not InlineBlockDetector().is_inline_block(tokens, 0)

    def test_length_threshold(self) -> None:
        body = "x" * 48
        fits = tokenize(f"({body})")
        too_long = tokenize(f"({body}x)")
        detector = InlineBlockDetector()
        assert detector.is_inline_block(fits, 0)
        assert not detector.is_inline_block(too_long, 0)

    def test_custom_threshold(self) -> None:
        tokens = tokenize("(a, b)")
        assert not InlineBlockDetector(max_length=5).is_inline_block(tokens, 0)

    def test_length_ignores_source_spacing(self) -> None:
        detector = InlineBlockDetector(max_length=6)
        for source in ("(a,b)", "(a, b)", "(  a ,\n b )"):
            assert detector.is_inline_block(tokenize(source), 0)
        assert not InlineBlockDetector(max_length=5).is_inline_block(tokenize("(a,b)"), 0)

    def test_compact_list_measured_as_rendered(self) -> None:
        letters = ",".join("abcdefghijklmnopqrstuvw")
        tokens = tokenize(f"f({letters})")
        assert not InlineBlockDetector().is_inline_block(tokens, _open_index(tokens))

    def test_keyword_after_matching_close_is_ignored(self) -> None:
        tokens = tokenize("(a) FROM t")
        assert InlineBlockDetector().is_inline_block(tokens, 0)

    def test_unmatched_open_is_not_inline(self) -> None:
        tokens = tokenize("(a, b")
        assert not InlineBlockDetector().is_inline_block(tokens, 0)


class TestActivation:
    def test_begin_and_end(self) -> None:
        tokens = tokenize("(a)")
        detector = InlineBlockDetector()
        assert detector.try_begin(tokens, 0)
        assert detector.is_active()
        detector.end()
        assert not detector.is_active()

    def test_nested_parens_end_at_matching_close(self) -> None:
        tokens = tokenize("f(g(a), b)")
        detector = InlineBlockDetector()
        assert detector.try_begin(tokens, _open_index(tokens, 0))
        assert detector.try_begin(tokens, _open_index(tokens, 1))
        detector.end()
        assert detector.is_active()
        detector.end()
        assert not detector.is_active()

    def test_failed_begin_stays_inactive(self) -> None:
        tokens = tokenize("(SELECT 1)")
        detector = InlineBlockDetector()
        assert not detector.try_begin(tokens, 0)
        assert not detector.is_active()

    def test_end_when_inactive_is_noop(self) -> None:
        detector = InlineBlockDetector()
        detector.end()
        assert not detector.is_active()

import pytest

from avatar_chat.ai.grammar import (
    DEFAULT_RULES,
    CorrectionRule,
    GrammarCorrector,
    check_and_correct,
)


def test_examples():
    assert check_and_correct("i has a dog") == "I have a dog"
    assert check_and_correct("he go home") == "He goes home"


@pytest.mark.parametrize("phrase,replacement", [(r.phrase, r.replacement) for r in DEFAULT_RULES])
def test_every_rule_changes_matching_input(phrase, replacement):
    text = f"well {phrase} today"
    corrected = check_and_correct(text)
    assert corrected != text
    assert replacement in corrected


@pytest.mark.parametrize("text", [
    "",
    "I have a dog",
    "She does her homework.",
    "this has nothing to fix",
    "the hego is wrong",   # no word boundary
    "ithas no space",
])
def test_no_match_returns_input_unchanged(text):
    assert check_and_correct(text) == text


def test_case_insensitive_and_every_occurrence():
    assert check_and_correct("I HAS one, i Has two") == "I have one, I have two"


def test_apostrophes_in_replacements():
    assert check_and_correct("i doesnt know") == "I don’t know"
    assert check_and_correct("he dont care") == "He doesn’t care"


def test_multiple_rules_in_one_sentence():
    text = "they is late and you was early"
    assert check_and_correct(text) == "They are late and You were early"


def test_later_rule_sees_earlier_output():
    corrector = GrammarCorrector([
        CorrectionRule("cat", "big dog"),
        CorrectionRule("dog", "wolf"),
    ])
    assert corrector.correct("a cat") == "a big wolf"


def test_earlier_rule_does_not_rescan_later_output():
    corrector = GrammarCorrector([
        CorrectionRule("wolf", "fox"),
        CorrectionRule("dog", "wolf"),
    ])
    assert corrector.correct("a dog") == "a wolf"


def test_phrase_is_matched_literally():
    corrector = GrammarCorrector([CorrectionRule("a.b", "x")])
    assert corrector.correct("a.b acb") == "x acb"


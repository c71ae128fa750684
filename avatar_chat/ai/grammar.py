"""
Grammar correction - fixed phrase substitutions applied before text reaches the AI.
"""

import re
from dataclasses import dataclass, field
from typing import Iterable, Pattern, Tuple

@dataclass(frozen=True)
class CorrectionRule:
    """A case-insensitive whole-phrase substitution."""
    phrase: str
    replacement: str
    pattern: Pattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        compiled = re.compile(rf"\b{re.escape(self.phrase)}\b", re.IGNORECASE)
        object.__setattr__(self, "pattern", compiled)

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text)

DEFAULT_RULES: Tuple[CorrectionRule, ...] = (
    CorrectionRule("i has", "I have"),
    CorrectionRule("he go", "He goes"),
    CorrectionRule("she do", "She does"),
    CorrectionRule("they is", "They are"),
    CorrectionRule("i am go", "I am going"),
    CorrectionRule("you was", "You were"),
    CorrectionRule("it do", "It does"),
    CorrectionRule("i doesnt", "I don’t"),
    CorrectionRule("he dont", "He doesn’t"),
)

class GrammarCorrector:
    """Runs an ordered list of correction rules over text.

    Each rule runs once, in order, on the output of the rule before it.
    A later rule may match text an earlier rule produced.
    """

    def __init__(self, rules: Iterable[CorrectionRule] = DEFAULT_RULES):
        self.rules: Tuple[CorrectionRule, ...] = tuple(rules)

    def correct(self, text: str) -> str:
        corrected = text
        for rule in self.rules:
            corrected = rule.apply(corrected)
        return corrected

_default_corrector = GrammarCorrector()

def check_and_correct(text: str) -> str:
    """Apply the default correction rules to text."""
    return _default_corrector.correct(text)

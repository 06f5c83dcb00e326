from .spellcheck import (
    SpellcheckReport,
    SpellcheckResult,
    adjacent_transpositions,
    build_dictionary,
    check_word,
    format_spellcheck_report,
    load_words,
    run_spellcheck,
)

__all__ = [
    "SpellcheckReport",
    "SpellcheckResult",
    "adjacent_transpositions",
    "build_dictionary",
    "check_word",
    "format_spellcheck_report",
    "load_words",
    "run_spellcheck",
]

"""Near-misspelling report.

Loads a dictionary word list into a :class:`ProbeHashMap` used as a key set,
then classifies each search word as found verbatim, found after swapping one
pair of adjacent characters, or unknown.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Union

from probemap.config import MapPolicy
from probemap.contracts.error import IOErrorEnvelope
from probemap.core.maps import ProbeHashMap
from probemap.core.probe import ProbeStats

logger = logging.getLogger("probemap")

STATUS_FOUND = "found"
STATUS_TRANSPOSED = "transposed"
STATUS_UNKNOWN = "unknown"

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


@dataclass(frozen=True)
class SpellcheckResult:
    word: str
    status: str
    match: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"word": self.word, "status": self.status, "match": self.match}


@dataclass
class SpellcheckReport:
    dictionary_path: str
    search_path: str
    dictionary_size: int
    capacity: int
    results: List[SpellcheckResult] = field(default_factory=list)
    stats: ProbeStats = field(default_factory=ProbeStats)

    def counts(self) -> Dict[str, int]:
        out = {STATUS_FOUND: 0, STATUS_TRANSPOSED: 0, STATUS_UNKNOWN: 0}
        for result in self.results:
            out[result.status] += 1
        return out

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dictionary": self.dictionary_path,
            "search": self.search_path,
            "dictionary_size": self.dictionary_size,
            "capacity": self.capacity,
            "counts": self.counts(),
            "probes": self.stats.to_dict(),
            "results": [r.to_dict() for r in self.results],
        }


def load_words(path: Union[str, Path], encoding: str = "utf-8") -> List[str]:
    """Read one word per line, skipping blank lines."""

    file_path = Path(path)
    try:
        text = file_path.read_text(encoding=encoding)
    except UnicodeDecodeError as exc:
        raise IOErrorEnvelope(
            f"{file_path} is not valid {encoding}", hint="pass --encoding"
        ) from exc
    return [line.strip() for line in text.splitlines() if line.strip()]


def build_dictionary(words: Iterable[str], policy: Optional[MapPolicy] = None) -> ProbeHashMap:
    policy = policy or MapPolicy()
    dictionary = ProbeHashMap(
        policy.initial_capacity,
        policy.prime,
        policy.max_load_factor,
        seed=policy.seed,
    )
    for word in words:
        dictionary.put(word, None)
    return dictionary


def adjacent_transpositions(word: str) -> Iterator[str]:
    chars = list(word)
    for i in range(len(chars) - 1):
        chars[i], chars[i + 1] = chars[i + 1], chars[i]
        yield "".join(chars)
        chars[i], chars[i + 1] = chars[i + 1], chars[i]


def check_word(
    word: str, dictionary: ProbeHashMap, stats: Optional[ProbeStats] = None
) -> SpellcheckResult:
    if dictionary.probe(word, stats).found:
        return SpellcheckResult(word, STATUS_FOUND, word)
    for variant in adjacent_transpositions(word):
        if variant != word and dictionary.probe(variant, stats).found:
            return SpellcheckResult(word, STATUS_TRANSPOSED, variant)
    return SpellcheckResult(word, STATUS_UNKNOWN)


def run_spellcheck(
    dictionary_path: Union[str, Path],
    search_path: Union[str, Path],
    policy: Optional[MapPolicy] = None,
    *,
    encoding: str = "utf-8",
) -> SpellcheckReport:
    words = load_words(dictionary_path, encoding)
    dictionary = build_dictionary(words, policy)
    logger.info(
        "Loaded %d dictionary words (capacity=%d, load_factor=%.3f)",
        len(dictionary),
        dictionary.capacity,
        dictionary.load_factor(),
    )
    report = SpellcheckReport(
        dictionary_path=str(dictionary_path),
        search_path=str(search_path),
        dictionary_size=len(dictionary),
        capacity=dictionary.capacity,
    )
    for word in load_words(search_path, encoding):
        report.results.append(check_word(word, dictionary, report.stats))
    logger.debug("Spellcheck probe stats: %s", report.stats.to_dict())
    return report


def format_spellcheck_report(report: SpellcheckReport) -> str:
    lines: List[str] = []
    for result in report.results:
        if result.status == STATUS_FOUND:
            lines.append(f"Found: {result.word}")
        elif result.status == STATUS_TRANSPOSED:
            lines.append(f"Transposed: {result.word} -> {result.match}")
        else:
            lines.append(f"Unknown: {result.word}")
    lines.append(f"Dictionary size: {report.dictionary_size}")
    lines.append(f"Table capacity: {report.capacity}")
    lines.append(f"Average probes: {report.stats.average():.3f}")
    lines.append(f"Max probes: {report.stats.max_probes}")
    return "\n".join(lines)

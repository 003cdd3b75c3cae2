"""
Fuzzy subsequence matcher.

Every character of a query atom has to appear in the candidate, in order but
not necessarily contiguously. Among all such alignments the best one is
chosen by an affine-gap dynamic program that rewards:

* contiguous runs of matched characters
* matches that start a word (after whitespace, a delimiter, a camelCase hump
  or a letter/digit transition)
* characters matched with identical case

Queries are split on whitespace into atoms, each atom must match and the
pattern score is the sum of the atom scores.
"""

import unicodedata
from functools import lru_cache
from typing import NamedTuple

from wyrmlaunch.log import logger

# ========== SCORING CONSTANTS ==========
SCORE_MATCH = 16
PENALTY_GAP_START = 3
PENALTY_GAP_EXTENSION = 1
BONUS_BOUNDARY = SCORE_MATCH // 2
BONUS_NON_WORD = SCORE_MATCH // 2
BONUS_BOUNDARY_WHITE = BONUS_BOUNDARY + 2
BONUS_BOUNDARY_DELIMITER = BONUS_BOUNDARY + 1
BONUS_CAMEL123 = BONUS_BOUNDARY - PENALTY_GAP_EXTENSION
BONUS_CONSECUTIVE = PENALTY_GAP_START + PENALTY_GAP_EXTENSION
BONUS_FIRST_CHAR_MULTIPLIER = 2
BONUS_CASE_MATCH = 1
MIN_SCORE = 1

CASE_MODES = ("ignore", "smart", "respect")
NORMALIZATION_MODES = ("smart", "never")
DELIMITERS = frozenset("/,:;|")

CHAR_WHITE, CHAR_NONWORD, CHAR_DELIMITER, CHAR_LOWER, CHAR_UPPER, CHAR_LETTER, CHAR_NUMBER = range(7)
_WORD_CLASSES = frozenset((CHAR_LOWER, CHAR_UPPER, CHAR_LETTER, CHAR_NUMBER))


class MatcherConfigError(ValueError):
	"""Raised when the matcher or ranking engine is built with an unknown mode."""


# ========== CHARACTER HELPERS ==========
def char_class(ch: str) -> int:
	if ch.isspace():
		return CHAR_WHITE

	if ch in DELIMITERS:
		return CHAR_DELIMITER

	if ch.isdigit():
		return CHAR_NUMBER

	if ch.isalpha():
		if ch.islower():
			return CHAR_LOWER

		return CHAR_UPPER if ch.isupper() else CHAR_LETTER

	return CHAR_NONWORD


def bonus_for(prev: int, cur: int) -> int:
	if cur in _WORD_CLASSES:
		if prev == CHAR_WHITE:
			return BONUS_BOUNDARY_WHITE

		if prev == CHAR_DELIMITER:
			return BONUS_BOUNDARY_DELIMITER

		if prev == CHAR_NONWORD:
			return BONUS_BOUNDARY

	if (prev == CHAR_LOWER and cur == CHAR_UPPER) or (prev != CHAR_NUMBER and cur == CHAR_NUMBER):
		return BONUS_CAMEL123

	if cur in (CHAR_NONWORD, CHAR_DELIMITER):
		return BONUS_NON_WORD

	return BONUS_BOUNDARY_WHITE if cur == CHAR_WHITE else 0


def fold_char(ch: str) -> str:
	low = ch.lower()
	return low if len(low) == 1 else ch


def normalize_char(ch: str) -> str:
	if ch.isascii():
		return ch

	base = "".join(c for c in unicodedata.normalize("NFKD", ch) if not unicodedata.combining(c))
	return base if len(base) == 1 else ch


# ========== BUFFERS ==========
class MatchBuffer:
	"""Pre-decoded characters of one searchable string.

	Holds every view the matcher may compare against, so a string is decoded
	exactly once however many queries it is scored against. Two buffers are
	equal when their source text is equal.
	"""

	__slots__ = ("_hash", "bonus", "chars", "folded", "normalized", "normalized_folded", "text")

	def __init__(self, text: str) -> None:
		self.text = text
		self.chars = tuple(text)
		self.folded = tuple(fold_char(c) for c in self.chars)
		self.normalized = tuple(normalize_char(c) for c in self.chars)
		self.normalized_folded = tuple(fold_char(c) for c in self.normalized)
		bonus = []
		prev = CHAR_WHITE
		for ch in self.chars:
			cur = char_class(ch)
			bonus.append(bonus_for(prev, cur))
			prev = cur

		self.bonus = tuple(bonus)
		self._hash = hash(text)

	def view(self, fold: bool, normalize: bool) -> tuple[str, ...]:
		if normalize:
			return self.normalized_folded if fold else self.normalized

		return self.folded if fold else self.chars

	def __len__(self) -> int:
		return len(self.chars)

	def __hash__(self) -> int:
		return self._hash

	def __eq__(self, other: object) -> bool:
		if not isinstance(other, MatchBuffer):
			return NotImplemented

		return self.text == other.text

	def __repr__(self) -> str:
		return f"MatchBuffer({self.text!r})"


class Atom(NamedTuple):
	text: str
	needle: tuple[str, ...]
	fold: bool
	normalize: bool


# ========== MATCHER ==========
class FuzzyMatcher:
	"""Score query patterns against match buffers."""

	def __init__(self, case_matching: str = "smart", normalization: str = "smart", cache_size: int = 8192) -> None:
		if case_matching not in CASE_MODES:
			msg = f"Invalid case_matching mode {case_matching!r}, expected one of {CASE_MODES}"
			raise MatcherConfigError(msg)

		if normalization not in NORMALIZATION_MODES:
			msg = f"Invalid normalization mode {normalization!r}, expected one of {NORMALIZATION_MODES}"
			raise MatcherConfigError(msg)

		if cache_size < 0:
			msg = f"Invalid cache_size {cache_size}, must be >= 0"
			raise MatcherConfigError(msg)

		self.case_matching = case_matching
		self.normalization = normalization
		self._score_atom = lru_cache(maxsize=cache_size)(self._align)
		logger.debug(f"FuzzyMatcher initialized (case: {case_matching}, normalization: {normalization}, cache: {cache_size})")

	def parse(self, query: str) -> tuple[Atom, ...]:
		"""Split a query into whitespace-separated atoms with their comparison views."""
		atoms = []
		for word in query.split():
			if self.case_matching == "ignore":
				fold = True
			elif self.case_matching == "smart":
				fold = not any(c.isupper() for c in word)
			else:
				fold = False

			normalize = self.normalization == "smart" and all(normalize_char(c) == c for c in word)
			needle = tuple(fold_char(c) for c in word) if fold else tuple(word)
			atoms.append(Atom(word, needle, fold, normalize))

		return tuple(atoms)

	def score(self, pattern: tuple[Atom, ...], buffer: MatchBuffer) -> int | None:
		"""Sum of atom scores, or None when any atom does not match."""
		if not pattern:
			return None

		total = 0
		for atom in pattern:
			if (s := self._score_atom(atom, buffer)) is None:
				return None

			total += s

		return total

	def score_text(self, query: str, text: str) -> int | None:
		return self.score(self.parse(query), MatchBuffer(text))

	def cache_info(self):
		return self._score_atom.cache_info()

	@staticmethod
	def _align(atom: Atom, buffer: MatchBuffer) -> int | None:
		needle = atom.needle
		haystack = buffer.view(atom.fold, atom.normalize)
		n, m = len(needle), len(haystack)
		if n == 0 or n > m:
			return None

		pos = 0
		for c in needle:
			try:
				pos = haystack.index(c, pos) + 1
			except ValueError:
				return None

		chars, bonus, raw = buffer.chars, buffer.bonus, atom.text
		prev_score: list[int | None] = []
		prev_run: list[int] = []
		for i, nc in enumerate(needle):
			row: list[int | None] = [None] * m
			run_row = [0] * m
			gap_best = None
			for j in range(i, m - n + i + 1):
				if i > 0 and j >= 2:
					if gap_best is not None:
						gap_best -= PENALTY_GAP_EXTENSION

					opened = prev_score[j - 2]
					if opened is not None and (gap_best is None or opened - PENALTY_GAP_START > gap_best):
						gap_best = opened - PENALTY_GAP_START

				if haystack[j] != nc:
					continue

				b = bonus[j]
				case_bonus = BONUS_CASE_MATCH if chars[j] == raw[i] else 0
				if i == 0:
					row[j] = SCORE_MATCH + b * BONUS_FIRST_CHAR_MULTIPLIER + case_bonus
					run_row[j] = b
					continue

				best, run = None, b
				if (diag := prev_score[j - 1]) is not None:
					first = prev_run[j - 1]
					if b >= BONUS_BOUNDARY and b > first:
						first = b

					best = diag + SCORE_MATCH + max(first, BONUS_CONSECUTIVE, b) + case_bonus
					run = first

				if gap_best is not None and (best is None or gap_best + SCORE_MATCH + b + case_bonus > best):
					best = gap_best + SCORE_MATCH + b + case_bonus
					run = b

				row[j] = best
				run_row[j] = run

			prev_score, prev_run = row, run_row

		final = max((s for s in prev_score if s is not None), default=None)
		if final is None:
			return None

		return max(final, MIN_SCORE)

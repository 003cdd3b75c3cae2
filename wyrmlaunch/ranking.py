"""Ranking Engine: turns a query and an Entry Store into a best-first result list."""

from concurrent.futures import ThreadPoolExecutor
from operator import attrgetter
from time import perf_counter

from wyrmlaunch.entries import AppEntry, EntryStore
from wyrmlaunch.log import logger
from wyrmlaunch.matcher import Atom, FuzzyMatcher, MatcherConfigError

NAME_WEIGHT = 5
KEYWORD_WEIGHT = 1
EMPTY_QUERY_MODES = ("all", "none")


class RankingEngine:
	"""Weighted fuzzy ranking of entries against a query.

	A name match counts five times as much as a keyword match. Entries with
	no match at all are left out of the result instead of being ranked last.
	"""

	def __init__(self, matcher: FuzzyMatcher | None = None, empty_query: str = "all", workers: int = 1) -> None:
		if empty_query not in EMPTY_QUERY_MODES:
			msg = f"Invalid empty_query mode {empty_query!r}, expected one of {EMPTY_QUERY_MODES}"
			raise MatcherConfigError(msg)

		if workers < 1:
			msg = f"Invalid workers count {workers}, must be >= 1"
			raise MatcherConfigError(msg)

		self.matcher = matcher or FuzzyMatcher()
		self.empty_query = empty_query
		self.workers = workers
		self._executor = ThreadPoolExecutor(max_workers=workers) if workers > 1 else None
		logger.debug(f"RankingEngine initialized (empty_query: {empty_query}, workers: {workers})")

	def score_entry(self, entry: AppEntry, pattern: tuple[Atom, ...]) -> int | None:
		total = None
		if (s := self.matcher.score(pattern, entry.name_buffer())) is not None:
			total = s * NAME_WEIGHT

		for buffer in entry.keyword_buffers():
			if (s := self.matcher.score(pattern, buffer)) is not None:
				total = (total or 0) + s * KEYWORD_WEIGHT

		entry.score = total
		return total

	def _score_chunk(self, entries: tuple[AppEntry, ...], pattern: tuple[Atom, ...]) -> list[AppEntry]:
		return [e for e in entries if self.score_entry(e, pattern) is not None]

	def rank(self, store: EntryStore, query: str) -> tuple[AppEntry, ...]:
		pattern = self.matcher.parse(query)
		if not pattern:
			for entry in store:
				entry.score = None

			return tuple(store) if self.empty_query == "all" else ()

		start_t = perf_counter()
		entries = tuple(store)
		if self._executor is not None and len(entries) > self.workers:
			size = -(-len(entries) // self.workers)
			chunks = [entries[i : i + size] for i in range(0, len(entries), size)]
			matched = [e for part in self._executor.map(self._score_chunk, chunks, [pattern] * len(chunks)) for e in part]
		else:
			matched = self._score_chunk(entries, pattern)

		matched.sort(key=attrgetter("score"), reverse=True)
		logger.debug(
			f"Ranked '{query}' | Entries: {len(entries)} | Matched: {len(matched)} | Time: {(perf_counter() - start_t) * 1000:.2f}ms"
		)
		return tuple(matched)

	def close(self) -> None:
		if self._executor is not None:
			self._executor.shutdown(wait=True)
			self._executor = None

from collections.abc import Iterable
from threading import Lock

from wyrmlaunch.entries import AppEntry, EntryStore, ParsedDescriptor
from wyrmlaunch.log import logger
from wyrmlaunch.ranking import RankingEngine


class LauncherState:
	"""Search session: the current store, query and derived results.

	Rebuilds go into a fresh store that is swapped in under the same lock that
	guards ranking, so a rank pass never sees a store being replaced.
	"""

	def __init__(self, engine: RankingEngine, store: EntryStore | None = None) -> None:
		self.engine = engine
		self.all_entries = store if store is not None else EntryStore()
		self.query = ""
		self.results: tuple[AppEntry, ...] = ()
		self._lock = Lock()

	def search(self, query: str) -> tuple[AppEntry, ...]:
		with self._lock:
			self.query = query
			self.results = self.engine.rank(self.all_entries, query)
			logger.debug(f"Query '{query}' produced {len(self.results)} results")
			return self.results

	def refresh(self, records: Iterable[ParsedDescriptor]) -> EntryStore:
		store = EntryStore.build(records)
		with self._lock:
			self.all_entries = store
			self.results = self.engine.rank(store, self.query)

		logger.info(f"Launcher state refreshed with {len(store)} entries")
		return store

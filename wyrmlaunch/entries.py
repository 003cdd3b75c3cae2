"""Entry Store: the fixed set of launchable, scorable application entries."""

from collections.abc import Iterable, Iterator, Sequence
from typing import NamedTuple

from wyrmlaunch.log import logger
from wyrmlaunch.matcher import MatchBuffer

TYPE_APPLICATION = "application"


class DesktopAction(NamedTuple):
	"""An additional launch action declared by a descriptor."""

	action_id: str
	name: str
	executable: str | None = None


class ParsedDescriptor(NamedTuple):
	"""One parsed descriptor, as handed over by the parsing layer.

	`entry_type` is compared case-insensitively, so `"Application"` and
	`"application"` both mark a launchable record.
	"""

	entry_type: str
	name: str | None = None
	executable: str | None = None
	keywords: tuple[str, ...] = ()
	categories: tuple[str, ...] = ()
	hidden: bool = False
	desktop_id: str | None = None
	path: str | None = None
	working_dir: str | None = None
	actions: tuple[DesktopAction, ...] = ()


class AppEntry:
	"""An indexed application; textual fields are fixed after construction."""

	__slots__ = (
		"_categories",
		"_executable",
		"_keyword_buffers",
		"_keywords",
		"_name",
		"_name_buffer",
		"actions",
		"desktop_id",
		"path",
		"score",
		"working_dir",
	)

	def __init__(
		self,
		name: str,
		executable: str,
		keywords: Iterable[str] = (),
		categories: Iterable[str] = (),
		desktop_id: str | None = None,
		path: str | None = None,
		working_dir: str | None = None,
		actions: Iterable[DesktopAction] = (),
	) -> None:
		self._name = str(name)
		self._executable = str(executable)
		self._keywords = tuple(str(k) for k in keywords)
		self._categories = tuple(str(c) for c in categories)
		self._name_buffer = MatchBuffer(self._name)
		self._keyword_buffers = tuple(MatchBuffer(k) for k in self._keywords)
		self.desktop_id = desktop_id
		self.path = path
		self.working_dir = working_dir
		self.actions = tuple(actions)
		self.score: int | None = None

	@property
	def name(self) -> str:
		return self._name

	@property
	def executable(self) -> str:
		return self._executable

	@property
	def keywords(self) -> tuple[str, ...]:
		return self._keywords

	@property
	def categories(self) -> tuple[str, ...]:
		return self._categories

	def name_buffer(self) -> MatchBuffer:
		return self._name_buffer

	def keyword_buffers(self) -> tuple[MatchBuffer, ...]:
		return self._keyword_buffers

	def __repr__(self) -> str:
		return f"AppEntry(name={self._name!r}, executable={self._executable!r}, score={self.score!r})"


class EntryStore(Sequence):
	"""Ordered, read-only collection of entries built once per refresh."""

	def __init__(self, entries: Iterable[AppEntry] = ()) -> None:
		self._entries = tuple(entries)

	@classmethod
	def build(cls, records: Iterable[ParsedDescriptor]) -> "EntryStore":
		entries = []
		skipped = 0
		for record in records:
			if (record.entry_type or "").strip().lower() != TYPE_APPLICATION:
				logger.debug(f"Skipping non-application descriptor: {record.desktop_id or record.name!r} ({record.entry_type})")
				skipped += 1
				continue

			if not record.executable:
				logger.debug(f"Skipping descriptor without executable: {record.desktop_id or record.name!r}")
				skipped += 1
				continue

			if not record.name:
				logger.debug(f"Skipping descriptor without name: {record.desktop_id or record.path!r}")
				skipped += 1
				continue

			entries.append(
				AppEntry(
					record.name,
					record.executable,
					record.keywords or (),
					record.categories or (),
					desktop_id=record.desktop_id,
					path=record.path,
					working_dir=record.working_dir,
					actions=record.actions or (),
				)
			)

		logger.info(f"Entry store built with {len(entries)} entries ({skipped} descriptors skipped)")
		return cls(entries)

	def __getitem__(self, index):
		return self._entries[index]

	def __len__(self) -> int:
		return len(self._entries)

	def __iter__(self) -> Iterator[AppEntry]:
		return iter(self._entries)

	def __repr__(self) -> str:
		return f"EntryStore({len(self._entries)} entries)"

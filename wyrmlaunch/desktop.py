"""Discovery and parsing of freedesktop `.desktop` descriptors."""

import os
from collections.abc import Iterable, Iterator

from gi.repository import GLib  # type: ignore[missing-module-attribute]

from wyrmlaunch.entries import DesktopAction, ParsedDescriptor
from wyrmlaunch.log import logger

DESKTOP_EXT = ".desktop"
DESKTOP_GROUP = GLib.KEY_FILE_DESKTOP_GROUP
ACTIONS_KEY = GLib.KEY_FILE_DESKTOP_KEY_ACTIONS
ACTION_GROUP_PREFIX = "Desktop Action "


def default_directories() -> tuple[str, ...]:
	"""XDG application directories, user data dir first."""
	bases = [GLib.get_user_data_dir(), *GLib.get_system_data_dirs()]
	dirs = []
	for base in bases:
		path = os.path.join(base, "applications")
		if path not in dirs:
			dirs.append(path)

	return tuple(dirs)


# ========== DISCOVERY ==========
def _walk_directory(directory: str) -> Iterator[tuple[str, str]]:
	def on_error(err: OSError) -> None:
		logger.warning(f"Cannot read directory '{err.filename}': {err.strerror}")

	visited: set[tuple[int, int]] = set()
	for root, dirnames, filenames in os.walk(directory, onerror=on_error, followlinks=True):
		try:
			st = os.stat(root)
		except OSError as e:
			logger.warning(f"Cannot stat directory '{root}': {e.strerror}")
			dirnames.clear()
			continue

		if (st.st_dev, st.st_ino) in visited:
			logger.debug(f"Skipping already visited directory: '{root}'")
			dirnames.clear()
			continue

		visited.add((st.st_dev, st.st_ino))
		dirnames.sort()
		for filename in sorted(filenames):
			if not filename.endswith(DESKTOP_EXT):
				continue

			path = os.path.join(root, filename)
			desktop_id = os.path.relpath(path, directory).replace(os.sep, "-")
			yield desktop_id, path


def discover(directories: Iterable[str]) -> Iterator[tuple[str, str]]:
	"""Yield `(desktop_id, path)` pairs; an id found in an earlier directory shadows later ones."""
	seen: set[str] = set()
	for directory in directories:
		if not os.path.isdir(directory):
			logger.debug(f"Skipping missing application directory: '{directory}'")
			continue

		found = 0
		for desktop_id, path in _walk_directory(directory):
			if desktop_id in seen:
				logger.debug(f"'{path}' shadowed by an earlier '{desktop_id}'")
				continue

			seen.add(desktop_id)
			found += 1
			yield desktop_id, path

		logger.debug(f"Found {found} descriptors in '{directory}'")


# ========== PARSING ==========
def _get_optional(getter, *args, group: str = DESKTOP_GROUP):
	try:
		return getter(group, *args)
	except GLib.Error:
		return None


def _parse_actions(kf: GLib.KeyFile, path: str) -> tuple[DesktopAction, ...]:
	actions = []
	for action_id in _get_optional(kf.get_string_list, ACTIONS_KEY) or []:
		if not action_id:
			continue

		group = f"{ACTION_GROUP_PREFIX}{action_id}"
		if not kf.has_group(group):
			logger.debug(f"Descriptor '{path}' lists action '{action_id}' without a [{group}] group")
			continue

		name = _get_optional(kf.get_locale_string, GLib.KEY_FILE_DESKTOP_KEY_NAME, None, group=group)
		if not name:
			logger.debug(f"Skipping unnamed action '{action_id}' in '{path}'")
			continue

		actions.append(DesktopAction(action_id, name, _get_optional(kf.get_string, GLib.KEY_FILE_DESKTOP_KEY_EXEC, group=group)))

	return tuple(actions)


def parse_descriptor(path: str, desktop_id: str | None = None) -> ParsedDescriptor | None:
	"""Read the `[Desktop Entry]` group of one file; None when it cannot be read."""
	kf = GLib.KeyFile.new()
	try:
		kf.load_from_file(path, GLib.KeyFileFlags.NONE)
	except GLib.Error as e:
		logger.warning(f"Failed to parse descriptor '{path}': {e.message}")
		return None

	if not kf.has_group(DESKTOP_GROUP):
		logger.warning(f"Descriptor '{path}' has no [{DESKTOP_GROUP}] group")
		return None

	entry_type = _get_optional(kf.get_string, GLib.KEY_FILE_DESKTOP_KEY_TYPE) or ""
	keywords = _get_optional(kf.get_locale_string_list, GLib.KEY_FILE_DESKTOP_KEY_KEYWORDS, None) or []
	categories = _get_optional(kf.get_string_list, GLib.KEY_FILE_DESKTOP_KEY_CATEGORIES) or []
	no_display = _get_optional(kf.get_boolean, GLib.KEY_FILE_DESKTOP_KEY_NO_DISPLAY)
	hidden = _get_optional(kf.get_boolean, GLib.KEY_FILE_DESKTOP_KEY_HIDDEN)
	return ParsedDescriptor(
		entry_type=entry_type.strip(),
		name=_get_optional(kf.get_locale_string, GLib.KEY_FILE_DESKTOP_KEY_NAME, None),
		executable=_get_optional(kf.get_string, GLib.KEY_FILE_DESKTOP_KEY_EXEC),
		keywords=tuple(k for k in keywords if k),
		categories=tuple(c for c in categories if c),
		hidden=bool(no_display or hidden),
		desktop_id=desktop_id or os.path.basename(path),
		path=path,
		working_dir=_get_optional(kf.get_string, GLib.KEY_FILE_DESKTOP_KEY_PATH) or None,
		actions=_parse_actions(kf, path),
	)


def load_descriptors(directories: Iterable[str], include_hidden: bool = False) -> list[ParsedDescriptor]:
	records = []
	for desktop_id, path in discover(directories):
		if (record := parse_descriptor(path, desktop_id)) is None:
			continue

		if record.hidden and not include_hidden:
			logger.debug(f"Skipping hidden descriptor: '{desktop_id}'")
			continue

		records.append(record)

	logger.info(f"Loaded {len(records)} descriptors")
	return records

import os
from typing import Any, BinaryIO, NamedTuple

from gi.repository import GLib  # type: ignore[missing-module-attribute]

from wyrmlaunch.desktop import default_directories
from wyrmlaunch.log import PROG_NAME, logger

try:
	import tomllib
except ModuleNotFoundError:
	import tomli as tomllib

CONFIG_NAME = "config.toml"
USER_UID = os.getuid()


# ========== COERCION ==========
def _as_bool(value: Any) -> bool:
	if isinstance(value, bool):
		return value

	msg = f"expected a boolean, got {type(value).__name__}"
	raise TypeError(msg)


def _as_directories(value: Any) -> tuple[str, ...]:
	if isinstance(value, str):
		value = [value]

	if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
		msg = "expected a list of directory paths"
		raise TypeError(msg)

	return tuple(os.path.expanduser(v) for v in value)


class LauncherConfig(NamedTuple):
	directories: tuple[str, ...]
	empty_query: str = "all"
	case_matching: str = "smart"
	normalization: str = "smart"
	workers: int = 1
	max_results: int = 50
	show_hidden: bool = False
	cache_size: int = 8192

	@classmethod
	def from_mapping(cls, data: dict[str, Any], directories: tuple[str, ...]) -> "LauncherConfig":
		"""Typed settings from parsed TOML; a `[settings]` table overrides top-level keys.

		Values of the wrong type are logged and replaced by their default.
		Matcher modes are passed through as strings and validated by the engine.
		"""
		settings = data.get("settings")
		merged = {**data, **settings} if isinstance(settings, dict) else data
		values: dict[str, Any] = {"directories": directories}
		for key, coerce in _COERCERS.items():
			if key not in merged:
				continue

			try:
				values[key] = coerce(merged[key])
			except (TypeError, ValueError) as e:
				logger.warning(f"Ignoring config value {key} = {merged[key]!r} ({e}), keeping the default")
				continue

			logger.debug(f"Config override: {key} = {values[key]!r}")

		config = cls(**values)
		return config._replace(max_results=max(1, config.max_results))


_COERCERS = {
	"directories": _as_directories,
	"empty_query": str,
	"case_matching": str,
	"normalization": str,
	"workers": int,
	"max_results": int,
	"show_hidden": _as_bool,
	"cache_size": int,
}


# ========== PERMISSIONS ==========
def _require_private(path: str, st: os.stat_result, forbidden: int) -> None:
	if st.st_uid == USER_UID and not st.st_mode & forbidden:
		return

	msg = (
		f"Refusing '{path}': owned by UID {st.st_uid} with mode {st.st_mode & 0o777:#o}, expected UID {USER_UID} "
		f"without {forbidden:#o} permission bits. Fix with `chown $USER` and `chmod {0o777 & ~forbidden:o}`."
	)
	raise PermissionError(msg)


def open_private(path: str) -> BinaryIO:
	"""Open a file only the current user can touch, inside a directory only they can list."""
	parent = os.path.dirname(os.path.abspath(path))
	_require_private(parent, os.stat(parent), 0o077)
	fd = os.open(path, os.O_RDONLY | os.O_NOFOLLOW)
	try:
		_require_private(path, os.fstat(fd), 0o177)
	except PermissionError:
		os.close(fd)
		raise

	return os.fdopen(fd, "rb")


# ========== PATH RESOLUTION ==========
def default_config_path() -> str:
	return os.path.join(GLib.get_user_config_dir(), PROG_NAME, CONFIG_NAME)


def resolve_config_path(path: str | None = None) -> str | None:
	"""Explicit file, then `<dir>/config.toml`, then the per-user default; None if nothing exists."""
	candidates = []
	if path:
		path = os.path.expanduser(path)
		candidates.append(os.path.join(path, CONFIG_NAME) if os.path.isdir(path) else path)

	candidates.append(default_config_path())
	for candidate in candidates:
		if os.path.isfile(candidate):
			return candidate

		logger.debug(f"No config file at '{candidate}'")

	return None


# ========== LOADING ==========
def read_config(path: str) -> dict[str, Any]:
	"""Parsed TOML document at `path`, or an empty dict when it cannot be used."""
	try:
		with open_private(path) as f:
			data = tomllib.load(f)
	except FileNotFoundError:
		logger.info(f"Config file '{path}' disappeared, using defaults")
		return {}
	except PermissionError:
		logger.exception(f"Config file '{path}' is not private, using defaults")
		return {}
	except tomllib.TOMLDecodeError:
		logger.exception(f"Config file '{path}' is not valid TOML, using defaults")
		return {}
	except OSError:
		logger.exception(f"Cannot read config file '{path}', using defaults")
		return {}

	logger.info(f"Configuration loaded from '{path}' (keys: {sorted(data)})")
	return data


def load_config(path: str | None = None) -> LauncherConfig:
	if resolved := resolve_config_path(path):
		data = read_config(resolved)
	else:
		logger.info("No configuration file found, using defaults")
		data = {}

	return LauncherConfig.from_mapping(data, default_directories())

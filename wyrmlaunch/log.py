"""Syslog-flavoured logging for wyrmlaunch."""

import logging
import os
import sys
from logging.handlers import SysLogHandler

PROG_NAME = "wyrmlaunch"
LOG_LVL = "INFO"
SYSLOG_SOCKETS = ("/dev/log", "/var/run/syslog")

# ========== SYSLOG LEVELS ==========
syslog_extension = (
	("EMERGENCY", 70, "emerg"),
	("ALERT", 60, "alert"),
	("NOTICE", 25, "notice"),
)

for level_name, level_value, _ in syslog_extension:
	setattr(logging, level_name, level_value)
	logging.addLevelName(level_value, level_name)
	setattr(
		logging.Logger,
		level_name.lower(),
		lambda self, msg, lvl=level_value, *args, **kws: (
			self._log(lvl, msg, args, **kws) if self.isEnabledFor(lvl) else None
		),
	)

logger = logging.getLogger(PROG_NAME)
log_level = os.getenv(f"{PROG_NAME.upper()}_LOG_LEVEL", LOG_LVL)
logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
_handler: logging.Handler | None = None


def setup_logging() -> logging.Handler:
	"""Attach a syslog handler, or a stderr one when no syslog socket exists."""
	global _handler
	if _handler is not None:
		return _handler

	formatter = logging.Formatter(f"{PROG_NAME}[%(process)d]: %(levelname)s - %(message)s")
	if addr := next((p for p in SYSLOG_SOCKETS if os.path.exists(p)), None):
		handler = SysLogHandler(address=addr)
		handler.priority_map.update({i[0]: i[2] for i in syslog_extension})
	else:
		handler = logging.StreamHandler(sys.stderr)

	handler.setFormatter(formatter)
	logger.addHandler(handler)
	if addr is None:
		logger.warning(f"No syslog socket found (tried: {list(SYSLOG_SOCKETS)}), logging to stderr")

	_handler = handler
	return handler

"""`wyrmlaunch` command line front end: rank installed applications against a query."""

import argparse
import sys
from collections.abc import Sequence

from wyrmlaunch.config import load_config
from wyrmlaunch.desktop import load_descriptors
from wyrmlaunch.entries import AppEntry, EntryStore
from wyrmlaunch.log import PROG_NAME, logger, setup_logging
from wyrmlaunch.matcher import FuzzyMatcher, MatcherConfigError
from wyrmlaunch.ranking import RankingEngine
from wyrmlaunch.state import LauncherState


def build_parser() -> argparse.ArgumentParser:
	parser = argparse.ArgumentParser(prog=PROG_NAME, description="Fuzzy-search installed desktop applications.")
	parser.add_argument("-c", "--config", help="config file, or directory holding config.toml")
	parser.add_argument("-n", "--limit", type=int, help="maximum number of results to print")
	parser.add_argument("query", nargs="*", help="search terms")
	return parser


def format_result(entry: AppEntry) -> str:
	score = "-" if entry.score is None else str(entry.score)
	return f"{score:>6}  {entry.name}  ({entry.executable})"


def main(argv: Sequence[str] | None = None) -> int:
	args = build_parser().parse_args(argv)
	setup_logging()
	config = load_config(args.config)
	try:
		matcher = FuzzyMatcher(config.case_matching, config.normalization, config.cache_size)
		engine = RankingEngine(matcher, empty_query=config.empty_query, workers=config.workers)
	except MatcherConfigError:
		logger.critical("Invalid matcher configuration", exc_info=True)
		return 2

	try:
		records = load_descriptors(config.directories, include_hidden=config.show_hidden)
		state = LauncherState(engine, EntryStore.build(records))
		results = state.search(" ".join(args.query))
		limit = args.limit if args.limit is not None else config.max_results
		for entry in results[: max(0, limit)]:
			print(format_result(entry))
	except Exception:
		logger.critical("Fatal error while loading or ranking applications", exc_info=True)
		raise
	finally:
		engine.close()

	logger.info(f"Printed {min(len(results), max(0, limit))} of {len(results)} results")
	return 0


if __name__ == "__main__":
	sys.exit(main())

"""
+--------------+
|  WYRMLAUNCH  |
+--------------+

Application launcher backend: indexes desktop entries and ranks them
against a typed query with fuzzy subsequence matching.
"""

from wyrmlaunch.entries import AppEntry, DesktopAction, EntryStore, ParsedDescriptor
from wyrmlaunch.matcher import FuzzyMatcher, MatchBuffer, MatcherConfigError
from wyrmlaunch.ranking import RankingEngine
from wyrmlaunch.state import LauncherState

__version__ = "0.1.0"

__all__ = [
	"AppEntry",
	"DesktopAction",
	"EntryStore",
	"FuzzyMatcher",
	"LauncherState",
	"MatchBuffer",
	"MatcherConfigError",
	"ParsedDescriptor",
	"RankingEngine",
]

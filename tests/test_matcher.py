import pytest

from wyrmlaunch.matcher import (
	BONUS_BOUNDARY_DELIMITER,
	BONUS_BOUNDARY_WHITE,
	BONUS_CAMEL123,
	MIN_SCORE,
	FuzzyMatcher,
	MatchBuffer,
	MatcherConfigError,
)


@pytest.fixture
def matcher():
	return FuzzyMatcher()


@pytest.mark.parametrize(
	"kwargs",
	[{"case_matching": "upper"}, {"normalization": "always"}, {"cache_size": -1}],
)
def test_invalid_configuration_rejected(kwargs):
	with pytest.raises(MatcherConfigError):
		FuzzyMatcher(**kwargs)


def test_config_error_is_value_error():
	assert issubclass(MatcherConfigError, ValueError)


def test_subsequence_required(matcher):
	assert matcher.score_text("fire", "Firefox") is not None
	assert matcher.score_text("fire", "Files") is None
	assert matcher.score_text("xof", "Firefox") is None
	assert matcher.score_text("firefoxes", "Firefox") is None


def test_empty_query_has_no_score(matcher):
	assert matcher.score_text("", "Firefox") is None
	assert matcher.score_text("   ", "Firefox") is None


def test_contiguous_beats_scattered(matcher):
	assert matcher.score_text("fire", "Firefox") > matcher.score_text("fire", "Fxixrxe")


def test_word_boundary_preferred(matcher):
	assert matcher.score_text("ch", "Gnu Chess") > matcher.score_text("ch", "Gnu Touch")


def test_case_alignment_rewarded():
	matcher = FuzzyMatcher(case_matching="ignore")
	assert matcher.score_text("fire", "fire") > matcher.score_text("fire", "FIRE")


def test_smart_case_respects_uppercase_query(matcher):
	assert matcher.score_text("Fi", "firefox") is None
	assert matcher.score_text("fi", "FIREFOX") is not None
	assert FuzzyMatcher(case_matching="ignore").score_text("Fi", "firefox") is not None


def test_respect_case():
	matcher = FuzzyMatcher(case_matching="respect")
	assert matcher.score_text("fire", "Firefox") is None
	assert matcher.score_text("Fire", "Firefox") is not None


def test_normalization(matcher):
	assert matcher.score_text("cafe", "Café") is not None
	assert matcher.score_text("café", "Café") is not None
	assert matcher.score_text("café", "Cafe") is None
	assert FuzzyMatcher(normalization="never").score_text("cafe", "Café") is None


def test_multiple_atoms_all_required(matcher):
	text = "Firefox Web Browser"
	combined = matcher.score_text("fire brow", text)
	assert combined == matcher.score_text("fire", text) + matcher.score_text("brow", text)
	assert matcher.score_text("fire zzz", text) is None


def test_long_gap_still_positive(matcher):
	assert matcher.score_text("ab", "a" + "x" * 100 + "b") == MIN_SCORE


def test_scores_are_cached(matcher):
	pattern = matcher.parse("fire")
	buffer = MatchBuffer("Firefox")
	first = matcher.score(pattern, buffer)
	assert matcher.score(pattern, MatchBuffer("Firefox")) == first
	assert matcher.cache_info().hits >= 1


def test_cache_can_be_disabled():
	matcher = FuzzyMatcher(cache_size=0)
	assert matcher.score_text("fire", "Firefox") == FuzzyMatcher().score_text("fire", "Firefox")


def test_buffer_bonus_table():
	assert MatchBuffer("Gnu Chess").bonus[0] == BONUS_BOUNDARY_WHITE
	assert MatchBuffer("Gnu Chess").bonus[4] == BONUS_BOUNDARY_WHITE
	assert MatchBuffer("fooBar").bonus[3] == BONUS_CAMEL123
	assert MatchBuffer("a/b").bonus[2] == BONUS_BOUNDARY_DELIMITER
	assert MatchBuffer("abc").bonus[1:] == (0, 0)


def test_buffer_views():
	buffer = MatchBuffer("Café")
	assert buffer.view(fold=False, normalize=False) == ("C", "a", "f", "é")
	assert buffer.view(fold=True, normalize=False) == ("c", "a", "f", "é")
	assert buffer.view(fold=True, normalize=True) == ("c", "a", "f", "e")
	assert len(buffer) == 4


def test_buffer_equality_follows_text():
	assert MatchBuffer("Files") == MatchBuffer("Files")
	assert hash(MatchBuffer("Files")) == hash(MatchBuffer("Files"))
	assert MatchBuffer("Files") != MatchBuffer("files")

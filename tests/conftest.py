import pytest

from wyrmlaunch.entries import EntryStore, ParsedDescriptor


def app(name, executable, keywords=(), categories=(), **kw):
	return ParsedDescriptor("Application", name, executable, tuple(keywords), tuple(categories), **kw)


@pytest.fixture
def browser_records():
	return [
		app("Firefox", "/usr/bin/firefox", ["web", "browser"], ["Network"]),
		app("Files", "/usr/bin/nautilus", ["browser", "manager"], ["System"]),
	]


@pytest.fixture
def browser_store(browser_records):
	return EntryStore.build(browser_records)

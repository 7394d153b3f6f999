"""
Catalog store tests: wholesale replacement, lookups, genre vocabulary.
Run: pytest tests/test_catalog_store.py
"""

import pytest

from conftest import CATALOG, CATALOG_URL, FakeClient, routes
from cinealgo.catalog_store import UNKNOWN_TITLE, CatalogStore
from cinealgo.errors import NormalizationError, ServiceError


def load_store(table=None):
	table = table if table is not None else {CATALOG_URL: CATALOG}
	store = CatalogStore(FakeClient(responder=routes(table)), CATALOG_URL)
	store.load_all()
	return store, table


def test_starts_empty():
	store = CatalogStore(FakeClient(), CATALOG_URL)
	assert store.all() == ()
	assert store.by_id('1') is None
	assert store.title_for('1') == UNKNOWN_TITLE
	assert store.genres() == []


def test_load_all_and_lookups():
	store, _ = load_store()
	assert [m.title for m in store.all()] == ['Inception', 'Interstellar', 'The Dark Knight', 'Se7en']
	assert store.by_id(2).title == 'Interstellar'  # numeric ids work too
	assert store.by_id('4').genres == ('Crimen', 'Misterio', 'Thriller')
	assert store.title_for('99') == UNKNOWN_TITLE
	assert store.title_for(None) == UNKNOWN_TITLE


def test_failed_load_keeps_previous_content():
	store, table = load_store()
	table[CATALOG_URL] = ServiceError("Request failed", url=CATALOG_URL)
	with pytest.raises(ServiceError):
		store.load_all()
	assert len(store.all()) == 4

	table[CATALOG_URL] = [CATALOG[0], "garbage"]
	with pytest.raises(NormalizationError):
		store.load_all()
	assert len(store.all()) == 4
	assert store.by_id('3') is not None


def test_reload_replaces_wholesale():
	store, table = load_store()
	table[CATALOG_URL] = [CATALOG[3]]
	store.load_all()
	assert [m.id for m in store.all()] == ['4']
	assert store.by_id('1') is None


def test_genres_sorted_and_distinct():
	store, _ = load_store()
	assert store.genres() == ['Acción', 'Ciencia Ficción', 'Crimen', 'Drama', 'Misterio', 'Thriller']


@pytest.mark.parametrize("text,expected", [
	('Drama', 'Drama'),
	('drama', 'Drama'),
	('ciencia ficcion', 'Ciencia Ficción'),
	('  thriller ', 'Thriller'),
	('Documental zzz', 'Documental zzz'),
	('Ciencia', 'Ciencia'),  # partial names are sent as typed
	('Crimenes', 'Crimenes'),
])
def test_resolve_genre(text, expected):
	store, _ = load_store()
	assert store.resolve_genre(text) == expected


def test_resolve_genre_without_catalog_passes_through():
	store = CatalogStore(FakeClient(), CATALOG_URL)
	assert store.resolve_genre(' Drama ') == 'Drama'

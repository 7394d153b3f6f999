"""
Dispatcher tests: validation short-circuit, busy bookkeeping, error paths,
generation-stamped results, genre filter and catalog loading.
Run: pytest tests/test_dispatcher.py
"""

import dataclasses

import pytest

from conftest import ALGORITHM_URL, CATALOG, CATALOG_URL, FakeClient, make_dispatcher, movie_payload, routes
from cinealgo import normalizers
from cinealgo.descriptors import REGISTRY
from cinealgo.errors import ServiceError, SupersededError
from cinealgo.models import AlgorithmTag, SelectionState, Variant

VALID_SELECTION = SelectionState(selected_movie_id='1', start_movie_id='1', end_movie_id='2')


def body_for(descriptor):
	"""A well-formed response body for the descriptor's normalization strategy."""
	m1, m2 = CATALOG[0], CATALOG[1]
	if descriptor.normalize is normalizers.wrapped_with_metrics:
		return {"peliculasOptimas": [m1, m2], "puntuacionTotal": 17.4, "tiempoTotal": 317}
	if descriptor.normalize is normalizers.first_candidate:
		return [[m1, m2], [m2]]
	if descriptor.normalize is normalizers.edge_endpoints:
		return {"aristas": [{"origen": m1, "destino": m2, "peso": 0.4}], "pesoTotal": 0.4, "algoritmo": "Prim"}
	return [m1, m2]


def test_invalid_selection_issues_no_request(settings, status):
	client = FakeClient()
	dispatcher = make_dispatcher(client, settings, status)
	assert dispatcher.dispatch(Variant.BFS, SelectionState()) is None
	assert client.requests == []
	assert status.current.kind == 'error'
	assert status.current.message == 'Por favor selecciona una película'
	assert not dispatcher.busy


@pytest.mark.parametrize("variant", list(Variant))
def test_busy_wraps_the_network_call(settings, status, variant):
	seen = []  # busy flag observed while the request is in flight
	descriptor = REGISTRY[variant]
	client = FakeClient(responder=lambda request: body_for(descriptor), on_send=lambda request: seen.append(dispatcher.busy))
	dispatcher = make_dispatcher(client, settings, status)
	assert not dispatcher.busy

	result = dispatcher.dispatch(variant, VALID_SELECTION)

	assert seen == [True]
	assert not dispatcher.busy
	assert result is not None
	assert result is dispatcher.current
	assert result.algorithm is descriptor.algorithm
	assert result.variant is variant
	assert isinstance(result.movies, tuple) and len(result.movies) >= 1


@pytest.mark.parametrize("variant", list(Variant))
def test_busy_cleared_after_failure(settings, status, variant):
	seen = []
	def fail(request):
		raise ServiceError("Request failed: connection refused", url=request.url)
	client = FakeClient(responder=fail, on_send=lambda request: seen.append(dispatcher.busy))
	dispatcher = make_dispatcher(client, settings, status)

	assert dispatcher.dispatch(variant, VALID_SELECTION) is None
	assert seen == [True]
	assert not dispatcher.busy
	assert status.current.kind == 'error'
	assert status.current.message == REGISTRY[variant].error_message


def test_failure_leaves_previous_result(settings, status):
	table = {f"{ALGORITHM_URL}/greedy/recomendacion": CATALOG[2]}
	client = FakeClient(responder=routes(table))
	dispatcher = make_dispatcher(client, settings, status)
	first = dispatcher.dispatch(Variant.GREEDY_RECOMMENDATION)
	assert [m.title for m in first.movies] == ['The Dark Knight']

	# malformed body: wrapped endpoint answering a plain list
	table[f"{ALGORITHM_URL}/dp/maraton-optimo"] = [CATALOG[0]]
	assert dispatcher.dispatch(Variant.DP_OPTIMAL) is None
	assert dispatcher.current is first

	# non-success status
	assert dispatcher.dispatch(Variant.PRIM_MST) is None
	assert dispatcher.current is first
	assert not dispatcher.busy


def test_unexpected_error_mid_normalization_is_reported(settings, status):
	def boom(raw):
		raise RuntimeError("normalizer bug")
	registry = dict(REGISTRY)
	registry[Variant.GREEDY_TOP] = dataclasses.replace(REGISTRY[Variant.GREEDY_TOP], normalize=boom)
	dispatcher = make_dispatcher(FakeClient(), settings, status, registry=registry)

	assert dispatcher.dispatch(Variant.GREEDY_TOP) is None
	assert not dispatcher.busy
	assert dispatcher.current is None
	assert status.current.kind == 'error'
	assert status.current.message == REGISTRY[Variant.GREEDY_TOP].error_message


def test_out_of_range_number_in_body_is_reported(settings, status):
	bad = dict(CATALOG[0], **{'año': float('inf')})  # what 1e400 decodes to
	dispatcher = make_dispatcher(FakeClient(responder=lambda request: [bad]), settings, status)
	assert dispatcher.dispatch(Variant.QUICKSORT_RATING) is None
	assert status.current.message == REGISTRY[Variant.QUICKSORT_RATING].error_message
	assert not dispatcher.busy


def test_unknown_variant_is_reported(settings, status):
	client = FakeClient()
	dispatcher = make_dispatcher(client, settings, status)
	assert dispatcher.dispatch('teleport') is None
	assert client.requests == []
	assert status.current.kind == 'error'
	assert 'teleport' in status.current.message


def test_string_variant_names_are_accepted(settings, status):
	client = FakeClient(responder=lambda request: [CATALOG[0]])
	dispatcher = make_dispatcher(client, settings, status)
	result = dispatcher.dispatch('quicksort-rating')
	assert result.variant is Variant.QUICKSORT_RATING
	assert client.requests[0].url == f"{ALGORITHM_URL}/quicksort/rating"


def test_wrapped_metrics_reach_the_result(settings, status):
	table = {f"{ALGORITHM_URL}/dp/maraton-optimo": {
		"peliculasOptimas": [CATALOG[0], CATALOG[1]], "puntuacionTotal": 12.5, "tiempoTotal": 180,
	}}
	dispatcher = make_dispatcher(FakeClient(responder=routes(table)), settings, status)
	result = dispatcher.dispatch(Variant.DP_OPTIMAL, SelectionState(dp_time=180))
	assert [m.id for m in result.movies] == ['1', '2']
	assert result.metadata.puntuacion == 12.5
	assert result.metadata['tiempoTotal'] == 180
	assert result.title == 'Maratón Óptimo DP (180 min)'
	assert result.algorithm is AlgorithmTag.DYNAMIC_PROGRAMMING


def test_new_result_replaces_previous(settings, status):
	dispatcher = make_dispatcher(FakeClient(responder=lambda request: [CATALOG[0]]), settings, status)
	first = dispatcher.dispatch(Variant.QUICKSORT_RATING)
	second = dispatcher.dispatch(Variant.MERGESORT_TITLE)
	assert dispatcher.current is second
	assert second.generation > first.generation


def test_stale_completion_does_not_overwrite_newer_result(settings, status):
	# The first request is still in flight when a second dispatch starts and finishes.
	state = {'nested': False}

	def on_send(request):
		if request.url.endswith('/quicksort/rating') and not state['nested']:
			state['nested'] = True
			dispatcher.dispatch(Variant.MERGESORT_YEAR)

	def responder(request):
		if request.url.endswith('/quicksort/rating'):
			return [CATALOG[0]]
		return [CATALOG[3]]

	dispatcher = make_dispatcher(FakeClient(responder=responder, on_send=on_send), settings, status)
	with pytest.raises(SupersededError) as excinfo:
		dispatcher.dispatch(Variant.QUICKSORT_RATING)

	assert excinfo.value.generation < excinfo.value.current  # discarded: a newer result was already applied
	assert status.current is None  # nothing failed, nothing to report
	assert dispatcher.current.variant is Variant.MERGESORT_YEAR
	assert [m.title for m in dispatcher.current.movies] == ['Se7en']
	assert not dispatcher.busy


@pytest.mark.parametrize("genre", ['', '   ', None])
def test_blank_genre_filter_is_a_no_op(settings, status, genre):
	client = FakeClient(responder=lambda request: [CATALOG[0]])
	dispatcher = make_dispatcher(client, settings, status)
	before = dispatcher.dispatch(Variant.QUICKSORT_RATING)
	client.requests.clear()

	assert dispatcher.filter_by_genre(genre) is None
	assert client.requests == []
	assert dispatcher.current is before
	assert status.current is None


def test_genre_filter_resolves_and_encodes(settings, status):
	table = {
		CATALOG_URL: CATALOG,
		f"{CATALOG_URL}/genero/Ciencia%20Ficci%C3%B3n": [CATALOG[0], CATALOG[1]],
	}
	client = FakeClient(responder=routes(table))
	dispatcher = make_dispatcher(client, settings, status)
	dispatcher.load_catalog()

	result = dispatcher.filter_by_genre('ciencia ficcion')
	assert result.algorithm is AlgorithmTag.FILTER
	assert result.title == 'Género: Ciencia Ficción'
	assert [m.id for m in result.movies] == ['1', '2']


def test_genre_filter_failure_reports_error(settings, status):
	dispatcher = make_dispatcher(FakeClient(responder=routes({})), settings, status)
	assert dispatcher.filter_by_genre('Drama') is None
	assert status.current.message == 'Error filtrando por género'
	assert not dispatcher.busy


def test_load_catalog_produces_browse_result(settings, status):
	dispatcher = make_dispatcher(FakeClient(responder=routes({CATALOG_URL: CATALOG})), settings, status)
	result = dispatcher.load_catalog()
	assert result.algorithm is AlgorithmTag.BROWSE
	assert result.title == 'Todas las Películas'
	assert len(result.movies) == len(CATALOG)
	assert dispatcher.catalog.by_id(3).title == 'The Dark Knight'
	assert dispatcher.current is result


def test_failed_reload_keeps_catalog_and_result(settings, status):
	table = {CATALOG_URL: CATALOG}
	dispatcher = make_dispatcher(FakeClient(responder=routes(table)), settings, status)
	loaded = dispatcher.load_catalog()

	table[CATALOG_URL] = ServiceError("Service answered 500", url=CATALOG_URL, status_code=500)
	assert dispatcher.load_catalog() is None
	assert len(dispatcher.catalog.all()) == len(CATALOG)
	assert dispatcher.current is loaded
	assert status.current.message == 'Error cargando películas'


def test_titles_use_loaded_catalog(settings, status):
	table = {
		CATALOG_URL: CATALOG,
		f"{CATALOG_URL}/4/dfs": [movie_payload(9, 'Zodiac')],
	}
	dispatcher = make_dispatcher(FakeClient(responder=routes(table)), settings, status)
	dispatcher.load_catalog()
	result = dispatcher.dispatch(Variant.DFS, SelectionState(selected_movie_id='4'))
	assert result.title == 'DFS desde "Se7en"'
	assert result.algorithm is AlgorithmTag.TRAVERSAL_DFS

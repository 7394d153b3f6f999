"""
Shared fixtures and fakes.
Nothing here talks to the network: the transport and the status timer are replaced by fakes.
"""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
	sys.path.insert(0, str(ROOT))

import pytest

from cinealgo.catalog_store import CatalogStore
from cinealgo.config import Settings
from cinealgo.dispatcher import Dispatcher
from cinealgo.errors import ServiceError
from cinealgo.status_channel import StatusChannel

CATALOG_URL = "http://svc/api/peliculas"
ALGORITHM_URL = "http://svc/api/algoritmos"


def movie_payload(movie_id, title, year=2000, duration=120, rating=7.5, genres=("Drama",), actors=()):
	"""Movie object as the service serializes it."""
	return {
		'peliculaId': movie_id,
		'titulo': title,
		'año': year,
		'duracion': duration,
		'promedioRating': rating,
		'generos': [{'nombre': g} for g in genres],
		'actores': [{'nombre': a} for a in actors],
	}


CATALOG = [
	movie_payload(1, 'Inception', 2010, 148, 8.8, ('Ciencia Ficción', 'Thriller'), ('Leonardo DiCaprio',)),
	movie_payload(2, 'Interstellar', 2014, 169, 8.6, ('Ciencia Ficción', 'Drama')),
	movie_payload(3, 'The Dark Knight', 2008, 152, 9.0, ('Acción', 'Crimen')),
	movie_payload(4, 'Se7en', 1995, 127, 8.6, ('Crimen', 'Misterio', 'Thriller')),
]


class FakeClient:
	"""
	Stands in for AlgorithmServiceClient.
	`responder(request)` returns the raw body or raises; every request is recorded.
	"""

	def __init__(self, responder=None, on_send=None):
		self.requests = []  # every HttpRequest seen
		self.responder = responder or (lambda request: [])
		self.on_send = on_send  # hook run before answering

	def send(self, request):
		self.requests.append(request)
		if self.on_send is not None:
			self.on_send(request)
		return self.responder(request)


def routes(table):
	"""Responder answering from a {url: body_or_exception} table; unknown URLs fail like a 404."""
	def responder(request):
		if request.url not in table:
			raise ServiceError("Service answered 404", url=request.url, status_code=404)
		value = table[request.url]
		if isinstance(value, Exception):
			raise value
		return value
	return responder


class FakeTimer:
	"""threading.Timer look-alike that only fires when the test says so."""

	created = []  # every timer built, in order

	def __init__(self, interval, function, args=None, kwargs=None):
		self.interval = interval
		self.function = function
		self.args = args or ()
		self.kwargs = kwargs or {}
		self.started = False
		self.cancelled = False
		self.daemon = False
		FakeTimer.created.append(self)

	def start(self):
		self.started = True

	def cancel(self):
		self.cancelled = True

	def fire(self):
		# a cancelled threading.Timer may still race past cancel(); fire regardless
		self.function(*self.args, **self.kwargs)


@pytest.fixture
def fake_timer():
	FakeTimer.created = []
	return FakeTimer


@pytest.fixture
def settings():
	return Settings(catalog_api_url=CATALOG_URL, algorithm_api_url=ALGORITHM_URL)


@pytest.fixture
def status(fake_timer):
	return StatusChannel(duration_s=3.0, timer_factory=fake_timer)


def make_dispatcher(client, settings, status, registry=None):
	catalog = CatalogStore(client, settings.catalog_api_url)
	return Dispatcher(client, catalog, status, settings, registry=registry)

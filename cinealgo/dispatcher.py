"""
Dispatcher module.
Runs a variant end to end: validate -> mark busy -> request -> normalize -> apply -> clear busy.
"""

import threading  # guards generation bookkeeping across UI/API threads
import time  # measure dispatch latencies
from typing import Callable, Dict, Optional, Tuple, Union  # type hints
from urllib.parse import quote  # encode genre path segment

from loguru import logger  # console logger

from .catalog_store import CatalogStore  # movie list + title lookups
from .config import Settings  # base URLs and timeouts
from .descriptors import REGISTRY, RequestDescriptor  # variant registry
from .errors import NormalizationError, ServiceError, SupersededError  # failure and ordering outcomes
from .http_client import AlgorithmServiceClient  # transport
from .models import AlgorithmResult, AlgorithmTag, HttpRequest, Movie, ResultMetadata, SelectionState, Variant
from .normalizers import direct_list  # catalog/filter responses are plain lists
from .status_channel import StatusChannel  # user-visible notifications


class Dispatcher:
	"""
	Owns the current AlgorithmResult.

	Each operation is stamped with an increasing generation when it is issued. A completion
	is applied only if no newer operation has been applied already, so a slow earlier
	request can never overwrite a faster later one. `busy` is true while anything is in flight.
	"""

	def __init__(
		self,
		client: AlgorithmServiceClient,
		catalog: CatalogStore,
		status: StatusChannel,
		settings: Settings,
		registry: Optional[Dict[Variant, RequestDescriptor]] = None,
	):
		self.client = client
		self.catalog = catalog
		self.status = status
		self.settings = settings
		self.registry = registry if registry is not None else REGISTRY
		self._lock = threading.Lock()
		self._current: Optional[AlgorithmResult] = None
		self._issued = 0  # last generation handed out
		self._applied = 0  # generation of the current result
		self._in_flight = 0

	@property
	def current(self) -> Optional[AlgorithmResult]:
		return self._current

	@property
	def busy(self) -> bool:
		return self._in_flight > 0

	def lookup(self, variant: Union[Variant, str]) -> Optional[RequestDescriptor]:
		"""Accept a Variant or its string value; unknown names resolve to None."""
		try:
			return self.registry.get(Variant(variant))
		except ValueError:
			return None

	def dispatch(self, variant: Union[Variant, str], selection: Optional[SelectionState] = None) -> Optional[AlgorithmResult]:
		"""
		Run one variant against the service.
		Returns the applied result, or None when validation or the call failed (the error is
		published on the status channel). Raises SupersededError when the call succeeded but a
		newer result was applied first.
		"""
		selection = selection if selection is not None else SelectionState()
		descriptor = self.lookup(variant)
		if descriptor is None:
			logger.warning(f"[Dispatcher] Unknown variant requested: {variant!r}")
			self.status.publish(f'Algoritmo desconocido: {variant}', 'error')
			return None

		message = descriptor.validate(selection)
		if message:
			logger.info(f"[Dispatcher] {descriptor.variant.value} rejected: {message}")
			self.status.publish(message, 'error')
			return None

		request = descriptor.build_request(selection, self.settings)
		title = descriptor.title_for(selection, self.catalog.title_for)
		return self._run(
			request,
			descriptor.normalize,
			lambda movies, metadata, generation: AlgorithmResult(
				title=title,
				algorithm=descriptor.algorithm,
				movies=movies,
				metadata=metadata,
				variant=descriptor.variant,
				generation=generation,
			),
			descriptor.error_message,
		)

	def filter_by_genre(self, genre: Optional[str]) -> Optional[AlgorithmResult]:
		"""Show the catalog movies of one genre; a blank genre is a silent no-op."""
		if not genre or not genre.strip():
			return None
		resolved = self.catalog.resolve_genre(genre)
		request = HttpRequest(method='GET', url=f"{self.settings.catalog_api_url}/genero/{quote(resolved, safe='')}")
		return self._run(
			request,
			direct_list,
			lambda movies, metadata, generation: AlgorithmResult(
				title=f'Género: {resolved}',
				algorithm=AlgorithmTag.FILTER,
				movies=movies,
				metadata=metadata,
				generation=generation,
			),
			'Error filtrando por género',
		)

	def load_catalog(self) -> Optional[AlgorithmResult]:
		"""Reload the catalog and show it as the browse result."""
		def fetch(_request: HttpRequest):
			return self.catalog.load_all()

		def as_browse(movies: Tuple[Movie, ...]):
			return movies, ResultMetadata()

		request = HttpRequest(method='GET', url=self.catalog.catalog_url)
		return self._run(
			request,
			as_browse,
			lambda movies, metadata, generation: AlgorithmResult(
				title='Todas las Películas',
				algorithm=AlgorithmTag.BROWSE,
				movies=movies,
				metadata=metadata,
				generation=generation,
			),
			'Error cargando películas',
			send=fetch,
		)

	def _run(self, request: HttpRequest, normalize: Callable, make_result: Callable, error_message: str,
			send: Optional[Callable] = None) -> Optional[AlgorithmResult]:
		send = send or self.client.send
		generation = self._begin()
		start = time.time()  # start timer
		try:
			raw = send(request)
			movies, metadata = normalize(raw)
			result = make_result(movies, metadata, generation)
		except (ServiceError, NormalizationError) as e:
			logger.warning(f"[Dispatcher] #{generation} {request.method} {request.url} failed: {e}")
			self.status.publish(error_message, 'error')
			return None
		except Exception:
			# any other failure is still reported, never fatal
			logger.exception(f"[Dispatcher] #{generation} {request.method} {request.url} raised unexpectedly")
			self.status.publish(error_message, 'error')
			return None
		finally:
			self._end()  # every exit path, including unexpected exceptions
		elapsed_ms = (time.time() - start) * 1000  # compute ms
		logger.info(f"[Dispatcher] #{generation} '{result.title}' -> {len(result.movies)} movies in {elapsed_ms:.2f} ms")
		return self._apply(result)

	def _begin(self) -> int:
		with self._lock:
			self._issued += 1
			self._in_flight += 1
			return self._issued

	def _end(self) -> None:
		with self._lock:
			self._in_flight -= 1

	def _apply(self, result: AlgorithmResult) -> AlgorithmResult:
		with self._lock:
			if result.generation < self._applied:
				logger.info(f"[Dispatcher] Discarding stale result #{result.generation} (current is #{self._applied})")
				raise SupersededError(result.generation, self._applied)
			self._applied = result.generation
			self._current = result  # single assignment
		return result


def build_dispatcher(settings: Optional[Settings] = None, timer_factory: Optional[Callable] = None) -> Dispatcher:
	"""Wire a Dispatcher with its client, catalog and status channel from settings."""
	settings = settings or Settings()
	client = AlgorithmServiceClient(timeout=settings.request_timeout_s)
	catalog = CatalogStore(client, settings.catalog_api_url)
	if timer_factory is not None:
		status = StatusChannel(duration_s=settings.status_duration_s, timer_factory=timer_factory)
	else:
		status = StatusChannel(duration_s=settings.status_duration_s)
	logger.info(f"[Dispatcher] Catalog API: {settings.catalog_api_url} | Algorithm API: {settings.algorithm_api_url}")
	return Dispatcher(client, catalog, status, settings)

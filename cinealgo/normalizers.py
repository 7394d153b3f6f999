"""
Response normalization.

The algorithm service answers in four shapes. Each normalizer turns one shape into the
canonical (movies, metadata) pair so the rest of the system never needs to know which
algorithm ran:

1. direct list       -- [movie, ...] (or a single movie object, or null)
2. wrapped-with-metrics -- {"peliculasOptimas": [...], "tiempoTotal": ..., ...}
3. candidate list    -- [[movie, ...], [movie, ...], ...]; only the first candidate is shown
4. edge list         -- [{"origen": movie, "destino": movie, "peso": ...}, ...], optionally
                        wrapped as {"aristas": [...], "pesoTotal": ..., ...}
"""

from typing import Any, Callable, Dict, List, Tuple  # type hints

from loguru import logger  # console logger

from .errors import NormalizationError  # shape mismatch
from .models import Movie, ResultMetadata  # canonical records
from .payload_parser import PayloadParser  # raw JSON -> Movie

# Signature shared by every strategy
Normalizer = Callable[[Any], Tuple[Tuple[Movie, ...], ResultMetadata]]

# Field carrying the selected movies in DP / B&B results
OPTIMAL_MOVIES_FIELD = 'peliculasOptimas'
# Field carrying the edges in MST results
EDGES_FIELD = 'aristas'

_parser = PayloadParser()  # stateless, shared


def _scalar_fields(raw: Dict[str, Any], skip: str) -> ResultMetadata:
	"""Copy every present, non-null scalar field verbatim; lists/objects and the movie field are skipped."""
	values = {}
	for key, value in raw.items():
		if key == skip or value is None:
			continue
		if isinstance(value, (bool, int, float, str)):
			values[key] = value
	return ResultMetadata(values)


def direct_list(raw: Any) -> Tuple[Tuple[Movie, ...], ResultMetadata]:
	"""Ordered list of movies, passed through unchanged."""
	if raw is None:
		return (), ResultMetadata()
	if isinstance(raw, dict):
		# greedy recommendation answers with one movie, not a list
		return (_parser.parse_movie(raw),), ResultMetadata()
	return tuple(_parser.parse_movies(raw)), ResultMetadata()


def wrapped_with_metrics(raw: Any) -> Tuple[Tuple[Movie, ...], ResultMetadata]:
	"""Object with an optimal-movies list plus auxiliary scalar fields (DP, branch & bound)."""
	if not isinstance(raw, dict):
		raise NormalizationError(f"Expected a result object, got {type(raw).__name__}")
	movies = tuple(_parser.parse_movies(raw.get(OPTIMAL_MOVIES_FIELD) or []))
	return movies, _scalar_fields(raw, skip=OPTIMAL_MOVIES_FIELD)


def first_candidate(raw: Any) -> Tuple[Tuple[Movie, ...], ResultMetadata]:
	"""List of alternative movie lists; index 0 is displayed and the rest are dropped."""
	if raw is None:
		return (), ResultMetadata()
	if not isinstance(raw, list):
		raise NormalizationError(f"Expected a list of candidates, got {type(raw).__name__}")
	if not raw:
		return (), ResultMetadata()
	if len(raw) > 1:
		logger.debug(f"[Normalizer] Showing candidate 1 of {len(raw)}")
	return tuple(_parser.parse_movies(raw[0])), ResultMetadata()


def _edge_totals(edges: List[Any]) -> ResultMetadata:
	"""numeroAristas and pesoTotal computed from the edges themselves."""
	weights = [e.get('peso') for e in edges if isinstance(e, dict)]
	weights = [w for w in weights if isinstance(w, (int, float)) and not isinstance(w, bool)]
	values = {'numeroAristas': len(edges)}
	if weights:
		values['pesoTotal'] = sum(weights)
	return ResultMetadata(values)


def edge_endpoints(raw: Any) -> Tuple[Tuple[Movie, ...], ResultMetadata]:
	"""
	Spanning-tree edges; the distinct endpoint movies are displayed.
	Duplicates are dropped by id, keeping the first occurrence so the order is reproducible.
	A bare edge list carries no totals of its own, so the edge count and total weight are derived
	(edges without a weight are skipped in the sum).
	"""
	metadata = ResultMetadata()
	if raw is None:
		return (), metadata
	if isinstance(raw, dict):
		metadata = _scalar_fields(raw, skip=EDGES_FIELD)  # pesoTotal, numeroAristas, algoritmo, ...
		edges = raw.get(EDGES_FIELD) or []
	else:
		edges = raw
	if not isinstance(edges, list):
		raise NormalizationError(f"Expected a list of edges, got {type(edges).__name__}")
	if not isinstance(raw, dict):
		metadata = _edge_totals(edges)

	seen = set()  # ids already emitted
	movies: List[Movie] = []  # accumulator
	for edge in edges:
		if not isinstance(edge, dict):
			raise NormalizationError(f"Expected an edge object, got {type(edge).__name__}")
		for end in ('origen', 'destino'):
			payload = edge.get(end)
			if payload is None:
				continue
			movie = _parser.parse_movie(payload)
			if movie.id in seen:
				continue
			seen.add(movie.id)
			movies.append(movie)
	return tuple(movies), metadata

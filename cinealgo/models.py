"""
Data models for the movie algorithm console.
Defines the records shared by the dispatcher, the normalizers and the presentation layers.
"""

# Import dataclass to define simple "record-like" classes without boilerplate
from dataclasses import dataclass, field  # auto-generates __init__, __repr__, etc.
# Enum gives us closed sets of algorithm tags and variants
from enum import Enum  # string-valued enumerations
# Import typing helpers for precise and self-documenting types
from collections.abc import Mapping  # base for the read-only metadata view
from typing import Any, Dict, Iterator, List, Optional, Tuple  # type hints


class AlgorithmTag(str, Enum):
	"""Family of algorithm that produced a result; drives the badge shown next to the title."""
	TRAVERSAL_BFS = 'traversal-bfs'
	TRAVERSAL_DFS = 'traversal-dfs'
	SHORTEST_PATH = 'shortest-path'
	GREEDY = 'greedy'
	QUICKSORT = 'quicksort'
	MERGESORT = 'mergesort'
	BACKTRACKING = 'backtracking'
	DYNAMIC_PROGRAMMING = 'dynamic-programming'
	MST_PRIM = 'mst-prim'
	MST_KRUSKAL = 'mst-kruskal'
	BRANCH_AND_BOUND = 'branch-and-bound'
	BROWSE = 'browse'
	FILTER = 'filter'


class Variant(str, Enum):
	"""Every operation a user can dispatch against the algorithm service."""
	BFS = 'bfs'
	DFS = 'dfs'
	DIJKSTRA_PATH = 'dijkstra-path'
	DIJKSTRA_NEAREST = 'dijkstra-nearest'
	GREEDY_RECOMMENDATION = 'greedy-recommendation'
	GREEDY_TOP = 'greedy-top'
	GREEDY_MARATHON = 'greedy-marathon'
	QUICKSORT_RATING = 'quicksort-rating'
	QUICKSORT_YEAR = 'quicksort-year'
	QUICKSORT_DURATION = 'quicksort-duration'
	MERGESORT_RATING = 'mergesort-rating'
	MERGESORT_YEAR = 'mergesort-year'
	MERGESORT_DURATION = 'mergesort-duration'
	MERGESORT_TITLE = 'mergesort-title'
	BACKTRACKING_MIX = 'backtracking-mix'
	BACKTRACKING_EXACT = 'backtracking-exact'
	BACKTRACKING_COMBINATIONS = 'backtracking-combinations'
	DP_OPTIMAL = 'dp-optimal'
	DP_QUANTITY = 'dp-quantity'
	DP_MINIMUM = 'dp-minimum'
	PRIM_MST = 'prim-mst'
	KRUSKAL_MST = 'kruskal-mst'
	BB_OPTIMAL = 'bb-optimal'
	BB_QUANTITY = 'bb-quantity'
	BB_MINIMUM = 'bb-minimum'
	CATALOG_TOP = 'catalog-top'


@dataclass(frozen=True)
class Movie:
	"""
	Represents a single movie as served by the catalog API.
	Frozen because a fetched catalog is replaced wholesale, never edited in place.
	"""
	id: str  # unique identifier (string form of the service's numeric id)
	title: str  # display title
	year: int  # release year as a number (e.g., 1999)
	duration: int  # running time in minutes
	rating: float  # average rating
	genres: Tuple[str, ...] = ()  # ordered genre names
	actors: Tuple[str, ...] = ()  # ordered actor names, empty when the service omits them


@dataclass
class SelectionState:
	"""
	What the user has currently picked in the controls.
	Ephemeral: lives as long as the UI session and is never persisted.
	"""
	selected_movie_id: Optional[str] = None  # single-node operations (BFS/DFS/nearest)
	start_movie_id: Optional[str] = None  # shortest path origin
	end_movie_id: Optional[str] = None  # shortest path destination
	marathon_time: int = 300  # greedy marathon budget (minutes)
	exact_time: int = 240  # backtracking exact-time target (minutes)
	dp_time: int = 360  # dynamic programming budget (minutes)
	bb_time: int = 360  # branch & bound budget (minutes)
	mix_genres: List[str] = field(default_factory=lambda: ['Ciencia Ficción', 'Drama', 'Thriller'])  # genre mix
	top_n: int = 5  # greedy top / nearest count
	combination_size: int = 3  # backtracking combination size
	minimum_movies: int = 3  # lower bound for the "minimum" marathons
	depth: int = 3  # traversal depth
	limit: int = 15  # traversal result cap


@dataclass(frozen=True)
class HttpRequest:
	method: str  # GET or POST
	url: str  # absolute URL with encoded path segments
	params: Dict[str, Any] = field(default_factory=dict)  # query parameters
	body: Optional[Dict[str, Any]] = None  # JSON body for POST requests


class ResultMetadata(Mapping):
	"""
	Read-only mapping of scalar fields emitted by the algorithm service.

	Keys are the service's own field names; a field the service did not emit is
	simply absent. Short aliases (``puntuacion`` for ``puntuacionTotal`` and so on)
	resolve to the verbatim keys, both as items and as attributes.
	"""

	ALIASES = {
		'puntuacion': 'puntuacionTotal',
		'tiempo': 'tiempoTotal',
		'eficiencia': 'ratioEficiencia',
		'explorados': 'nodosExplorados',
		'podados': 'nodosPodados',
		'peso': 'pesoTotal',
		'aristas': 'numeroAristas',
		'nodos': 'numeroNodos',
	}

	def __init__(self, values: Optional[Mapping[str, Any]] = None):
		self._values: Dict[str, Any] = dict(values or {})  # private copy

	def __getitem__(self, key: str) -> Any:
		if key in self._values:
			return self._values[key]
		alias = self.ALIASES.get(key)
		if alias is not None and alias in self._values:
			return self._values[alias]
		raise KeyError(key)

	def __getattr__(self, name: str) -> Any:
		# only reached when normal attribute lookup fails
		if name.startswith('_'):
			raise AttributeError(name)
		try:
			return self[name]
		except KeyError:
			raise AttributeError(name) from None

	def __iter__(self) -> Iterator[str]:
		return iter(self._values)

	def __len__(self) -> int:
		return len(self._values)

	def __eq__(self, other: object) -> bool:
		if isinstance(other, Mapping):
			return dict(self._values) == dict(other)
		return NotImplemented

	def __repr__(self) -> str:
		return f"ResultMetadata({self._values!r})"


@dataclass(frozen=True)
class AlgorithmResult:
	"""
	The canonical result every presentation layer renders.
	Movies are always a tuple (possibly empty), whatever shape the service answered with.
	"""
	title: str  # display title
	algorithm: AlgorithmTag  # algorithm family badge
	movies: Tuple[Movie, ...] = ()  # ordered movies, never None
	metadata: ResultMetadata = field(default_factory=ResultMetadata)  # algorithm-dependent scalars
	variant: Optional[Variant] = None  # producing variant; None for browse/filter
	generation: int = 0  # dispatch sequence number that produced it

	def __post_init__(self):
		# Coerce to concrete containers so callers may pass lists or None
		object.__setattr__(self, 'movies', tuple(self.movies or ()))
		if not isinstance(self.metadata, ResultMetadata):
			object.__setattr__(self, 'metadata', ResultMetadata(self.metadata))

"""
Request descriptor registry.

Every dispatchable variant is described by one frozen RequestDescriptor: where its
endpoint lives, which selections it needs, how its response is normalized and how its
result is titled. The Dispatcher only ever talks to descriptors, never to per-algorithm code.
"""

from dataclasses import dataclass, field  # descriptor records
from typing import Any, Callable, Dict, List, Optional, Tuple  # type hints
from urllib.parse import quote  # percent-encode path segments (año, genres)

from .config import Settings  # base URLs
from .errors import SelectionError  # invalid selection outcome
from .models import AlgorithmTag, HttpRequest, SelectionState, Variant  # records
from . import normalizers  # response strategies

# Which API a descriptor talks to
CATALOG = 'catalog'  # /api/peliculas
ALGORITHMS = 'algorithms'  # /api/algoritmos

# A requirement inspects the selection and returns a user message when unmet
Requirement = Callable[[SelectionState], Optional[str]]

DEFAULT_ERROR_MESSAGE = 'Error al ejecutar algoritmo'


def _is_positive_int(value: Any) -> bool:
	return isinstance(value, int) and not isinstance(value, bool) and value > 0


def require_movie(selection: SelectionState) -> Optional[str]:
	if not selection.selected_movie_id:
		return 'Por favor selecciona una película'
	return None


def require_path_endpoints(selection: SelectionState) -> Optional[str]:
	if not selection.start_movie_id or not selection.end_movie_id:
		return 'Por favor selecciona ambas películas'
	if str(selection.start_movie_id) == str(selection.end_movie_id):
		return 'Selecciona dos películas distintas'
	return None


def require_genres(selection: SelectionState) -> Optional[str]:
	genres = [g for g in (selection.mix_genres or []) if g and g.strip()]
	if not genres:
		return 'Selecciona al menos un género'
	return None


def require_minutes(attr: str, label: str) -> Requirement:
	"""Positive integer minute budget stored in `attr`."""
	def check(selection: SelectionState) -> Optional[str]:
		if not _is_positive_int(getattr(selection, attr)):
			return f'El tiempo {label} debe ser un número entero positivo de minutos'
		return None
	return check


def require_count(attr: str, label: str) -> Requirement:
	def check(selection: SelectionState) -> Optional[str]:
		if not _is_positive_int(getattr(selection, attr)):
			return f'{label} debe ser un número entero positivo'
		return None
	return check


def require_traversal_bounds(selection: SelectionState) -> Optional[str]:
	if not _is_positive_int(selection.depth) or not _is_positive_int(selection.limit):
		return 'La profundidad y el límite deben ser enteros positivos'
	return None


@dataclass(frozen=True)
class RequestDescriptor:
	"""
	Pure data record for one algorithm variant.
	- path: selection -> path below the base URL
	- params: selection -> query parameters
	- body: selection -> JSON body (POST only)
	- title: (selection, lookup title by id) -> display title
	"""
	variant: Variant
	algorithm: AlgorithmTag
	label: str  # button caption
	base: str  # CATALOG or ALGORITHMS
	path: Callable[[SelectionState], str]
	normalize: normalizers.Normalizer
	title: Callable[[SelectionState, Callable[[Any], str]], str]
	method: str = 'GET'
	params: Callable[[SelectionState], Dict[str, Any]] = lambda s: {}
	body: Optional[Callable[[SelectionState], Dict[str, Any]]] = None
	requirements: Tuple[Requirement, ...] = ()
	error_message: str = DEFAULT_ERROR_MESSAGE

	def validate(self, selection: SelectionState) -> Optional[str]:
		"""Return the first unmet requirement's message, or None when the selection is usable."""
		for requirement in self.requirements:
			message = requirement(selection)
			if message:
				return message
		return None

	def build_request(self, selection: SelectionState, settings: Settings) -> HttpRequest:
		"""Deterministic request for the current selection; raises SelectionError if invalid."""
		message = self.validate(selection)
		if message:
			raise SelectionError(message)
		base_url = settings.catalog_api_url if self.base == CATALOG else settings.algorithm_api_url
		return HttpRequest(
			method=self.method,
			url=f"{base_url}{self.path(selection)}",
			params=self.params(selection),
			body=self.body(selection) if self.body else None,
		)

	def title_for(self, selection: SelectionState, title_of: Callable[[Any], str]) -> str:
		return self.title(selection, title_of)


def _seg(value: Any) -> str:
	return quote(str(value), safe='')


def _fixed(path: str) -> Callable[[SelectionState], str]:
	return lambda s: path


def _static_title(text: str):
	return lambda s, title_of: text


def _mix_genres(selection: SelectionState) -> List[str]:
	return [g.strip() for g in selection.mix_genres if g and g.strip()]


def _traversal(variant: Variant, tag: AlgorithmTag, kind: str, caption: str) -> RequestDescriptor:
	return RequestDescriptor(
		variant=variant,
		algorithm=tag,
		label=caption,
		base=CATALOG,
		path=lambda s: f"/{_seg(s.selected_movie_id)}/{kind}",
		params=lambda s: {'profundidad': s.depth, 'limite': s.limit},
		normalize=normalizers.direct_list,
		title=lambda s, title_of: f'{kind.upper()} desde "{title_of(s.selected_movie_id)}"',
		requirements=(require_movie, require_traversal_bounds),
	)


def _sort(variant: Variant, tag: AlgorithmTag, family: str, key: str, caption: str, title: str) -> RequestDescriptor:
	return RequestDescriptor(
		variant=variant,
		algorithm=tag,
		label=caption,
		base=ALGORITHMS,
		path=_fixed(f"/{family}/{_seg(key)}"),
		normalize=normalizers.direct_list,
		title=_static_title(title),
	)


def _marathon(variant: Variant, tag: AlgorithmTag, family: str, goal: str, attr: str, caption: str,
		title: str, with_minimum: bool = False) -> RequestDescriptor:
	"""DP / branch & bound marathons: one time budget, optionally a minimum movie count."""
	requirements: Tuple[Requirement, ...] = (require_minutes(attr, 'máximo'),)
	if with_minimum:
		requirements += (require_count('minimum_movies', 'El mínimo de películas'),)

	def params(s: SelectionState) -> Dict[str, Any]:
		values = {'tiempoMaximo': getattr(s, attr)}
		if with_minimum:
			values['minimo'] = s.minimum_movies
		return values

	return RequestDescriptor(
		variant=variant,
		algorithm=tag,
		label=caption,
		base=ALGORITHMS,
		path=_fixed(f"/{family}/{goal}"),
		params=params,
		normalize=normalizers.wrapped_with_metrics,
		title=lambda s, title_of: f"{title} ({getattr(s, attr)} min)",
		requirements=requirements,
	)


def build_registry() -> Dict[Variant, RequestDescriptor]:
	"""Construct the closed registry; every Variant has exactly one descriptor."""
	descriptors = [
		# Graph traversal over the similarity graph
		_traversal(Variant.BFS, AlgorithmTag.TRAVERSAL_BFS, 'bfs', 'BFS - Amplitud'),
		_traversal(Variant.DFS, AlgorithmTag.TRAVERSAL_DFS, 'dfs', 'DFS - Profundidad'),

		# Shortest paths
		RequestDescriptor(
			variant=Variant.DIJKSTRA_PATH,
			algorithm=AlgorithmTag.SHORTEST_PATH,
			label='Dijkstra',
			base=ALGORITHMS,
			path=lambda s: f"/dijkstra/camino/{_seg(s.start_movie_id)}/{_seg(s.end_movie_id)}",
			normalize=normalizers.direct_list,
			title=lambda s, title_of: f'Camino Más Corto: "{title_of(s.start_movie_id)}" → "{title_of(s.end_movie_id)}"',
			requirements=(require_path_endpoints,),
		),
		RequestDescriptor(
			variant=Variant.DIJKSTRA_NEAREST,
			algorithm=AlgorithmTag.SHORTEST_PATH,
			label='Dijkstra - Más Cercanas',
			base=ALGORITHMS,
			path=lambda s: f"/dijkstra/cercanas/{_seg(s.selected_movie_id)}",
			params=lambda s: {'n': s.top_n},
			normalize=normalizers.direct_list,
			title=lambda s, title_of: f'{s.top_n} Más Cercanas a "{title_of(s.selected_movie_id)}"',
			requirements=(require_movie, require_count('top_n', 'La cantidad de películas')),
		),

		# Greedy
		RequestDescriptor(
			variant=Variant.GREEDY_RECOMMENDATION,
			algorithm=AlgorithmTag.GREEDY,
			label='Recomendación Rápida',
			base=ALGORITHMS,
			path=_fixed('/greedy/recomendacion'),
			normalize=normalizers.direct_list,
			title=_static_title('Recomendación Greedy'),
		),
		RequestDescriptor(
			variant=Variant.GREEDY_TOP,
			algorithm=AlgorithmTag.GREEDY,
			label='Top N Greedy',
			base=ALGORITHMS,
			path=_fixed('/greedy/top'),
			params=lambda s: {'n': s.top_n},
			normalize=normalizers.direct_list,
			title=lambda s, title_of: f'Top {s.top_n} Greedy',
			requirements=(require_count('top_n', 'La cantidad de películas'),),
		),
		RequestDescriptor(
			variant=Variant.GREEDY_MARATHON,
			algorithm=AlgorithmTag.GREEDY,
			label='Maratón Greedy',
			base=ALGORITHMS,
			path=_fixed('/greedy/maraton'),
			params=lambda s: {'tiempoMaximo': s.marathon_time},
			normalize=normalizers.direct_list,
			title=lambda s, title_of: f'Maratón Greedy ({s.marathon_time} min)',
			requirements=(require_minutes('marathon_time', 'de maratón'),),
		),

		# Sorting
		_sort(Variant.QUICKSORT_RATING, AlgorithmTag.QUICKSORT, 'quicksort', 'rating', 'Ordenar por Calificación', 'Ordenado por Calificación'),
		_sort(Variant.QUICKSORT_YEAR, AlgorithmTag.QUICKSORT, 'quicksort', 'año', 'Ordenar por Año', 'Ordenado por Año'),
		_sort(Variant.QUICKSORT_DURATION, AlgorithmTag.QUICKSORT, 'quicksort', 'duracion', 'Ordenar por Duración', 'Ordenado por Duración'),
		_sort(Variant.MERGESORT_RATING, AlgorithmTag.MERGESORT, 'mergesort', 'rating', 'Ordenar por Calificación', 'MergeSort por Calificación'),
		_sort(Variant.MERGESORT_YEAR, AlgorithmTag.MERGESORT, 'mergesort', 'año', 'Ordenar por Año', 'MergeSort por Año'),
		_sort(Variant.MERGESORT_DURATION, AlgorithmTag.MERGESORT, 'mergesort', 'duracion', 'Ordenar por Duración', 'MergeSort por Duración'),
		_sort(Variant.MERGESORT_TITLE, AlgorithmTag.MERGESORT, 'mergesort', 'titulo', 'Ordenar por Título', 'MergeSort por Título'),

		# Backtracking
		RequestDescriptor(
			variant=Variant.BACKTRACKING_MIX,
			algorithm=AlgorithmTag.BACKTRACKING,
			label='Mezcla de Géneros',
			base=ALGORITHMS,
			method='POST',
			path=_fixed('/backtracking/mix-generos'),
			body=lambda s: {'generos': _mix_genres(s)},
			normalize=normalizers.first_candidate,
			title=lambda s, title_of: f"Mezcla de Géneros ({', '.join(_mix_genres(s))})",
			requirements=(require_genres,),
			error_message='Error al generar mezcla de géneros',
		),
		RequestDescriptor(
			variant=Variant.BACKTRACKING_EXACT,
			algorithm=AlgorithmTag.BACKTRACKING,
			label='Maratón Exacto',
			base=ALGORITHMS,
			path=_fixed('/backtracking/maraton-exacto'),
			params=lambda s: {'tiempo': s.exact_time},
			normalize=normalizers.first_candidate,
			title=lambda s, title_of: f'Maratón Exacto ({s.exact_time} min)',
			requirements=(require_minutes('exact_time', 'exacto'),),
		),
		RequestDescriptor(
			variant=Variant.BACKTRACKING_COMBINATIONS,
			algorithm=AlgorithmTag.BACKTRACKING,
			label='Combinaciones',
			base=ALGORITHMS,
			path=_fixed('/backtracking/combinaciones'),
			params=lambda s: {'cantidad': s.combination_size},
			normalize=normalizers.first_candidate,
			title=lambda s, title_of: f'Combinación de {s.combination_size} Películas',
			requirements=(require_count('combination_size', 'El tamaño de la combinación'),),
		),

		# Dynamic programming
		_marathon(Variant.DP_OPTIMAL, AlgorithmTag.DYNAMIC_PROGRAMMING, 'dp', 'maraton-optimo', 'dp_time', 'Maratón Óptimo', 'Maratón Óptimo DP'),
		_marathon(Variant.DP_QUANTITY, AlgorithmTag.DYNAMIC_PROGRAMMING, 'dp', 'maraton-cantidad', 'dp_time', 'Máxima Cantidad', 'Máxima Cantidad DP'),
		_marathon(Variant.DP_MINIMUM, AlgorithmTag.DYNAMIC_PROGRAMMING, 'dp', 'maraton-minimo', 'dp_time', 'Maratón con Mínimo', 'Maratón con Mínimo DP', with_minimum=True),

		# Minimum spanning trees
		RequestDescriptor(
			variant=Variant.PRIM_MST,
			algorithm=AlgorithmTag.MST_PRIM,
			label='Prim - MST',
			base=ALGORITHMS,
			path=_fixed('/prim/mst'),
			normalize=normalizers.edge_endpoints,
			title=_static_title('Árbol de Expansión Mínimo (Prim)'),
		),
		RequestDescriptor(
			variant=Variant.KRUSKAL_MST,
			algorithm=AlgorithmTag.MST_KRUSKAL,
			label='Kruskal - MST',
			base=ALGORITHMS,
			path=_fixed('/kruskal/mst'),
			normalize=normalizers.edge_endpoints,
			title=_static_title('Árbol de Expansión Mínimo (Kruskal)'),
		),

		# Branch & bound
		_marathon(Variant.BB_OPTIMAL, AlgorithmTag.BRANCH_AND_BOUND, 'bb', 'maraton-optimo', 'bb_time', 'Maratón Óptimo', 'Maratón Óptimo B&B'),
		_marathon(Variant.BB_QUANTITY, AlgorithmTag.BRANCH_AND_BOUND, 'bb', 'maraton-cantidad', 'bb_time', 'Máxima Cantidad', 'Máxima Cantidad B&B'),
		_marathon(Variant.BB_MINIMUM, AlgorithmTag.BRANCH_AND_BOUND, 'bb', 'maraton-minimo', 'bb_time', 'Maratón con Mínimo', 'Maratón con Mínimo B&B', with_minimum=True),

		# Catalog shortcuts
		RequestDescriptor(
			variant=Variant.CATALOG_TOP,
			algorithm=AlgorithmTag.BROWSE,
			label='Top Calificaciones',
			base=CATALOG,
			path=_fixed('/top'),
			normalize=normalizers.direct_list,
			title=_static_title('Top Calificaciones'),
		),
	]

	registry = {d.variant: d for d in descriptors}
	missing = [v for v in Variant if v not in registry]
	if missing or len(registry) != len(descriptors):
		raise RuntimeError(f"Descriptor registry is not exhaustive: missing={missing}")
	return registry


# Module-level registry used by default
REGISTRY: Dict[Variant, RequestDescriptor] = build_registry()

"""
Streamlit UI for the movie algorithm console.
Talks to the remote algorithm service through the Dispatcher and renders every
result the same way, whatever algorithm produced it.

Run API service first (Spring backend on :8080), then:
    streamlit run streamlit_app.py
"""

# Streamlit framework to build a simple interactive UI
import streamlit as st  # UI primitives
# Typing to make function signatures clearer
from typing import Optional  # indicates values can be None

# Console logging
from loguru import logger  # console logger

# Local imports for dispatching and rendering
from cinealgo.config import Settings  # base URLs from the environment
from cinealgo.descriptors import REGISTRY  # button labels
from cinealgo.dispatcher import Dispatcher, build_dispatcher  # dispatch orchestration
from cinealgo.errors import SupersededError  # a newer result won the race
from cinealgo.models import AlgorithmResult, SelectionState, Variant  # records

# Genres offered by the quick filter
GENRES = ['Ciencia Ficción', 'Thriller', 'Acción', 'Drama', 'Crimen', 'Misterio']

# Configure Streamlit page (title and layout width)
st.set_page_config(page_title="Recomendador de Películas", layout="wide")  # wide layout

# Main page title
st.title("🎬 Recomendador de Películas – Algoritmos")  # friendly header


def get_dispatcher(catalog_url: str, algorithm_url: str) -> Dispatcher:
	"""One dispatcher per browser session; rebuilt when the URLs change."""
	key = (catalog_url, algorithm_url)  # identity of the wiring
	if st.session_state.get('dispatcher_key') != key:
		settings = Settings(catalog_api_url=catalog_url, algorithm_api_url=algorithm_url)
		dispatcher = build_dispatcher(settings)
		st.session_state['dispatcher'] = dispatcher
		st.session_state['dispatcher_key'] = key
		with st.spinner("Cargando películas..."):
			dispatcher.load_catalog()  # initial browse result
	return st.session_state['dispatcher']


def movie_select(label: str, key: str, dispatcher: Dispatcher) -> Optional[str]:
	"""Select box over the catalog returning the chosen movie id (or None)."""
	ids = [None] + [m.id for m in dispatcher.catalog.all()]  # None = nothing chosen
	return st.selectbox(
		label,
		ids,
		key=key,
		format_func=lambda i: "Elige una película..." if i is None else dispatcher.catalog.title_for(i),
	)


def run(variant: Variant) -> None:
	"""Button callback: dispatch with the session's current selection."""
	dispatcher: Dispatcher = st.session_state['dispatcher']
	try:
		dispatcher.dispatch(variant, st.session_state['selection'])
	except SupersededError as e:
		logger.info(f"[UI] {variant.value} superseded: {e}")  # the newer result is already shown


def reload_all() -> None:
	try:
		st.session_state['dispatcher'].load_catalog()
	except SupersededError as e:
		logger.info(f"[UI] Catalog reload superseded: {e}")


def run_filter() -> None:
	"""Filter callback: runs before the page redraws so its status shows right away."""
	genre = st.session_state.get('filter-genre', '')
	logger.debug(f"[UI] Genre filter requested: {genre!r}")
	try:
		st.session_state['dispatcher'].filter_by_genre(genre)  # blank genre is a no-op
	except SupersededError as e:
		logger.info(f"[UI] Genre filter superseded: {e}")


def button(variant: Variant, icon: str) -> None:
	st.button(f"{icon} {REGISTRY[variant].label}", key=f"btn-{variant.value}", on_click=run, args=(variant,),
		disabled=st.session_state['dispatcher'].busy, width="stretch")


def render_result(result: Optional[AlgorithmResult]) -> None:
	"""Render the current result: title, algorithm badge, metadata and one row per movie."""
	if result is None or not result.movies:
		st.info("👈 Selecciona un algoritmo para ver resultados")  # empty state
		if result is not None:
			st.caption(f"{result.title} · {result.algorithm.value} · sin resultados")
		return

	st.subheader(result.title)  # title
	st.caption(f"Algoritmo: {result.algorithm.value} | {len(result.movies)} películas")  # badge
	if result.metadata:
		cols = st.columns(len(result.metadata))  # one metric per field
		for col, (key, value) in zip(cols, result.metadata.items()):
			col.metric(key, f"{value:.2f}" if isinstance(value, float) else str(value))
	st.divider()  # visual separator

	# Render each movie as a details row
	for i, movie in enumerate(result.movies, start=1):
		st.markdown(f"**{i}. {movie.title}** ({movie.year})")  # title + year
		st.caption(f"⏱️ {movie.duration} min | ⭐ {movie.rating}")  # numbers
		if movie.genres:
			st.write(f"🎬 Géneros: {', '.join(movie.genres)}")  # genres
		if movie.actors:
			st.write(f"🎭 Actores: {', '.join(movie.actors)}")  # actors


# Sidebar contains configuration controls
defaults = Settings()  # environment defaults
with st.sidebar:
	st.header("Configuración")  # section label
	catalog_url = st.text_input("API de películas", defaults.catalog_api_url)  # where the catalog lives
	algorithm_url = st.text_input("API de algoritmos", defaults.algorithm_api_url)  # where the algorithms live

dispatcher = get_dispatcher(catalog_url.rstrip('/'), algorithm_url.rstrip('/'))  # session dispatcher
if 'selection' not in st.session_state:
	st.session_state['selection'] = SelectionState()  # UI defaults
selection: SelectionState = st.session_state['selection']

# Status notification (auto-clears after a few seconds)
status = dispatcher.status.current
if status is not None:
	if status.kind == 'error':
		st.error(status.message)
	elif status.kind == 'success':
		st.success(status.message)
	else:
		st.info(status.message)

col_controls, col_results = st.columns([1, 2])  # controls left, results right

with col_controls:
	with st.expander("🔬 Algoritmos de Grafos", expanded=True):
		selection.selected_movie_id = movie_select("Seleccionar Película", 'sel-movie', dispatcher)
		button(Variant.BFS, "🔵")
		button(Variant.DFS, "🟣")
		selection.top_n = int(st.number_input("Cantidad (N)", min_value=1, value=selection.top_n, step=1))
		button(Variant.DIJKSTRA_NEAREST, "🟢")
		st.markdown("**Camino Más Corto**")
		selection.start_movie_id = movie_select("Película de inicio", 'sel-start', dispatcher)
		selection.end_movie_id = movie_select("Película de fin", 'sel-end', dispatcher)
		button(Variant.DIJKSTRA_PATH, "🟢")

	with st.expander("⚡ Greedy / Ordenamiento"):
		button(Variant.GREEDY_RECOMMENDATION, "⚡")
		button(Variant.GREEDY_TOP, "🏆")
		selection.marathon_time = int(st.number_input("Tiempo de maratón (min)", min_value=1, value=selection.marathon_time, step=10))
		button(Variant.GREEDY_MARATHON, "📺")
		for variant in (Variant.QUICKSORT_RATING, Variant.QUICKSORT_YEAR, Variant.QUICKSORT_DURATION):
			button(variant, "📊")
		for variant in (Variant.MERGESORT_RATING, Variant.MERGESORT_YEAR, Variant.MERGESORT_DURATION, Variant.MERGESORT_TITLE):
			button(variant, "🔀")

	with st.expander("🎭 Backtracking"):
		choices = sorted(set(GENRES) | set(dispatcher.catalog.genres()))  # fixed list + catalog genres
		selection.mix_genres = st.multiselect("Géneros a mezclar", choices, default=[g for g in selection.mix_genres if g in choices])
		button(Variant.BACKTRACKING_MIX, "🎭")
		selection.exact_time = int(st.number_input("Tiempo exacto (min)", min_value=1, value=selection.exact_time, step=10))
		button(Variant.BACKTRACKING_EXACT, "⏱️")
		selection.combination_size = int(st.number_input("Tamaño de combinación", min_value=1, value=selection.combination_size, step=1))
		button(Variant.BACKTRACKING_COMBINATIONS, "🧩")

	with st.expander("🧮 Programación Dinámica / Branch & Bound"):
		selection.dp_time = int(st.number_input("Tiempo DP (min)", min_value=1, value=selection.dp_time, step=10))
		selection.bb_time = int(st.number_input("Tiempo B&B (min)", min_value=1, value=selection.bb_time, step=10))
		selection.minimum_movies = int(st.number_input("Mínimo de películas", min_value=1, value=selection.minimum_movies, step=1))
		for variant in (Variant.DP_OPTIMAL, Variant.DP_QUANTITY, Variant.DP_MINIMUM):
			button(variant, "🧮")
		for variant in (Variant.BB_OPTIMAL, Variant.BB_QUANTITY, Variant.BB_MINIMUM):
			button(variant, "✂️")

	with st.expander("🌳 Árbol de Expansión Mínimo"):
		button(Variant.PRIM_MST, "🌲")
		button(Variant.KRUSKAL_MST, "🌳")

	with st.expander("🧪 Opciones Rápidas", expanded=True):
		st.button("🎬 Ver Todas las Películas", on_click=reload_all, disabled=dispatcher.busy, width="stretch")
		button(Variant.CATALOG_TOP, "⭐")
		st.selectbox("Filtrar por Género", [''] + GENRES, key='filter-genre', format_func=lambda g: g or "Selecciona un género...")
		st.button("Filtrar", on_click=run_filter, disabled=dispatcher.busy)

with col_results:
	if dispatcher.busy:
		st.caption("⏳ Cargando...")
	render_result(dispatcher.current)  # always the single current result

# Show a footer indicator of current wiring
st.sidebar.markdown("---")  # separator
st.sidebar.caption(f"Películas en catálogo: {len(dispatcher.catalog.all())}")  # catalog size

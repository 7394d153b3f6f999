"""
Catalog store module.
Holds the full movie list fetched from the catalog API and answers id and genre lookups.
"""

from typing import Dict, List, Optional, Tuple  # type hints

# Fuzzy matching to map user-typed genres onto the catalog's vocabulary
from rapidfuzz import process, fuzz, utils  # fuzzy matching utilities

from loguru import logger  # console logger

from .http_client import AlgorithmServiceClient  # transport
from .models import HttpRequest, Movie  # request + movie records
from .payload_parser import PayloadParser  # raw JSON -> Movie

# Shown wherever a selected id is not (or not yet) in the catalog
UNKNOWN_TITLE = "Película desconocida"


class CatalogStore:
	"""
	In-memory copy of the catalog.
	Content is replaced wholesale by load_all(); a failed load keeps the previous content.
	"""

	GENRE_MATCH_CUTOFF = 88  # minimum ratio score; absorbs case and accents, not missing words

	def __init__(self, client: AlgorithmServiceClient, catalog_url: str, parser: Optional[PayloadParser] = None):
		self.client = client  # transport shared with the dispatcher
		self.catalog_url = catalog_url  # e.g. http://localhost:8080/api/peliculas
		self.parser = parser or PayloadParser()  # payload converter
		self._movies: Tuple[Movie, ...] = ()  # ordered catalog
		self._by_id: Dict[str, Movie] = {}  # id -> movie index

	def load_all(self) -> Tuple[Movie, ...]:
		"""
		Fetch the full catalog and swap it in.
		Raises ServiceError/NormalizationError before touching the stored content.
		"""
		logger.info(f"[Catalog] Loading movies from {self.catalog_url}...")
		raw = self.client.send(HttpRequest(method='GET', url=self.catalog_url))
		movies = tuple(self.parser.parse_movies(raw if raw is not None else []))  # may raise
		index = {m.id: m for m in movies}  # build before swapping
		# Two single assignments; readers see either the old or the new catalog
		self._by_id = index
		self._movies = movies
		logger.info(f"[Catalog] Successfully loaded {len(movies)} movies.")
		return movies

	def all(self) -> Tuple[Movie, ...]:
		return self._movies

	def by_id(self, movie_id) -> Optional[Movie]:
		if movie_id is None:
			return None
		return self._by_id.get(str(movie_id))

	def title_for(self, movie_id) -> str:
		"""Best-effort title lookup; unknown ids resolve to a placeholder, never an error."""
		movie = self.by_id(movie_id)
		return movie.title if movie else UNKNOWN_TITLE

	def genres(self) -> List[str]:
		"""Return a sorted list of all unique genres in the catalog."""
		genres = set()  # unique genres
		for movie in self._movies:
			genres.update(movie.genres)
		return sorted(genres)  # sorted for stable display

	def resolve_genre(self, text: str) -> str:
		"""
		Map free text onto a catalog genre name ("ciencia ficcion" -> "Ciencia Ficción").
		Falls back to the trimmed input when nothing scores above the cutoff.
		"""
		needle = (text or '').strip()
		choices = self.genres()
		if not needle or not choices:
			return needle
		best = process.extractOne(needle, choices, scorer=fuzz.ratio, processor=utils.default_process, score_cutoff=self.GENRE_MATCH_CUTOFF)
		if best:
			logger.debug(f"[Catalog] Genre '{needle}' resolved to '{best[0]}' (score={best[1]:.1f})")
			return best[0]
		return needle

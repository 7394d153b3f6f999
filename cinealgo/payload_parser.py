"""
Payload parsing module.
Converts raw JSON movie objects from the catalog/algorithm API into Movie records.
"""

# Typing helpers
from typing import Any, Dict, List, Tuple  # type hints

# Import our Movie data class used across the project
from .models import Movie  # structured movie record
from .errors import NormalizationError  # raised on non-object payloads

# Console logging
from loguru import logger  # console logger


class PayloadParser:
	"""
	Handles conversion of service payloads into Movie objects.
	The service speaks Spanish field names (peliculaId, titulo, año, ...); this is the only
	place that knows about them.
	"""

	def parse_movie(self, data: Any) -> Movie:
		"""
		Convert one raw dictionary into a Movie.
		Performs safe defaults for missing numeric fields.
		"""
		if not isinstance(data, dict):  # anything but a JSON object is malformed
			raise NormalizationError(f"Expected a movie object, got {type(data).__name__}")

		# Genres/actors arrive as [{"nombre": ...}] from the graph store, but accept plain strings too
		genres = self._parse_names(data.get('generos'))  # ordered genre names
		actors = self._parse_names(data.get('actores'))  # ordered actor names

		# Parse numeric fields, providing safe defaults when missing
		try:
			year = int(data['año']) if data.get('año') else 0  # int year or 0
			duration = int(data['duracion']) if data.get('duracion') else 0  # minutes or 0
			rating = float(data['promedioRating']) if data.get('promedioRating') else 0.0  # float rating
		except (TypeError, ValueError, OverflowError) as e:  # e.g. non-numeric or infinite year
			logger.warning(f"[Parser] Malformed movie payload {data.get('peliculaId')!r}: {e}")
			raise NormalizationError(f"Malformed movie payload: {e}") from e

		return Movie(
			id=str(data.get('peliculaId', '')),  # ensure ID is string
			title=str(data.get('titulo') or ''),  # display title
			year=year,
			duration=duration,
			rating=rating,
			genres=genres,
			actors=actors,
		)

	def parse_movies(self, items: Any) -> List[Movie]:
		"""Parse a JSON array of movie objects, preserving order."""
		if not isinstance(items, list):
			raise NormalizationError(f"Expected a list of movies, got {type(items).__name__}")
		return [self.parse_movie(item) for item in items]

	def _parse_names(self, value) -> Tuple[str, ...]:
		"""
		Normalize a value that may be None, a list of {"nombre": ...} objects, a list of strings,
		or a comma-separated string into a tuple of clean names.
		"""
		if value is None:  # missing field
			return ()
		if isinstance(value, str):  # comma-separated string
			return tuple(item.strip() for item in value.split(',') if item.strip())
		if isinstance(value, list):
			names = []  # accumulator
			for item in value:
				if isinstance(item, dict):
					name = item.get('nombre')  # graph node name
				else:
					name = item
				if name:
					names.append(str(name).strip())
			return tuple(names)
		return ()  # any other type becomes empty

	def to_payload(self, movie: Movie) -> Dict[str, Any]:
		"""Inverse of parse_movie: the wire representation of a Movie."""
		return {
			'peliculaId': movie.id,
			'titulo': movie.title,
			'año': movie.year,
			'duracion': movie.duration,
			'promedioRating': movie.rating,
			'generos': [{'nombre': g} for g in movie.genres],
			'actores': [{'nombre': a} for a in movie.actors],
		}

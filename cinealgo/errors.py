"""
Error taxonomy for the movie algorithm console.
"""

from typing import Optional


class CineAlgoError(Exception):
	"""Base class for every error raised by this package."""


class SelectionError(CineAlgoError):
	"""A required selection or parameter is missing or invalid; no request is issued."""

	def __init__(self, message: str):
		super().__init__(message)
		self.message = message  # user-facing text


class ServiceError(CineAlgoError):
	"""The algorithm service was unreachable, answered non-2xx, or sent an undecodable body."""

	def __init__(self, message: str, url: str = '', status_code: Optional[int] = None):
		super().__init__(message)
		self.url = url
		self.status_code = status_code


class NormalizationError(CineAlgoError):
	"""The response body did not match the shape documented for its endpoint."""


class UnknownVariantError(CineAlgoError):
	"""Requested variant is not in the registry."""


class SupersededError(CineAlgoError):
	"""The call succeeded, but a newer result was applied first; its own result was discarded."""

	def __init__(self, generation: int, current: int):
		super().__init__(f"Result #{generation} superseded by #{current}")
		self.generation = generation
		self.current = current

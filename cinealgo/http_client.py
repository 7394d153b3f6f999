"""
HTTP transport to the remote algorithm service.
Wraps a requests.Session and turns every failure mode into a single ServiceError.
"""

import time  # measure request latencies
from typing import Any, Optional  # type hints

# HTTP client used to talk to the catalog and algorithm APIs
import requests  # make web requests

# Console logging
from loguru import logger  # console logger

from .errors import ServiceError  # transport/parse failure
from .models import HttpRequest  # request built by a descriptor


class AlgorithmServiceClient:
	"""
	Sends HttpRequest records and returns the decoded JSON body.
	No retries: a failed call surfaces immediately so the user can re-trigger it.
	"""

	def __init__(self, timeout: float = 60.0, session: Optional[requests.Session] = None):
		self.timeout = timeout  # seconds per request
		self.session = session or requests.Session()  # connection pooling across calls

	def send(self, request: HttpRequest) -> Any:
		"""Issue the request and return the parsed JSON (None for an empty body)."""
		start = time.time()  # start timer
		logger.debug(f"[Client] {request.method} {request.url} params={request.params} body={request.body}")
		try:
			resp = self.session.request(
				request.method,
				request.url,
				params=request.params or None,  # query string
				json=request.body,  # JSON body for POST
				timeout=self.timeout,
			)
			resp.raise_for_status()  # raise error if server responded with an error code
		except requests.HTTPError as e:
			status = e.response.status_code if e.response is not None else None
			logger.warning(f"[Client] {request.method} {request.url} failed with status {status}")
			raise ServiceError(f"Service answered {status}", url=request.url, status_code=status) from e
		except requests.RequestException as e:  # connection refused, timeout, ...
			logger.warning(f"[Client] {request.method} {request.url} failed: {e}")
			raise ServiceError(f"Request failed: {e}", url=request.url) from e

		elapsed_ms = (time.time() - start) * 1000  # compute ms
		logger.debug(f"[Client] {request.url} answered {resp.status_code} in {elapsed_ms:.2f} ms")

		# A Java null serializes to an empty body
		if not resp.content or not resp.content.strip():
			return None
		try:
			return resp.json()  # parse JSON returned by the service
		except ValueError as e:
			logger.warning(f"[Client] Undecodable body from {request.url}: {e}")
			raise ServiceError(f"Undecodable response body: {e}", url=request.url, status_code=resp.status_code) from e

"""
Smoke-check a running algorithm service.

This script:
1) Loads the catalog from CINEALGO_CATALOG_API_URL
2) Picks the first two movies as selections
3) Dispatches every registered variant
4) Logs a one-line summary per variant

Usage:
    python -m scripts.smoke_check

Exits non-zero when any variant fails.
"""

import sys  # exit status
import time  # measure step timings

from loguru import logger  # console logging

from cinealgo.descriptors import REGISTRY  # every variant
from cinealgo.dispatcher import build_dispatcher  # wiring from settings
from cinealgo.models import SelectionState  # UI defaults


def main() -> int:
	# Headline banner for visibility in console
	logger.info("=" * 60)
	logger.info("Algorithm Service Smoke Check")
	logger.info("=" * 60)

	dispatcher = build_dispatcher()  # settings from the environment

	# 1) Load catalog
	logger.info("[1/3] Loading catalog...")
	if dispatcher.load_catalog() is None:
		logger.error("[FAIL] Catalog could not be loaded; is the service running?")
		return 1
	movies = dispatcher.catalog.all()
	logger.info(f"[OK] Loaded {len(movies)} movies")

	# 2) Build a selection from the catalog
	logger.info("[2/3] Building selection...")
	selection = SelectionState()  # UI defaults for every budget
	if len(movies) >= 2:
		selection.selected_movie_id = movies[0].id
		selection.start_movie_id = movies[0].id
		selection.end_movie_id = movies[1].id
	logger.info(f"[OK] start={selection.start_movie_id} end={selection.end_movie_id}")

	# 3) Dispatch everything
	logger.info("[3/3] Dispatching variants...")
	failures = []  # variants that returned nothing
	for variant, descriptor in REGISTRY.items():
		t0 = time.time()  # start timer
		result = dispatcher.dispatch(variant, selection)
		elapsed = (time.time() - t0) * 1000  # ms
		if result is None:
			failures.append(variant.value)
			logger.warning(f"  [FAIL] {variant.value}: {dispatcher.status.current.message if dispatcher.status.current else 'no result'}")
			continue
		logger.info(f"  [OK] {variant.value:<28} {len(result.movies):>3} movies {elapsed:8.2f} ms {dict(result.metadata)}")

	dispatcher.status.clear()  # stop the pending auto-clear timer
	# Footer
	logger.info("=" * 60)
	if failures:
		logger.error(f"{len(failures)} variant(s) failed: {', '.join(failures)}")
		return 1
	logger.info("All variants answered.")
	return 0


if __name__ == '__main__':
	sys.exit(main())  # invoke checker

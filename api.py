"""
FastAPI service exposing the algorithm console as JSON.
Endpoints:
- GET  /health: basic health check
- GET  /algorithms: every dispatchable variant
- GET  /catalog, POST /catalog/reload: the movie catalog
- POST /dispatch/{variant}: run a variant with the given selection and return the normalized result
- GET  /filter/{genre}: movies of one genre
- GET  /results/current: the result currently on display

Startup wires a Dispatcher from CINEALGO_* settings and loads the catalog once.

Run:
    uvicorn api:app --reload
"""

# Import standard libraries for timing
import time  # measure startup latency
from typing import Any, Dict, List, Optional  # precise typing for clarity

# Import FastAPI for building the web API and Pydantic for response models
from fastapi import FastAPI, HTTPException  # FastAPI primitives
from pydantic import BaseModel  # request/response schema definitions

# Import our internal modules for dispatching and results
from cinealgo.dispatcher import Dispatcher, build_dispatcher  # dispatch orchestration
from cinealgo.errors import SupersededError  # a newer result won the race
from cinealgo.models import AlgorithmResult, Movie, SelectionState  # canonical records

# Import loguru for simple, structured console logging
from loguru import logger  # convenient console logger

# Instantiate the FastAPI application with metadata
app = FastAPI(title="Movie Algorithm Console API", version="1.0.0")  # web app

# Globals that hold the dispatcher instance and measured startup time
DISPATCHER: Optional[Dispatcher] = None  # will point to the wired dispatcher
STARTUP_TIME_S: float = 0.0  # measures how long startup took

# Answer for a call that succeeded but was overtaken by a newer one
SUPERSEDED_DETAIL = "Resultado reemplazado por una ejecución más reciente"


# Pydantic model that describes the shape of a single movie in responses
class MovieOut(BaseModel):
	id: str  # unique id
	title: str  # human-readable title
	year: int  # release year
	duration: int  # minutes
	rating: float  # average rating
	genres: List[str]  # list of genres
	actors: List[str]  # list of actors


# Pydantic model for a normalized algorithm result
class ResultOut(BaseModel):
	title: str  # display title
	algorithm: str  # algorithm tag
	variant: Optional[str] = None  # producing variant, None for browse/filter
	generation: int  # dispatch sequence number
	movies: List[MovieOut]  # ordered movies
	metadata: Dict[str, Any]  # algorithm-dependent scalars


# Selection sent by clients; every field defaults like the UI controls do
class SelectionIn(BaseModel):
	selected_movie_id: Optional[str] = None
	start_movie_id: Optional[str] = None
	end_movie_id: Optional[str] = None
	marathon_time: int = 300
	exact_time: int = 240
	dp_time: int = 360
	bb_time: int = 360
	mix_genres: List[str] = ['Ciencia Ficción', 'Drama', 'Thriller']
	top_n: int = 5
	combination_size: int = 3
	minimum_movies: int = 3
	depth: int = 3
	limit: int = 15


class DescriptorOut(BaseModel):
	variant: str
	algorithm: str
	label: str
	method: str


def movie_out(m: Movie) -> MovieOut:
	return MovieOut(
		id=m.id,
		title=m.title,
		year=m.year,
		duration=m.duration,
		rating=m.rating,
		genres=list(m.genres),
		actors=list(m.actors),
	)


def result_out(r: AlgorithmResult) -> ResultOut:
	return ResultOut(
		title=r.title,
		algorithm=r.algorithm.value,
		variant=r.variant.value if r.variant else None,
		generation=r.generation,
		movies=[movie_out(m) for m in r.movies],
		metadata=dict(r.metadata),
	)


def _dispatcher() -> Dispatcher:
	if DISPATCHER is None:  # dispatcher must be ready to serve
		logger.warning("[API] Request received but dispatcher not initialized")  # guard log
		raise HTTPException(status_code=503, detail="Dispatcher not initialized")
	return DISPATCHER


# FastAPI startup hook to wire the dispatcher once
@app.on_event("startup")
async def startup_event():
	"""Wire the dispatcher and load the catalog."""
	global DISPATCHER, STARTUP_TIME_S  # refer to module-level globals
	start = time.time()  # start timer for startup latency
	logger.info("[API] Startup: wiring dispatcher and loading catalog...")  # log intent
	DISPATCHER = build_dispatcher()  # settings come from the environment
	DISPATCHER.load_catalog()  # failure is reported on the status channel, not fatal
	STARTUP_TIME_S = time.time() - start  # elapsed seconds
	logger.info(f"[API] Startup complete in {STARTUP_TIME_S:.2f}s with {len(DISPATCHER.catalog.all())} movies.")


# Simple health endpoint for readiness checks
@app.get("/health")
async def health():
	"""Return minimal health info for liveness/readiness probes."""
	return {
		"status": "ok",  # constant indicator
		"dispatcher_ready": DISPATCHER is not None,  # True if dispatcher wired
		"catalog_size": len(DISPATCHER.catalog.all()) if DISPATCHER else 0,  # loaded movies
		"busy": DISPATCHER.busy if DISPATCHER else False,  # request in flight
		"startup_seconds": round(STARTUP_TIME_S, 2),  # startup latency
	}


@app.get("/algorithms", response_model=List[DescriptorOut])
def algorithms():
	"""List every dispatchable variant."""
	return [
		DescriptorOut(variant=d.variant.value, algorithm=d.algorithm.value, label=d.label, method=d.method)
		for d in _dispatcher().registry.values()
	]


@app.get("/catalog", response_model=List[MovieOut])
def catalog():
	return [movie_out(m) for m in _dispatcher().catalog.all()]


@app.post("/catalog/reload", response_model=ResultOut)
def reload_catalog():
	dispatcher = _dispatcher()
	try:
		result = dispatcher.load_catalog()
	except SupersededError:
		raise HTTPException(status_code=409, detail=SUPERSEDED_DETAIL)
	if result is None:
		raise HTTPException(status_code=502, detail="Error cargando películas")
	return result_out(result)


# Main dispatch endpoint
@app.post("/dispatch/{variant}", response_model=ResultOut)
def dispatch(variant: str, selection: Optional[SelectionIn] = None):
	"""Run one variant and return its normalized result."""
	dispatcher = _dispatcher()
	descriptor = dispatcher.lookup(variant)
	if descriptor is None:
		raise HTTPException(status_code=404, detail=f"Unknown variant: {variant}")

	state = SelectionState(**(selection or SelectionIn()).model_dump())  # API model -> domain record
	logger.debug(f"[API] /dispatch/{variant} selection={state}")  # debug log of input
	try:
		result = dispatcher.dispatch(descriptor.variant, state)
	except SupersededError as e:
		logger.info(f"[API] /dispatch/{variant} superseded: {e}")
		raise HTTPException(status_code=409, detail=SUPERSEDED_DETAIL)
	if result is None:
		message = descriptor.validate(state)
		if message:
			raise HTTPException(status_code=400, detail=message)  # selection-invalid
		raise HTTPException(status_code=502, detail=descriptor.error_message)  # transport/parse failure
	return result_out(result)


@app.get("/filter/{genre}", response_model=ResultOut)
def filter_by_genre(genre: str):
	dispatcher = _dispatcher()
	if not genre.strip():
		raise HTTPException(status_code=400, detail="Selecciona un género")
	try:
		result = dispatcher.filter_by_genre(genre)
	except SupersededError:
		raise HTTPException(status_code=409, detail=SUPERSEDED_DETAIL)
	if result is None:
		raise HTTPException(status_code=502, detail="Error filtrando por género")
	return result_out(result)


@app.get("/results/current", response_model=ResultOut)
def current_result():
	result = _dispatcher().current
	if result is None:
		raise HTTPException(status_code=404, detail="No result yet")
	return result_out(result)

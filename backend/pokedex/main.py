import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .routers import health, pokemon, scanner
from .routers import config as config_router
from .config import POKEDEX_WARMUP
from .services.engine import get_engine
from .services.errors import PokedexError

app = FastAPI(title="Pokédex API")
logger = logging.getLogger("uvicorn.error")

# Dev CORS (adjust origins for production)
app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(pokemon.router, prefix="/pokemon", tags=["pokemon"])
app.include_router(scanner.router, prefix="/scanner", tags=["scanner"])
app.include_router(config_router.router, prefix="/config", tags=["config"])


# Build the region index and start the bulk catalog load on startup
@app.on_event("startup")
async def on_startup():
	if not POKEDEX_WARMUP:
		logger.info("Warmup disabled (POKEDEX_WARMUP=false); catalog loads on first query")
		return

	engine = get_engine()
	try:
		lookup = await engine.get_region_map()
		logger.info("Region map ready: %s entries", len(lookup))
	except PokedexError as e:
		# Not fatal: the region map is rebuilt on first use
		logger.warning("Region map build failed: %s", e)

	# The bulk load fans out over every entry; don't hold up startup for it
	engine.start_background_load()


@app.get("/")
def read_root():
	return {"message": "Pokédex API is running"}


if __name__ == "__main__":
	import uvicorn
	uvicorn.run(app, host="0.0.0.0", port=8000)

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from exposure_api.config import get_settings
from exposure_api.routers.exposure import router as exposure_router


def create_app() -> FastAPI:
	settings = get_settings()
	logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

	app = FastAPI(title="Exposure Equivalence API", version="0.1.0")

	# CORS (adjust origins in production)
	app.add_middleware(
		CORSMiddleware,
		allow_origins=settings.cors_origins,
		allow_credentials=False,
		allow_methods=["*"],
		allow_headers=["*"],
	)

	# Routers
	app.include_router(exposure_router)

	return app


app = create_app()


if __name__ == "__main__":
	# Local dev server: uvicorn exposure_api.main:app --reload
	import uvicorn

	uvicorn.run("exposure_api.main:app", host="0.0.0.0", port=8000, reload=True)

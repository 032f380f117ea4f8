import logging
import os

from fastapi import FastAPI

from api import state
from api.routers import actions, analysis, ops

# Logging configuration
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="momentum")
app.include_router(analysis.router)
app.include_router(actions.router)
app.include_router(ops.router)


@app.on_event("startup")
async def startup() -> None:
    if state.backend is None:
        return
    loaded = await state.backend.warm_up()
    logger.info(
        f"Intent backend: {state.settings.intent_backend} (model ready: {loaded})"
    )


@app.on_event("shutdown")
async def shutdown() -> None:
    if state.backend is not None:
        state.backend.executor.cleanup()
        logger.info("Executor state cleared")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )

from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI

from telemetry_server.adapters.api.routes import router
from telemetry_server.runtime import Runtime, build_runtime


def create_app(runtime_factory: Optional[Callable[[], Runtime]] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        runtime = (runtime_factory or build_runtime)()
        app.state.live_view = runtime.view
        runtime.start()
        try:
            yield
        finally:
            runtime.stop()

    app = FastAPI(title="Air Telemetry", lifespan=lifespan)
    app.include_router(router)
    return app


app = create_app()

# app/main.py
import asyncio

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.routers import health, products
from app.api.routers.messages import router as message_router
from app.data.database import SessionLocal, init_db
from app.transport.tcp_server import TcpServer
from app.utils.settings import HTTP_HOST, HTTP_PORT, TCP_HOST, TCP_PORT, LOG_LEVEL
from app.utils.logging import get_logger

logger = get_logger(__name__)


async def validation_error_handler(request: Request, exc: RequestValidationError):
    #bez "input" - np. cena 1e999 to inf, a JSONResponse nie serializuje inf/nan
    errors = [{k: v for k, v in err.items() if k != "input"} for err in exc.errors()]
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(errors)})


def create_app() -> FastAPI:
    init_db()
    logger.info("Database tables ready")

    app = FastAPI(
        title="Product Service",
        version="1.0.0",
    )

    #health przed products, inaczej /health lapie GET /{product_id}
    app.include_router(health.router)
    app.include_router(products.router)

    app.add_exception_handler(RequestValidationError, validation_error_handler)

    return app


app = create_app()


async def serve():
    tcp_server = TcpServer(message_router, SessionLocal, TCP_HOST, TCP_PORT)
    try:
        await tcp_server.start()
    except OSError as e:
        logger.error(f"Cannot bind TCP listener on {TCP_HOST}:{TCP_PORT}: {e}")
        raise

    http_server = uvicorn.Server(
        uvicorn.Config(app, host=HTTP_HOST, port=HTTP_PORT, log_level=LOG_LEVEL.lower())
    )
    try:
        await http_server.serve()
    finally:
        await tcp_server.close()


def main():
    asyncio.run(serve())


if __name__ == "__main__":
    main()

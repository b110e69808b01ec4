import asyncio
import os
import threading

#baza w pamieci - musi byc ustawione przed importem app.*
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from fastapi.testclient import TestClient

from app.data.database import Base, SessionLocal, engine, init_db


@pytest.fixture(autouse=True)
def clean_db():
    Base.metadata.drop_all(bind=engine)
    init_db()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    from app.main import app

    with TestClient(app) as c:
        yield c


@pytest.fixture
def tcp_server():
    """Prawdziwy listener TCP na losowym porcie, petla asyncio w osobnym watku."""
    from app.api.routers.messages import router
    from app.transport.tcp_server import TcpServer

    loop = asyncio.new_event_loop()
    server = TcpServer(router, SessionLocal, "127.0.0.1", 0)
    loop.run_until_complete(server.start())
    thread = threading.Thread(target=loop.run_forever, daemon=True)
    thread.start()

    yield server

    asyncio.run_coroutine_threadsafe(server.close(), loop).result(timeout=5)
    loop.call_soon_threadsafe(loop.stop)
    thread.join(timeout=5)
    loop.close()

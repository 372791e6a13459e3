"""Shared fixtures: fake fetch collaborators and a SQLModel-backed list endpoint."""

from collections import deque
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple
from urllib.parse import parse_qsl

import anyio
import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from fsp_collection.models import PageResult
from fsp_collection.server import ListQuery, ListQueryEngine, parse_list_query
from sqlalchemy import DateTime, StaticPool
from sqlmodel import Field, Session, SQLModel, create_engine, select


def page(rows: List[Any], total: Optional[int] = None, total_pages: int = 1) -> dict:
    """Wire payload of one list page."""
    return {"data": rows, "total": len(rows) if total is None else total, "total_pages": total_pages}


class FakeFetcher:
    """Fetcher answering from a queue of payloads or exceptions."""

    def __init__(self):
        self.calls: List[Tuple[str, str]] = []
        self.responses: deque = deque()
        self.default = page([])

    def queue(self, *responses: Any) -> "FakeFetcher":
        self.responses.extend(responses)
        return self

    async def fetch(self, endpoint: str, query_string: str) -> Any:
        self.calls.append((endpoint, query_string))
        response = self.responses.popleft() if self.responses else self.default
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last_params(self) -> dict:
        return dict(parse_qsl(self.calls[-1][1]))


class Gate:
    """One in-flight request of a GatedFetcher, resolved by the test."""

    def __init__(self, query_string: str):
        self.query_string = query_string
        self.event = anyio.Event()
        self.payload: Any = None
        self.error: Optional[Exception] = None

    def resolve(self, payload: Any) -> None:
        self.payload = payload
        self.event.set()

    def fail(self, error: Exception) -> None:
        self.error = error
        self.event.set()


class GatedFetcher:
    """Fetcher whose requests stay in flight until the test resolves them."""

    def __init__(self):
        self.gates: List[Gate] = []

    async def fetch(self, endpoint: str, query_string: str) -> Any:
        gate = Gate(query_string)
        self.gates.append(gate)
        await gate.event.wait()
        if gate.error is not None:
            raise gate.error
        return gate.payload


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def gated_fetcher():
    return GatedFetcher()


@pytest.fixture
def make_page():
    return page


# --- List endpoint backed by SQLModel ---


class Participant(SQLModel, table=True):
    """Participant model served by the test list endpoint."""

    __tablename__ = "participant"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    email: str
    status: str = Field(default="active")
    age: int | None = Field(default=None)
    created_at: datetime = Field(sa_type=DateTime(timezone=True))


class ParticipantPublic(SQLModel):
    """Public participant model."""

    id: int
    name: str
    email: str
    status: str
    age: int | None
    created_at: datetime


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Create a test database session."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    with Session(engine) as session:
        participants = [
            Participant(name="Alice", email="alice@example.com", age=30,
                        created_at=datetime(2024, 1, 5, 10, 0, tzinfo=timezone.utc)),
            Participant(name="Bob", email="bob@example.com", status="inactive", age=25,
                        created_at=datetime(2024, 1, 20, 8, 15, tzinfo=timezone.utc)),
            Participant(name="Carol", email="carol@example.com", age=41,
                        created_at=datetime(2024, 2, 10, 23, 59, tzinfo=timezone.utc)),
            Participant(name="Dave", email="dave@example.com", age=35,
                        created_at=datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)),
            Participant(name="Eve", email="eve@example.com", status="inactive", age=28,
                        created_at=datetime(2023, 12, 31, 23, 30, tzinfo=timezone.utc)),
        ]
        session.add_all(participants)
        session.commit()
        yield session
    engine.dispose()


@pytest.fixture
def app(session):
    """FastAPI app exposing participants through the list query contract."""
    app = FastAPI()

    def get_session():
        yield session

    @app.get("/participants", response_model=PageResult[ParticipantPublic])
    def read_participants(
        *,
        session: Session = Depends(get_session),
        list_query: ListQuery = Depends(parse_list_query),
    ):
        engine = ListQueryEngine(
            list_query, search_fields=["name", "email"], extra_fields=["status", "age"]
        )
        return engine.generate_response(select(Participant), session)

    @app.get("/strict/participants", response_model=PageResult[ParticipantPublic])
    def read_participants_strict(
        *,
        session: Session = Depends(get_session),
        list_query: ListQuery = Depends(parse_list_query),
    ):
        engine = ListQueryEngine(
            list_query,
            search_fields=["name", "email"],
            extra_fields=["status", "age"],
            strict_mode=True,
        )
        return engine.generate_response(select(Participant), session)

    return app


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def participants():
    """Base select over the participant table."""
    return select(Participant)

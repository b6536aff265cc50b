import asyncio
from collections import defaultdict
from typing import Dict, List, Union

import pytest


class FakeResponse:
    def __init__(self, status: int, body: str = ""):
        self.status = status
        self._body = body

    async def text(self, errors: str = "strict") -> str:
        return self._body


Outcome = Union[FakeResponse, BaseException]


class _FakeRequest:
    def __init__(self, session: "FakeSession", url: str):
        self._session = session
        self._url = url

    async def __aenter__(self) -> FakeResponse:
        session = self._session
        stage = "page" if "page=" in self._url else "item"
        session.requests.append(self._url)
        session.in_flight[stage] += 1
        session.max_in_flight[stage] = max(session.max_in_flight[stage], session.in_flight[stage])
        try:
            await asyncio.sleep(session.latency)
        finally:
            session.in_flight[stage] -= 1

        outcome = session.next_outcome(self._url)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None


class FakeSession:
    """
    Stands in for aiohttp.ClientSession. Each URL has a script of outcomes
    played in order; the last one repeats. Unknown URLs answer 404.
    """

    def __init__(self, routes: Dict[str, List[Outcome]] = None, latency: float = 0):
        self.routes = {url: list(outcomes) for url, outcomes in (routes or {}).items()}
        self.latency = latency
        self.requests: List[str] = []
        self.in_flight = defaultdict(int)
        self.max_in_flight = defaultdict(int)

    def next_outcome(self, url: str) -> Outcome:
        script = self.routes.get(url)
        if not script:
            return FakeResponse(404)
        return script.pop(0) if len(script) > 1 else script[0]

    def get(self, url: str, **kwargs) -> _FakeRequest:
        return _FakeRequest(self, url)

    def count(self, url: str) -> int:
        return self.requests.count(url)


class RecordingSleep:
    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def make_session():
    return FakeSession


@pytest.fixture
def ok():
    return lambda body="": FakeResponse(200, body)


@pytest.fixture
def status():
    return lambda code: FakeResponse(code)

"""Pytest configuration and fixtures for webdriver-cdp tests."""

import pytest

from webdriver_cdp.session import SessionCache


class FakeSession:
    """
    In-memory stand-in for a CDP session.

    ``responses`` maps a method name to a result dict, or to a callable
    taking the params and returning one.
    """

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []
        self.detached = False

    async def send(self, method, params=None):
        self.calls.append((method, params))
        response = self.responses.get(method, {})
        if callable(response):
            return response(params)
        return response

    async def detach(self):
        self.detached = True

    @property
    def methods(self):
        return [method for method, _ in self.calls]

    def params_for(self, method):
        return [params for m, params in self.calls if m == method]


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def sessions(session):
    """Session cache that always hands out the same fake session."""
    async def factory(page):
        return session

    return SessionCache(factory)


@pytest.fixture
def page():
    return "page-1"

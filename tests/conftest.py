"""Shared test fixtures for Venture Sourcer tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from venture_sourcer import config
from venture_sourcer.models import Company, CompanyInfo, Person, Source
from venture_sourcer.results import ProviderResult


@pytest.fixture(autouse=True)
def no_credentials(monkeypatch):
    """Every test starts with no provider or SMTP credentials."""
    for name in (
        'OPENROUTER_API_KEY',
        'PERPLEXITY_API_KEY',
        'APOLLO_API_KEY',
        'EMAIL_ADDRESS',
        'EMAIL_APP_PASSWORD',
        'EMAIL_SEND_AS',
    ):
        monkeypatch.setattr(config, name, None)


@pytest.fixture
def fake_client():
    """Build a configured LLM client stub that answers with the given responses in order."""
    def _make(*responses):
        client = MagicMock()
        client.configured = True
        client.complete = AsyncMock(side_effect=[
            r if isinstance(r, ProviderResult) else ProviderResult.success(r)
            for r in responses
        ])
        return client
    return _make


@pytest.fixture
def offline_client():
    """An LLM client stub with no API key."""
    client = MagicMock()
    client.configured = False
    client.complete = AsyncMock(return_value=ProviderResult.unconfigured("", "no key"))
    return client


@pytest.fixture
def person():
    return Person(
        id="apollo_p1",
        name="Jane Smith",
        first_name="Jane",
        last_name="Smith",
        title="VP Engineering",
        seniority="vp",
        company_name="Acme",
    )


@pytest.fixture
def company():
    return CompanyInfo(name="Acme", domain="acme.com", industry="Robotics",
                       description="Warehouse robots")


@pytest.fixture
def research_company():
    return Company(id="perplexity_0", name="Stripe", domain="stripe.com", source=Source.RESEARCH)

"""
Pytest configuration and shared fixtures for authorization request tests.

This module provides client registrations, a repository, a resolver and a
factory for Starlette requests used across the test modules.
"""

import pytest
from typing import Dict, Optional
from urllib.parse import urlencode

from starlette.requests import Request

from oauth_request_resolver.client.registrations import InMemoryClientRegistrationRepository
from oauth_request_resolver.client.resolver import AuthorizationRequestResolver
from oauth_request_resolver.shared.oauth_models import (
    ClientRegistration,
    DEFAULT_REDIRECT_URI_TEMPLATE,
)


def build_request(path: str,
                  host: str = "example.com",
                  scheme: str = "https",
                  root_path: str = "",
                  query: Optional[Dict[str, str]] = None,
                  method: str = "GET") -> Request:
    """Build a Starlette request from an ASGI scope."""
    port = 443 if scheme == "https" else 80
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": method,
        "scheme": scheme,
        "server": (host.split(":")[0], port),
        "path": path,
        "root_path": root_path,
        "query_string": urlencode(query or {}).encode("latin-1"),
        "headers": [(b"host", host.encode("latin-1"))],
    }
    return Request(scope)


@pytest.fixture
def make_request():
    """Factory fixture for Starlette requests."""
    return build_request


@pytest.fixture
def public_registration() -> ClientRegistration:
    """Public client using the authorization code grant (PKCE)."""
    return ClientRegistration(
        registration_id="public-client",
        client_id="public-client-id",
        client_authentication_method="none",
        authorization_grant_type="authorization_code",
        authorization_uri="https://provider.example.com/login/oauth/authorize",
        redirect_uri_template=DEFAULT_REDIRECT_URI_TEMPLATE,
        scopes={"read:user", "openid"},
    )


@pytest.fixture
def github_registration() -> ClientRegistration:
    """Confidential client using the authorization code grant."""
    return ClientRegistration(
        registration_id="github",
        client_id="github-client-id",
        client_secret="github-client-secret",
        client_authentication_method="client_secret_basic",
        authorization_grant_type="authorization_code",
        authorization_uri="https://github.com/login/oauth/authorize",
        redirect_uri_template=DEFAULT_REDIRECT_URI_TEMPLATE,
        scopes={"read:user"},
    )


@pytest.fixture
def implicit_registration() -> ClientRegistration:
    """Public client using the implicit grant."""
    return ClientRegistration(
        registration_id="implicit-client",
        client_id="implicit-client-id",
        client_authentication_method="none",
        authorization_grant_type="implicit",
        authorization_uri="https://provider.example.com/authorize",
        redirect_uri_template="{baseUrl}/authorized",
        scopes={"read"},
    )


@pytest.fixture
def password_registration() -> ClientRegistration:
    """Registration with a grant type the resolver does not support."""
    return ClientRegistration(
        registration_id="password-client",
        client_id="password-client-id",
        client_secret="secret",
        authorization_grant_type="password",
    )


@pytest.fixture
def repository(public_registration, github_registration,
               implicit_registration, password_registration) -> InMemoryClientRegistrationRepository:
    """Repository holding every test registration."""
    return InMemoryClientRegistrationRepository([
        public_registration,
        github_registration,
        implicit_registration,
        password_registration,
    ])


@pytest.fixture
def resolver(repository) -> AuthorizationRequestResolver:
    """Resolver using the default base URI."""
    return AuthorizationRequestResolver(repository)


@pytest.fixture(autouse=True)
def disable_logging():
    """Disable logging during tests to reduce noise."""
    import logging
    logging.disable(logging.CRITICAL)
    yield
    logging.disable(logging.NOTSET)


# Pytest configuration
def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "security: marks tests as security-focused tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers automatically."""
    for item in items:
        # Add markers based on test file names
        if "client_application" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        elif "security" in item.nodeid or "error_handling" in item.nodeid:
            item.add_marker(pytest.mark.security)
        else:
            item.add_marker(pytest.mark.unit)

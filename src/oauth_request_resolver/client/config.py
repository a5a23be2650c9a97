"""
Client configuration.

Settings come from environment variables. Client registrations are read from
the JSON file named by ``CLIENT_REGISTRATIONS_FILE`` when set; otherwise the
demo registrations below are used.
"""

import json
import os
from pathlib import Path
from typing import List, Optional

from pydantic import TypeAdapter

from ..shared.oauth_models import ClientRegistration, DEFAULT_REDIRECT_URI_TEMPLATE
from .resolver import DEFAULT_AUTHORIZATION_REQUEST_BASE_URI


CLIENT_CONFIG = {
    "authorization_request_base_uri": os.getenv(
        "AUTHORIZATION_REQUEST_BASE_URI", DEFAULT_AUTHORIZATION_REQUEST_BASE_URI
    ),
    "host": os.getenv("CLIENT_HOST", "0.0.0.0"),
    "port": int(os.getenv("CLIENT_PORT", "8080")),
    "registrations_file": os.getenv("CLIENT_REGISTRATIONS_FILE"),
    "authorization_server": os.getenv("AUTHORIZATION_SERVER_URL", "http://localhost:8081"),
}

_registrations_adapter = TypeAdapter(List[ClientRegistration])


def demo_registrations(authorization_server: Optional[str] = None) -> List[ClientRegistration]:
    """
    Demo registrations covering each supported flow.

    - ``demo-client``: public client, authorization code + PKCE
    - ``github``: confidential client, authorization code
    - ``legacy-implicit``: implicit grant
    """
    authorization_server = authorization_server or CLIENT_CONFIG["authorization_server"]
    return [
        ClientRegistration(
            registration_id="demo-client",
            client_id="demo-client",
            client_name="OAuth Learning Authorization Server",
            authorization_grant_type="authorization_code",
            authorization_uri=f"{authorization_server}/authorize",
            redirect_uri_template=DEFAULT_REDIRECT_URI_TEMPLATE,
            scopes={"read"},
        ),
        ClientRegistration(
            registration_id="github",
            client_id=os.getenv("GITHUB_CLIENT_ID", "github-client-id"),
            client_secret=os.getenv("GITHUB_CLIENT_SECRET", "github-client-secret"),
            client_name="GitHub",
            authorization_grant_type="authorization_code",
            authorization_uri="https://github.com/login/oauth/authorize",
            redirect_uri_template=DEFAULT_REDIRECT_URI_TEMPLATE,
            scopes={"read:user"},
        ),
        ClientRegistration(
            registration_id="legacy-implicit",
            client_id="legacy-implicit",
            client_name="Legacy Implicit Client",
            authorization_grant_type="implicit",
            authorization_uri=f"{authorization_server}/authorize",
            redirect_uri_template="{baseUrl}/authorized",
            scopes={"read"},
        ),
    ]


def load_client_registrations(path: Optional[str] = None) -> List[ClientRegistration]:
    """
    Load client registrations.

    Args:
        path: JSON file holding a list of registrations; defaults to the
            configured ``registrations_file``

    Returns:
        list: Validated client registrations

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If an entry is not a valid registration
    """
    path = path or CLIENT_CONFIG["registrations_file"]
    if not path:
        return demo_registrations()

    with Path(path).open(encoding="utf-8") as f:
        data = json.load(f)
    return _registrations_adapter.validate_python(data)

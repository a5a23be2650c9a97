"""
OAuth 2.0 Pydantic models for client registrations and authorization requests.

This module defines the data exchanged by the authorization request resolver:
the read-only client registration it looks up, the immutable authorization
request it produces, and the error body returned when resolution fails.
"""

from enum import Enum
from types import MappingProxyType
from typing import Any, FrozenSet, List, Mapping, Optional
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


DEFAULT_REDIRECT_URI_TEMPLATE = "{baseUrl}/{action}/oauth2/code/{registrationId}"


class PKCEMethod(str, Enum):
    """PKCE code challenge methods as defined in RFC 7636."""
    S256 = "S256"


class GrantType(str, Enum):
    """OAuth 2.0 authorization grant types."""
    AUTHORIZATION_CODE = "authorization_code"
    IMPLICIT = "implicit"
    REFRESH_TOKEN = "refresh_token"
    CLIENT_CREDENTIALS = "client_credentials"
    PASSWORD = "password"


class ResponseType(str, Enum):
    """OAuth 2.0 authorization endpoint response types."""
    CODE = "code"
    TOKEN = "token"


class ClientAuthenticationMethod(str, Enum):
    """How a client authenticates against the token endpoint."""
    CLIENT_SECRET_BASIC = "client_secret_basic"
    CLIENT_SECRET_POST = "client_secret_post"
    NONE = "none"


class OAuth2ParameterNames:
    """Parameter and attribute names used in authorization requests."""
    RESPONSE_TYPE = "response_type"
    CLIENT_ID = "client_id"
    REDIRECT_URI = "redirect_uri"
    SCOPE = "scope"
    STATE = "state"
    REGISTRATION_ID = "registration_id"
    CODE_VERIFIER = "code_verifier"
    CODE_CHALLENGE = "code_challenge"
    CODE_CHALLENGE_METHOD = "code_challenge_method"


class ClientRegistration(BaseModel):
    """
    Client registration with an OAuth 2.0 provider.

    Registrations for the redirect-based grants (authorization_code and
    implicit) must carry an authorization URI and a redirect URI template.
    When no client authentication method is configured, a client without a
    secret is treated as a public client.
    """
    model_config = ConfigDict(frozen=True)

    registration_id: str = Field(..., min_length=1, description="Registration identifier")
    client_id: str = Field(..., min_length=1, description="OAuth client identifier")
    client_secret: Optional[str] = Field(default=None, description="Client secret (confidential clients)")
    client_authentication_method: ClientAuthenticationMethod = Field(
        default=ClientAuthenticationMethod.CLIENT_SECRET_BASIC,
        description="Token endpoint authentication method"
    )
    authorization_grant_type: GrantType = Field(..., description="Authorization grant type")
    authorization_uri: Optional[str] = Field(default=None, description="Provider authorization endpoint")
    redirect_uri_template: Optional[str] = Field(
        default=DEFAULT_REDIRECT_URI_TEMPLATE,
        description="Redirect URI template ({baseUrl}, {action}, {registrationId})"
    )
    scopes: FrozenSet[str] = Field(default_factory=frozenset, description="Requested scopes")
    client_name: Optional[str] = Field(default=None, description="Display name")

    @field_validator('scopes', mode='before')
    @classmethod
    def split_scope_string(cls, v):
        """Accept a space or comma separated scope string."""
        if isinstance(v, str):
            return frozenset(s for s in v.replace(',', ' ').split() if s)
        return v

    @model_validator(mode='before')
    @classmethod
    def default_authentication_method(cls, data):
        """Clients without a secret default to the 'none' authentication method."""
        if isinstance(data, dict) and data.get('client_authentication_method') is None:
            data = dict(data)
            data['client_authentication_method'] = (
                ClientAuthenticationMethod.CLIENT_SECRET_BASIC
                if data.get('client_secret') else ClientAuthenticationMethod.NONE
            )
        return data

    @model_validator(mode='after')
    def validate_grant_requirements(self):
        """Check the fields each redirect-based grant needs."""
        if self.authorization_grant_type in (GrantType.AUTHORIZATION_CODE, GrantType.IMPLICIT):
            if not self.authorization_uri:
                raise ValueError("authorization_uri is required for redirect-based grants")
            if not self.redirect_uri_template:
                raise ValueError("redirect_uri_template is required for redirect-based grants")
        return self

    @property
    def is_public_client(self) -> bool:
        """True when the client does not authenticate at the token endpoint."""
        return self.client_authentication_method == ClientAuthenticationMethod.NONE

    @property
    def uses_pkce(self) -> bool:
        """True for public clients using the authorization code grant."""
        return self.authorization_grant_type == GrantType.AUTHORIZATION_CODE and self.is_public_client


class AuthorizationRequest(BaseModel):
    """
    OAuth 2.0 authorization request, ready to send as a redirect.

    Built fresh for every resolution and frozen afterwards, including the
    two mappings, which are read-only views over private copies. ``attributes``
    hold values the client keeps for later (registration id, PKCE code
    verifier); ``additional_parameters`` are sent to the authorization
    endpoint alongside the standard parameters.
    """
    model_config = ConfigDict(frozen=True)

    authorization_uri: str = Field(..., min_length=1, description="Provider authorization endpoint")
    grant_type: GrantType = Field(..., description="Authorization grant type")
    response_type: ResponseType = Field(..., description="Authorization response type")
    client_id: str = Field(..., min_length=1, description="OAuth client identifier")
    redirect_uri: Optional[str] = Field(default=None, description="Expanded redirect URI")
    scopes: FrozenSet[str] = Field(default_factory=frozenset, description="Requested scopes")
    state: Optional[str] = Field(default=None, description="CSRF protection state parameter")
    additional_parameters: Mapping[str, Any] = Field(default_factory=dict)
    attributes: Mapping[str, Any] = Field(default_factory=dict)

    @field_validator('additional_parameters', 'attributes', mode='after')
    @classmethod
    def read_only_mapping(cls, v):
        """Copy the input and expose it through a read-only view."""
        return MappingProxyType(dict(v))

    @model_validator(mode='after')
    def validate_response_type(self):
        """Keep response type consistent with the grant."""
        expected = {
            GrantType.AUTHORIZATION_CODE: ResponseType.CODE,
            GrantType.IMPLICIT: ResponseType.TOKEN,
        }.get(self.grant_type)
        if expected is None:
            raise ValueError(f"Unsupported grant type for authorization request: {self.grant_type.value}")
        if self.response_type != expected:
            raise ValueError(
                f"response_type '{self.response_type.value}' does not match grant type '{self.grant_type.value}'"
            )
        return self

    @property
    def registration_id(self) -> Optional[str]:
        return self.attributes.get(OAuth2ParameterNames.REGISTRATION_ID)

    @property
    def code_verifier(self) -> Optional[str]:
        return self.attributes.get(OAuth2ParameterNames.CODE_VERIFIER)

    def to_query_parameters(self) -> List[tuple]:
        """
        Authorization endpoint query parameters in send order.

        Returns:
            list: (name, value) pairs; scopes are sorted and space separated
        """
        params = [
            (OAuth2ParameterNames.RESPONSE_TYPE, self.response_type.value),
            (OAuth2ParameterNames.CLIENT_ID, self.client_id),
        ]
        if self.scopes:
            params.append((OAuth2ParameterNames.SCOPE, " ".join(sorted(self.scopes))))
        if self.state:
            params.append((OAuth2ParameterNames.STATE, self.state))
        if self.redirect_uri:
            params.append((OAuth2ParameterNames.REDIRECT_URI, self.redirect_uri))
        for name, value in self.additional_parameters.items():
            params.append((name, str(value)))
        return params

    @property
    def authorization_request_uri(self) -> str:
        """Full authorization URI including the request query parameters.

        Query parameters already present on the authorization URI are kept.
        """
        parts = urlsplit(self.authorization_uri)
        query = parse_qsl(parts.query, keep_blank_values=True) + self.to_query_parameters()
        return urlunsplit((
            parts.scheme,
            parts.netloc,
            parts.path,
            urlencode(query, quote_via=quote),
            parts.fragment,
        ))


class OAuthError(BaseModel):
    """
    OAuth 2.0 error response model.

    Standard error response format as defined in RFC 6749.
    """
    error: str = Field(..., description="Error code")
    error_description: Optional[str] = Field(
        default=None,
        description="Human-readable error description"
    )
    error_uri: Optional[str] = Field(
        default=None,
        description="URI with error information"
    )
    state: Optional[str] = Field(
        default=None,
        description="State parameter from request"
    )

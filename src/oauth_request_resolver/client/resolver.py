"""
Authorization request resolution.

Maps an incoming request to an OAuth 2.0 authorization request:

1. Extract the registration id from a path of the form
   ``<base>/{registrationId}`` (or take one supplied by the caller)
2. Look up the client registration and dispatch on its grant type
3. Build the authorization request: redirect URI, scopes, state and, for
   public authorization code clients, PKCE parameters

A request that does not target the authorization endpoint resolves to None
and should be passed through untouched.
"""

import re
from typing import Dict, Optional

from starlette.requests import Request

from ..shared.crypto_utils import Base64StringKeyGenerator, PKCEGenerator
from ..shared.errors import (
    InvalidGrantTypeError,
    TemplateExpansionError,
    UnknownRegistrationError,
)
from ..shared.logging_utils import ComponentType, MessageType, OAuthLogger
from ..shared.oauth_models import (
    AuthorizationRequest,
    ClientAuthenticationMethod,
    ClientRegistration,
    GrantType,
    OAuth2ParameterNames,
    ResponseType,
)
from .registrations import ClientRegistrationRepository


DEFAULT_AUTHORIZATION_REQUEST_BASE_URI = "/oauth2/authorization"
REGISTRATION_ID_URI_VARIABLE_NAME = "registrationId"

ACTION_PARAMETER = "action"
DEFAULT_LOGIN_ACTION = "login"
DEFAULT_AUTHORIZE_ACTION = "authorize"

DEFAULT_PORTS = {"http": 80, "https": 443}

_TEMPLATE_VARIABLE = re.compile(r"\{([^{}]*)\}")


class AuthorizationRequestMatcher:
    """
    Matches request paths against ``<base_uri>/{registrationId}``.

    The placeholder captures exactly one non-empty path segment. Matching is
    case-sensitive and the context path (ASGI ``root_path``) is ignored.
    """

    def __init__(self, base_uri: str):
        if not base_uri or not base_uri.strip():
            raise ValueError("authorization_request_base_uri cannot be empty")

        self.base_uri = base_uri.rstrip("/")
        self.pattern = re.compile(
            re.escape(self.base_uri)
            + "/(?P<" + REGISTRATION_ID_URI_VARIABLE_NAME + ">[^/]+)"
        )

    def match_path(self, path: str) -> Optional[str]:
        """Return the registration id captured from ``path``, or None."""
        match = self.pattern.fullmatch(path)
        if match is None:
            return None
        return match.group(REGISTRATION_ID_URI_VARIABLE_NAME)

    def match(self, request: Request) -> Optional[str]:
        return self.match_path(application_path(request))


def context_path(request: Request) -> str:
    return request.scope.get("root_path", "").rstrip("/")


def application_path(request: Request) -> str:
    """Request path with the context path removed."""
    path = request.scope.get("path", "")
    root = context_path(request)
    if root and (path == root or path.startswith(root + "/")):
        path = path[len(root):]
    return path


def build_base_url(request: Request) -> str:
    """
    Scheme, host, port and context path of the current request.

    The host is lowercased and the port is left out when it is the default
    for the scheme.
    """
    url = request.url
    host = url.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    port = url.port
    if port is not None and port != DEFAULT_PORTS.get(url.scheme):
        host = f"{host}:{port}"
    return f"{url.scheme}://{host}{context_path(request)}"


def expand_uri_template(template: str, variables: Dict[str, str]) -> str:
    """
    Substitute ``{name}`` placeholders in ``template``.

    Raises:
        TemplateExpansionError: If a placeholder has no value in ``variables``
    """
    def substitute(match):
        name = match.group(1)
        if name not in variables:
            raise TemplateExpansionError(template, name)
        return variables[name]

    return _TEMPLATE_VARIABLE.sub(substitute, template)


class AuthorizationRequestResolver:
    """
    Resolves OAuth 2.0 authorization requests from incoming HTTP requests.

    Supports the authorization code grant (with PKCE for public clients) and
    the implicit grant. Instances keep no per-request state and can be shared
    between concurrent requests.

    Args:
        client_registration_repository: Registration lookup by id
        authorization_request_base_uri: Base path the registration id follows
        state_generator: Generator for the anti-forgery state parameter
        pkce_generator: Generator for PKCE verifier/challenge pairs
        logger: Logger for resolution events
    """

    def __init__(self,
                 client_registration_repository: ClientRegistrationRepository,
                 authorization_request_base_uri: str = DEFAULT_AUTHORIZATION_REQUEST_BASE_URI,
                 state_generator: Optional[Base64StringKeyGenerator] = None,
                 pkce_generator: Optional[PKCEGenerator] = None,
                 logger: Optional[OAuthLogger] = None):
        if client_registration_repository is None:
            raise ValueError("client_registration_repository cannot be None")

        self.client_registration_repository = client_registration_repository
        self.authorization_request_matcher = AuthorizationRequestMatcher(authorization_request_base_uri)
        self.state_generator = state_generator or Base64StringKeyGenerator()
        self.pkce_generator = pkce_generator or PKCEGenerator()
        self.logger = logger or OAuthLogger(ComponentType.CLIENT.value)

    def resolve(self, request: Request,
                registration_id: Optional[str] = None) -> Optional[AuthorizationRequest]:
        """
        Resolve an authorization request.

        Without ``registration_id`` the id is taken from the request path and
        the redirect action defaults to "login"; with an explicit id the
        action defaults to "authorize". An ``action`` query parameter
        overrides either default.

        Args:
            request: Incoming request
            registration_id: Registration id chosen by the caller

        Returns:
            AuthorizationRequest, or None when the request path does not
            target a registration

        Raises:
            UnknownRegistrationError: No registration has this id, or an
                explicit id is empty
            InvalidGrantTypeError: The registration's grant is not redirect-based
            TemplateExpansionError: The redirect URI template is malformed
        """
        if registration_id is None:
            registration_id = self.authorization_request_matcher.match(request)
            if registration_id is None:
                return None
            default_action = DEFAULT_LOGIN_ACTION
        else:
            if not registration_id:
                self.logger.log_error(
                    "unknown_registration",
                    "Registration id cannot be empty",
                    {"registration_id": registration_id, "path": request.url.path}
                )
                raise UnknownRegistrationError(registration_id)
            default_action = DEFAULT_AUTHORIZE_ACTION

        action = request.query_params.get(ACTION_PARAMETER, default_action)
        return self._resolve(request, registration_id, action)

    def _resolve(self, request: Request, registration_id: str, action: str) -> AuthorizationRequest:
        client_registration = self.client_registration_repository.find_by_registration_id(registration_id)
        if client_registration is None:
            self.logger.log_error(
                "unknown_registration",
                "No client registration found",
                {"registration_id": registration_id, "path": request.url.path}
            )
            raise UnknownRegistrationError(registration_id)

        attributes = {OAuth2ParameterNames.REGISTRATION_ID: client_registration.registration_id}
        additional_parameters = {}

        grant_type = client_registration.authorization_grant_type
        if grant_type == GrantType.AUTHORIZATION_CODE:
            response_type = ResponseType.CODE
            if client_registration.client_authentication_method == ClientAuthenticationMethod.NONE:
                self._add_pkce_parameters(attributes, additional_parameters)
        elif grant_type == GrantType.IMPLICIT:
            response_type = ResponseType.TOKEN
        else:
            self.logger.log_error(
                "invalid_grant_type",
                "Grant type is not supported for authorization requests",
                {"registration_id": registration_id, "grant_type": grant_type.value}
            )
            raise InvalidGrantTypeError(client_registration.registration_id, grant_type.value)

        authorization_request = AuthorizationRequest(
            authorization_uri=client_registration.authorization_uri,
            grant_type=grant_type,
            response_type=response_type,
            client_id=client_registration.client_id,
            redirect_uri=self.expand_redirect_uri(request, client_registration, action),
            scopes=client_registration.scopes,
            state=self.state_generator.generate_key(),
            additional_parameters=additional_parameters,
            attributes=attributes,
        )

        self.logger.log_oauth_message(
            ComponentType.CLIENT.value, ComponentType.USER_AGENT.value,
            MessageType.REDIRECT.value,
            {
                "registration_id": client_registration.registration_id,
                "grant_type": grant_type.value,
                "client_id": authorization_request.client_id,
                "authorization_uri": authorization_request.authorization_uri,
                "redirect_uri": authorization_request.redirect_uri,
                "scope": " ".join(sorted(authorization_request.scopes)),
                "state": authorization_request.state,
                "pkce": OAuth2ParameterNames.CODE_CHALLENGE in additional_parameters,
            }
        )
        return authorization_request

    def expand_redirect_uri(self, request: Request,
                            client_registration: ClientRegistration,
                            action: str) -> str:
        """
        Expand the registration's redirect URI template.

        Supported variables are ``baseUrl``, ``action`` and
        ``registrationId``; see ``DEFAULT_REDIRECT_URI_TEMPLATE``.
        """
        variables = {
            "baseUrl": build_base_url(request),
            "action": action,
            REGISTRATION_ID_URI_VARIABLE_NAME: client_registration.registration_id,
        }
        try:
            return expand_uri_template(client_registration.redirect_uri_template, variables)
        except TemplateExpansionError as e:
            e.registration_id = client_registration.registration_id
            self.logger.log_error(
                "template_expansion",
                str(e),
                {"registration_id": client_registration.registration_id}
            )
            raise

    def _add_pkce_parameters(self, attributes: dict, additional_parameters: dict):
        """Store the code verifier in attributes and send its challenge."""
        pkce = self.pkce_generator.generate_parameters()
        attributes[OAuth2ParameterNames.CODE_VERIFIER] = pkce.code_verifier
        additional_parameters[OAuth2ParameterNames.CODE_CHALLENGE] = pkce.code_challenge

        if pkce.code_challenge_method is None:
            self.logger.log_pkce_operation(
                MessageType.PKCE_FALLBACK,
                {
                    "reason": "SHA-256 unavailable, sending plain code challenge",
                    "code_challenge": pkce.code_challenge,
                },
                success=False
            )
            return

        additional_parameters[OAuth2ParameterNames.CODE_CHALLENGE_METHOD] = pkce.code_challenge_method
        self.logger.log_pkce_operation(
            MessageType.PKCE_GENERATION,
            {
                "code_verifier": pkce.code_verifier,
                "code_challenge": pkce.code_challenge,
                "code_challenge_method": pkce.code_challenge_method,
            }
        )

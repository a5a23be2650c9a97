"""
OAuth 2.0 Client Application

This FastAPI application sends users to their provider's authorization
endpoint. Requests to ``/oauth2/authorization/{registrationId}`` are turned
into 302 redirects carrying the client id, redirect URI, scopes, state and,
for public clients, a PKCE challenge. All other requests pass through.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse

from ..shared.errors import AuthorizationRequestError
from ..shared.logging_utils import ComponentType, OAuthLogger
from ..shared.oauth_models import AuthorizationRequest, OAuthError
from ..shared.security import SecurityHeaders
from .config import CLIENT_CONFIG, load_client_registrations
from .registrations import InMemoryClientRegistrationRepository
from .resolver import AuthorizationRequestResolver

app = FastAPI(
    title="OAuth 2.0 Client",
    description="Resolves OAuth 2.0 authorization requests and redirects to the provider",
    version="1.0.0"
)

logger = OAuthLogger(ComponentType.CLIENT.value)

client_registration_repository = InMemoryClientRegistrationRepository(load_client_registrations())

resolver = AuthorizationRequestResolver(
    client_registration_repository,
    CLIENT_CONFIG["authorization_request_base_uri"],
    logger=logger
)


def authorization_redirect(authorization_request: AuthorizationRequest) -> RedirectResponse:
    """302 redirect to the provider authorization endpoint."""
    return RedirectResponse(authorization_request.authorization_request_uri, status_code=302)


def authorization_error_response(error: AuthorizationRequestError) -> JSONResponse:
    body = OAuthError(error=error.error_code, error_description=str(error))
    return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))


@app.middleware("http")
async def authorization_request_redirect(request: Request, call_next):
    """
    Redirect requests that target a client registration.

    Requests whose path does not match the authorization request base URI
    resolve to None and continue to the application unchanged.
    """
    try:
        authorization_request = resolver.resolve(request)
    except AuthorizationRequestError as e:
        response = authorization_error_response(e)
    else:
        if authorization_request is None:
            response = await call_next(request)
        else:
            response = authorization_redirect(authorization_request)

    for header_name, header_value in SecurityHeaders.get_oauth_security_headers().items():
        response.headers[header_name] = header_value
    return response


@app.get("/authorize/{registration_id}")
async def authorize_client(request: Request, registration_id: str):
    """
    Start authorization for an explicitly named registration.

    The redirect URI action defaults to "authorize".
    """
    try:
        authorization_request = resolver.resolve(request, registration_id)
    except AuthorizationRequestError as e:
        return authorization_error_response(e)
    return authorization_redirect(authorization_request)


@app.get("/")
async def index():
    """List the configured registrations and their authorization links."""
    base_uri = resolver.authorization_request_matcher.base_uri
    return {
        "service": "OAuth 2.0 Client",
        "registrations": [
            {
                "registration_id": registration.registration_id,
                "client_name": registration.client_name or registration.registration_id,
                "grant_type": registration.authorization_grant_type.value,
                "pkce": registration.uses_pkce,
                "authorization_link": f"{base_uri}/{registration.registration_id}",
            }
            for registration in client_registration_repository
        ]
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "oauth-client"}


if __name__ == "__main__":
    import uvicorn
    logger.log_startup(CLIENT_CONFIG["port"], {
        "authorization_request_base_uri": CLIENT_CONFIG["authorization_request_base_uri"],
        "registrations": len(client_registration_repository),
    })
    uvicorn.run(app, host=CLIENT_CONFIG["host"], port=CLIENT_CONFIG["port"])

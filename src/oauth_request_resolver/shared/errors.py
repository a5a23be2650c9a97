"""
Exception hierarchy for authorization request resolution.

All errors stem from static configuration (unknown registrations, unsupported
grant types, bad redirect URI templates) and are never retried.
"""

from typing import Optional


class AuthorizationRequestError(ValueError):
    """Base exception for authorization request resolution failures."""

    error_code = "invalid_request"


class UnknownRegistrationError(AuthorizationRequestError):
    """Raised when a registration id does not resolve to a client registration."""

    def __init__(self, registration_id: str):
        self.registration_id = registration_id
        super().__init__(f"Invalid Client Registration with Id: {registration_id}")


class InvalidGrantTypeError(AuthorizationRequestError):
    """Raised when a client registration uses a grant type other than
    authorization_code or implicit."""

    def __init__(self, registration_id: str, grant_type: str):
        self.registration_id = registration_id
        self.grant_type = grant_type
        super().__init__(
            f"Invalid Authorization Grant Type ({grant_type}) "
            f"for Client Registration with Id: {registration_id}"
        )


class TemplateExpansionError(AuthorizationRequestError):
    """Raised when a redirect URI template references an unsupported variable."""

    def __init__(self, template: str, variable: str, registration_id: Optional[str] = None):
        self.template = template
        self.variable = variable
        self.registration_id = registration_id
        super().__init__(
            f"Redirect URI template '{template}' references unknown variable '{variable}'"
        )

"""
Error taxonomy for the signup flow.

Each error carries the HTTP status and the user-facing copy rendered on the
error page by the application's exception handlers.
"""

from __future__ import annotations

from http import HTTPStatus


class SignupError(Exception):
    """Base class for failures that end a signup request with an error page."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR
    title: str = "Erreur inattendue"
    message: str = "Une erreur est survenue. Merci de réessayer plus tard."

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(detail or self.message)
        self.detail = detail


class SignupValidationError(SignupError):
    """The registration form is missing a required field."""

    status_code = HTTPStatus.BAD_REQUEST
    title = "Informations manquantes"
    message = (
        "Merci de renseigner le nom de votre entreprise et votre email de contact "
        "pour continuer."
    )


class ConfigurationError(SignupError):
    """The operator has not configured something the flow depends on."""

    title = "Configuration manquante"
    message = "L'application n'est pas correctement configurée. Merci de contacter le support."


class ProviderNotConfiguredError(ConfigurationError):
    """Google OAuth client credentials are absent."""

    title = "Configuration Google manquante"
    message = (
        "L'application n'a pas été configurée avec les identifiants OAuth Google. "
        "Merci de contacter le support."
    )


class StateVerificationError(SignupError):
    """The signup state token cannot be trusted; the user must start over."""

    status_code = HTTPStatus.BAD_REQUEST
    title = "Lien expiré ou invalide"
    message = (
        "Le lien de connexion n'est plus valide. Merci de recommencer le processus "
        "d'inscription."
    )


class MissingStateError(StateVerificationError):
    title = "Requête invalide"
    message = (
        "Le paramètre de suivi nécessaire pour Google est manquant. Merci de soumettre "
        "à nouveau le formulaire."
    )


class InvalidOrExpiredStateError(StateVerificationError):
    """Forged, tampered, malformed or expired state token."""


class MissingAuthorizationCodeError(SignupError):
    """Google redirected back without an authorization code."""

    status_code = HTTPStatus.BAD_REQUEST
    title = "Autorisation refusée"
    message = "Google ne nous a pas retourné de code. Merci de réessayer."


class ProviderError(SignupError):
    """Google rejected or failed a request made on behalf of the user."""

    title = "Erreur pendant la connexion"
    message = (
        "Nous n'avons pas pu finaliser l'autorisation Google. Merci de réessayer ou "
        "de contacter le support."
    )


class ProviderExchangeFailedError(ProviderError):
    """Token exchange or profile lookup failed."""


class RecorderError(Exception):
    """Writing a connection to the external store failed."""


__all__ = [
    "ConfigurationError",
    "InvalidOrExpiredStateError",
    "MissingAuthorizationCodeError",
    "MissingStateError",
    "ProviderError",
    "ProviderExchangeFailedError",
    "ProviderNotConfiguredError",
    "RecorderError",
    "SignupError",
    "SignupValidationError",
    "StateVerificationError",
]

"""Service layer exports."""

from .connection_recorder import ConnectionRecorder
from .signup_flow import SignupFlowService
from .state_tokens import DEFAULT_MAX_AGE_MS, StateTokenSigner
from .token_cipher import TokenCipherService

__all__ = [
    "ConnectionRecorder",
    "DEFAULT_MAX_AGE_MS",
    "SignupFlowService",
    "StateTokenSigner",
    "TokenCipherService",
]

"""Release tooling helpers for the trace agent build pipeline."""

__version__ = "0.1.0"
from .credentials import (
    CredentialMaterial,
    CryptoError,
    ciphertext_path,
    decrypt_credentials,
    encrypt_credentials,
)
from .secrets import (
    CREDENTIALS_IV_ENV,
    CREDENTIALS_KEY_ENV,
    SecretAttempt,
    SecretResolutionInfo,
    SecretSpec,
    describe_secret,
    list_secrets,
    register_resolver,
    register_secret,
    resolve_secret,
    resolve_secret_info,
    use_dotenv,
)

__all__ = [
    "__version__",
    "CredentialMaterial",
    "CryptoError",
    "ciphertext_path",
    "decrypt_credentials",
    "encrypt_credentials",
    "CREDENTIALS_IV_ENV",
    "CREDENTIALS_KEY_ENV",
    "SecretAttempt",
    "SecretResolutionInfo",
    "SecretSpec",
    "describe_secret",
    "list_secrets",
    "register_resolver",
    "register_secret",
    "resolve_secret",
    "resolve_secret_info",
    "use_dotenv",
]

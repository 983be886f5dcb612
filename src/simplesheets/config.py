"""
Library configuration.

A SheetsConfig is built once and then only read.  Nothing in the library
keeps process wide settings, a client is handed its config and that is
the only place it looks.
"""
from dataclasses import dataclass, field
from collections.abc import Mapping
from pathlib import Path
import json
import os

from .errors import CredentialsError
from .retry import RetryPolicy

CREDENTIALS_ENV = "SHEETS_CREDENTIALS"
ENVIRONMENT_ENV = "SHEETS_ENVIRONMENT"
COLLABORATOR_ENV = "SHEETS_DEFAULT_COLLABORATOR"

DEFAULT_ENVIRONMENT = "prod"
DEFAULT_TOKEN_CACHE = str((Path.home() / ".simplesheets_tokens.json").absolute())

def load_credentials(credentials: Mapping|str|Path|None = None) -> dict:
    """
    Resolve credential material to a dict.
    A mapping is taken as the parsed credentials.  A string or Path is a
    JSON file to read.  None falls back to the file named by SHEETS_CREDENTIALS.
    """
    source = credentials
    if source is None or source == "":
        source = os.environ.get(CREDENTIALS_ENV) or None
    if source is None:
        raise CredentialsError(f"No credentials provided. Pass credentials mapping/path or set {CREDENTIALS_ENV}.")

    if isinstance(source, Mapping):
        return dict(source)

    if isinstance(source, (str, Path)):
        path = Path(source).expanduser().resolve()
        if not path.is_file():
            raise CredentialsError(f"Credentials file not found: {path}")
        try:
            with open(path, 'r', encoding='utf-8') as f:
                loaded = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise CredentialsError(f"Failed to parse credentials file: {e}") from e
        if not isinstance(loaded, dict):
            raise CredentialsError(f"Credentials file does not hold a JSON object: {path}")
        return loaded

    raise CredentialsError("Invalid credentials format. Must be a mapping or file path.")

@dataclass(frozen=True)
class SheetsConfig():
    """
    credentials:            parsed credential document (service account, authorized user
                            or OAuth client secrets)
    environment:            'prod', 'dev' or 'test'.  dev turns on sharing new spreadsheets
                            with default_collaborator, dev and test log at DEBUG
    retry_policy:           retry/backoff applied to every remote call
    default_collaborator:   email that new spreadsheets are shared with in dev
    token_cache:            where the OAuth installed-app flow caches refreshed tokens
    auth_server/auth_port:  local redirect server for the installed-app flow
    """
    credentials: dict = field(default_factory=dict, repr=False)
    environment: str = field(default=DEFAULT_ENVIRONMENT)
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    default_collaborator: str|None = field(default=None)
    token_cache: str = field(default=DEFAULT_TOKEN_CACHE)
    auth_server: str = field(default="localhost")
    auth_port: int = field(default=0)

    @property
    def is_dev(self) -> bool:
        return self.environment == "dev"

    @classmethod
    def from_options(cls,
                     credentials: Mapping|str|Path|None = None,
                     environment: str|None = None,
                     max_retries: int|None = None,
                     max_backoff_ms: int|None = None,
                     default_collaborator: str|None = None,
                     token_cache: str|Path|None = None,
                     auth_port: int|None = None) -> "SheetsConfig":
        """
        Build a config from loose options, filling gaps from the environment.
        """
        env = environment or os.environ.get(ENVIRONMENT_ENV) or DEFAULT_ENVIRONMENT
        kwargs = {
            "credentials": load_credentials(credentials),
            "environment": str(env).lower(),
            "retry_policy": RetryPolicy().override(max_retries, max_backoff_ms),
            "default_collaborator": default_collaborator or os.environ.get(COLLABORATOR_ENV) or None,
        }
        if token_cache is not None:
            kwargs["token_cache"] = str(token_cache)
        if auth_port is not None:
            kwargs["auth_port"] = int(auth_port)
        return cls(**kwargs)

from pathlib import Path
import json
import logging

import httplib2
import google_auth_httplib2
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build, Resource

from .config import SheetsConfig
from .errors import CredentialsError

logger = logging.getLogger(__name__)

SHEETS = ("sheets", "v4")
DRIVE = ("drive", "v3")

class GWSAccess():
    """
    Authenticated access to the Sheets and Drive services for one config.
    See https://developers.google.com/workspace/guides/create-credentials#choose_the_access_credential_that_is_right_for_you
    for an overview of what you'll need.

    Three kinds of credential documents are understood:
        service_account:    a service account key, the usual server to server setup
        authorized_user:    a stored OAuth user grant with a refresh token
        installed/web:      OAuth client secrets, which triggers the confirmation
                            screens once and then reuses the cached token

    Connection is lazy, nothing talks to Google until a service is requested.
    Services can be handed in directly, which is how the tests swap in fakes.
    """

    SCOPES = [
        "https://www.googleapis.com/auth/spreadsheets",
        "https://www.googleapis.com/auth/drive",
        "https://www.googleapis.com/auth/drive.file",
        "https://www.googleapis.com/auth/drive.metadata.readonly"
    ]

    __DEFAULT_AUTH_PROMPT_MSG = "Please visit this URL to authorize simplesheets: {url}"
    __DEFAULT_AUTH_FLOW_SUCCESS_MSG = "simplesheets is authorized, you may close this window."

    def __init__(self, config: SheetsConfig,
                 services: dict[str, Resource]|None = None) -> None:
        self.__config = config
        self.__creds = None
        self.__services = dict(services or {})

    def __bool__(self) -> bool:
        """True if we are connected and authenticated, or were given services"""
        return self.connected or bool(self.__services)

    def __str__(self) -> str:
        if self.connected:
            return f"Connected:{self.credential_type}"
        return f"Disconnected:{self.credential_type}"

    def __repr__(self) -> str:
        return f"{str(self.__class__)}:{str(self)}"

    @property
    def config(self) -> SheetsConfig:
        return self.__config

    @property
    def creds(self):
        """Current active credentials or None"""
        return self.__creds

    @property
    def connected(self) -> bool:
        """
        Are we authenticated with Google?
        """
        return bool(self.__creds) and bool(self.__creds.valid)

    @property
    def credential_type(self) -> str:
        info = self.__config.credentials
        if "installed" in info or "web" in info:
            return "client_secrets"
        return str(info.get("type", ""))

    def connect(self) -> bool:
        """
        Establish credentials for the configured credential document.
        Service accounts mint their own tokens on first request so valid is
        False until then, connected only reflects user credentials.
        """
        kind = self.credential_type
        info = self.__config.credentials
        try:
            if kind == "service_account":
                self.__creds = service_account.Credentials.from_service_account_info(info, scopes=self.SCOPES)
            elif kind == "authorized_user":
                self.__creds = Credentials.from_authorized_user_info(info, self.SCOPES)
                if not self.__creds.valid and self.__creds.refresh_token:
                    self.__creds.refresh(Request())
            elif kind == "client_secrets":
                self.__creds = self._installed_app_creds(info)
            else:
                raise CredentialsError(f"Unsupported credentials type: {kind or '<missing>'}")
        except CredentialsError:
            raise
        except (ValueError, KeyError) as e:
            raise CredentialsError(f"Invalid credentials: {e}") from e
        logger.debug("Credentials loaded", extra={"credential_type": kind})
        return self.__creds is not None

    def _installed_app_creds(self, client_config: dict):
        """
        OAuth installed-app flow with a token cache so the confirmation
        screens only show up once.  A cache that was granted different
        scopes is thrown away.
        """
        cache = Path(self.__config.token_cache)
        creds = None
        if cache.is_file():
            with open(cache, 'r', encoding='utf-8') as f:
                cached = json.load(f)
            if all(s in cached.get("scopes", []) for s in self.SCOPES):
                creds = Credentials.from_authorized_user_info(cached, self.SCOPES)
            else:
                cache.unlink()
        if creds and not creds.valid and creds.refresh_token:
            try:
                creds.refresh(Request())
            except Exception as e:
                logger.warning("Failed to refresh cached token, re-authorizing: %s", e)
                creds = None
                cache.unlink(missing_ok=True)
        if not creds or not creds.valid:
            flow = InstalledAppFlow.from_client_config(client_config, self.SCOPES)
            creds = flow.run_local_server(host=self.__config.auth_server,
                                          port=self.__config.auth_port,
                                          authorization_prompt_message=self.__DEFAULT_AUTH_PROMPT_MSG,
                                          success_message=self.__DEFAULT_AUTH_FLOW_SUCCESS_MSG)
            user_info = {'refresh_token': creds.refresh_token, 'client_id': creds.client_id,
                         'client_secret': creds.client_secret, 'scopes': self.SCOPES}
            with open(cache, 'w', encoding='utf-8') as f:
                json.dump(user_info, f, ensure_ascii=False, indent=2)
        return creds

    def get_service(self, name: str, version: str) -> Resource:
        """
        Build the requested service if not already available, connecting if required.
        """
        id = f'{name}:{version}'
        s = self.__services.get(id, None)
        if s is None:
            if self.__creds is None:
                self.connect()
            s = build(name, version, credentials=self.__creds, cache_discovery=False)
            self.__services[id] = s
        return s

    @property
    def sheets(self) -> Resource:
        return self.get_service(*SHEETS)

    @property
    def drive(self) -> Resource:
        return self.get_service(*DRIVE)

    def new_http(self):
        """
        A fresh authorized transport for one request.  httplib2.Http is not
        thread safe and requests run on worker threads, so they can't share
        the one the service was built with.  None means use the request's own,
        which is the case for injected services.
        """
        if self.__creds is None:
            return None
        return google_auth_httplib2.AuthorizedHttp(self.__creds, http=httplib2.Http())

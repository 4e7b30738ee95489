# OAuth2 installed-app flow with PKCE
import base64
import enum
import hashlib
import http.server
import logging
import re
import secrets
import string
import threading
import webbrowser
from dataclasses import dataclass
from urllib.parse import urlencode

import requests

from litho.config import READONLY_SCOPE
from litho.errors import AuthorizationFailed, FetchError, SerError

logger = logging.getLogger(__name__)

AUTH_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"

CALLBACK_HOST = "localhost"
CALLBACK_PORT = 7878

# RFC 7636 unreserved characters
VERIFIER_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "-.~_"
VERIFIER_LENGTH = 128

_CODE_RE = re.compile(r"[?&]code=([^&#]*)")


def code_challenge_for(code_verifier: str) -> str:
    """S256 challenge: base64url(SHA-256(verifier)) without padding."""
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")


@dataclass(frozen=True)
class PkceMaterial:
    code_verifier: str
    code_challenge: str

    @classmethod
    def generate(cls, length: int = VERIFIER_LENGTH) -> "PkceMaterial":
        verifier = "".join(secrets.choice(VERIFIER_ALPHABET) for _ in range(length))
        return cls(code_verifier=verifier, code_challenge=code_challenge_for(verifier))

    def __repr__(self) -> str:
        return f"PkceMaterial(code_challenge={self.code_challenge!r})"


def extract_code(url: str) -> str | None:
    """
    Return the ``code`` query parameter of a redirect URL.

    The value ends at ``&`` or the end of the URL. A URL without a code (for
    example an ``error=access_denied`` redirect) yields None.
    """
    match = _CODE_RE.search(url)
    if not match or not match.group(1):
        return None
    return match.group(1)


class CodeSlot:
    """
    Single-assignment hand-off between the listener thread and the waiter.

    The first ``claim`` wins and wakes the waiter. Later claims see the slot
    as taken and return False; they never overwrite the first outcome. A claim
    with ``None`` records a redirect that carried no code.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._ready = threading.Event()
        self._taken = False
        self._code: str | None = None

    @property
    def taken(self) -> bool:
        with self._lock:
            return self._taken

    def claim(self, code: str | None) -> bool:
        with self._lock:
            if self._taken:
                return False
            self._taken = True
            self._code = code
        self._ready.set()
        return True

    def wait(self, timeout: float | None = None) -> str:
        """Block until claimed; raise AuthorizationFailed on timeout or a missing code."""
        if not self._ready.wait(timeout):
            raise AuthorizationFailed(f"No authorization redirect within {timeout}s")
        if self._code is None:
            raise AuthorizationFailed("Authorization failed: redirect carried no code")
        return self._code


class _CallbackHandler(http.server.BaseHTTPRequestHandler):
    """Answers any method on any path; only the first request counts."""

    server: "CallbackServer"

    def _respond(self):
        logger.info(f"Request received. {self.command} {self.path}")
        code = extract_code(self.path)
        if not self.server.code_slot.claim(code):
            body = "Ok"
        elif code is None:
            body = "Authorization failed."
        else:
            body = "Authorization complete."
        payload = body.encode("utf-8")
        self.send_response(200)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        if self.command != "HEAD":
            self.wfile.write(payload)

    do_GET = do_POST = do_PUT = do_PATCH = do_DELETE = do_HEAD = do_OPTIONS = _respond

    def log_message(self, format, *args):
        logger.debug(f"callback: {format % args}")


class CallbackServer(http.server.HTTPServer):
    """Local redirect target served from a background thread."""

    def __init__(self, host: str, port: int, code_slot: CodeSlot):
        self.code_slot = code_slot
        super().__init__((host, port), _CallbackHandler)
        self._thread: threading.Thread | None = None

    def start(self):
        self._thread = threading.Thread(
            target=self.serve_forever, kwargs={"poll_interval": 0.1}, name="oauth-callback", daemon=True
        )
        self._thread.start()

    def stop(self):
        self.shutdown()
        self.server_close()
        if self._thread is not None:
            self._thread.join()


class AuthState(enum.Enum):
    IDLE = "idle"
    LISTENING = "listening"
    CODE_CAPTURED = "code_captured"
    EXCHANGING = "exchanging"
    DONE = "done"
    FAILED = "failed"


class TokenAuthority:
    """
    Obtains refresh and access tokens for an installed-app OAuth client.

    Construction only generates PKCE material and the authorization URL.
    ``fetch_refresh`` runs the interactive flow and needs an operator with a
    browser; ``fetch_access`` exchanges a cached refresh token. Nothing is
    retried, and a failed exchange needs a fresh authorization flow.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        token_endpoint: str = TOKEN_ENDPOINT,
        *,
        auth_endpoint: str = AUTH_ENDPOINT,
        scope: str = READONLY_SCOPE,
        host: str = CALLBACK_HOST,
        port: int = CALLBACK_PORT,
        timeout: float = 60.0,
        open_browser: bool = False,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.token_endpoint = token_endpoint
        self.host = host
        self.port = port
        self.timeout = timeout
        self.open_browser = open_browser
        self.redirect_uri = f"http://{host}:{port}"
        self._pkce = PkceMaterial.generate()
        self.auth_url = self._build_auth_url(auth_endpoint, scope)
        self.state = AuthState.IDLE

    @property
    def code_challenge(self) -> str:
        return self._pkce.code_challenge

    def _build_auth_url(self, auth_endpoint: str, scope: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": scope,
            "code_challenge": self._pkce.code_challenge,
            "code_challenge_method": "S256",
        }
        return f"{auth_endpoint}?{urlencode(params)}"

    def wait_for_code(self, wait_timeout: float | None = None) -> str:
        """Serve the redirect listener until one request arrives, then stop it."""
        slot = CodeSlot()
        try:
            server = CallbackServer(self.host, self.port, slot)
        except OSError as e:
            self.state = AuthState.FAILED
            raise AuthorizationFailed(f"Cannot listen on {self.redirect_uri}: {e}") from e
        server.start()
        self.state = AuthState.LISTENING
        print(f"Open your browser and authorize access:\n  {self.auth_url}")
        if self.open_browser:
            webbrowser.open(self.auth_url)
        try:
            code = slot.wait(wait_timeout)
        except AuthorizationFailed:
            self.state = AuthState.FAILED
            raise
        finally:
            server.stop()
        self.state = AuthState.CODE_CAPTURED
        return code

    def fetch_refresh(self, wait_timeout: float | None = None) -> str:
        """Run the browser flow and return a new refresh token."""
        code = self.wait_for_code(wait_timeout)
        return self._exchange(
            {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "code": code,
                "code_verifier": self._pkce.code_verifier,
                "grant_type": "authorization_code",
                "redirect_uri": self.redirect_uri,
            },
            "refresh_token",
        )

    def fetch_access(self, refresh_token: str) -> str:
        """Exchange a refresh token for a short-lived access token."""
        return self._exchange(
            {
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            },
            "access_token",
        )

    def _exchange(self, form: dict[str, str], field: str) -> str:
        self.state = AuthState.EXCHANGING
        logger.debug(f"Requesting {field} ({form['grant_type']}) from {self.token_endpoint}")
        try:
            r = requests.post(self.token_endpoint, data=form, timeout=self.timeout)
        except requests.RequestException as e:
            self.state = AuthState.FAILED
            raise FetchError(f"Token exchange failed: {e}") from e
        try:
            payload = r.json()
        except ValueError as e:
            self.state = AuthState.FAILED
            raise SerError(f"Token endpoint returned non-JSON body (HTTP {r.status_code})") from e
        value = payload.get(field) if isinstance(payload, dict) else None
        if not isinstance(value, str) or not value:
            self.state = AuthState.FAILED
            detail = payload.get("error", "") if isinstance(payload, dict) else ""
            raise SerError(f"Token response (HTTP {r.status_code}) has no {field} {detail}".rstrip())
        self.state = AuthState.DONE
        return value


def get_access_token(authority: TokenAuthority, store, account: str, clear: bool = False,
                     wait_timeout: float | None = None) -> str:
    """
    Return an access token, authorizing interactively only when needed.

    The refresh token is cached in ``store`` under ``account``; the access
    token is never persisted.
    """
    if clear:
        logger.info(f"Clearing cached token for {account}")
        store.delete(account)
    refresh_token = store.get(account)
    if not refresh_token:
        logger.info("Token not found, authorizing")
        refresh_token = authority.fetch_refresh(wait_timeout)
        store.set(account, refresh_token)
    return authority.fetch_access(refresh_token)

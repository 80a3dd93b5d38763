"""
TickTick OAuth2 authorization-code flow using Authlib.

The flow has two steps:

    awaiting = Authorization.begin_auth(client_id, "http://localhost:8080")
    print(f"Visit: {awaiting.get_url()}")
    # ... user approves, provider redirects with ?code=...&state=...
    token = await awaiting.finish_auth(client_secret, code, state)

The redirect can also be captured locally with ``RedirectListener`` (or
``AwaitingAuthCode.finish_auth_with_redirect``), which waits on the redirect
URI's host and port for a bounded amount of time.
"""

from __future__ import annotations

import asyncio
import contextlib
import html
import logging
import secrets
from types import TracebackType
from typing import Any, NamedTuple
from urllib.parse import parse_qs, urlsplit

import httpx
from authlib.common.security import generate_token
from authlib.integrations.httpx_client import AsyncOAuth2Client, OAuthError
from authlib.oauth2.rfc6749.parameters import prepare_grant_uri
from pydantic import ValidationError

from ticktick_open.constants import (
    AUTHORIZE_URL,
    DEFAULT_REDIRECT_TIMEOUT,
    OAUTH_SCOPES,
    TOKEN_SCOPE,
    TOKEN_URL,
)
from ticktick_open.exceptions import (
    TickTickAuthorizationError,
    TickTickAuthorizationTimeoutError,
    TickTickConfigurationError,
    TickTickCSRFMismatchError,
    TickTickResponseParseError,
)
from ticktick_open.models import AccessToken

logger = logging.getLogger(__name__)

CSRF_TOKEN_LENGTH = 32
REQUEST_READ_TIMEOUT = 10.0

_SUCCESS_PAGE = (
    "<html><head><title>TickTick authorization</title></head>"
    "<body><p>{message}</p><p>You can close this window.</p></body></html>"
)


class AuthorizationResponse(NamedTuple):
    """Query parameters delivered to the redirect URI."""

    code: str
    state: str


def _check_redirect_uri(redirect_uri: str) -> None:
    parts = urlsplit(redirect_uri)
    if parts.scheme not in ("http", "https") or not parts.hostname:
        raise TickTickConfigurationError(
            f"Invalid redirect URI {redirect_uri!r}: expected an absolute http(s) URL"
        )
    try:
        parts.port
    except ValueError as e:
        raise TickTickConfigurationError(f"Invalid redirect URI {redirect_uri!r}: {e}") from e


# =============================================================================
# Flow States
# =============================================================================


class Authorization:
    """Entry point of the authorization flow."""

    @staticmethod
    def begin_auth(client_id: str, redirect_uri: str, **client_kwargs: Any) -> AwaitingAuthCode:
        """
        Build the authorization URL and start waiting for an auth code.

        Args:
            client_id: OAuth client ID from the TickTick developer center
            redirect_uri: Redirect URI registered for the client
            **client_kwargs: Extra ``httpx.AsyncClient`` options used for the
                token exchange (e.g. ``timeout``, ``transport``)

        Returns:
            AwaitingAuthCode holding the URL and CSRF state

        Raises:
            TickTickConfigurationError: If the client ID or redirect URI is invalid
        """
        if not client_id:
            raise TickTickConfigurationError("OAuth client ID is required")
        _check_redirect_uri(redirect_uri)

        csrf_state = generate_token(CSRF_TOKEN_LENGTH)
        authorization_url = prepare_grant_uri(
            AUTHORIZE_URL,
            client_id,
            "code",
            redirect_uri=redirect_uri,
            scope=" ".join(OAUTH_SCOPES),
            state=csrf_state,
        )
        logger.info("Authorization started for client %s", client_id)
        return AwaitingAuthCode(
            authorization_url=authorization_url,
            csrf_state=csrf_state,
            client_id=client_id,
            redirect_uri=redirect_uri,
            client_kwargs=client_kwargs,
        )


class AwaitingAuthCode:
    """Authorization URL issued; waiting for the provider's redirect."""

    def __init__(
        self,
        *,
        authorization_url: str,
        csrf_state: str,
        client_id: str,
        redirect_uri: str,
        client_kwargs: dict[str, Any] | None = None,
    ) -> None:
        self.authorization_url = authorization_url
        self.csrf_state = csrf_state
        self.client_id = client_id
        self.redirect_uri = redirect_uri
        self._client_kwargs = client_kwargs or {}
        self._finished = False

    def __repr__(self) -> str:
        return f"AwaitingAuthCode(client_id={self.client_id!r}, redirect_uri={self.redirect_uri!r})"

    def get_url(self) -> str:
        return self.authorization_url

    @property
    def is_finished(self) -> bool:
        return self._finished

    async def finish_auth(self, client_secret: str, auth_code: str, state: str) -> AccessToken:
        """
        Exchange the authorization code for an access token.

        The returned state is checked before any request is made.

        Args:
            client_secret: OAuth client secret
            auth_code: ``code`` query parameter of the redirect
            state: ``state`` query parameter of the redirect

        Returns:
            AccessToken for the TickTick client

        Raises:
            TickTickCSRFMismatchError: If state differs from the one sent
            TickTickAuthorizationError: If the exchange fails or was already done
            TickTickResponseParseError: If the token response is malformed
        """
        if self._finished:
            raise TickTickAuthorizationError("Authorization flow already finished")
        if not secrets.compare_digest(state.encode(), self.csrf_state.encode()):
            logger.warning("Authorization redirect carried an unexpected state")
            raise TickTickCSRFMismatchError(expected=self.csrf_state, received=state)
        self._finished = True

        logger.info("Exchanging authorization code for an access token")
        try:
            async with AsyncOAuth2Client(
                client_id=self.client_id,
                client_secret=client_secret,
                redirect_uri=self.redirect_uri,
                token_endpoint_auth_method="client_secret_post",
                **self._client_kwargs,
            ) as oauth:
                token = await oauth.fetch_token(
                    TOKEN_URL,
                    grant_type="authorization_code",
                    code=auth_code,
                    scope=TOKEN_SCOPE,
                )
        except OAuthError as e:
            raise TickTickAuthorizationError(f"Token request rejected: {e.error}") from e
        except httpx.HTTPError as e:
            raise TickTickAuthorizationError(f"Token request failed: {e}") from e
        except ValueError as e:
            raise TickTickResponseParseError(f"Token response is not JSON: {e}") from e

        try:
            access_token = AccessToken.model_validate(dict(token))
        except ValidationError as e:
            raise TickTickResponseParseError(f"Unexpected token response: {e}") from e

        logger.info("Access token obtained (scope=%s)", access_token.scope)
        return access_token

    async def finish_auth_with_redirect(
        self,
        client_secret: str,
        *,
        timeout: float = DEFAULT_REDIRECT_TIMEOUT,
    ) -> AccessToken:
        """Capture the redirect on the loopback interface, then finish the flow."""
        response = await wait_for_redirect(self.redirect_uri, timeout=timeout)
        return await self.finish_auth(client_secret, response.code, response.state)


# =============================================================================
# Loopback Redirect Listener
# =============================================================================


class RedirectListener:
    """
    One-shot HTTP listener for the OAuth redirect.

    Reads the request line of incoming connections and resolves with the
    first one carrying ``code`` and ``state`` (or ``error``) query
    parameters. Other requests (favicons, stray requests) get a 400 and are ignored.
    Connections that send nothing within ``request_timeout`` are dropped, and
    closing the listener drops any connection still open.

    Usage:
        async with RedirectListener("127.0.0.1", 8080) as listener:
            response = await listener.wait(timeout=120)
    """

    def __init__(
        self,
        host: str = "127.0.0.1",
        port: int = 8080,
        *,
        request_timeout: float = REQUEST_READ_TIMEOUT,
    ) -> None:
        self.host = host
        self.request_timeout = request_timeout
        self._requested_port = port
        self._server: asyncio.AbstractServer | None = None
        self._result: asyncio.Future[AuthorizationResponse] | None = None
        self._connections: set[asyncio.Task[None]] = set()

    @property
    def port(self) -> int:
        """Bound port (differs from the requested one when 0 was given)."""
        if self._server is None or not self._server.sockets:
            return self._requested_port
        return self._server.sockets[0].getsockname()[1]

    async def start(self) -> None:
        self._result = asyncio.get_running_loop().create_future()
        try:
            self._server = await asyncio.start_server(self._handle, self.host, self._requested_port)
        except OSError as e:
            raise TickTickAuthorizationError(
                f"Cannot listen for the redirect on {self.host}:{self._requested_port}: {e}"
            ) from e
        logger.info("Waiting for authorization redirect on %s:%s", self.host, self.port)

    async def close(self) -> None:
        if self._server is not None:
            self._server.close()
            connections = list(self._connections)
            for task in connections:
                task.cancel()
            await asyncio.gather(*connections, return_exceptions=True)
            await self._server.wait_closed()
            self._server = None

        # An error redirect that arrived after the last wait() is dropped.
        if self._result is not None and self._result.done() and not self._result.cancelled():
            self._result.exception()

    async def __aenter__(self) -> RedirectListener:
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def wait(self, timeout: float = DEFAULT_REDIRECT_TIMEOUT) -> AuthorizationResponse:
        """
        Wait for the redirect.

        Raises:
            TickTickAuthorizationTimeoutError: If nothing arrives within ``timeout``
            TickTickAuthorizationError: If the provider redirected with an error
        """
        if self._result is None:
            raise TickTickAuthorizationError("RedirectListener has not been started")
        try:
            return await asyncio.wait_for(asyncio.shield(self._result), timeout)
        except asyncio.TimeoutError:
            raise TickTickAuthorizationTimeoutError(timeout) from None

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        task = asyncio.current_task()
        if task is not None:
            self._connections.add(task)
        try:
            request_line = await asyncio.wait_for(_read_request_line(reader), self.request_timeout)
            status, message = self._resolve(request_line)
            body = _SUCCESS_PAGE.format(message=html.escape(message)).encode()
            head = (
                f"HTTP/1.1 {status}\r\n"
                "Content-Type: text/html; charset=utf-8\r\n"
                f"Content-Length: {len(body)}\r\n"
                "Connection: close\r\n\r\n"
            )
            writer.write(head.encode() + body)
            await writer.drain()
        except (asyncio.TimeoutError, ConnectionError) as e:
            logger.debug("Dropped redirect connection: %r", e)
        finally:
            self._connections.discard(task)
            writer.close()
            with contextlib.suppress(ConnectionError):
                await writer.wait_closed()

    def _resolve(self, request_line: str) -> tuple[str, str]:
        parts = request_line.split()
        if len(parts) < 2 or self._result is None or self._result.done():
            return "400 Bad Request", "Unexpected request."

        query = parse_qs(urlsplit(parts[1]).query)
        if "error" in query:
            error = query["error"][0]
            self._result.set_exception(TickTickAuthorizationError(f"Authorization denied: {error}"))
            return "200 OK", f"Authorization failed: {error}"

        code = query.get("code", [None])[0]
        state = query.get("state", [None])[0]
        if code is None or state is None:
            return "400 Bad Request", "Missing code or state."

        self._result.set_result(AuthorizationResponse(code=code, state=state))
        logger.info("Authorization redirect received")
        return "200 OK", "Authorization complete."


async def _read_request_line(reader: asyncio.StreamReader) -> str:
    """Read the request line and skip the headers."""
    request_line = (await reader.readline()).decode("latin-1")
    while (await reader.readline()) not in (b"\r\n", b"\n", b""):
        pass
    return request_line


async def wait_for_redirect(
    redirect_uri: str,
    *,
    timeout: float = DEFAULT_REDIRECT_TIMEOUT,
) -> AuthorizationResponse:
    """Listen on the redirect URI's host and port until the redirect arrives."""
    _check_redirect_uri(redirect_uri)
    parts = urlsplit(redirect_uri)
    port = parts.port if parts.port is not None else (443 if parts.scheme == "https" else 80)
    async with RedirectListener(parts.hostname, port) as listener:
        return await listener.wait(timeout)

"""
Fusebill API client implementation.
"""

import json
import logging
import math
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

import requests
from requests.adapters import HTTPAdapter

if TYPE_CHECKING:
    from ..config import FusebillConfig

logger = logging.getLogger(__name__)

MODE_PRODUCTION = "production"
MODE_STAGING = "staging"

# Public API (token auth) and private API (session cookie auth) hosts
PUBLIC_BASE_URLS = {
    MODE_PRODUCTION: "https://secure.fusebill.com/v1",
    MODE_STAGING: "https://stg-secure.fusebill.com/v1",
}
PRIVATE_BASE_URLS = {
    MODE_PRODUCTION: "https://secure.fusebill.com",
    MODE_STAGING: "https://stg-secure.fusebill.com",
}

LOGIN_ENDPOINT = "/api/Login/"
WRITEOFF_ENDPOINT = "/api/invoices/writeoff"


class FusebillError(Exception):
    """Base exception for Fusebill client errors."""

    pass


class FusebillValidationError(FusebillError, ValueError):
    """Input rejected before any request was sent."""

    pass


class FusebillConnectionError(FusebillError):
    """Failed to connect to Fusebill."""

    pass


class FusebillAuthenticationError(FusebillError):
    """Login was rejected by Fusebill."""

    def __init__(self, status_code: int, message: str | None = None):
        self.status_code = status_code
        super().__init__(
            message
            or f"Unable to login to Fusebill (status {status_code}), check username and password"
        )


class FusebillAPIError(FusebillError):
    """API returned a non-success response."""

    def __init__(self, status_code: int, response_body: str | None = None):
        self.status_code = status_code
        self.response_body = response_body
        super().__init__(f"Fusebill API error {status_code}: {response_body or ''}")


class FusebillDecodeError(FusebillError):
    """Response body could not be decoded into the expected shape."""

    pass


@dataclass(frozen=True)
class Credentials:
    """Fusebill credentials.

    username/password are used by the private API login; token is sent as
    the Basic authorization value on the public API.
    """

    username: str = ""
    password: str = ""
    token: str = ""

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r})"


@dataclass
class FusebillResponse:
    """Raw successful response."""

    body: bytes
    status_code: int

    def json(self) -> dict:
        """Decode the body as a JSON object."""
        try:
            data = json.loads(self.body)
        except ValueError as e:
            raise FusebillDecodeError(f"Response is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise FusebillDecodeError(
                f"Expected a JSON object, got {type(data).__name__}"
            )
        return data


@dataclass
class Invoice:
    """Fusebill invoice representation (balance view)."""

    id: int
    outstanding_balance: float

    @classmethod
    def from_api_response(cls, invoice_id: int, data: dict) -> "Invoice":
        """Create from Fusebill API response."""
        raw = data.get("outstandingBalance")
        if raw is None:
            raise FusebillDecodeError(
                f"Invoice {invoice_id}: response has no outstandingBalance"
            )
        # bool is an int subclass but never a valid balance
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise FusebillDecodeError(
                f"Invoice {invoice_id}: outstandingBalance is not a number: {raw!r}"
            )
        return cls(id=invoice_id, outstanding_balance=float(raw))


@dataclass(frozen=True)
class WriteOff:
    """Write-off request payload."""

    invoice_id: int
    amount: float

    def to_dict(self) -> dict:
        return {"invoiceId": self.invoice_id, "amount": self.amount}


def parse_invoice_id(invoice_id: int | str) -> int:
    """Parse an invoice identifier into the integer Fusebill expects."""
    if isinstance(invoice_id, bool):
        raise FusebillValidationError(f"Invalid invoice id: {invoice_id!r}")
    try:
        return int(str(invoice_id).strip())
    except ValueError as e:
        raise FusebillValidationError(f"Invalid invoice id: {invoice_id!r}") from e


def validate_write_off(invoice_id: int | str, amount: float) -> WriteOff:
    """Check a write-off before anything is sent and build its payload."""
    if not (amount > 0 and math.isfinite(amount)):
        raise FusebillValidationError(
            f"Invoice {invoice_id}: write-off amount must be positive, got {amount:.2f}"
        )
    return WriteOff(invoice_id=parse_invoice_id(invoice_id), amount=float(amount))


def resolve_base_url(mode: str, private: bool) -> str:
    """Pick the base URL for a mode and API flavour."""
    urls = PRIVATE_BASE_URLS if private else PUBLIC_BASE_URLS
    try:
        return urls[mode]
    except KeyError:
        raise FusebillValidationError(
            f"Unknown Fusebill mode {mode!r}, expected one of: {', '.join(urls)}"
        ) from None


class FusebillClient:
    """
    Client for the Fusebill API.

    Two flavours share this class:
    - public: every request carries "Authorization: Basic <token>"
    - private: requests ride on a session cookie obtained via login()

    One lock guards login and the cookie jar, so concurrent first-time
    callers log in exactly once. Everything else runs concurrently over a
    single session. No retries.
    """

    DEFAULT_TIMEOUT = 5
    DEFAULT_POOL_SIZE = 10

    def __init__(
        self,
        base_url: str,
        credentials: Credentials,
        session_auth: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        pool_size: int = DEFAULT_POOL_SIZE,
    ):
        """
        Initialize Fusebill client.

        Args:
            base_url: API root (see PUBLIC_BASE_URLS / PRIVATE_BASE_URLS)
            credentials: Username/password and/or token
            session_auth: Use cookie login instead of the token header
            timeout: Per-request timeout in seconds
            pool_size: Connection pool size shared by all requests
        """
        self.base_url = base_url.rstrip("/")
        self.credentials = credentials
        self.session_auth = session_auth
        self.timeout = timeout

        self._lock = threading.Lock()
        # set once login succeeds; the session cookie lives in self.session.cookies
        self._logged_in = False

        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if not session_auth:
            self.session.headers["Authorization"] = f"Basic {credentials.token}"

        adapter = HTTPAdapter(
            pool_connections=pool_size,
            pool_maxsize=pool_size,
            max_retries=0,
        )
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    @classmethod
    def public(cls, mode: str, credentials: Credentials, **kwargs) -> "FusebillClient":
        """Client for the token-authenticated public API."""
        return cls(resolve_base_url(mode, private=False), credentials, **kwargs)

    @classmethod
    def private(cls, mode: str, credentials: Credentials, **kwargs) -> "FusebillClient":
        """Client for the cookie-authenticated private API."""
        return cls(
            resolve_base_url(mode, private=True),
            credentials,
            session_auth=True,
            **kwargs,
        )

    @classmethod
    def from_config(cls, config: "FusebillConfig", private: bool = False) -> "FusebillClient":
        """Build a public or private client from loaded configuration."""
        credentials = Credentials(
            username=config.username,
            password=config.password,
            token=config.token,
        )
        factory = cls.private if private else cls.public
        return factory(config.mode, credentials, timeout=config.timeout)

    @property
    def is_logged_in(self) -> bool:
        with self._lock:
            return self._logged_in

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "FusebillClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(
        self,
        method: str,
        endpoint: str,
        data: dict | None = None,
        body: bytes | str | None = None,
        json_data: dict | None = None,
        headers: dict | None = None,
    ) -> requests.Response:
        """Send a request, mapping transport failures to FusebillConnectionError."""
        url = f"{self.base_url}{endpoint}"

        logger.debug(f"API Request: {method} {url}")
        if json_data:
            logger.debug(f"Request body: {json.dumps(json_data)}")

        try:
            response = self.session.request(
                method=method,
                url=url,
                data=data if data is not None else body,
                json=json_data,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.ConnectionError as e:
            logger.error(f"Connection error to {url}: {e}")
            raise FusebillConnectionError(
                f"Failed to connect to Fusebill at {self.base_url}: {e}"
            ) from e
        except requests.exceptions.Timeout as e:
            logger.error(f"Timeout for {url}: {e}")
            raise FusebillConnectionError(f"Request to Fusebill timed out: {e}") from e
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error for {url}: {e}")
            raise FusebillError(f"Request failed: {e}") from e

        logger.debug(f"Response status: {response.status_code}")
        return response

    def login(self) -> None:
        """
        Establish the private API session.

        Idempotent: returns immediately once the session cookie is established.

        Raises:
            FusebillError: If this client uses token auth
            FusebillAuthenticationError: If Fusebill rejects the credentials
            FusebillConnectionError: On transport failure
        """
        if not self.session_auth:
            raise FusebillError("login() is only available on a session-auth client")

        with self._lock:
            if self._logged_in:
                return

            response = self._request(
                "POST",
                LOGIN_ENDPOINT,
                data={
                    "username": self.credentials.username,
                    "password": self.credentials.password,
                },
            )
            if response.status_code != requests.codes.ok:
                logger.error(f"Login rejected with status {response.status_code}")
                raise FusebillAuthenticationError(response.status_code)

            self._logged_in = True
            logger.info(f"Logged in to Fusebill as {self.credentials.username}")

    def send_request(
        self,
        method: str,
        endpoint: str,
        body: bytes | str | None = None,
        json_data: dict | None = None,
    ) -> FusebillResponse:
        """
        Send an authorized request.

        Args:
            method: HTTP method
            endpoint: Path relative to base_url, starting with "/"
            body: Raw request body
            json_data: JSON-serializable body (takes precedence over body)

        Returns:
            FusebillResponse with the raw body and status code

        Raises:
            FusebillAPIError: On any non-200 response
        """
        if self.session_auth:
            self.login()

        response = self._request(
            method,
            endpoint,
            body=body,
            json_data=json_data,
            headers={"Content-Type": "application/json"},
        )

        if response.status_code != requests.codes.ok:
            logger.error(f"API Error {response.status_code} for {method} {endpoint}")
            logger.debug(f"Full response body: {response.text}")
            raise FusebillAPIError(response.status_code, response.text)

        return FusebillResponse(body=response.content, status_code=response.status_code)

    def get_invoice(self, invoice_id: int | str) -> Invoice:
        """Fetch an invoice's balance view."""
        parsed_id = parse_invoice_id(invoice_id)
        response = self.send_request("GET", f"/invoices/{parsed_id}")
        return Invoice.from_api_response(parsed_id, response.json())

    def get_invoice_balance(self, invoice_id: int | str) -> float:
        """
        Get an invoice's outstanding balance.

        Raises:
            FusebillDecodeError: If the response has no numeric outstandingBalance
        """
        return self.get_invoice(invoice_id).outstanding_balance

    def write_off(self, invoice_id: int | str, amount: float) -> None:
        """
        Write off an invoice.

        Args:
            invoice_id: Fusebill invoice ID
            amount: Amount to write off, must be positive

        Raises:
            FusebillValidationError: If amount is not positive or the id is invalid
            FusebillError: If this client uses token auth
            FusebillAuthenticationError: If the session login fails
            FusebillAPIError: If Fusebill rejects the write-off
        """
        payload = validate_write_off(invoice_id, amount)

        # token clients have no session and fail here before any request
        self.login()
        self.send_request("POST", WRITEOFF_ENDPOINT, json_data=payload.to_dict())

        logger.info(f"Wrote off {payload.amount:.2f} on invoice {payload.invoice_id}")

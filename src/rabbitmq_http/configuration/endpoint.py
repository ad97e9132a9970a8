from __future__ import annotations

import base64
import pathlib
from typing import Any, Dict, List, Optional, Union

import marshmallow as mm

from rabbitmq_http.errors import ConfigurationError

DEFAULT_ENDPOINT = "http://localhost:15672/api"
DEFAULT_USERNAME = "guest"
DEFAULT_PASSWORD = "guest"
DEFAULT_TIMEOUT = 30.0


class Password:
    """
    Password material that is wiped from memory once it is no longer needed.

    The secret is kept in a mutable buffer which is overwritten with zeroes on
    close(), when leaving a ``with`` block, or when the object is collected.
    It is never included in repr() or str(). The API clients derive the
    Authorization header from the buffer on each request rather than keeping a
    copy, so requests sent after close() carry an empty password. Strings
    returned by reveal() are immutable and are not covered by the scrubbing.
    """

    __slots__ = ("_buffer",)

    def __init__(self, secret: Union[str, bytes, bytearray, Password]):
        if isinstance(secret, Password):
            secret = secret._buffer
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        self._buffer = bytearray(secret)

    def reveal(self) -> str:
        return self._buffer.decode("utf-8")

    def basic_authorization(self, username: str) -> str:
        """Value of an HTTP Basic Authorization header for this password."""
        credentials = username.encode("utf-8") + b":" + bytes(self._buffer)
        return "Basic " + base64.b64encode(credentials).decode("ascii")

    def close(self) -> None:
        buffer = getattr(self, "_buffer", None)
        if buffer is None:
            return
        for i in range(len(buffer)):
            buffer[i] = 0
        buffer.clear()

    @property
    def closed(self) -> bool:
        return not self._buffer

    def __enter__(self) -> Password:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __del__(self):
        self.close()

    def __eq__(self, other):
        if isinstance(other, Password):
            return self._buffer == other._buffer
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return "Password(********)"

    __str__ = __repr__


class EndpointSchema(mm.Schema):
    base_url = mm.fields.Str(required=True)
    username = mm.fields.Str(load_default=DEFAULT_USERNAME)
    password = mm.fields.Str(load_default=DEFAULT_PASSWORD)
    vhost = mm.fields.Str(load_default="/")
    timeout = mm.fields.Float(
        load_default=DEFAULT_TIMEOUT,
        validate=mm.validate.Range(min=0, min_inclusive=False),
    )
    ca_certificate_bundle = mm.fields.Str()
    skip_tls_peer_verification = mm.fields.Bool(load_default=False)


class ClientConfiguration:
    """Where the management API lives and how to authenticate against it."""

    __slots__ = (
        "_endpoint",
        "_username",
        "_password",
        "_ca_certificate_bundle",
        "_skip_tls_peer_verification",
        "_timeout",
        "_vhost",
    )

    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        username: str = DEFAULT_USERNAME,
        password: Union[str, Password] = DEFAULT_PASSWORD,
        *,
        ca_certificate_bundle: Optional[Union[str, pathlib.Path]] = None,
        skip_tls_peer_verification: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        vhost: str = "/",
    ):
        if not endpoint:
            raise ConfigurationError("An API endpoint must be specified")
        if timeout <= 0:
            raise ConfigurationError(f"Timeout must be positive, got {timeout}")
        self._endpoint = endpoint.rstrip("/")
        if not self.endpoints:
            raise ConfigurationError(f"No API endpoint in {endpoint!r}")
        self._username = username
        self._password = Password(password)
        self._ca_certificate_bundle = (
            pathlib.Path(ca_certificate_bundle) if ca_certificate_bundle else None
        )
        self._skip_tls_peer_verification = skip_tls_peer_verification
        self._timeout = float(timeout)
        self._vhost = vhost

    @classmethod
    def from_dict(cls, settings: Dict[str, Any]) -> ClientConfiguration:
        try:
            loaded = EndpointSchema().load(settings, unknown=mm.EXCLUDE)
        except mm.ValidationError as e:
            raise ConfigurationError(f"Invalid endpoint configuration: {e}") from None
        return cls(
            endpoint=loaded["base_url"],
            username=loaded["username"],
            password=loaded["password"],
            ca_certificate_bundle=loaded.get("ca_certificate_bundle"),
            skip_tls_peer_verification=loaded["skip_tls_peer_verification"],
            timeout=loaded["timeout"],
            vhost=loaded["vhost"],
        )

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def endpoints(self) -> List[str]:
        """Candidate endpoints, if a comma separated list was configured."""
        return [
            url.strip().rstrip("/")
            for url in self._endpoint.split(",")
            if url.strip()
        ]

    @property
    def username(self) -> str:
        return self._username

    @property
    def password(self) -> Password:
        return self._password

    @property
    def ca_certificate_bundle(self) -> Optional[pathlib.Path]:
        return self._ca_certificate_bundle

    @property
    def skip_tls_peer_verification(self) -> bool:
        return self._skip_tls_peer_verification

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def vhost(self) -> str:
        return self._vhost

    @property
    def verify(self) -> Union[bool, str]:
        """The TLS verification setting understood by requests and httpx."""
        if self._skip_tls_peer_verification:
            return False
        if self._ca_certificate_bundle is not None:
            return str(self._ca_certificate_bundle)
        return True

    def with_endpoint(self, endpoint: str) -> ClientConfiguration:
        return ClientConfiguration(
            endpoint=endpoint,
            username=self._username,
            password=self._password,
            ca_certificate_bundle=self._ca_certificate_bundle,
            skip_tls_peer_verification=self._skip_tls_peer_verification,
            timeout=self._timeout,
            vhost=self._vhost,
        )

    def __repr__(self) -> str:
        return (
            f"<ClientConfiguration endpoint={self._endpoint!r}"
            f" username={self._username!r} timeout={self._timeout}>"
        )


class ClientConfigurationBuilder:
    def __init__(self):
        self._settings: Dict[str, Any] = {}

    def with_endpoint(self, endpoint: str) -> ClientConfigurationBuilder:
        self._settings["endpoint"] = endpoint
        return self

    def with_basic_auth_credentials(
        self, username: str, password: Union[str, Password]
    ) -> ClientConfigurationBuilder:
        self._settings["username"] = username
        self._settings["password"] = password
        return self

    def with_ca_certificate_bundle(
        self, path: Union[str, pathlib.Path]
    ) -> ClientConfigurationBuilder:
        self._settings["ca_certificate_bundle"] = path
        return self

    def with_tls_peer_verification_disabled(self) -> ClientConfigurationBuilder:
        self._settings["skip_tls_peer_verification"] = True
        return self

    def with_timeout(self, seconds: float) -> ClientConfigurationBuilder:
        self._settings["timeout"] = seconds
        return self

    def build(self) -> ClientConfiguration:
        return ClientConfiguration(**self._settings)

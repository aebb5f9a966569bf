"""
Webhook authentication.

GitHub signs the request body with HMAC using the trigger's secret and
sends the digest in ``X-Hub-Signature-256`` (or the legacy
``X-Hub-Signature``). GitLab sends the shared secret itself in
``X-Gitlab-Token``. Both verifiers release the body only after the
request has been authenticated.
"""

import hashlib
import hmac
from typing import Callable
from urllib.parse import parse_qs

from ..utils.exceptions import AuthenticationFailedError
from ..utils.logger import get_logger
from .models import Provider, TriggerSecret
from .request import RawRequest

logger = get_logger(__name__)

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
FORM_PAYLOAD_FIELD = "payload"


class GitHubSignatureVerifier:
    """
    Validates GitHub webhook signatures.

    Header format is ``<algorithm>=<hex digest>``; the SHA-256 header
    takes precedence over the SHA-1 one when both are present.
    """

    SIGNATURE_HEADERS = ("X-Hub-Signature-256", "X-Hub-Signature")
    ALGORITHMS: dict[str, Callable] = {
        "sha1": hashlib.sha1,
        "sha256": hashlib.sha256,
        "sha512": hashlib.sha512,
    }

    def __init__(self, secret: TriggerSecret):
        """
        Initialize signature verifier.

        Args:
            secret: Secret whose ``secret_token`` is the HMAC key
        """
        self.secret = secret

    def verify(self, request: RawRequest, trigger_name: str) -> bytes:
        """
        Authenticate the request and release its JSON payload.

        Args:
            request: Inbound request; its body is consumed here
            trigger_name: Trigger name for log correlation

        Returns:
            The verified JSON payload bytes

        Raises:
            AuthenticationFailedError: Missing, malformed or mismatched signature
            RequestBodyError: If the body cannot be read
        """
        header_name, signature = self._signature_header(request)
        if signature is None:
            self._fail(trigger_name, "missing signature header")

        algorithm, _, digest = signature.partition("=")
        hash_factory = self.ALGORITHMS.get(algorithm.lower())
        if hash_factory is None or not digest:
            self._fail(trigger_name, f"malformed {header_name} header", header_name)

        try:
            received = bytes.fromhex(digest)
        except ValueError:
            self._fail(trigger_name, f"{header_name} digest is not hex encoded", header_name)

        if not self.secret.secret_token:
            self._fail(trigger_name, f"secret {self.secret.name} has an empty secretToken", header_name)

        body = request.read_body()
        expected = hmac.new(self.secret.secret_token, body, hash_factory).digest()
        if not hmac.compare_digest(expected, received):
            self._fail(trigger_name, "payload signature check failed", header_name)

        logger.info(
            f"[{trigger_name}] Signature validated using {header_name}",
            extra={"trigger": trigger_name, "provider": Provider.GITHUB.value},
        )
        return self._extract_payload(request, body)

    def generate_signature(self, body: bytes, algorithm: str = "sha256") -> str:
        """
        Generate a signature header value for a body.

        Args:
            body: Request body to sign
            algorithm: One of sha1, sha256, sha512

        Returns:
            Header value in ``<algorithm>=<hex>`` form
        """
        digest = hmac.new(self.secret.secret_token, body, self.ALGORITHMS[algorithm]).hexdigest()
        return f"{algorithm}={digest}"

    def _signature_header(self, request: RawRequest) -> tuple[str, str | None]:
        for header_name in self.SIGNATURE_HEADERS:
            value = request.header(header_name)
            if value:
                return header_name, value.strip()
        return self.SIGNATURE_HEADERS[0], None

    def _extract_payload(self, request: RawRequest, body: bytes) -> bytes:
        """Form-encoded deliveries carry the JSON document in the ``payload`` field."""
        content_type = (request.header("Content-Type") or "").split(";")[0].strip().lower()
        if content_type != FORM_CONTENT_TYPE:
            return body
        form = parse_qs(body.decode("utf-8", errors="replace"))
        return form.get(FORM_PAYLOAD_FIELD, [""])[0].encode("utf-8")

    def _fail(self, trigger_name: str, reason: str, header: str | None = None):
        logger.warning(
            f"[{trigger_name}] Validation FAIL (error {reason} validating payload)",
            extra={"trigger": trigger_name, "provider": Provider.GITHUB.value},
        )
        raise AuthenticationFailedError(
            f"GitHub webhook authentication failed: {reason}",
            provider=Provider.GITHUB.value,
            header=header,
            secret_name=self.secret.name,
        )


class GitLabTokenVerifier:
    """
    Validates GitLab webhook tokens.

    GitLab uses simple token comparison via the X-Gitlab-Token header.
    """

    TOKEN_HEADER = "X-Gitlab-Token"

    def __init__(self, secret: TriggerSecret):
        """
        Initialize token verifier.

        Args:
            secret: Secret whose ``secret_token`` is the shared token
        """
        self.secret = secret

    def verify(self, request: RawRequest, trigger_name: str) -> bytes:
        """
        Authenticate the request and release its body.

        The token is checked before the body is read, so an
        unauthenticated body is never consumed.

        Raises:
            AuthenticationFailedError: Missing or mismatched token
            RequestBodyError: If the body cannot be read
        """
        token = request.header(self.TOKEN_HEADER)
        if token is None:
            self._fail(trigger_name, f"missing {self.TOKEN_HEADER} header")

        if not self.secret.secret_token:
            self._fail(trigger_name, f"secret {self.secret.name} has an empty secretToken")

        if not hmac.compare_digest(token.encode("latin-1"), self.secret.secret_token):
            self._fail(
                trigger_name,
                f"{self.TOKEN_HEADER} did not match the token stored in the secret: {self.secret.name}",
            )

        logger.info(
            f"[{trigger_name}] {self.TOKEN_HEADER} validated",
            extra={"trigger": trigger_name, "provider": Provider.GITLAB.value},
        )
        return request.read_body()

    def _fail(self, trigger_name: str, reason: str):
        logger.warning(
            f"[{trigger_name}] Validation FAIL ({reason})",
            extra={"trigger": trigger_name, "provider": Provider.GITLAB.value},
        )
        raise AuthenticationFailedError(
            f"GitLab webhook authentication failed: {reason}",
            provider=Provider.GITLAB.value,
            header=self.TOKEN_HEADER,
            secret_name=self.secret.name,
        )

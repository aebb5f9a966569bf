"""
Webhook interception pipeline.

Runs one inbound request through:
    1. Secret verification (GitHub signature or GitLab token)
    2. Event decoding
    3. Declared filter matching
    4. Branch augmentation

Authentication, decoding and augmentation failures raise; a filter
mismatch is a routine outcome and is returned as a rejected
``InterceptResult`` so the caller can try its next trigger.
"""

from enum import Enum
from typing import Optional

from ..config.settings import FilterHeaderNames, Settings
from ..utils.exceptions import InterceptorError, UnsupportedEventTypeError, WebhookDecodeError
from ..utils.logger import get_logger
from .augment import augment_payload
from .decoders import GitHubEventDecoder, GitLabEventDecoder
from .models import DecodedEvent, InterceptResult, Provider, TriggerSecret
from .request import RawRequest
from .signatures import GitHubSignatureVerifier, GitLabTokenVerifier
from .validators import WebhookEventFilter, declared_filter_from_request

logger = get_logger(__name__)


class PipelineStage(str, Enum):
    """Stages a request passes through; FAILED is reachable from any of them."""

    RECEIVED = "received"
    AUTHENTICATED = "authenticated"
    DECODED = "decoded"
    FILTERED = "filtered"
    AUGMENTED = "augmented"
    FAILED = "failed"


def detect_provider(request: RawRequest) -> Provider:
    """
    Select the provider from the headers present on a request.

    Raises:
        WebhookDecodeError: Neither GitHub nor GitLab headers are present
    """
    if request.header(GitHubEventDecoder.EVENT_HEADER) is not None:
        return Provider.GITHUB
    if (
        request.header(GitLabEventDecoder.EVENT_HEADER) is not None
        or request.header(GitLabTokenVerifier.TOKEN_HEADER) is not None
    ):
        return Provider.GITLAB
    raise WebhookDecodeError(
        "Unable to determine webhook provider: no X-GitHub-Event, X-Gitlab-Event or X-Gitlab-Token header"
    )


class WebhookInterceptor:
    """
    Validates and normalizes webhooks for one trigger at a time.

    Holds no per-request state, so one instance can serve concurrent
    requests.
    """

    def __init__(
        self,
        header_names: FilterHeaderNames = FilterHeaderNames(),
        trim_actions: bool = True,
    ):
        """
        Initialize the interceptor.

        Args:
            header_names: Headers carrying the declared filter
            trim_actions: Ignore whitespace around declared action entries
        """
        self.header_names = header_names
        self.event_filter = WebhookEventFilter(trim_actions=trim_actions)
        self.github_decoder = GitHubEventDecoder()
        self.gitlab_decoder = GitLabEventDecoder()

    @classmethod
    def from_settings(cls, settings: Settings) -> "WebhookInterceptor":
        return cls(header_names=settings.filter_headers, trim_actions=settings.trim_action_entries)

    def handle(
        self,
        request: RawRequest,
        trigger_name: str,
        secret: TriggerSecret,
        provider: Optional[Provider] = None,
    ) -> InterceptResult:
        """
        Run a request through the interception pipeline.

        Args:
            request: Inbound request; its body is consumed
            trigger_name: Name of the trigger being evaluated, for logs
            secret: The trigger's secret
            provider: Force a provider instead of detecting it from headers

        Returns:
            InterceptResult carrying the augmented payload on a pass, or
            the mismatch reason on a filter rejection

        Raises:
            AuthenticationFailedError: Signature or token check failed
            WebhookDecodeError: Unknown provider/event type or malformed payload
            UnsupportedEventTypeError: The matched event has no branch augmentation
            RequestBodyError: The body could not be read
        """
        stage = PipelineStage.RECEIVED
        try:
            provider = provider or detect_provider(request)

            verifier = (
                GitHubSignatureVerifier(secret) if provider == Provider.GITHUB else GitLabTokenVerifier(secret)
            )
            body = verifier.verify(request, trigger_name)
            stage = PipelineStage.AUTHENTICATED

            event = self._decode(provider, request, body)
            stage = PipelineStage.DECODED
        except InterceptorError as e:
            logger.warning(
                f"[{trigger_name}] Validation FAIL ({e.message})",
                extra={"trigger": trigger_name, "stage": stage.value},
            )
            raise

        logger.info(
            f"[{trigger_name}] Clone URL coming in as JSON: {event.clone_url}",
            extra={"trigger": trigger_name, "stage": stage.value},
        )
        logger.info(
            f"[{trigger_name}] Handling {provider.value} event with delivery ID: {event.delivery_id}",
            extra={"trigger": trigger_name, "event_type": event.event_type, "event_kind": event.kind.value},
        )

        declared = declared_filter_from_request(request, self.header_names)
        outcome = self.event_filter.match(event, declared)
        stage = PipelineStage.FILTERED

        if not outcome.passed:
            logger.info(
                f"[{trigger_name}] Validation FAIL ({outcome.detail})",
                extra={"trigger": trigger_name, "reason": outcome.reason.value, "stage": stage.value},
            )
            return InterceptResult(
                passed=False,
                provider=provider,
                event_type=event.event_type,
                reason=outcome.reason,
                detail=outcome.detail,
            )

        logger.info(
            f"[{trigger_name}] Validation PASS ({outcome.detail})",
            extra={"trigger": trigger_name, "stage": stage.value},
        )

        try:
            payload = augment_payload(event)
        except UnsupportedEventTypeError as e:
            logger.error(
                f"[{trigger_name}] Failed to add branch to payload processing {provider.value} "
                f"event ID: {event.delivery_id}. Error: {e.message}",
                extra={"trigger": trigger_name, "stage": PipelineStage.FAILED.value, "details": e.details},
            )
            raise

        logger.info(
            f"[{trigger_name}] Validation PASS so writing response",
            extra={"trigger": trigger_name, "stage": PipelineStage.AUGMENTED.value},
        )
        return InterceptResult(
            passed=True,
            provider=provider,
            event_type=event.event_type,
            detail=outcome.detail,
            payload=payload,
        )

    def _decode(self, provider: Provider, request: RawRequest, body: bytes) -> DecodedEvent:
        if provider == Provider.GITHUB:
            event_type = request.header(GitHubEventDecoder.EVENT_HEADER)
            if not event_type:
                raise WebhookDecodeError(f"Missing {GitHubEventDecoder.EVENT_HEADER} header")
            return self.github_decoder.decode(
                event_type, body, delivery_id=request.header(GitHubEventDecoder.DELIVERY_HEADER)
            )

        event_type = request.header(GitLabEventDecoder.EVENT_HEADER)
        if not event_type:
            raise WebhookDecodeError(f"Missing {GitLabEventDecoder.EVENT_HEADER} header")
        return self.gitlab_decoder.decode(event_type, body)

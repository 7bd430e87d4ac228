"""Per-request state threaded through the pipeline."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import IntEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from rpc_pipeline.classifier import ClassifiedError, Failure, Outcome, Success
from rpc_pipeline.exceptions import RequestStateError

if TYPE_CHECKING:
    from rpc_pipeline.endpoint import Endpoint


class RequestStage(IntEnum):
    """Lifecycle of a :class:`RequestState`.

    Stages only move forward. ``CLASSIFIED`` may be reached from any earlier
    stage when a failure cuts processing short.
    """

    CREATED = 0
    DECODED = 1
    VALIDATED = 2
    AUTH_CHECKED = 3
    DISPATCHED = 4
    CLASSIFIED = 5
    SERIALIZED = 6
    DONE = 7


# Fields that may be given a value once and never replaced.
_WRITE_ONCE = frozenset({"raw_body", "headers", "remote_origin", "endpoint"})


@dataclass(eq=False)
class RequestState:
    """Mutable record of one RPC call.

    The transport creates it, the :class:`~rpc_pipeline.dispatcher.Dispatcher`
    owns it while the call is processed, and hooks read or adjust it at every
    stage. Once the request is ``DONE`` the object is read-only.

    Attributes
    ----------
    raw_body : bytes
        Request body as received by the transport.
    headers : Mapping[str, str]
        Transport headers with lowercase names, stored as a read-only
        mapping.
    remote_origin : str | None
        Address of the client.
    endpoint : Endpoint | None
        Endpoint resolved from the request path.
    decoded_envelope : Any
        Parsed request body. After validation it is a dict whose ``params``
        is a list.
    is_authenticated : bool
        Set by an authentication hook. Requests are rejected unless True.
    is_authorized : bool
        Set by an authorization hook. Requests are rejected unless True.
    method_invoked : bool
        True once the method has been called, by the dispatcher or a hook.
    response_envelope : dict[str, Any] | None
        Protocol response built from the outcome.
    serialized_response : str | None
        Final response text. The dispatcher never overwrites a value set by a
        hook.
    """

    raw_body: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)
    remote_origin: str | None = None
    endpoint: Endpoint | None = None
    decoded_envelope: Any = None
    is_authenticated: bool = False
    is_authorized: bool = False
    method_invoked: bool = False
    response_envelope: dict[str, Any] | None = None
    serialized_response: str | None = None
    stage: RequestStage = field(default=RequestStage.CREATED, init=False)
    _outcome: Outcome | None = field(default=None, init=False, repr=False)
    _hook_stages: set = field(default_factory=set, init=False, repr=False)

    def __setattr__(self, name: str, value: Any) -> None:
        current = self.__dict__
        if current.get("stage") is RequestStage.DONE:
            msg = f"Cannot set '{name}' on a finished request"
            raise RequestStateError(msg)
        if name in _WRITE_ONCE:
            if name == "headers":
                value = MappingProxyType(dict(value))
            # Unset fields hold None, b"" or an empty mapping
            previous = current.get(name)
            if previous and previous != value:
                msg = f"'{name}' cannot be changed once set"
                raise RequestStateError(msg)
        super().__setattr__(name, value)

    def advance(self, stage: RequestStage) -> None:
        """Move the request forward to ``stage``.

        Raises
        ------
        RequestStateError
            If ``stage`` is not after the current stage.
        """
        if stage <= self.stage:
            msg = f"Cannot move from {self.stage.name} to {stage.name}"
            raise RequestStateError(msg)
        self.stage = stage

    def mark_hook_stage(self, hook_stage: str) -> None:
        """Record that the hooks of ``hook_stage`` ran for this request.

        Raises
        ------
        RequestStateError
            If the hooks of that stage already ran.
        """
        if hook_stage in self._hook_stages:
            msg = f"Hooks for '{hook_stage}' already ran for this request"
            raise RequestStateError(msg)
        self._hook_stages.add(hook_stage)

    # Outcome

    @property
    def outcome(self) -> Outcome | None:
        return self._outcome

    def succeed(self, value: Any = None) -> None:
        """Set a successful outcome."""
        self._outcome = Success(value)

    def fail(self, error: ClassifiedError) -> None:
        """Set a failed outcome."""
        self._outcome = Failure(error)

    @property
    def failed(self) -> bool:
        return isinstance(self._outcome, Failure)

    @property
    def result(self) -> Any:
        """Return value of the call, or None when it did not succeed."""
        if isinstance(self._outcome, Success):
            return self._outcome.value
        return None

    @property
    def error(self) -> ClassifiedError | None:
        if isinstance(self._outcome, Failure):
            return self._outcome.error
        return None

    # Envelope accessors

    @property
    def rpc_id(self) -> Any:
        """Correlation id of the request, None when unknown, absent or invalid."""
        if not isinstance(self.decoded_envelope, dict):
            return None
        rpc_id = self.decoded_envelope.get("id")
        if isinstance(rpc_id, bool) or not isinstance(rpc_id, str | int | float):
            return None
        return rpc_id

    @property
    def method_name(self) -> str | None:
        if isinstance(self.decoded_envelope, dict):
            method = self.decoded_envelope.get("method")
            if isinstance(method, str):
                return method
        return None

    @property
    def params(self) -> list[Any]:
        if isinstance(self.decoded_envelope, dict):
            params = self.decoded_envelope.get("params")
            if isinstance(params, list):
                return params
        return []

    @property
    def is_notification(self) -> bool:
        """True for a request object carrying no id (absent or null).

        Bodies that could not be decoded into a request object are never
        notifications: the client gets an error response with a null id.
        """
        return (
            isinstance(self.decoded_envelope, dict)
            and self.decoded_envelope.get("id") is None
        )

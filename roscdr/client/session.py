"""Multiplexed bridge session over a single duplex channel."""

import asyncio
from collections.abc import Callable, Mapping
from typing import Any, NewType, Protocol

from loguru import logger

from .control import (
    ControlOp,
    CreateRequest,
    DestroyRequest,
    QosProfile,
    parse_create_response,
    qos_to_wire,
)
from .framing import (
    ServiceRequestFrame,
    ServiceResponseFrame,
    TopicFrame,
    decode_frame,
    encode_service_request,
    encode_topic,
)

PublisherId = NewType("PublisherId", int)
SubscriptionId = NewType("SubscriptionId", int)
ServiceClientId = NewType("ServiceClientId", int)

EndpointId = PublisherId | SubscriptionId | ServiceClientId
QosLike = QosProfile | Mapping[str, Any] | None
SubscriptionCallback = Callable[[memoryview], None]

_CALL_ID_MODULUS = 1 << 32


class SessionError(RuntimeError):
    """Raised when the session is used incorrectly."""


class Channel(Protocol):
    """Duplex frame channel owned by the caller.

    Received frames are handed to ``Session.handle_frame``, text frames as
    ``str`` and binary frames as bytes-like objects.
    """

    def send(self, frame: str | bytes) -> None: ...


def _cancellation(trigger: asyncio.Future) -> BaseException:
    """Exception a cancelled call raises, taken from its cancel trigger."""
    if trigger.cancelled():
        return asyncio.CancelledError()
    exc = trigger.exception()
    if exc is not None:
        return exc
    reason = trigger.result()
    if isinstance(reason, BaseException):
        return reason
    return asyncio.CancelledError(reason)


class Session:
    """Publishers, subscriptions and service clients sharing one channel.

    Endpoint creation and service calls are coroutines that resolve when the
    bridge answers. Each takes an optional ``cancel`` future: if it completes
    before the answer, the call is forgotten and raises the cancellation
    reason. Any number of calls may be in flight; they are told apart only by
    call id.

    Example:
        session = Session(channel)
        pub = await session.create_publisher("/chatter", "std_msgs/msg/String")
        session.publish(pub, serialize(String, {"data": "hi"}))
    """

    def __init__(self, channel: Channel) -> None:
        self._channel = channel
        self._pending_creates: dict[int, Callable[[int], None]] = {}
        self._pending_calls: dict[int, Callable[[memoryview], None]] = {}
        self._subscriptions: dict[int, SubscriptionCallback] = {}
        self._next_call_id = 0

    @property
    def pending_creates(self) -> int:
        return len(self._pending_creates)

    @property
    def pending_calls(self) -> int:
        return len(self._pending_calls)

    @property
    def subscriptions(self) -> frozenset[int]:
        return frozenset(self._subscriptions)

    def _allocate_call_id(self) -> int:
        # Wraps at 32 bits; ids of calls still pending are skipped
        while True:
            call_id = self._next_call_id
            self._next_call_id = (self._next_call_id + 1) % _CALL_ID_MODULUS
            if call_id not in self._pending_creates and call_id not in self._pending_calls:
                return call_id

    async def create_publisher(
        self,
        name: str,
        type: str,
        qos: QosLike = None,
        *,
        cancel: asyncio.Future | None = None,
    ) -> PublisherId:
        endpoint_id = await self._create(ControlOp.CREATE_PUBLISHER, name, type, qos, cancel)
        return PublisherId(endpoint_id)

    async def create_subscription(
        self,
        name: str,
        type: str,
        callback: SubscriptionCallback,
        qos: QosLike = None,
        *,
        cancel: asyncio.Future | None = None,
    ) -> SubscriptionId:
        """Subscribe to a topic; ``callback`` gets each raw CDR payload.

        The callback is registered as soon as the bridge's answer is handled,
        before this coroutine resumes, so no message after it is missed. If
        the task is cancelled between the two, the subscription is destroyed.
        """

        def register(endpoint_id: int) -> None:
            self._subscriptions[endpoint_id] = callback

        endpoint_id = await self._create(
            ControlOp.CREATE_SUBSCRIPTION, name, type, qos, cancel, on_created=register
        )
        return SubscriptionId(endpoint_id)

    async def create_service_client(
        self,
        name: str,
        type: str,
        qos: QosLike = None,
        *,
        cancel: asyncio.Future | None = None,
    ) -> ServiceClientId:
        endpoint_id = await self._create(ControlOp.CREATE_SERVICE_CLIENT, name, type, qos, cancel)
        return ServiceClientId(endpoint_id)

    def publish(self, publisher_id: PublisherId, payload: bytes) -> None:
        """Send one message. There is no acknowledgment."""
        self._channel.send(encode_topic(publisher_id, _payload_bytes(payload)))

    async def call(
        self,
        service_client_id: ServiceClientId,
        payload: bytes,
        *,
        cancel: asyncio.Future | None = None,
    ) -> memoryview:
        """Call a service and return the raw CDR response payload."""
        request = _payload_bytes(payload)
        if cancel is not None and cancel.done():
            raise _cancellation(cancel)

        call_id = self._allocate_call_id()
        frame = encode_service_request(service_client_id, call_id, request)
        return await self._await_response(
            self._pending_calls, call_id, lambda: self._channel.send(frame), cancel
        )

    def destroy(self, endpoint_id: EndpointId) -> None:
        """Release an endpoint without waiting for the bridge.

        Calls already pending against a destroyed service client stay pending.
        """
        self._subscriptions.pop(endpoint_id, None)
        logger.debug("Destroying endpoint {}", endpoint_id)
        self._channel.send(DestroyRequest(id=endpoint_id).to_json())

    def handle_frame(self, frame: str | bytes | bytearray | memoryview) -> None:
        """Dispatch one frame received from the channel.

        Malformed or unexpected frames are dropped; they never disturb the
        calls already in flight.
        """
        if isinstance(frame, str):
            self._handle_text(frame)
        else:
            self._handle_binary(frame)

    async def _create(
        self,
        op: ControlOp,
        name: str,
        type: str,
        qos: QosLike,
        cancel: asyncio.Future | None,
        on_created: Callable[[int], None] | None = None,
    ) -> int:
        if cancel is not None and cancel.done():
            raise _cancellation(cancel)

        call_id = self._allocate_call_id()
        request = CreateRequest(call_id=call_id, op=op, name=name, type=type, qos=qos_to_wire(qos))
        text = request.to_json()
        return await self._await_response(
            self._pending_creates,
            call_id,
            lambda: self._channel.send(text),
            cancel,
            on_created,
            on_abandoned=self.destroy,
        )

    async def _await_response(
        self,
        table: dict[int, Callable[[Any], None]],
        call_id: int,
        send: Callable[[], None],
        cancel: asyncio.Future | None,
        on_resolved: Callable[[Any], None] | None = None,
        on_abandoned: Callable[[Any], None] | None = None,
    ) -> Any:
        """Send a request and wait for the response registered under ``call_id``.

        ``on_resolved`` runs synchronously with the response. ``on_abandoned``
        runs when the awaiting task is cancelled after the response was
        accepted, so the caller never sees the value.
        """
        future = asyncio.get_running_loop().create_future()

        def resolve(value: Any) -> None:
            if future.done():
                return
            # A fired trigger wins even if its callback has not run yet
            if cancel is not None and cancel.done():
                logger.debug("Dropping response for cancelled call {}", call_id)
                future.set_exception(_cancellation(cancel))
                return
            if on_resolved is not None:
                on_resolved(value)
            future.set_result(value)

        def on_cancel(trigger: asyncio.Future) -> None:
            if table.pop(call_id, None) is not None and not future.done():
                future.set_exception(_cancellation(trigger))

        table[call_id] = resolve
        try:
            send()
        except BaseException:
            table.pop(call_id, None)
            raise

        if cancel is not None:
            cancel.add_done_callback(on_cancel)
        try:
            return await future
        except asyncio.CancelledError:
            accepted = future.done() and not future.cancelled() and future.exception() is None
            if accepted and on_abandoned is not None:
                on_abandoned(future.result())
            raise
        finally:
            table.pop(call_id, None)
            if cancel is not None:
                cancel.remove_done_callback(on_cancel)

    def _handle_text(self, text: str) -> None:
        response = parse_create_response(text)
        if response is None:
            logger.debug("Dropping unrecognized control frame: {!r}", text[:120])
            return

        resolve = self._pending_creates.pop(response.call_id, None)
        if resolve is None:
            logger.debug("Dropping create response for unknown call {}", response.call_id)
            return
        resolve(response.id)

    def _handle_binary(self, data: bytes | bytearray | memoryview) -> None:
        frame = decode_frame(data)
        if frame is None:
            logger.debug("Dropping malformed binary frame ({} bytes)", len(data))
            return

        if isinstance(frame, TopicFrame):
            callback = self._subscriptions.get(frame.endpoint_id)
            if callback is None:
                logger.debug("Dropping message for unknown subscription {}", frame.endpoint_id)
                return
            callback(frame.payload)
        elif isinstance(frame, ServiceResponseFrame):
            resolve = self._pending_calls.pop(frame.call_id, None)
            if resolve is None:
                logger.debug("Dropping service response for unknown call {}", frame.call_id)
                return
            resolve(frame.payload)
        elif isinstance(frame, ServiceRequestFrame):
            logger.debug("Dropping service request for client {}", frame.service_client_id)


def _payload_bytes(payload: bytes | bytearray | memoryview) -> bytes | bytearray | memoryview:
    if not isinstance(payload, (bytes, bytearray, memoryview)):
        raise SessionError(f"payload must be bytes-like, got {type(payload).__name__}")
    return payload

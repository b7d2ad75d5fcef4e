"""
Behaviour shared by client and server endpoints.

An endpoint owns the action registry built from its profiles, the direction
table deciding which actions it may send and receive, and the handling of
inbound frames: routing Calls to the registered application handlers and
completing pending requests on CallResult/CallError.
"""

import inspect
from typing import Callable, Iterable, Optional

from loguru import logger
from opentelemetry.metrics import MeterProvider

from ocppj import config
from ocppj.errors import (
    ConnectionLostError,
    DuplicateMessageIdError,
    ErrorCode,
    LocalError,
    OcppError,
    UnsupportedActionError,
)
from ocppj.feature import Feature, Profile
from ocppj.messages import Call, CallError, CallResult, Dialect, encode, parse_envelope
from ocppj.metrics import OcppMetrics
from ocppj.payload import CustomPayload
from ocppj.state import PendingRequest
from ocppj.utils import default_message_id
from ocppj.validation import ValidationError, validator

MAX_ID_ATTEMPTS = 10

ResponseCallback = Callable[[Optional[object], Optional[Exception]], None]


async def call_handler(handler, *args):
    """Call a sync or async handler and return its result."""
    result = handler(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class Endpoint:
    role = None

    def __init__(
        self,
        dialect: Dialect,
        profiles: Iterable[Profile],
        queue_capacity: int = config.QUEUE_CAPACITY,
        response_timeout: float = config.RESPONSE_TIMEOUT,
        retain_queue: bool = config.RETAIN_QUEUE_ON_DISCONNECT,
        meter_provider: Optional[MeterProvider] = None,
    ):
        self.dialect = dialect
        self.queue_capacity = queue_capacity
        self.response_timeout = response_timeout
        self.retain_queue = retain_queue
        self.metrics = OcppMetrics(meter_provider, dialect.version)
        self.profiles = {}
        self._features = {}
        self._request_types = {}
        self._handlers = {}
        self._custom_requests = {}
        self._custom_responses = {}
        self._id_generator = default_message_id
        for profile in profiles:
            self.add_profile(profile)

    def add_profile(self, profile: Profile):
        """
        Register the features of a profile.

        Raises:
            ValueError: if the profile or one of its actions is already registered
        """
        if profile.name in self.profiles:
            raise ValueError(f"profile {profile.name} is already registered")
        for feature in profile:
            if feature.action in self._features:
                raise ValueError(f"duplicate action {feature.action} in profile {profile.name}")
            if feature.request_type in self._request_types:
                raise ValueError(
                    f"request type {feature.request_type.__name__} is already bound to "
                    f"{self._request_types[feature.request_type].action}"
                )
        self.profiles[profile.name] = profile
        for feature in profile:
            self._features[feature.action] = feature
            self._request_types[feature.request_type] = feature

    def get_feature(self, action: str) -> Optional[Feature]:
        return self._features.get(action)

    def feature_for_request(self, request) -> Optional[Feature]:
        return self._request_types.get(type(request))

    @property
    def format_error_code(self) -> ErrorCode:
        return self.dialect.format_error_code

    @property
    def name(self) -> str:
        raise NotImplementedError

    def set_message_id_generator(self, generator: Callable[[], str]):
        self._id_generator = generator

    def set_profile_handler(self, profile_name: str, handler):
        """
        Register the object handling inbound requests of a profile.

        The handler exposes one method per action, named on_<action in
        snake case>, e.g. on_boot_notification.
        """
        if profile_name not in self.profiles:
            raise ValueError(f"unknown profile {profile_name}")
        self._handlers[profile_name] = handler

    def set_custom_request_type(self, action: str, custom_type: Optional[type]):
        """
        Exchange the request payload of an action in a non-standard shape.

        Inbound requests are decoded into custom_type and converted with its
        parse method; outbound requests are converted with serialize. Pass
        None to restore the standard payload.
        """
        self._set_custom_type(self._custom_requests, action, custom_type)

    def set_custom_response_type(self, action: str, custom_type: Optional[type]):
        """Same as set_custom_request_type, for the response payload of an action."""
        self._set_custom_type(self._custom_responses, action, custom_type)

    def _set_custom_type(self, registry, action, custom_type):
        if action not in self._features:
            raise ValueError(f"unknown action {action}")
        if custom_type is None:
            registry.pop(action, None)
            return
        if not issubclass(custom_type, CustomPayload):
            raise TypeError(f"{custom_type.__name__} is not a CustomPayload")
        registry[action] = custom_type

    def can_send(self, feature: Feature) -> bool:
        return self.role in feature.initiators

    def can_receive(self, feature: Feature) -> bool:
        return self.role.peer in feature.initiators

    def _handler_for(self, feature):
        for profile_name, profile in self.profiles.items():
            if profile.supports(feature.action):
                handler = self._handlers.get(profile_name)
                return getattr(handler, feature.handler_name, None) if handler else None
        return None

    # Outbound

    def _submit(self, dispatcher, request, callback: Optional[ResponseCallback], message_id=None) -> str:
        """
        Validate, encode and hand a request to the dispatcher.

        Failures are reported to the callback and raised to the caller.
        """
        try:
            entry = self._new_pending(dispatcher, request, callback, message_id)
            dispatcher.send(entry)
        except (LocalError, ValidationError, TypeError, ValueError) as e:
            self._reject(dispatcher.peer_id, request, callback, e)
            raise
        return entry.message_id

    def _reject(self, peer_id, request, callback, error):
        """Report a request refused before reaching the wire."""
        logger.warning(f"Request to {peer_id} rejected: {error}")
        feature = self.feature_for_request(request)
        self.metrics.record_outbound(peer_id, feature.action if feature else "", error)
        if callback is not None:
            try:
                callback(None, error)
            except Exception:
                logger.exception("Callback for rejected request raised")

    def _new_pending(self, dispatcher, request, callback, message_id):
        feature = self.feature_for_request(request)
        if feature is None or not self.can_send(feature):
            action = feature.action if feature else type(request).__name__
            raise UnsupportedActionError(
                f"unsupported action {action} on {self.name}, cannot send request"
            )
        validator.validate(request, "Call.Payload")
        if message_id is None:
            message_id = self._next_message_id(dispatcher)
        elif dispatcher.has_message_id(message_id):
            raise DuplicateMessageIdError(f"request with message id {message_id} is already pending")
        payload = feature.encode_request(request, self._custom_requests.get(feature.action))
        frame = encode(Call(message_id, feature.action, payload))
        return PendingRequest(
            message_id, feature, request, self._observed(dispatcher.peer_id, feature, callback), frame
        )

    def _observed(self, peer_id, feature, callback):
        def on_result(response, error):
            self.metrics.record_outbound(peer_id, feature.action, error)
            if callback is not None:
                callback(response, error)

        return on_result

    def _next_message_id(self, dispatcher):
        for _ in range(MAX_ID_ATTEMPTS):
            message_id = self._id_generator()
            if not dispatcher.has_message_id(message_id):
                return message_id
        raise DuplicateMessageIdError(
            f"could not generate a free message id after {MAX_ID_ATTEMPTS} attempts"
        )

    # Inbound

    async def _write_to(self, peer_id, frame):
        raise NotImplementedError

    def _dispatcher_for(self, peer_id):
        raise NotImplementedError

    def _handler_args(self, handler, peer_id, request):
        raise NotImplementedError

    async def _handle_message(self, peer_id, data):
        logger.debug(f"Received from {peer_id}: {data}")
        try:
            message = parse_envelope(data, self.format_error_code)
        except OcppError as e:
            logger.warning(f"Invalid message from {peer_id}: {e.description}")
            self.metrics.record_inbound(peer_id, "", e)
            if e.message_id:
                await self._send_error(peer_id, e)
            return
        if isinstance(message, Call):
            error = await self._handle_call(peer_id, message)
            self.metrics.record_inbound(peer_id, message.action, error)
        elif isinstance(message, CallResult):
            self._handle_call_result(peer_id, message)
        else:
            self._handle_call_error(peer_id, message)

    async def _handle_call(self, peer_id, call):
        """Answer an inbound Call; returns the error replied with, if any."""
        message_id = call.unique_id
        feature = self.get_feature(call.action)
        if feature is None:
            return await self._send_error(peer_id, OcppError(
                ErrorCode.NOT_IMPLEMENTED,
                f"unsupported action {call.action} on {self.name}",
                message_id,
            ))
        handler = self._handler_for(feature) if self.can_receive(feature) else None
        if handler is None:
            return await self._send_error(peer_id, OcppError(
                ErrorCode.NOT_SUPPORTED,
                f"unsupported action {call.action} on {self.name}",
                message_id,
            ))

        try:
            request = feature.decode_request(
                call.payload, self.format_error_code, self._custom_requests.get(feature.action)
            )
            validator.validate(request, "Call.Payload")
        except ValidationError as e:
            return await self._send_error(peer_id, e.to_ocpp_error(message_id, feature.action))
        except OcppError as e:
            e.message_id = message_id
            return await self._send_error(peer_id, e)

        try:
            response = await call_handler(*self._handler_args(handler, peer_id, request))
        except OcppError as e:
            e.message_id = message_id
            return await self._send_error(peer_id, e)
        except Exception:
            logger.exception(f"Handler for {call.action} from {peer_id} raised")
            return await self._send_error(peer_id, OcppError(
                ErrorCode.INTERNAL_ERROR,
                f"internal error while handling {call.action}",
                message_id,
            ))

        return await self._send_response(peer_id, feature, message_id, response)

    async def _send_response(self, peer_id, feature, message_id, response):
        if response is None:
            return await self._send_error(
                peer_id, OcppError(ErrorCode.GENERIC_ERROR, "empty response", message_id)
            )
        if not isinstance(response, feature.response_type):
            return await self._send_error(peer_id, OcppError(
                ErrorCode.GENERIC_ERROR,
                f"invalid response type {type(response).__name__} for feature {feature.action}",
                message_id,
            ))
        try:
            validator.validate(response, "CallResult.Payload")
        except ValidationError as e:
            return await self._send_error(peer_id, e.to_ocpp_error(message_id, feature.action))
        try:
            payload = feature.encode_response(response, self._custom_responses.get(feature.action))
            frame = encode(CallResult(message_id, payload))
        except (TypeError, ValueError) as e:
            logger.error(f"Couldn't encode {feature.action} response for {peer_id}: {e}")
            return await self._send_error(peer_id, OcppError(ErrorCode.GENERIC_ERROR, str(e), message_id))
        if not await self._write_frame(peer_id, frame):
            return ConnectionLostError(f"couldn't send {feature.action} response to {peer_id}")
        return None

    def _handle_call_result(self, peer_id, result):
        dispatcher = self._dispatcher_for(peer_id)
        entry = dispatcher.state.get_pending(result.unique_id) if dispatcher else None
        if entry is None:
            logger.warning(f"No previous request {result.unique_id} sent. Discarding response message")
            return
        response, error = None, None
        try:
            response = entry.feature.decode_response(
                result.payload, self.format_error_code, self._custom_responses.get(entry.action)
            )
            validator.validate(response, "CallResult.Payload")
        except ValidationError as e:
            response, error = None, e.to_ocpp_error(result.unique_id, entry.action)
        except OcppError as e:
            e.message_id = result.unique_id
            response, error = None, e
        if error is not None:
            logger.warning(f"Invalid {entry.action} response from {peer_id}: {error.description}")
        dispatcher.complete(result.unique_id, response, error)

    def _handle_call_error(self, peer_id, call_error):
        dispatcher = self._dispatcher_for(peer_id)
        if dispatcher is None or not dispatcher.state.has_pending(call_error.unique_id):
            logger.warning(f"No previous request {call_error.unique_id} sent. Discarding error message")
            return
        error = call_error.to_ocpp_error()
        logger.info(f"Received error for request {call_error.unique_id} from {peer_id}: {error}")
        dispatcher.complete(call_error.unique_id, None, error)

    async def _send_error(self, peer_id, error):
        """Reply with a CallError and return the error for bookkeeping."""
        logger.warning(f"Replying to {peer_id} with {error.code}: {error.description}")
        message = CallError.from_ocpp_error(error)
        try:
            frame = encode(message)
        except (TypeError, ValueError) as e:
            logger.error(f"Couldn't encode error details for {error.message_id}: {e}")
            message.details = {}
            frame = encode(message)
        await self._write_frame(peer_id, frame)
        return error

    async def _write_frame(self, peer_id, frame) -> bool:
        logger.debug(f"Sending to {peer_id}: {frame}")
        try:
            await self._write_to(peer_id, frame)
        except Exception as e:
            logger.error(f"Failed to write to {peer_id}: {e}")
            return False
        return True

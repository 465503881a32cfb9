"""Control-channel records (JSON text frames) and QoS profiles."""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from dataclasses_json import CatchAll, DataClassJsonMixin, Undefined, config


class ControlOp(StrEnum):
    CREATE_PUBLISHER = "create_publisher"
    CREATE_SUBSCRIPTION = "create_subscription"
    CREATE_SERVICE_CLIENT = "create_service_client"
    DESTROY = "destroy"


class QosBaseProfile(StrEnum):
    SENSOR_DATA = "sensor_data"
    PARAMETERS = "parameters"
    DEFAULT = "default"
    SERVICES_DEFAULT = "services_default"
    PARAMETER_EVENTS = "parameter_events"
    SYSTEM_DEFAULT = "system_default"
    BEST_AVAILABLE = "best_available"


class QosHistoryPolicy(StrEnum):
    SYSTEM_DEFAULT = "system_default"
    KEEP_LAST = "keep_last"
    KEEP_ALL = "keep_all"


class QosReliabilityPolicy(StrEnum):
    SYSTEM_DEFAULT = "system_default"
    RELIABLE = "reliable"
    BEST_EFFORT = "best_effort"
    BEST_AVAILABLE = "best_available"


class QosDurabilityPolicy(StrEnum):
    SYSTEM_DEFAULT = "system_default"
    TRANSIENT_LOCAL = "transient_local"
    VOLATILE = "volatile"
    BEST_AVAILABLE = "best_available"


class QosLivelinessPolicy(StrEnum):
    SYSTEM_DEFAULT = "system_default"
    AUTOMATIC = "automatic"
    MANUAL_BY_TOPIC = "manual_by_topic"
    BEST_AVAILABLE = "best_available"


INFINITE = "infinite"


@dataclass
class QosDuration(DataClassJsonMixin):
    sec: int
    nsec: int = 0


def _option() -> Any:
    return field(default=None, metadata=config(exclude=lambda value: value is None))


@dataclass
class QosProfile(DataClassJsonMixin):
    """QoS settings forwarded to the bridge as-is.

    Unset options are left out of the wire form. Options the bridge knows but
    this class does not can be passed through ``extra``.
    """

    dataclass_json_config = config(undefined=Undefined.INCLUDE)["dataclasses_json"]

    profile: QosBaseProfile | str | None = _option()
    history: QosHistoryPolicy | str | None = _option()
    depth: int | None = _option()
    reliability: QosReliabilityPolicy | str | None = _option()
    durability: QosDurabilityPolicy | str | None = _option()
    deadline: QosDuration | str | None = _option()
    lifespan: QosDuration | str | None = _option()
    liveliness: QosLivelinessPolicy | str | None = _option()
    liveliness_lease_duration: QosDuration | str | None = _option()
    avoid_ros_namespace_conventions: bool | None = _option()
    extra: CatchAll = field(default_factory=dict)


def qos_to_wire(qos: QosProfile | Mapping[str, Any] | None) -> dict[str, Any]:
    if qos is None:
        return {}
    if isinstance(qos, QosProfile):
        return qos.to_dict(encode_json=True)
    return dict(qos)


@dataclass
class CreateRequest(DataClassJsonMixin):
    call_id: int
    op: ControlOp
    name: str
    type: str
    qos: dict[str, Any] = field(default_factory=dict)


@dataclass
class CreateResponse(DataClassJsonMixin):
    id: int
    call_id: int


@dataclass
class DestroyRequest(DataClassJsonMixin):
    id: int
    op: ControlOp = ControlOp.DESTROY


def _is_uint(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def parse_create_response(text: str) -> CreateResponse | None:
    """Parse a CreateResponse text frame, or return None if it is not one."""
    try:
        record = json.loads(text)
    except ValueError:
        return None

    if not isinstance(record, dict):
        return None
    if not _is_uint(record.get("id")) or not _is_uint(record.get("call_id")):
        return None
    return CreateResponse(id=record["id"], call_id=record["call_id"])

"""Bridge session: publishers, subscriptions and service clients over one channel."""

from .control import INFINITE as INFINITE
from .control import QosBaseProfile as QosBaseProfile
from .control import QosDurabilityPolicy as QosDurabilityPolicy
from .control import QosDuration as QosDuration
from .control import QosHistoryPolicy as QosHistoryPolicy
from .control import QosLivelinessPolicy as QosLivelinessPolicy
from .control import QosProfile as QosProfile
from .control import QosReliabilityPolicy as QosReliabilityPolicy
from .framing import FrameError as FrameError
from .framing import Opcode as Opcode
from .session import Channel as Channel
from .session import PublisherId as PublisherId
from .session import ServiceClientId as ServiceClientId
from .session import Session as Session
from .session import SessionError as SessionError
from .session import SubscriptionId as SubscriptionId

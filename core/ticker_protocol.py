# -*- coding: utf-8 -*-

from dataclasses import dataclass
from typing import Any, Dict, Union


class TickerProtocolError(ValueError):
    pass


def _check_count(name: str, value: Any) -> None:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise TickerProtocolError(f"{name} must be a non-negative integer, got {value!r}")


# ----- engine -> ticker -----
@dataclass(frozen=True)
class Start:
    deadline: int  # epoch ms
    type = "START"

    def __post_init__(self):
        _check_count("deadline", self.deadline)


@dataclass(frozen=True)
class Stop:
    type = "STOP"


@dataclass(frozen=True)
class Check:
    type = "CHECK"


# ----- ticker -> engine -----
@dataclass(frozen=True)
class Tick:
    remaining_seconds: int
    type = "TICK"

    def __post_init__(self):
        _check_count("remaining_seconds", self.remaining_seconds)


@dataclass(frozen=True)
class Complete:
    type = "COMPLETE"


Command = Union[Start, Stop, Check]
Event = Union[Tick, Complete]


def ensure_command(obj: Any) -> Command:
    if not isinstance(obj, (Start, Stop, Check)):
        raise TickerProtocolError(f"Not a ticker command: {obj!r}")
    return obj


def ensure_event(obj: Any) -> Event:
    if not isinstance(obj, (Tick, Complete)):
        raise TickerProtocolError(f"Not a ticker event: {obj!r}")
    return obj


def to_message(msg: Union[Command, Event]) -> Dict[str, Any]:
    if isinstance(msg, Start):
        payload: Dict[str, Any] = {"deadline": msg.deadline}
    elif isinstance(msg, Tick):
        payload = {"remainingSeconds": msg.remaining_seconds}
    elif isinstance(msg, (Stop, Check, Complete)):
        payload = {}
    else:
        raise TickerProtocolError(f"Unknown ticker message: {msg!r}")
    return {"type": msg.type, "payload": payload}


def from_message(data: Any) -> Union[Command, Event]:
    if not isinstance(data, dict):
        raise TickerProtocolError("Ticker message must be an object.")
    kind = data.get("type")
    payload = data.get("payload") or {}
    if not isinstance(payload, dict):
        raise TickerProtocolError("Ticker payload must be an object.")

    if kind == "START":
        if "deadline" not in payload:
            raise TickerProtocolError("START requires a deadline.")
        return Start(payload["deadline"])
    if kind == "STOP":
        return Stop()
    if kind == "CHECK":
        return Check()
    if kind == "TICK":
        if "remainingSeconds" not in payload:
            raise TickerProtocolError("TICK requires remainingSeconds.")
        return Tick(payload["remainingSeconds"])
    if kind == "COMPLETE":
        return Complete()
    raise TickerProtocolError(f"Unknown ticker message type: {kind!r}")

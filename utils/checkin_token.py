"""
Check-in tokens carried by attendee QR codes

Two encodings are accepted:
    plain:  userId:<int>,eventId:<int>
    signed: a JWT (type "checkin", version 1) carrying uid/eid and an expiry

Plain tokens can be disabled with CHECKIN_REQUIRE_SIGNED, in which case the
notification emails embed signed tokens instead.
"""
import os
from dataclasses import dataclass
from datetime import datetime, timedelta

import jwt

from utils.auth import JWT_SECRET_KEY, JWT_ALGORITHM
from utils.errors import InvalidTokenError

CHECKIN_REQUIRE_SIGNED = os.getenv("CHECKIN_REQUIRE_SIGNED", "false").lower() == "true"
CHECKIN_TOKEN_TTL_HOURS = int(os.getenv("CHECKIN_TOKEN_TTL_HOURS", 720))
CHECKIN_TOKEN_VERSION = 1

PLAIN_TOKEN_KEYS = ("userId", "eventId")
# Largest id an Integer primary key can hold
MAX_ID = 2 ** 31 - 1


@dataclass(frozen=True)
class CheckinToken:
    user_id: int
    event_id: int


def encode_checkin_token(user_id: int, event_id: int) -> str:
    return f"userId:{user_id},eventId:{event_id}"


def encode_signed_checkin_token(user_id: int, event_id: int) -> str:
    payload = {
        "type": "checkin",
        "v": CHECKIN_TOKEN_VERSION,
        "uid": user_id,
        "eid": event_id,
        "iat": datetime.utcnow(),
        "exp": datetime.utcnow() + timedelta(hours=CHECKIN_TOKEN_TTL_HOURS),
    }
    return jwt.encode(payload, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)


def checkin_payload(user_id: int, event_id: int) -> str:
    """Token to embed in an attendee's check-in QR code"""
    if CHECKIN_REQUIRE_SIGNED:
        return encode_signed_checkin_token(user_id, event_id)
    return encode_checkin_token(user_id, event_id)


def _parse_id(value: str) -> int:
    if not value.isascii() or not value.isdigit():
        raise InvalidTokenError()
    parsed = int(value)
    if not 1 <= parsed <= MAX_ID:
        raise InvalidTokenError()
    return parsed


def parse_checkin_token(raw: str) -> CheckinToken:
    """
    Parse a plain token

    The token must have exactly two comma-separated segments. Each segment is
    split at its first colon, the keys must be userId then eventId, and the
    values must be positive integers.
    """
    segments = raw.strip().split(",")
    if len(segments) != len(PLAIN_TOKEN_KEYS):
        raise InvalidTokenError()

    values = []
    for segment, expected_key in zip(segments, PLAIN_TOKEN_KEYS):
        key, sep, value = segment.partition(":")
        if not sep or key.strip() != expected_key:
            raise InvalidTokenError()
        values.append(_parse_id(value.strip()))

    return CheckinToken(user_id=values[0], event_id=values[1])


def parse_signed_checkin_token(raw: str) -> CheckinToken:
    try:
        payload = jwt.decode(raw, JWT_SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise InvalidTokenError("Check-in QR code has expired")
    except jwt.InvalidTokenError:
        raise InvalidTokenError()

    if payload.get("type") != "checkin" or payload.get("v") != CHECKIN_TOKEN_VERSION:
        raise InvalidTokenError()

    user_id, event_id = payload.get("uid"), payload.get("eid")
    if not all(isinstance(v, int) and not isinstance(v, bool) and 1 <= v <= MAX_ID for v in (user_id, event_id)):
        raise InvalidTokenError()
    return CheckinToken(user_id=user_id, event_id=event_id)


def decode_checkin_token(raw: str) -> CheckinToken:
    """Decode a scanned check-in token in either encoding"""
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidTokenError()

    raw = raw.strip()
    if raw.count(".") == 2 and ":" not in raw:
        return parse_signed_checkin_token(raw)

    if CHECKIN_REQUIRE_SIGNED:
        raise InvalidTokenError("Unsigned check-in QR codes are not accepted")
    return parse_checkin_token(raw)

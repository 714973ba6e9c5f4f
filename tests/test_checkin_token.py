"""
Tests for check-in tokens and QR rendering
"""
import base64
import jwt
import pytest
from datetime import datetime, timedelta

import utils.checkin_token as checkin_token
from utils.auth import JWT_SECRET_KEY, JWT_ALGORITHM
from utils.checkin_token import (
    CheckinToken, decode_checkin_token, encode_checkin_token, encode_signed_checkin_token, parse_checkin_token
)
from utils.errors import InvalidTokenError
from utils.qr import build_registration_link, encode_qr


class TestPlainToken:

    def test_encode(self):
        assert encode_checkin_token(1, 2) == "userId:1,eventId:2"

    def test_parse(self):
        assert parse_checkin_token("userId:12,eventId:7") == CheckinToken(user_id=12, event_id=7)

    def test_parse_tolerates_surrounding_whitespace(self):
        assert decode_checkin_token("  userId:3,eventId:4\n") == CheckinToken(user_id=3, event_id=4)

    @pytest.mark.parametrize("raw", [
        "garbage",
        "",
        "userId:abc,eventId:2",
        "userId:1",
        "userId:1,eventId:2,extra:3",
        "eventId:2,userId:1",
        "user:1,event:2",
        "userId:1.5,eventId:2",
        "userId:-1,eventId:2",
        "userId:0,eventId:2",
        "userId:1,eventId:",
        "userId1,eventId:2",
        "userId:99999999999999999999,eventId:1",
        "userId:1,eventId:2147483648",
    ])
    def test_malformed_tokens_rejected(self, raw):
        with pytest.raises(InvalidTokenError) as exc_info:
            decode_checkin_token(raw)
        assert exc_info.value.status_code == 400


class TestSignedToken:

    def test_round_trip(self):
        token = encode_signed_checkin_token(5, 9)
        assert decode_checkin_token(token) == CheckinToken(user_id=5, event_id=9)

    def test_tampered_signature_rejected(self):
        token = encode_signed_checkin_token(5, 9)
        tampered = token[:-2] + ("AA" if not token.endswith("AA") else "BB")
        with pytest.raises(InvalidTokenError):
            decode_checkin_token(tampered)

    def test_expired_token_rejected(self):
        token = jwt.encode({
            "type": "checkin", "v": 1, "uid": 1, "eid": 1,
            "exp": datetime.utcnow() - timedelta(seconds=1)
        }, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)
        with pytest.raises(InvalidTokenError) as exc_info:
            decode_checkin_token(token)
        assert "expired" in exc_info.value.detail

    def test_out_of_range_id_rejected(self):
        token = encode_signed_checkin_token(2 ** 31, 1)
        with pytest.raises(InvalidTokenError):
            decode_checkin_token(token)

    def test_admin_token_is_not_a_checkin_token(self):
        token = jwt.encode({"type": "admin", "admin_id": 1}, JWT_SECRET_KEY, algorithm=JWT_ALGORITHM)
        with pytest.raises(InvalidTokenError):
            decode_checkin_token(token)

    def test_plain_tokens_refused_when_signature_required(self, monkeypatch):
        monkeypatch.setattr(checkin_token, "CHECKIN_REQUIRE_SIGNED", True)
        with pytest.raises(InvalidTokenError):
            decode_checkin_token("userId:1,eventId:1")
        assert checkin_token.checkin_payload(1, 1).count(".") == 2

    def test_payload_is_plain_by_default(self):
        assert checkin_token.checkin_payload(1, 2) == "userId:1,eventId:2"


class TestQrEncoding:

    def test_registration_link(self):
        assert build_registration_link("AB12CD", "https://events.example.com/") == \
            "https://events.example.com/user-register?eventCode=AB12CD"

    def test_registration_link_default_base(self):
        assert build_registration_link("AB12CD").endswith("/user-register?eventCode=AB12CD")

    def test_encode_qr_returns_png_data_uri(self):
        data_uri = encode_qr("userId:1,eventId:1")
        prefix = "data:image/png;base64,"
        assert data_uri.startswith(prefix)
        assert base64.b64decode(data_uri[len(prefix):]).startswith(b"\x89PNG")

    def test_encode_qr_is_deterministic(self):
        assert encode_qr("https://example.com/x") == encode_qr("https://example.com/x")

    def test_encode_qr_long_payload(self):
        assert encode_qr("x" * 400).startswith("data:image/png;base64,")

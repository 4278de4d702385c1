"""Tests for request/response envelopes."""

import json

import pytest

from tc_cli.core.client import DecodeError, ServerReportedError, ValidationError
from tc_cli.core.envelope import RequestEnvelope, peek_qname, stateful_state, unwrap, wrap
from tc_cli.core.types import GetPropertiesResponse, SessionInfo

# =============================================================================
# Outbound
# =============================================================================


class TestWrap:
    def test_empty_state_and_policy_are_still_sent(self):
        assert wrap({"a": 1}).to_dict() == {"header": {"state": {}, "policy": {}}, "body": {"a": 1}}

    def test_body_omitted_when_none(self):
        assert wrap().to_dict() == {"header": {"state": {}, "policy": {}}}

    def test_empty_body_is_kept(self):
        assert wrap({}).to_dict()["body"] == {}

    def test_state_and_policy_pass_through(self):
        envelope = wrap({"x": [1]}, state=stateful_state("de_DE"), policy={"types": []})
        header = envelope.to_dict()["header"]
        assert header["state"]["locale"] == "de_DE"
        assert header["state"]["stateless"] is True
        assert header["policy"] == {"types": []}

    def test_encode_is_compact_json(self):
        encoded = wrap({"name": "Ä"}).encode()
        assert b" " not in encoded
        assert json.loads(encoded) == {"header": {"state": {}, "policy": {}}, "body": {"name": "Ä"}}

    def test_non_json_body_rejected(self):
        with pytest.raises(ValidationError):
            wrap({"when": object()})

    def test_default_envelope(self):
        assert RequestEnvelope().to_dict() == {"header": {"state": {}, "policy": {}}}


# =============================================================================
# Inbound
# =============================================================================


class TestPeek:
    def test_reads_qname(self):
        qname, document = peek_qname(b'{".QName": "x.LoginResponse", "serverInfo": {}}')
        assert qname == "x.LoginResponse"
        assert document["serverInfo"] == {}

    def test_missing_qname(self):
        assert peek_qname(b"{}")[0] is None

    @pytest.mark.parametrize("body", [b"", b"<html>", b"[1, 2]", b'"text"'])
    def test_non_object_is_decode_error(self, body):
        with pytest.raises(DecodeError):
            peek_qname(body)


class TestUnwrap:
    def test_parses_with_operation_type(self):
        body = json.dumps(
            {
                ".QName": "http://teamcenter.com/Schemas/Soa/2006-03/Base.ServiceData",
                "plain": ["A1"],
                "modelObjects": {"A1": {"uid": "A1", "className": "Item", "type": "Item", "props": {}}},
            }
        ).encode()
        response = unwrap(body, GetPropertiesResponse.from_dict)
        assert response.service_data.plain == ["A1"]
        assert response.service_data.get("A1").class_name == "Item"

    def test_structure_mismatch_is_decode_error(self):
        body = json.dumps({".QName": "x.GetTCSessionInfoResponse", "serverVersion": "14"}).encode()
        with pytest.raises(DecodeError) as exc:
            unwrap(body, SessionInfo.from_dict)
        assert exc.value.details == {".QName": "x.GetTCSessionInfoResponse"}

    def test_wrong_value_type_is_decode_error(self):
        body = json.dumps({"plain": "A1"}).encode()
        with pytest.raises(DecodeError):
            unwrap(body, GetPropertiesResponse.from_dict)

    def test_exception_qname_is_server_error(self):
        body = json.dumps(
            {
                ".QName": "http://teamcenter.com/Schemas/Soa/2006-03/Exceptions.InvalidUserException",
                "code": 515024,
                "level": 3,
                "message": "The session is no longer valid",
            }
        ).encode()
        with pytest.raises(ServerReportedError, match="no longer valid") as exc:
            unwrap(body, GetPropertiesResponse.from_dict)
        assert exc.value.details["code"] == 515024
        assert exc.value.kind == "server_reported"

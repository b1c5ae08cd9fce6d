"""Tests for the recording state register decoder."""

import logging

import pytest

from core.rcp import (
    DecodeFailure,
    DecodedStatus,
    RecordingState,
    decode_hex_octets,
    decode_status,
    extract_tag,
    map_rec_state,
)
from payloads import rcp_reply


class TestMapRecState:

    @pytest.mark.parametrize("code,label", [
        (0, "OFF"),
        (1, "NO RECORDING"),
        (2, "STAND BY"),
        (3, "PRE ALARM RECORDING"),
        (4, "ALARM RECORDING"),
        (5, "POST ALARM RECORDING"),
    ])
    def test_known_states(self, code, label):
        assert map_rec_state(code) == label

    @pytest.mark.parametrize("code", [6, 42, 255, 70000])
    def test_unknown_states(self, code):
        assert map_rec_state(code) == f"UNKNOWN({code})"

    def test_enum_ordinals(self):
        assert RecordingState.STAND_BY == 2
        assert RecordingState(4).label == "ALARM RECORDING"


class TestExtractTag:

    def test_first_occurrence_case_insensitive(self):
        xml = "<RCP><STR> 01 </STR><str>02</str></RCP>"
        assert extract_tag("str", xml) == "01"

    def test_missing_tag(self):
        assert extract_tag("err", "<rcp><str>00</str></rcp>") is None

    def test_multiline_content(self):
        assert extract_tag("str", "<str>\n01\n02\n</str>") == "01\n02"


class TestDecodeHexOctets:

    def test_masks_and_splits_on_whitespace(self):
        assert decode_hex_octets(" 04\t0a\n FF 1ff ") == [4, 10, 255, 255]

    def test_malformed_token_is_zero_and_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="core.rcp"):
            assert decode_hex_octets("04 zz 02") == [4, 0, 2]
        assert "zz" in caplog.text


class TestDecodeStatus:

    def test_full_payload(self):
        result = decode_status(rcp_reply("04 01 02 80 ff ff"))

        assert isinstance(result, DecodedStatus)
        assert result.state_code == 4
        assert result.state == "ALARM RECORDING"
        assert result.rec_preset == 1
        assert result.enc_preset == 2
        assert result.flags == 0x80
        assert result.err is None

    def test_short_payload_leaves_fields_absent(self):
        result = decode_status(rcp_reply("02 00"))

        assert result.state_code == 2
        assert result.rec_preset == 0
        assert result.enc_preset is None
        assert result.flags is None

    def test_single_zero_byte_is_off_not_absent(self):
        result = decode_status(rcp_reply("00"))

        assert result.state_code == 0
        assert result.state == "OFF"
        assert result.rec_preset is None

    def test_unknown_state_code(self):
        result = decode_status(rcp_reply("09 00 00 00"))
        assert result.state == "UNKNOWN(9)"

    def test_missing_str(self):
        result = decode_status("<rcp><result></result></rcp>")
        assert result == DecodeFailure(reason="no <str>")

    def test_empty_str(self):
        assert decode_status(rcp_reply("   ")) == DecodeFailure(reason="no <str>")

    def test_err_reported_when_str_missing(self):
        result = decode_status(rcp_reply(err="0x40"))
        assert result == DecodeFailure(reason="0x40")

    def test_err_passed_through_on_success(self):
        result = decode_status(rcp_reply("01 00 00 00", err="0x20"))
        assert result.state_code == 1
        assert result.err == "0x20"

    def test_no_result_container(self):
        result = decode_status("<str>03 01</str>")
        assert result.state == "PRE ALARM RECORDING"

    @pytest.mark.parametrize("body", ["", "garbage", "<str>", "<<<>>>"])
    def test_garbage_never_raises(self, body):
        assert isinstance(decode_status(body), DecodeFailure)

"""Tests for payload assembly and the public encoder methods."""
import pytest

from vietqr.crc import crc16_ccitt
from vietqr.encoder import (
    BeneficiaryIdentity,
    GenerationRequest,
    InitiationMode,
    ServiceTemplate,
    assemble,
    encode,
    merchant_account_information,
    new_encoder,
)
from vietqr.services.errors import EncodingRangeError, ValidationError
from vietqr.tlv import parse_tlv

DYNAMIC_TO_ACCOUNT = (
    "00020101021238570010A00000072701270006970403011300110123456780208QRIBFTTA"
    "530370454061800005802VN62230819thanh toan don hang63045FAB"
)
STATIC_TO_CARD = (
    "00020101021138570010A00000072701270006970403011300110123456780208QRIBFTTC"
    "53037045802VN63046E2C"
)


def tags(payload):
    return [item.tag for item in parse_tlv(payload)]


class TestKnownPayloads:
    def test_dynamic_transfer_to_account(self, encoder):
        assert encoder.dynamic_transfer_to_account("180000", "thanh toan don hang") == DYNAMIC_TO_ACCOUNT

    def test_static_transfer_to_card(self, encoder):
        assert encoder.static_transfer_to_card() == STATIC_TO_CARD

    def test_static_transfer_to_account(self, encoder):
        payload = encoder.static_transfer_to_account()
        assert payload.startswith("000201010211")
        assert "0208QRIBFTTA" in payload
        assert tags(payload) == ["00", "01", "38", "53", "58", "63"]

    def test_dynamic_transfer_to_card(self, encoder):
        payload = encoder.dynamic_transfer_to_card("50000", "nap tien")
        assert payload.startswith("000201010212")
        assert "0208QRIBFTTC" in payload
        assert "540550000" in payload
        assert "62120808nap tien" in payload


class TestAssemble:
    identity = BeneficiaryIdentity(account_or_card_number="0011012345678", institution_id="970403")

    def test_field_order(self):
        request = GenerationRequest(
            service=ServiceTemplate.TRANSFER_TO_ACCOUNT,
            mode=InitiationMode.DYNAMIC,
            amount="1000",
            message="abc",
        )
        assert tags(assemble(self.identity, request) + "0000") == ["00", "01", "38", "53", "54", "58", "62", "63"]

    def test_ends_with_crc_placeholder(self):
        request = GenerationRequest(service=ServiceTemplate.TRANSFER_TO_CARD, mode=InitiationMode.STATIC)
        assert assemble(self.identity, request).endswith("6304")

    def test_merchant_account_information_nesting(self):
        item = merchant_account_information(self.identity, ServiceTemplate.TRANSFER_TO_ACCOUNT)
        assert item.tag == "38"
        assert [sub.tag for sub in parse_tlv(item.value)] == ["00", "01", "02"]
        network = list(parse_tlv(item.value))[1].value
        assert network == "0006970403" + "01130011012345678"

    @pytest.mark.parametrize("service", [ServiceTemplate.PUSH, ServiceTemplate.CASH])
    def test_internal_templates_are_valid_inputs(self, service):
        request = GenerationRequest(service=service, mode=InitiationMode.STATIC)
        payload = assemble(self.identity, request)
        assert f"0206{service.value}" in payload

    def test_empty_amount_and_message_are_omitted(self):
        request = GenerationRequest(
            service=ServiceTemplate.TRANSFER_TO_ACCOUNT,
            mode=InitiationMode.DYNAMIC,
            amount="",
            message="",
        )
        assert "54" not in tags(assemble(self.identity, request) + "0000")
        assert "62" not in tags(assemble(self.identity, request) + "0000")

    def test_amount_is_passed_through_verbatim(self):
        request = GenerationRequest(
            service=ServiceTemplate.TRANSFER_TO_ACCOUNT,
            mode=InitiationMode.DYNAMIC,
            amount="12.50",
        )
        assert "540512.50" in assemble(self.identity, request)


BOUNDARY_CASES = [
    pytest.param(("0011012345678", "970403", "180000", "thanh toan don hang"), id="typical"),
    pytest.param(("9" * 19, "970403", "250000", "Order 42"), id="19-digit-card"),
    pytest.param(("0011012345678", "A" * 11, "99000", "hoa don 7"), id="11-char-institution"),
    pytest.param(("0011012345678", "970403", "1" * 13, "x"), id="13-char-amount"),
    pytest.param(("0011012345678", "970403", "1000", "Z" * 20 + " 9876"), id="25-char-message"),
    pytest.param(("0011012345678", "970403", "1000", " "), id="single-space-message"),
    pytest.param(("9" * 19, "A" * 11, "1" * 13, "m" * 25), id="all-maximums"),
]

PUBLIC_METHODS = [
    "dynamic_transfer_to_account",
    "dynamic_transfer_to_card",
    "static_transfer_to_account",
    "static_transfer_to_card",
]


@pytest.fixture(params=PUBLIC_METHODS)
def method_name(request):
    return request.param


@pytest.fixture(params=BOUNDARY_CASES)
def generate(request, method_name):
    account, institution_id, amount, message = request.param
    method = getattr(new_encoder(account, institution_id), method_name)
    if method_name.startswith("dynamic"):
        return lambda: method(amount, message)
    return method


class TestEncode:
    identity = BeneficiaryIdentity(account_or_card_number="0011012345678", institution_id="970403")

    def test_crc_matches_trailer(self):
        request = GenerationRequest(service=ServiceTemplate.TRANSFER_TO_CARD, mode=InitiationMode.STATIC)
        encoded = encode(self.identity, request)
        assert encoded.crc == "6E2C"
        assert encoded.payload == STATIC_TO_CARD

    def test_crc_over_body_matches_trailer(self, generate):
        payload = generate()
        assert crc16_ccitt(payload[:-4]) == payload[-4:]

    def test_payload_is_self_describing(self, generate):
        payload = generate()
        items = list(parse_tlv(payload))
        assert sum(4 + len(item.value) for item in items) == len(payload)
        assert items[-1].tag == "63"
        assert len(items[-1].value) == 4

        nested = list(parse_tlv(items[2].value))
        assert [sub.tag for sub in nested] == ["00", "01", "02"]
        assert list(parse_tlv(nested[1].value))

    def test_idempotent(self, encoder):
        first = encoder.dynamic_transfer_to_account("180000", "thanh toan don hang")
        second = encoder.dynamic_transfer_to_account("180000", "thanh toan don hang")
        assert first == second

    def test_latin1_account_is_checksummed(self):
        identity = BeneficiaryIdentity(account_or_card_number="caf\xe9", institution_id="970403")
        request = GenerationRequest(service=ServiceTemplate.TRANSFER_TO_ACCOUNT, mode=InitiationMode.STATIC)
        encoded = encode(identity, request)
        assert "0104caf\xe9" in encoded.payload

    def test_multibyte_account_is_rejected(self):
        identity = BeneficiaryIdentity(account_or_card_number="Đ123", institution_id="970403")
        request = GenerationRequest(service=ServiceTemplate.TRANSFER_TO_ACCOUNT, mode=InitiationMode.STATIC)
        with pytest.raises(EncodingRangeError):
            encode(identity, request)


class TestOmission:
    def test_static_payload_has_no_amount_or_message(self, encoder):
        payload = encoder.static_transfer_to_account()
        assert "54" not in tags(payload)
        assert "62" not in tags(payload)

    def test_dynamic_without_message(self, encoder):
        payload = encoder.dynamic_transfer_to_account("1000", "")
        assert "54" in tags(payload)
        assert "62" not in tags(payload)

    def test_dynamic_without_amount(self, encoder):
        payload = encoder.dynamic_transfer_to_account("", "hello")
        assert "54" not in tags(payload)
        assert "62" in tags(payload)


class TestMessageValidation:
    def test_25_characters_accepted(self, encoder):
        message = "A" * 20 + " 1234"
        payload = encoder.dynamic_transfer_to_account("1000", message)
        assert f"0825{message}" in payload

    def test_26_characters_rejected(self, encoder):
        with pytest.raises(ValidationError) as excinfo:
            encoder.dynamic_transfer_to_account("1000", "A" * 26)
        assert excinfo.value.message == (
            "message exceeds 25 characters or contains characters outside letters/digits/space"
        )

    @pytest.mark.parametrize("message", ["pay@shop", "thanh toán", "line\nbreak", "tab\there"])
    def test_disallowed_characters_rejected(self, encoder, message):
        with pytest.raises(ValidationError):
            encoder.dynamic_transfer_to_card("1000", message)

    def test_validation_error_is_repeatable(self, encoder):
        for _ in range(2):
            with pytest.raises(ValidationError):
                encoder.dynamic_transfer_to_account("1000", "@")

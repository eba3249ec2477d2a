"""Tests for protocol messages and their binary form."""

import msgpack
import pytest

from credx.errors import InvalidArgumentError, MalformedDataError
from credx.models.credential import Credential, Hint, TokenRequestInfo
from credx.models.identifiers import AuthenticationDomain, AuthenticationMethod, AuthenticationMethods
from credx.models.password import PasswordSpecification, PasswordSpecificationBuilder
from credx.models.requests import (
    ClientVersion,
    CredentialDeleteRequest,
    CredentialRetrieveRequest,
    CredentialSaveRequest,
    HintRetrieveRequest,
    get_client_version,
    parse_version_part,
    set_client_version,
)
from credx.models.results import (
    CredentialDeleteResult,
    CredentialDeleteResultCode,
    CredentialRetrieveResponse,
    CredentialRetrieveResult,
    CredentialRetrieveResultCode,
    CredentialSaveResult,
    CredentialSaveResultCode,
    FollowUpAction,
    HintRetrieveResult,
    HintRetrieveResultCode,
)
from credx.transport.wire import WIRE_VERSION, decode_message, encode_message

DOMAIN = AuthenticationDomain("https://example.com")
TOKEN_ISSUER = "https://idp1.example.com"


def make_credential(**overrides) -> Credential:
    fields = dict(
        identifier="alice@example.com",
        authentication_method=AuthenticationMethods.EMAIL,
        authentication_domain=DOMAIN,
        display_name="Alice",
        display_picture="https://example.com/alice.png",
        password="correct horse",
        id_token="token",
        additional_properties={"extra": b"\x01"},
    )
    fields.update(overrides)
    return Credential(**fields)


def make_hint(**overrides) -> Hint:
    fields = dict(
        identifier="alice@example.com",
        authentication_method=AuthenticationMethods.EMAIL,
        display_name="Alice",
        generated_password="Gen3ratedPassw0rd",
    )
    fields.update(overrides)
    return Hint(**fields)


MESSAGES = {
    "credential": lambda: make_credential(),
    "minimal_credential": lambda: make_credential(
        display_name=None, display_picture=None, password=None, id_token=None, additional_properties=None
    ),
    "hint": lambda: make_hint(),
    "token_request_info": lambda: TokenRequestInfo(client_id="client", nonce="nonce"),
    "client_version": lambda: ClientVersion(vendor="example.com", major=1, minor=2, patch=3),
    "retrieve_request": lambda: CredentialRetrieveRequest(
        authentication_methods=[AuthenticationMethods.EMAIL, AuthenticationMethods.GOOGLE],
        token_providers={TOKEN_ISSUER: TokenRequestInfo(client_id="client")},
        require_user_mediation=True,
        additional_properties={"k": b"v"},
    ),
    "hint_request": lambda: HintRetrieveRequest(
        authentication_methods=[AuthenticationMethods.EMAIL],
        password_spec=PasswordSpecificationBuilder().of_length(8, 10).allow("abc").require("123", 2).build(),
    ),
    "save_request": lambda: CredentialSaveRequest.from_credential(make_credential()),
    "delete_request": lambda: CredentialDeleteRequest.from_credential(make_credential(password=None)),
    "retrieve_result": lambda: CredentialRetrieveResult(
        result_code=CredentialRetrieveResultCode.CREDENTIAL_SELECTED, credential=make_credential()
    ),
    "hint_result": lambda: HintRetrieveResult(result_code=HintRetrieveResultCode.HINT_SELECTED, hint=make_hint()),
    "save_result": lambda: CredentialSaveResult(result_code=CredentialSaveResultCode.SAVED),
    "delete_result": lambda: CredentialDeleteResult(result_code=CredentialDeleteResultCode.USER_REFUSED),
    "retrieve_response": lambda: CredentialRetrieveResponse(
        retrieve_action=FollowUpAction(target="com.provider", action="retrieve", request=b"\x00payload")
    ),
    "empty_retrieve_response": lambda: CredentialRetrieveResponse(),
    "password_spec": lambda: PasswordSpecification.DEFAULT,
}


@pytest.mark.parametrize("name", sorted(MESSAGES))
def test_round_trip(name):
    message = MESSAGES[name]()
    decoded = type(message).from_bytes(message.to_bytes())
    assert decoded == message


@pytest.mark.parametrize("name", sorted(MESSAGES))
def test_garbage_rejected(name):
    message_type = type(MESSAGES[name]())
    for garbage in (b"", b"\xc1", b"not a message", msgpack.packb([1, 2, 3]), msgpack.packb({"v": 1})):
        with pytest.raises(MalformedDataError):
            message_type.from_bytes(garbage)


def test_wrong_message_type_rejected():
    data = make_credential().to_bytes()
    with pytest.raises(MalformedDataError) as exc_info:
        Hint.from_bytes(data)
    assert exc_info.value.details == {"expected": "hint", "actual": "credential"}


def test_non_bytes_rejected():
    with pytest.raises(MalformedDataError):
        Credential.from_bytes("not bytes")


def test_unknown_fields_ignored():
    fields = make_credential().to_fields()
    fields["added_in_a_later_version"] = {"nested": [1, 2]}
    decoded = Credential.from_bytes(encode_message("credential", fields))
    assert decoded == make_credential()


def test_newer_wire_version_accepted():
    data = msgpack.packb(
        {"v": WIRE_VERSION + 1, "t": "token_request_info", "m": {"nonce": "n"}}, use_bin_type=True
    )
    assert TokenRequestInfo.from_bytes(data).nonce == "n"


def test_absent_optional_fields_decode_to_none():
    credential = make_credential(display_name=None, password=None)
    fields = decode_message("credential", credential.to_bytes())
    assert "display_name" not in fields
    assert "password" not in fields
    decoded = Credential.from_bytes(credential.to_bytes())
    assert decoded.display_name is None
    assert decoded.password is None


def test_unknown_result_code_is_unspecified():
    data = encode_message("credential_retrieve_result", {"result_code": 99})
    assert CredentialRetrieveResult.from_bytes(data).result_code == CredentialRetrieveResultCode.UNSPECIFIED
    assert CredentialSaveResult(result_code=42).result_code == CredentialSaveResultCode.UNSPECIFIED


def test_result_succeeded():
    assert CredentialSaveResult(result_code=CredentialSaveResultCode.SAVED).succeeded
    assert not CredentialSaveResult(result_code=CredentialSaveResultCode.USER_CANCELED).succeeded
    assert not CredentialRetrieveResult().succeeded


@pytest.mark.parametrize(
    "overrides",
    [
        {"identifier": ""},
        {"identifier": "   "},
        {"identifier": None},
        {"display_picture": "ftp://example.com/a.png"},
        {"display_picture": "not a uri"},
        {"authentication_domain": "https://example.com/path"},
        {"authentication_method": "email"},
    ],
)
def test_invalid_credential_rejected(overrides):
    with pytest.raises(InvalidArgumentError):
        make_credential(**overrides)


def test_required_credential_fields():
    with pytest.raises(InvalidArgumentError):
        Credential(identifier="alice", authentication_method=AuthenticationMethods.EMAIL)


def test_empty_optional_strings_become_none():
    credential = make_credential(display_name="", password="", id_token="")
    assert credential.display_name is None
    assert credential.password is None
    assert credential.id_token is None


def test_decoding_invalid_credential_raises_malformed_data():
    fields = make_credential().to_fields()
    fields["identifier"] = " "
    with pytest.raises(MalformedDataError) as exc_info:
        Credential.from_bytes(encode_message("credential", fields))
    assert exc_info.value.__cause__ is not None


def test_messages_are_immutable():
    credential = make_credential()
    with pytest.raises(Exception):
        credential.identifier = "mallory"


def test_derive_revalidates():
    credential = make_credential()
    assert credential.derive(display_name="Bob").display_name == "Bob"
    with pytest.raises(InvalidArgumentError):
        credential.derive(identifier="")
    with pytest.raises(InvalidArgumentError):
        credential.derive(no_such_field=1)


def test_hint_to_credential():
    hint = make_hint(id_token="tok")
    credential = hint.to_credential(DOMAIN)
    assert credential.identifier == hint.identifier
    assert credential.authentication_domain == DOMAIN
    assert credential.password == "Gen3ratedPassw0rd"
    assert credential.id_token == "tok"


def test_retrieve_request_methods_are_a_sorted_set():
    request = CredentialRetrieveRequest(
        authentication_methods=[
            AuthenticationMethods.PHONE,
            "credx://email",
            AuthenticationMethods.EMAIL,
        ]
    )
    assert request.authentication_methods == (AuthenticationMethods.EMAIL, AuthenticationMethods.PHONE)


def test_retrieve_request_single_method():
    request = CredentialRetrieveRequest.for_authentication_methods(AuthenticationMethods.EMAIL)
    assert request.authentication_methods == (AuthenticationMethods.EMAIL,)
    assert not request.require_user_mediation
    assert request.token_providers == {}


def test_retrieve_request_needs_a_method():
    with pytest.raises(InvalidArgumentError):
        CredentialRetrieveRequest(authentication_methods=[])


def test_token_providers_must_be_https():
    with pytest.raises(InvalidArgumentError):
        CredentialRetrieveRequest.for_authentication_methods(
            AuthenticationMethods.EMAIL, token_providers={"http://idp.example.com": TokenRequestInfo()}
        )


def test_token_provider_without_info_uses_default():
    request = CredentialRetrieveRequest.for_authentication_methods(
        AuthenticationMethods.EMAIL, token_providers={TOKEN_ISSUER: None}
    )
    assert request.token_providers[TOKEN_ISSUER] == TokenRequestInfo.DEFAULT


def test_hint_request_defaults_to_default_password_spec():
    request = HintRetrieveRequest.for_authentication_methods(AuthenticationMethods.EMAIL)
    assert request.password_spec == PasswordSpecification.DEFAULT


def test_hint_request_with_invalid_spec_fails_to_decode():
    fields = HintRetrieveRequest.for_authentication_methods(AuthenticationMethods.EMAIL).to_fields()
    fields["password_spec"]["min_length"] = 0
    with pytest.raises(MalformedDataError):
        HintRetrieveRequest.from_bytes(encode_message("hint_retrieve_request", fields))


def test_requests_carry_client_version():
    request = CredentialSaveRequest.from_credential(make_credential())
    assert request.client_version == get_client_version()
    assert request.client_version.vendor == "credx.dev"
    assert (request.client_version.major, request.client_version.minor, request.client_version.patch) == (0, 1, 0)
    assert "client_version" in request.to_fields()


def test_client_version_override():
    override = ClientVersion(vendor="test", major=9)
    set_client_version(override)
    assert CredentialDeleteRequest.from_credential(make_credential()).client_version == override
    set_client_version(None)
    assert get_client_version().vendor == "credx.dev"


@pytest.mark.parametrize(
    "part, expected",
    [("3", 3), ("", 0), (None, 0), ("x", 0), ("-2", 0), ("10", 10)],
)
def test_parse_version_part(part, expected):
    assert parse_version_part(part) == expected


def test_client_version_from_short_version_string():
    version = ClientVersion.from_version_string("2")
    assert (version.major, version.minor, version.patch) == (2, 0, 0)


def test_follow_up_action_requires_target():
    with pytest.raises(InvalidArgumentError):
        FollowUpAction(target="", action="retrieve")


def test_authentication_method_accepts_strings():
    method = AuthenticationMethod("https://accounts.google.com")
    assert make_credential(authentication_method="https://accounts.google.com").authentication_method == method

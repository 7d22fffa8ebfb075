import base64

import pytest

from conftest import make_token
from smb_invoicing.claims import current_user_id, decode_token, read_token_file


def test_decode_token_reads_payload_without_verification() -> None:
    token = make_token({"AdminID": "user-1", "role": "admin"})

    assert decode_token(token) == {"AdminID": "user-1", "role": "admin"}
    assert current_user_id(token) == "user-1"


def test_payload_needing_padding_and_urlsafe_characters() -> None:
    # "?>" encodes to "Pz4" in base64url; the claim forces '-'/'_' style data.
    token = make_token({"AdminID": 42, "note": "??>>~~"})
    assert current_user_id(token) == "42"


def test_missing_token_means_no_user() -> None:
    assert current_user_id(None) is None
    assert current_user_id("") is None


def test_token_without_user_claim() -> None:
    assert current_user_id(make_token({"sub": "x"})) is None


@pytest.mark.parametrize("token", ["no-dots-here", "a..c", "a.!!!.c", "a.bnVsbA.c"])
def test_malformed_tokens_raise_value_error(token) -> None:
    with pytest.raises(ValueError):
        decode_token(token)


def test_read_token_file(tmp_path) -> None:
    path = tmp_path / "token"
    path.write_text("  abc.def.ghi\n", encoding="utf-8")
    assert read_token_file(path) == "abc.def.ghi"

    path.write_text("\n", encoding="utf-8")
    assert read_token_file(path) is None


def test_payload_must_be_a_json_object() -> None:
    header, _, signature = make_token({}).split(".")
    payload = base64.urlsafe_b64encode(b"[1, 2]").decode("ascii").rstrip("=")

    with pytest.raises(ValueError):
        decode_token(f"{header}.{payload}.{signature}")

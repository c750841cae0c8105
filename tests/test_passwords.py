import pytest

from wastewise.auth.passwords import hash_password, verify_password


def _mutate_digest(h: str) -> str:
    parts = h.split("$")
    digest = parts[-1]
    i = len(digest) // 2
    repl = "A" if digest[i] != "A" else "B"
    parts[-1] = digest[:i] + repl + digest[i + 1:]
    return "$".join(parts)


def test_hash_then_verify_roundtrip():
    h = hash_password("secret")
    assert h.startswith("$argon2")
    assert "secret" not in h
    assert verify_password("secret", h) is True


def test_hash_is_salted_per_call():
    assert hash_password("secret") != hash_password("secret")


def test_wrong_password_is_rejected():
    h = hash_password("secret")
    assert verify_password("Secret", h) is False
    assert verify_password("secret ", h) is False


def test_mutated_hash_is_rejected():
    h = hash_password("secret")
    assert verify_password("secret", _mutate_digest(h)) is False


@pytest.mark.parametrize("stored", [None, "", "not-a-hash", "$argon2id$v=19$garbage"])
def test_missing_or_malformed_hash_verifies_false(stored):
    assert verify_password("secret", stored) is False


def test_empty_plaintext_never_verifies():
    assert verify_password("", hash_password("secret")) is False


def test_hash_rejects_empty_password():
    with pytest.raises(ValueError):
        hash_password("")

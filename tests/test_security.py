from catalog_site.core.security import hash_password, verify_password


def test_hash_is_salted_bcrypt_and_verifies():
    first = hash_password("s3cret-value")
    second = hash_password("s3cret-value")

    assert first.startswith("$2b$")
    assert first != second
    assert "s3cret-value" not in first
    assert verify_password("s3cret-value", first)
    assert verify_password("s3cret-value", second)


def test_wrong_password_does_not_verify():
    digest = hash_password("correct horse")
    assert not verify_password("battery staple", digest)


def test_malformed_digest_returns_false():
    assert not verify_password("anything", "not-a-real-hash")
    assert not verify_password("anything", "$2b$04$short")


def test_empty_inputs_return_false():
    digest = hash_password("value")
    assert not verify_password("", digest)
    assert not verify_password("value", "")

import pytest

from meltools.blowfish import Blowfish, init_key


def test_init_key_length():
    assert len(init_key()) == 1042


def test_init_key_known_words():
    words = init_key()
    assert words[0] == 0x243F6A88
    assert words[1] == 0x85A308D3
    assert words[17] == 0x8979FB1B
    assert words[18] == 0xD1310BA6
    assert words[-1] == 0x3AC372E6


def test_init_key_words_are_32_bit():
    assert all(0 <= w <= 0xFFFFFFFF for w in init_key())


def test_zero_key_vector():
    cipher = Blowfish(bytes(8))
    assert cipher.encrypt_block(bytes(8)).hex() == "4ef997456198dd78"


def test_ones_key_vector():
    cipher = Blowfish(b"\xff" * 8)
    assert cipher.encrypt_block(b"\xff" * 8).hex() == "51866fd5b85ecb8a"


@pytest.mark.parametrize("key", [b"secret", "password", b"k" * 56])
def test_round_trip(key):
    cipher = Blowfish(key)
    block = b"ABCDEFGH"
    encrypted = cipher.encrypt_block(block)
    assert encrypted != block
    assert cipher.decrypt_block(encrypted) == block


def test_different_keys_give_different_ciphertext():
    block = b"12345678"
    assert Blowfish(b"secret").encrypt_block(block) != Blowfish(b"token").encrypt_block(block)


def test_str_and_bytes_key_agree():
    assert Blowfish("secret").encrypt_block(b"abcdefgh") == Blowfish(b"secret").encrypt_block(b"abcdefgh")


@pytest.mark.parametrize("block", [b"", b"short", b"nine byte"])
def test_wrong_block_size(block):
    cipher = Blowfish(b"secret")
    with pytest.raises(ValueError):
        cipher.encrypt_block(block)
    with pytest.raises(ValueError):
        cipher.decrypt_block(block)
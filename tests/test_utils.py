import pytest

from meshsim.utils import dump, hashing, list_dir, poisson_rand, tokenize, uniform_rand


def test_dump_formats_hex():
    assert dump(b"\x00\xab\x10", 3) == "0x00ab10"


def test_dump_limits_to_size():
    data = b"abcdef"
    assert dump(data, 2) == dump(data[:2], 2)
    assert len(dump(data, 2)) == 2 + 2 * 2


def test_tokenize_default_spaces():
    assert tokenize("  a b  c ") == ["a", "b", "c"]


def test_tokenize_custom_delimiters():
    assert tokenize("a,b;;c", ",;") == ["a", "b", "c"]


@pytest.mark.parametrize("text", ["", "   "])
def test_tokenize_empty(text):
    assert tokenize(text) == []


def test_tokenize_no_delimiters_keeps_whole():
    assert tokenize("a b", "") == ["a b"]


def test_list_dir_returns_only_files(tmp_path):
    (tmp_path / "one.txt").write_text("x")
    (tmp_path / "two.txt").write_text("y")
    (tmp_path / "sub").mkdir()
    assert list_dir(tmp_path) == ["one.txt", "two.txt"]


def test_list_dir_missing_directory(tmp_path):
    assert list_dir(tmp_path / "absent") == []


def test_hashing_crc_check_value():
    assert hashing(b"123456789").rstrip(b"\0") == str(0xCBF43926 >> 8).encode()


@pytest.mark.parametrize("size", [20, 32])
def test_hashing_pads_to_size(size):
    h = hashing(b"some data", size)
    assert len(h) == size
    digits = h.rstrip(b"\0")
    assert digits.isdigit()
    assert h[len(digits):] == b"\0" * (size - len(digits))


def test_hashing_short_size_keeps_digits():
    h = hashing(b"123456789", 4)
    assert len(h) >= 4
    assert b"\0" not in h


def test_hashing_deterministic_and_distinct():
    assert hashing(b"abc") == hashing("abc")
    assert hashing(b"abc") != hashing(b"abd")


def test_poisson_rand_mean():
    draws = [poisson_rand() for _ in range(3000)]
    assert all(d >= 0 for d in draws)
    assert 3.5 < sum(draws) / len(draws) < 4.5


def test_uniform_rand_within_bounds():
    draws = [uniform_rand(10, 20) for _ in range(500)]
    assert all(10 <= d <= 20 for d in draws)
    assert all(0 <= uniform_rand() <= 100000 for _ in range(100))


def test_uniform_rand_degenerate_range():
    assert uniform_rand(5, 5) == 5
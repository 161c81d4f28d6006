"""Unit tests for gptbpe encode/decode, edge cases, and persistence."""

import pytest

import gptbpe as gb
from gptbpe.errors import (
    InvalidSymbolError,
    InvalidUtf8Error,
    ParallelModeError,
    PatternError,
    UnknownTokenError,
)

from conftest import MERGES, build_encoder


# Encoding
# ---------------------------------------------------------------------------


def test_single_space_is_one_token(tokenizer):
    assert tokenizer.encode(" ") == [220]


def test_single_tab_is_one_token(tokenizer):
    assert tokenizer.encode("\t") == [197]


def test_encode_uses_trained_merges(tokenizer, encoder):
    assert tokenizer.encode("hello world") == [encoder["hello"], encoder["Ġworld"]]


def test_encode_partial_merges(tokenizer, encoder):
    expected = [encoder["in"]] + [encoder[c] for c in "divisible"]
    assert tokenizer.encode("indivisible") == expected


def test_repeated_pair_merges_left_to_right(tokenizer, encoder):
    assert tokenizer.encode("aaa") == [encoder["aa"], encoder["a"]]
    assert tokenizer.encode("aaaa") == [encoder["aa"], encoder["aa"]]


def test_multibyte_characters_split_into_bytes(tokenizer):
    # one token per UTF-8 byte when no merge covers them
    assert len(tokenizer.encode("👋")) == len("👋".encode("utf-8"))


def test_empty_string(tokenizer):
    assert tokenizer.encode("") == []
    assert tokenizer.decode([]) == ""


def test_encode_is_deterministic(tokenizer, encoder):
    text = "hello world, hello again 👋"
    first = tokenizer.encode(text)
    fresh = gb.Tokenizer(gb.Vocabulary(encoder), gb.MergeRanks.from_pairs(MERGES))
    assert tokenizer.encode(text) == first
    assert fresh.encode(text) == first


def test_piece_missing_from_vocab_is_dropped():
    # "aa" is a merge rule but not a vocabulary entry
    encoder = build_encoder([])
    tok = gb.Tokenizer(gb.Vocabulary(encoder), gb.MergeRanks.from_pairs([("a", "a")]))
    assert tok.encode("aa") == []
    assert tok.encode("aab") == [encoder["b"]]


def test_chunk_parallel_encode_matches_serial(tokenizer):
    text = "hello world " * 20 + "indivisible aaa"
    assert tokenizer.encode(text, num_workers=4) == tokenizer.encode(text)


def test_custom_pattern_by_name_and_regex(encoder):
    vocab, ranks = gb.Vocabulary(encoder), gb.MergeRanks.from_pairs(MERGES)
    lookahead = gb.Tokenizer(vocab, ranks, pattern="gpt2_lookahead")
    assert lookahead.pat == gb.TokenPattern.GPT2_LOOKAHEAD.value
    # one chunk for the whole text: merges may now cross word boundaries
    whole = gb.Tokenizer(vocab, ranks, pattern=r"(?s).+")
    assert whole.encode("hello world") == [encoder["hello"], encoder["Ġworld"]]


def test_invalid_custom_pattern_raises(encoder):
    with pytest.raises(PatternError):
        gb.Tokenizer(gb.Vocabulary(encoder), gb.MergeRanks({}), pattern="(")


# Decoding
# ---------------------------------------------------------------------------


def test_roundtrip_ascii(tokenizer):
    text = "hello world, this is some text!"
    assert tokenizer.decode(tokenizer.encode(text)) == text


def test_roundtrip_unicode(tokenizer):
    text = "hello 👋 world 🌍 café naïve 日本語"
    assert tokenizer.decode(tokenizer.encode(text)) == text


def test_roundtrip_whitespace_only(tokenizer):
    text = "   \n\t  \r\n"
    assert tokenizer.decode(tokenizer.encode(text)) == text


def test_decode_unknown_id_raises(tokenizer):
    with pytest.raises(UnknownTokenError) as exc_info:
        tokenizer.decode([220, 10**6])
    assert exc_info.value.invalid_tok == 10**6


def test_decode_symbol_outside_alphabet_raises():
    encoder = build_encoder([])
    encoder["☃"] = len(encoder)
    tok = gb.Tokenizer(gb.Vocabulary(encoder), gb.MergeRanks({}))
    with pytest.raises(InvalidSymbolError):
        tok.decode([encoder["☃"]])


def test_decode_invalid_utf8_replaces_by_default(tokenizer, encoder):
    # 0xF0 opens a four byte sequence that never completes
    lead_byte = [encoder["\xf0"]]
    assert tokenizer.decode(lead_byte) == "�"
    assert tokenizer.decode_bytes(lead_byte) == b"\xf0"


def test_decode_invalid_utf8_strict_raises(tokenizer, encoder):
    with pytest.raises(InvalidUtf8Error) as exc_info:
        tokenizer.decode([encoder["h"], encoder["\xf0"]], errors="strict")
    assert exc_info.value.position == 1


def test_decode_unknown_errors_policy(tokenizer):
    with pytest.raises(ValueError):
        tokenizer.decode([220], errors="ignore")


# Batch encode/decode
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("mode", gb.list_parallel_modes())
def test_encode_batch_matches_single(tokenizer, mode):
    texts = ["First.", "hello world", "aaa indivisible", ""]
    encoded = tokenizer.encode_batch(texts, num_workers=3, parallel_mode=mode)
    assert encoded == [tokenizer.encode(text) for text in texts]
    assert tokenizer.decode_batch(encoded) == texts


def test_encode_batch_single_text_auto(tokenizer):
    assert tokenizer.encode_batch(["hello world"]) == [tokenizer.encode("hello world")]


def test_encode_batch_empty(tokenizer):
    assert tokenizer.encode_batch([]) == []


def test_encode_batch_unknown_mode_raises(tokenizer):
    with pytest.raises(ParallelModeError):
        tokenizer.encode_batch(["x"], parallel_mode="turbo")


# Introspection and persistence
# ---------------------------------------------------------------------------


def test_vocab_lookups(tokenizer, encoder):
    assert tokenizer.vocab_size() == 256 + len(MERGES)
    assert tokenizer.token_to_id("Ġworld") == encoder["Ġworld"]
    assert tokenizer.id_to_token(220) == "Ġ"


def test_cache_grows_with_distinct_chunks(tokenizer):
    tokenizer.encode("hello hello hello world")
    info = tokenizer.cache_info()
    # "hello", "Ġhello", "Ġworld"
    assert info.size == 3
    assert info.hits == 1


def test_save_and_load_roundtrip(tokenizer, tmp_path):
    out_dir = tokenizer.save(tmp_path / "tok")
    assert (out_dir / "encoder.json").is_file()
    assert (out_dir / "vocab.bpe").is_file()

    loaded = gb.from_pretrained(out_dir)
    text = "hello world aaa indivisible 🌍"
    assert loaded.encode(text) == tokenizer.encode(text)
    assert loaded.decode(loaded.encode(text)) == text

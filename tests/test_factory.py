"""Unit tests for loading tokenizers from files and the command line."""

import json

import pytest

import gptbpe as gb
from gptbpe.__main__ import main
from gptbpe.errors import MalformedVocabularyError, ModelLoadError


@pytest.fixture
def model_dir(tokenizer, tmp_path):
    """Directory holding encoder.json and vocab.bpe for the synthetic tables."""
    return tokenizer.save(tmp_path / "model")


# Loading
# ---------------------------------------------------------------------------


def test_load_files(model_dir, encoder):
    tok = gb.load_files(model_dir / "encoder.json", model_dir / "vocab.bpe")
    assert tok.encode("hello world") == [encoder["hello"], encoder["Ġworld"]]


def test_load_files_passes_tokenizer_options(model_dir):
    tok = gb.load_files(
        model_dir / "encoder.json",
        model_dir / "vocab.bpe",
        pattern="gpt2-lookahead",
        cache_size=16,
    )
    assert tok.pat == gb.TokenPattern.GPT2_LOOKAHEAD.value
    assert tok.cache_info().max_size == 16


def test_missing_file_raises(model_dir):
    with pytest.raises(ModelLoadError) as exc_info:
        gb.load_files(model_dir / "nope.json", model_dir / "vocab.bpe")
    assert exc_info.value.model_path.endswith("nope.json")


def test_malformed_encoder_reports_path(model_dir):
    (model_dir / "encoder.json").write_text(json.dumps({"a": -3}), encoding="utf-8")
    with pytest.raises(MalformedVocabularyError) as exc_info:
        gb.from_pretrained(model_dir)
    assert exc_info.value.model_path.endswith("encoder.json")


def test_malformed_merges_reports_path(model_dir):
    (model_dir / "vocab.bpe").write_text("#version: 0.2\na b c\n", encoding="utf-8")
    with pytest.raises(MalformedVocabularyError) as exc_info:
        gb.from_pretrained(model_dir)
    assert exc_info.value.model_path.endswith("vocab.bpe")
    assert "line: 2" in str(exc_info.value)


def test_from_tables(encoder):
    merges_text = "#version: 0.2\na a\n"
    tok = gb.from_tables(json.dumps(encoder), merges_text)
    assert tok.encode("aa") == [encoder["aa"]]


def test_from_tables_malformed_uses_source():
    with pytest.raises(MalformedVocabularyError) as exc_info:
        gb.from_tables("{}", "#version: 0.2\nbad\n", source="inline")
    assert exc_info.value.model_path == "inline"


def test_unknown_pretrained_name_raises():
    with pytest.raises(ModelLoadError):
        gb.from_pretrained("not-a-model")


def test_list_pretrained():
    assert "gpt2" in gb.list_pretrained()


# Command line
# ---------------------------------------------------------------------------


def test_cli_encode(model_dir, encoder, capsys):
    assert main(["--model", str(model_dir), "encode", "hello world"]) == 0
    out = capsys.readouterr().out.strip()
    assert out == f"{encoder['hello']} {encoder['Ġworld']}"


def test_cli_decode(model_dir, encoder, capsys):
    ids = [str(encoder["hello"]), str(encoder["Ġworld"])]
    assert main(["--model", str(model_dir), "decode", *ids]) == 0
    assert capsys.readouterr().out == "hello world\n"


def test_cli_decode_strict_failure(model_dir, encoder, capsys):
    code = main(["--model", str(model_dir), "decode", "--strict", str(encoder["\xf0"])])
    assert code == 1
    assert "not valid UTF-8" in capsys.readouterr().err


def test_cli_unknown_model(capsys):
    assert main(["--model", "not-a-model", "encode", "x"]) == 1
    assert "error:" in capsys.readouterr().err

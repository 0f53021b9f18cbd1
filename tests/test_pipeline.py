"""Unit tests for the text -> sequence pipeline, including save/load."""

import numpy as np
import pytest

import textseq as ts
from textseq.errors import (
    InvalidConfigurationError,
    ModelLoadError,
    NotFittedError,
    PatternError,
    RecordError,
    VocabularyError,
)


# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def config():
    return ts.EncodingConfig(max_tokens=2, sequence_length=4)


@pytest.fixture
def train_records():
    """Return press-release style records: fraud x2, charges x2, filed x1."""
    return [
        {"text": "Fraud, fraud charges.", "date": "2016-01-05"},
        {"text": "Charges filed.", "date": "2017-08-30"},
    ]


@pytest.fixture
def fitted(config, train_records):
    return ts.SequencePipeline(config).fit(train_records)


# Fit / transform
# ---------------------------------------------------------------------------


def test_fit_builds_top_k_vocabulary(fitted):
    assert fitted.vocabulary.as_dict() == {"fraud": 1, "charges": 2}


def test_transform_encodes_with_frozen_vocabulary(fitted):
    """Unknown words map to 0 and rows are padded at the tail."""
    x = fitted.transform([{"text": "Filed fraud charges"}], show_progress=False)
    assert x.tolist() == [[0, 1, 2, 0]]


def test_transform_shape(fitted):
    records = [{"text": "fraud " * 10}, {"text": ""}, {"text": "charges"}]
    x = fitted.transform(records, show_progress=False)
    assert x.shape == (3, 4)
    assert x.dtype == np.int32
    assert x[0].tolist() == [1, 1, 1, 1]
    assert x[1].tolist() == [0, 0, 0, 0]


def test_plain_strings_are_records(fitted):
    x = fitted.transform(["charges fraud"], show_progress=False)
    assert x.tolist() == [[2, 1, 0, 0]]


def test_custom_text_field(config):
    pipe = ts.SequencePipeline(config).fit([{"body": "wire wire fraud"}], text_field="body")
    assert pipe.vocabulary.tokens == ("wire", "fraud")


def test_missing_text_value_is_empty_document(fitted):
    x = fitted.transform([{"text": None}], show_progress=False)
    assert x.tolist() == [[0, 0, 0, 0]]


def test_fit_transform_matches_fit_then_transform(config, train_records):
    combined = ts.SequencePipeline(config).fit_transform(train_records)
    separate = ts.SequencePipeline(config).fit(train_records).transform(train_records)
    assert np.array_equal(combined, separate)


def test_refit_replaces_vocabulary(fitted):
    fitted.fit(["plea plea agreement"])
    assert fitted.vocabulary.tokens == ("plea", "agreement")


def test_custom_tokenizer_callable(config):
    """Any str -> list[str] callable can replace the word tokenizer."""
    pipe = ts.SequencePipeline(config, tokenizer=str.split).fit(["A a A"])
    assert pipe.vocabulary.tokens == ("A", "a")


def test_head_policies_from_config(train_records):
    config = ts.EncodingConfig(
        max_tokens=3, sequence_length=2, truncating="pre", padding="pre"
    )
    pipe = ts.SequencePipeline(config).fit(train_records)
    # fraud=1, charges=2, filed=3
    x = pipe.transform(["fraud charges filed", "filed"], show_progress=False)
    assert x.tolist() == [[2, 3], [0, 3]]


# Errors
# ---------------------------------------------------------------------------


def test_transform_before_fit_raises(config):
    with pytest.raises(NotFittedError):
        ts.SequencePipeline(config).transform(["fraud"])


def test_vocabulary_before_fit_raises(config):
    pipe = ts.SequencePipeline(config)
    assert not pipe.is_fitted()
    with pytest.raises(NotFittedError):
        _ = pipe.vocabulary


def test_record_without_text_field_raises(config):
    with pytest.raises(RecordError) as exc:
        ts.SequencePipeline(config).fit([{"text": "ok"}, {"title": "no text"}])
    assert exc.value.index == 1


def test_non_string_text_raises(config):
    with pytest.raises(RecordError):
        ts.SequencePipeline(config).fit([{"text": 42}])


# Save and load round-trip
# ---------------------------------------------------------------------------


def test_save_load_roundtrip(fitted, tmp_path):
    """Loaded pipeline has the same config and vocabulary and encodes identically."""
    prefix = str(tmp_path / "doj")
    fitted.save(prefix)

    loaded = ts.from_pretrained(f"{prefix}.model")
    assert loaded.config == fitted.config
    assert loaded.vocabulary == fitted.vocabulary

    records = ["fraud charges filed today", "charges"]
    assert np.array_equal(
        loaded.transform(records, show_progress=False),
        fitted.transform(records, show_progress=False),
    )


def test_save_writes_readable_vocab(fitted, tmp_path):
    prefix = tmp_path / "out" / "doj"
    fitted.save(str(prefix))
    lines = (tmp_path / "out" / "doj.vocab").read_text(encoding="utf-8").splitlines()
    assert lines == ["[0] <pad/unk>", "[1] fraud (2)", "[2] charges (2)"]


def test_save_load_custom_pattern_and_spaces(tmp_path):
    """Custom patterns and tokens containing spaces survive a round-trip."""
    config = ts.EncodingConfig(
        max_tokens=5, sequence_length=3, custom_pattern=r"[a-z]+ [a-z]+", lowercase=False
    )
    pipe = ts.SequencePipeline(config).fit(["wire fraud wire fraud mail fraud"])
    prefix = str(tmp_path / "bigrams")
    pipe.save(prefix)

    loaded = ts.from_pretrained(f"{prefix}.model")
    assert loaded.vocabulary.tokens == ("wire fraud", "mail fraud")
    assert loaded.config.custom_pattern == r"[a-z]+ [a-z]+"
    assert loaded.config.lowercase is False


def test_save_before_fit_raises(config, tmp_path):
    with pytest.raises(NotFittedError):
        ts.SequencePipeline(config).save(str(tmp_path / "nope"))


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(ModelLoadError):
        ts.from_pretrained(str(tmp_path / "missing.model"))


def test_load_wrong_suffix_raises(tmp_path):
    path = tmp_path / "pipeline.txt"
    path.write_text("TextSeq 1\n", encoding="utf-8")
    with pytest.raises(ModelLoadError):
        ts.from_pretrained(str(path))


def test_load_format_version_mismatch_raises(fitted, tmp_path):
    prefix = tmp_path / "doj"
    fitted.save(str(prefix))
    model = tmp_path / "doj.model"
    lines = model.read_text(encoding="utf-8").splitlines(keepends=True)
    lines[0] = "TextSeq 99\n"
    model.write_text("".join(lines), encoding="utf-8")

    with pytest.raises(ModelLoadError) as exc:
        ts.from_pretrained(str(model))
    assert exc.value.version_mismatch == ("99", "1")


def test_load_truncated_vocabulary_raises(fitted, tmp_path):
    prefix = tmp_path / "doj"
    fitted.save(str(prefix))
    model = tmp_path / "doj.model"
    # drop the last token line and the end marker
    lines = model.read_text(encoding="utf-8").splitlines(keepends=True)
    model.write_text("".join(lines[:-2]), encoding="utf-8")

    with pytest.raises(ModelLoadError):
        ts.from_pretrained(str(model))


def test_failed_load_keeps_previous_state(fitted, tmp_path):
    path = tmp_path / "broken.model"
    path.write_text("TextSeq 1\ntype sequence\nmax_tokens x\n", encoding="utf-8")
    before = fitted.vocabulary
    with pytest.raises(ModelLoadError):
        fitted.load(str(path))
    assert fitted.vocabulary is before


def test_failed_save_keeps_existing_files(fitted, config, tmp_path):
    """A save rejected for a line-break token leaves the earlier model untouched."""
    prefix = str(tmp_path / "doj")
    fitted.save(prefix)
    model_before = (tmp_path / "doj.model").read_bytes()
    vocab_before = (tmp_path / "doj.vocab").read_bytes()

    broken = ts.SequencePipeline(config, tokenizer=lambda text: ["line\nbreak"]).fit(["x"])
    with pytest.raises(VocabularyError):
        broken.save(prefix)

    assert (tmp_path / "doj.model").read_bytes() == model_before
    assert (tmp_path / "doj.vocab").read_bytes() == vocab_before


def test_save_pattern_with_line_break_raises(tmp_path):
    config = ts.EncodingConfig(max_tokens=3, sequence_length=2, custom_pattern="a|\nb")
    pipe = ts.SequencePipeline(config).fit(["a b"])
    with pytest.raises(PatternError):
        pipe.save(str(tmp_path / "nl"))
    assert not (tmp_path / "nl.model").exists()


def test_load_non_utf8_file_raises(tmp_path):
    path = tmp_path / "x.model"
    path.write_bytes(b"\xff\xfe\x00garbage\n\xff\n")
    with pytest.raises(ModelLoadError) as exc:
        ts.from_pretrained(str(path))
    assert exc.value.model_path == str(path)


def test_load_non_utf8_body_raises(fitted, tmp_path):
    """Undecodable bytes after a valid header are reported the same way."""
    fitted.save(str(tmp_path / "doj"))
    model = tmp_path / "doj.model"
    model.write_bytes(model.read_bytes() + b"\xff\xfe")
    with pytest.raises(ModelLoadError):
        fitted.load(str(model))


def test_load_directory_raises(tmp_path):
    path = tmp_path / "dir.model"
    path.mkdir()
    with pytest.raises(ModelLoadError):
        ts.from_pretrained(str(path))
    with pytest.raises(ModelLoadError):
        ts.SequencePipeline(ts.EncodingConfig(max_tokens=1, sequence_length=1)).load(str(path))


# Encoding options
# ---------------------------------------------------------------------------


def test_fit_transform_forwards_encoding_options(config, train_records):
    serial = ts.SequencePipeline(config).fit_transform(
        train_records, parallel_mode="off", show_progress=False
    )
    pooled = ts.SequencePipeline(config).fit_transform(
        train_records, num_workers=2, parallel_mode="batch", show_progress=False
    )
    assert np.array_equal(serial, pooled)


def test_fit_transform_rejects_unknown_parallel_mode(config, train_records):
    """The mode reaches the encoder instead of being silently dropped."""
    with pytest.raises(InvalidConfigurationError):
        ts.SequencePipeline(config).fit_transform(train_records, parallel_mode="chunk")

import json

import pandas as pd
import pytest

from config import read_sample_size
from data_processing.review_preprocessing import (Review, ReviewCleaner, binarize_rating,
                                                  is_ascii_text, parse_review_row,
                                                  parse_score, parse_version,
                                                  reviews_from_frame)
from utils.errors import MalformedRowError


@pytest.mark.parametrize("raw, expected", [
    ("13.0.2", 13),
    ("7", 7),
    (" 4.12 ", 4),
    ("0.9.1", 0),
])
def test_parse_version(raw, expected):
    assert parse_version(raw) == expected


@pytest.mark.parametrize("raw, reason", [
    ("", 'missing_version'),
    ("   ", 'missing_version'),
    (None, 'missing_version'),
    ("beta", 'unparsable_version'),
    ("v13.0", 'unparsable_version'),
    ("-1.2", 'unparsable_version'),
    ("².1", 'unparsable_version'),
    ("٣.0", 'unparsable_version'),
])
def test_parse_version_rejects(raw, reason):
    with pytest.raises(MalformedRowError) as excinfo:
        parse_version(raw)
    assert excinfo.value.reason == reason


def test_is_ascii_text():
    assert is_ascii_text("Plain review, 5 stars!")
    assert is_ascii_text("")
    assert not is_ascii_text("CafÃ©")
    assert not is_ascii_text("nul\x00byte")


def test_parse_score():
    assert parse_score("4") == 4
    assert parse_score("5.0") == 5
    for bad in ["0", "6", "3.5", "five", ""]:
        with pytest.raises(MalformedRowError) as excinfo:
            parse_score(bad)
        assert excinfo.value.reason == 'invalid_score'


def test_parse_review_row():
    row = {'app': 'Tinder', 'content': 'Love it',
           'reviewCreatedVersion': '13.0.2', 'score': '5'}
    assert parse_review_row(row) == Review(app='Tinder', content='Love it', version=13, score=5)


def test_parse_review_row_non_ascii():
    row = {'app': 'Tinder', 'content': 'TrÃ¨s bien',
           'reviewCreatedVersion': '13.0.2', 'score': '5'}
    with pytest.raises(MalformedRowError) as excinfo:
        parse_review_row(row)
    assert excinfo.value.reason == 'non_ascii'


def test_clean_reviews_drops_and_counts(raw_reviews_df, tmp_path):
    cleaner = ReviewCleaner(raw_path=tmp_path, output_path=tmp_path / "processed")
    clean_df = cleaner.clean_reviews(raw_reviews_df)

    assert list(clean_df.columns) == ['app', 'content', 'version', 'score']
    assert clean_df['content'].tolist() == ['Love it', '', 'Fine']
    assert clean_df['version'].tolist() == [13, 7, 12]
    assert clean_df['score'].tolist() == [5, 3, 2]
    assert cleaner.cleaning_summary == {
        'input_rows': 7,
        'missing_version': 1,
        'unparsable_version': 1,
        'non_ascii': 1,
        'invalid_score': 1,
        'final_rows': 3,
    }


def test_clean_reviews_drops_unicode_digit_versions(tmp_path):
    df = pd.DataFrame({
        'app': ['Tinder', 'Tinder'],
        'content': ['Superscript version', 'Normal version'],
        'reviewCreatedVersion': ['².1', '13.0.2'],
        'score': ['5', '4'],
    })
    cleaner = ReviewCleaner(raw_path=tmp_path, output_path=tmp_path)
    clean_df = cleaner.clean_reviews(df)
    assert clean_df['version'].tolist() == [13]
    assert cleaner.cleaning_summary['unparsable_version'] == 1


def test_clean_reviews_missing_column(raw_reviews_df, tmp_path):
    cleaner = ReviewCleaner(raw_path=tmp_path, output_path=tmp_path)
    with pytest.raises(ValueError, match="reviewCreatedVersion"):
        cleaner.clean_reviews(raw_reviews_df.drop(columns=['reviewCreatedVersion']))


def test_load_save_roundtrip(raw_reviews_df, tmp_path):
    raw_file = tmp_path / "raw.csv"
    raw_reviews_df.to_csv(raw_file, index=False)

    cleaner = ReviewCleaner(raw_path=tmp_path, output_path=tmp_path / "processed")
    loaded = cleaner.load_raw_reviews("raw.csv")
    # Empty cells stay empty strings instead of NaN
    assert loaded.loc[4, 'content'] == ''
    assert loaded.loc[1, 'reviewCreatedVersion'] == ''

    clean_df = cleaner.clean_reviews(loaded)
    output_file = cleaner.save(clean_df)
    report = cleaner.generate_preprocessing_report()

    assert output_file.exists()
    assert report.read_text(encoding='utf-8').startswith("# Data Preprocessing Report")
    with open(tmp_path / "processed" / "cleaning_summary.json", encoding='utf-8') as f:
        assert json.load(f)['final_rows'] == 3

    reloaded = pd.read_csv(output_file, keep_default_na=False)
    reviews = reviews_from_frame(reloaded)
    assert reviews[0] == Review(app='Tinder', content='Love it', version=13, score=5)
    assert reviews[1].content == ''


def test_load_raw_reviews_sample_size(raw_reviews_df, tmp_path):
    raw_file = tmp_path / "raw.csv"
    raw_reviews_df.to_csv(raw_file, index=False)
    cleaner = ReviewCleaner(raw_path=tmp_path, output_path=tmp_path)
    assert len(cleaner.load_raw_reviews(str(raw_file), sample_size=3)) == 3
    # 0 means no cap, same as leaving it unset
    assert len(cleaner.load_raw_reviews(str(raw_file), sample_size=0)) == len(raw_reviews_df)


@pytest.mark.parametrize("raw, expected", [
    ("5000", 5000),
    (" 12 ", 12),
    ("0", None),
    ("", None),
    (None, None),
    ("abc", None),
    ("-5", None),
    ("²", None),
])
def test_read_sample_size(raw, expected):
    assert read_sample_size(raw) == expected


def test_binarize_rating():
    assert [binarize_rating(s) for s in range(1, 6)] == ['low', 'low', 'low', 'high', 'high']
    assert binarize_rating(3, threshold=3) == 'high'

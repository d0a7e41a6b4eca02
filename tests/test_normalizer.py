import pytest

from feature_engineering.normalizer import (NormalizerConfig, StopwordMatcher, TextNormalizer,
                                            TokenizedCorpus, make_ngrams, stopwords_for_apps)


def test_empty_text_yields_no_tokens(plain_normalizer):
    assert plain_normalizer.normalize("") == []
    assert plain_normalizer.normalize(None) == []
    assert plain_normalizer.normalize("   ") == []


def test_lowercase_punctuation_numbers(plain_normalizer):
    tokens = plain_normalizer.normalize("I LOVE this App!!! 5 stars :)")
    assert tokens == ['love', 'app', 'stars']


def test_symbols_and_digits_inside_tokens(plain_normalizer):
    assert plain_normalizer.normalize("love <3 iphone11 + $$") == ['love', 'iphone']


def test_keep_numbers_and_punct():
    normalizer = TextNormalizer(NormalizerConfig(remove_numbers=False, remove_punct=False,
                                                 stopwords=frozenset(), stem=False))
    assert normalizer.normalize("rated 5!") == ['rated', '5', '!']


def test_handles_and_hashtags_are_stripped():
    normalizer = TextNormalizer(NormalizerConfig(stopwords=frozenset({'tinder*'}), stem=False))
    assert normalizer.normalize("@tinder #love tinderella") == ['love']


def test_wildcard_stopwords_from_app_names():
    patterns = stopwords_for_apps(["Tinder", "Bumble Dating", "#Hinge"])
    assert patterns == frozenset({'tinder*', 'bumbledating*', 'bumble*', 'dating*', 'hinge*'})

    is_stopword = StopwordMatcher(patterns | {'app'})
    assert is_stopword('Tinders')
    assert is_stopword('app')
    assert not is_stopword('apps')
    assert not is_stopword('matching')


def test_multi_word_app_names_keep_common_words():
    patterns = stopwords_for_apps(["Plenty of Fish"])
    assert patterns == frozenset({'plentyoffish*', 'plenty*', 'fish*'})

    normalizer = TextNormalizer(NormalizerConfig(stopwords=patterns, stem=False))
    assert normalizer.normalize("great offer, often offline") == [
        'great', 'offer', 'often', 'offline']
    assert normalizer.normalize("PlentyOfFish has plenty of fishermen") == ['has', 'of']


def test_short_app_names_match_exactly():
    patterns = stopwords_for_apps(["X", "Go Go"])
    assert patterns == frozenset({'x', 'gogo*'})

    normalizer = TextNormalizer(NormalizerConfig(stopwords=patterns, stem=False))
    assert normalizer.normalize("x xylophone gogogo go") == ['xylophone', 'go']


def test_custom_stemmer():
    normalizer = TextNormalizer(NormalizerConfig(stopwords=frozenset(),
                                                 stemmer=lambda token: token[:4]))
    assert normalizer.normalize("matches matching") == ['matc', 'matc']


def test_snowball_stemming_default():
    normalizer = TextNormalizer(NormalizerConfig(stopwords=frozenset()))
    assert normalizer.normalize("running crashes") == ['run', 'crash']
    # Snowball English, not Porter ("gener")
    assert normalizer.normalize("generously") == ['generous']


def test_stem_disabled_ignores_stemmer():
    normalizer = TextNormalizer(NormalizerConfig(stopwords=frozenset(), stem=False,
                                                 stemmer=lambda token: 'x'))
    assert normalizer.normalize("running") == ['running']


def test_ngrams():
    unigrams_and_bigrams = TextNormalizer(NormalizerConfig(stopwords=frozenset(), stem=False,
                                                           ngram_range=(1, 2)))
    bigrams_only = TextNormalizer(NormalizerConfig(stopwords=frozenset(), stem=False,
                                                   ngram_range=(2, 2)))
    text = "fast smooth design"
    assert unigrams_and_bigrams.normalize(text) == [
        'fast', 'smooth', 'design', 'fast_smooth', 'smooth_design']
    assert bigrams_only.normalize(text) == ['fast_smooth', 'smooth_design']
    assert bigrams_only.normalize("single") == []


def test_make_ngrams_concatenator():
    assert make_ngrams(['a', 'b', 'c'], 3, 3, ' ') == ['a b c']


def test_invalid_ngram_range():
    with pytest.raises(ValueError):
        NormalizerConfig(ngram_range=(2, 1))
    with pytest.raises(ValueError):
        NormalizerConfig(ngram_range=(0, 1))


def test_corpus_is_restartable(plain_normalizer):
    corpus = TokenizedCorpus(["love the design", "", "hate crash"], plain_normalizer)
    first = list(corpus)
    second = list(corpus)
    assert first == second == [['love', 'design'], [], ['hate', 'crash']]
    assert len(corpus) == 3
    assert corpus.docnames == ['text1', 'text2', 'text3']
    assert corpus.token_count() == 4


def test_corpus_docnames_must_align(plain_normalizer):
    with pytest.raises(ValueError):
        TokenizedCorpus(["a", "b"], plain_normalizer, docnames=['only_one'])

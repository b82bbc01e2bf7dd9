import math

import pytest

from thrifthub.helpers.ai.similarity import (
    cosine_similarity,
    fit_dimensions,
    match_label,
    parse_embedding,
    serialize_embedding,
)


def test_identical_vectors_score_one():
    assert cosine_similarity([0.3, 0.4], [0.3, 0.4]) == pytest.approx(1.0)


def test_orthogonal_vectors_score_zero():
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)


def test_zero_vector_scores_zero():
    assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0


def test_length_mismatch_raises():
    with pytest.raises(ValueError):
        cosine_similarity([1.0, 2.0], [1.0])


def test_fit_dimensions_pads_and_truncates():
    assert fit_dimensions([1, 2], 4) == [1.0, 2.0, 0.0, 0.0]
    assert fit_dimensions([1, 2, 3, 4, 5], 3) == [1.0, 2.0, 3.0]


def test_serialized_embedding_parses_back():
    vector = [0.125, -1.5, math.pi]
    assert parse_embedding(serialize_embedding(vector)) == vector
    assert parse_embedding("") == []


def test_match_label():
    assert match_label(0.876) == "88% match"
    assert match_label(-0.2) == "0% match"

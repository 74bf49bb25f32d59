"""Tests for cosine similarity scoring."""

import numpy as np
import pytest

from infrastructure.similarity import cosine_similarities, cosine_similarity


class TestCosineSimilarity:

    def test_identical_vector_scores_one(self):
        v = [0.3, -1.2, 4.5, 0.01]
        assert cosine_similarity(v, v) == pytest.approx(1.0)

    def test_is_symmetric(self):
        a = [1.0, 2.0, 3.0]
        b = [-2.0, 0.5, 1.0]
        assert cosine_similarity(a, b) == cosine_similarity(b, a)

    def test_opposite_and_orthogonal(self):
        assert cosine_similarity([1.0, 0.0], [-3.0, 0.0]) == pytest.approx(-1.0)
        assert cosine_similarity([1.0, 0.0], [0.0, 2.0]) == pytest.approx(0.0)

    def test_magnitude_does_not_matter(self):
        assert cosine_similarity([1.0, 1.0], [10.0, 10.0]) == pytest.approx(1.0)

    def test_zero_vector_scores_zero(self):
        assert cosine_similarity([0.0, 0.0, 0.0], [1.0, 2.0, 3.0]) == 0.0
        assert cosine_similarity([1.0, 2.0, 3.0], [0.0, 0.0, 0.0]) == 0.0
        assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0

    def test_bounded(self):
        rng = np.random.default_rng(7)
        for _ in range(200):
            a = rng.normal(size=16).tolist()
            b = rng.normal(size=16).tolist()
            assert -1.0 <= cosine_similarity(a, b) <= 1.0

    def test_length_mismatch_raises(self):
        with pytest.raises(ValueError):
            cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0])


class TestCosineSimilarities:

    def test_matches_scalar_form(self):
        query = [0.5, -1.0, 2.0]
        rows = [[1.0, 0.0, 0.0], [0.5, -1.0, 2.0], [0.0, 0.0, 0.0], [-1.0, 2.0, -4.0]]

        scores = cosine_similarities(query, np.array(rows))

        expected = [cosine_similarity(query, row) for row in rows]
        assert scores.tolist() == pytest.approx(expected)
        assert scores[2] == 0.0

    def test_zero_query_scores_all_zero(self):
        scores = cosine_similarities([0.0, 0.0], np.array([[1.0, 0.0], [0.0, 1.0]]))
        assert scores.tolist() == [0.0, 0.0]

    def test_empty_matrix(self):
        assert cosine_similarities([1.0, 0.0], np.zeros((0, 2))).size == 0

    def test_dimension_mismatch_raises(self):
        with pytest.raises(ValueError):
            cosine_similarities([1.0, 0.0, 0.0], np.array([[1.0, 0.0]]))

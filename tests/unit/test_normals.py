import numpy as np
import pytest

from metamesh.core.field import single_ball_field
from metamesh.core.normals import NormalEstimator
from metamesh.core.utils import ensure_unit_vectors


class ConstantField:
    def update(self) -> None:
        pass

    def evaluate(self, point: np.ndarray) -> float:
        return 0.25


def test_ball_normals_point_outward() -> None:
    field = single_ball_field(radius=1.0)
    est = NormalEstimator(epsilon=0.01)
    rng = np.random.default_rng(0)
    dirs = rng.normal(size=(20, 3))
    dirs /= np.linalg.norm(dirs, axis=1, keepdims=True)
    normals, fallback = est.estimate(field, dirs)
    assert not fallback.any()
    np.testing.assert_allclose(np.linalg.norm(normals, axis=1), 1.0, atol=1e-4)
    assert np.all(np.einsum("ij,ij->i", normals, dirs) > 0.999)


def test_gradient_uses_central_differences() -> None:
    field = single_ball_field(radius=1.0)
    est = NormalEstimator(epsilon=0.01)
    p = np.array([[2.0, 0.0, 0.0]])
    g = est.gradient(field, p)
    expected_x = field.evaluate(np.array([2.01, 0.0, 0.0])) - field.evaluate(np.array([1.99, 0.0, 0.0]))
    assert g[0, 0] == pytest.approx(expected_x)
    assert g[0, 1] == pytest.approx(0.0, abs=1e-15)
    assert g[0, 2] == pytest.approx(0.0, abs=1e-15)


def test_zero_gradient_falls_back_to_unit_vector() -> None:
    est = NormalEstimator(epsilon=0.01, fallback=(0.0, 0.0, 2.0))
    normals, fallback = est.estimate(ConstantField(), np.zeros((3, 3)))
    assert fallback.all()
    np.testing.assert_allclose(normals, np.tile([0.0, 0.0, 1.0], (3, 1)))
    assert np.all(np.isfinite(normals))


def test_estimate_one_and_empty_batch() -> None:
    field = single_ball_field(radius=1.0)
    est = NormalEstimator()
    n = est.estimate_one(field, np.array([0.0, 1.0, 0.0]))
    np.testing.assert_allclose(n, [0.0, 1.0, 0.0], atol=1e-6)
    normals, fallback = est.estimate(field, np.zeros((0, 3)))
    assert normals.shape == (0, 3)
    assert fallback.shape == (0,)


def test_invalid_estimator_settings() -> None:
    with pytest.raises(ValueError):
        NormalEstimator(epsilon=0.0)
    with pytest.raises(ValueError):
        NormalEstimator(fallback=(0.0, 0.0, 0.0))


def test_ensure_unit_vectors_handles_nan_rows() -> None:
    v = np.array([[3.0, 0.0, 4.0], [np.nan, 0.0, 0.0], [0.0, 0.0, 0.0]])
    out, degenerate = ensure_unit_vectors(v, fallback=(1.0, 0.0, 0.0))
    np.testing.assert_allclose(out[0], [0.6, 0.0, 0.8])
    np.testing.assert_allclose(out[1:], [[1.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
    assert degenerate.tolist() == [False, True, True]

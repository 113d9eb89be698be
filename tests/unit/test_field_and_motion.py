import numpy as np
import pytest

from metamesh.core.field import MetaBall, MetaBallField, ScalarField, sample_field, single_ball_field
from metamesh.motion.paths import OrbitMotion, OscillatingMotion, StaticMotion


class PlaneField:
    """Inside below z = 0; no vectorised evaluation."""

    def __init__(self) -> None:
        self.updates = 0

    def update(self) -> None:
        self.updates += 1

    def evaluate(self, point: np.ndarray) -> float:
        return float(-point[2])


def test_single_ball_is_zero_on_its_radius() -> None:
    field = single_ball_field(radius=1.5)
    for p in ([1.5, 0.0, 0.0], [0.0, -1.5, 0.0], [0.0, 0.0, 1.5]):
        assert field.evaluate(np.array(p)) == pytest.approx(0.0, abs=1e-12)
    assert field.evaluate(np.array([0.5, 0.0, 0.0])) > 0.0
    assert field.evaluate(np.array([3.0, 0.0, 0.0])) < 0.0


def test_field_is_finite_at_ball_center() -> None:
    field = single_ball_field(radius=1.0)
    value = field.evaluate(np.zeros(3))
    assert np.isfinite(value)
    assert value > 0.0


def test_potentials_add_up() -> None:
    balls = [MetaBall(center=np.array([-1.0, 0.0, 0.0]), radius=1.0), MetaBall(center=np.array([1.0, 0.0, 0.0]), radius=1.0)]
    field = MetaBallField(balls, threshold=1.0)
    # Each ball contributes 1 / 1**2 at the origin
    assert field.evaluate(np.zeros(3)) == pytest.approx(1.0)


def test_evaluate_many_matches_evaluate() -> None:
    rng = np.random.default_rng(3)
    field = MetaBallField(
        [MetaBall(center=rng.normal(size=3), radius=0.7), MetaBall(center=rng.normal(size=3), radius=1.1)],
        threshold=0.5,
    )
    pts = rng.uniform(-2.0, 2.0, size=(50, 3))
    many = field.evaluate_many(pts)
    single = np.array([field.evaluate(p) for p in pts])
    np.testing.assert_allclose(many, single)


def test_update_moves_balls_and_reset_restores() -> None:
    ball = MetaBall(
        center=np.zeros(3),
        radius=1.0,
        motion=OscillatingMotion(amplitude=(1.0, 0.0, 0.0), frequency_hz=1.0),
    )
    field = MetaBallField([ball], time_step_s=0.25)
    field.update()
    assert field.tick == 1
    np.testing.assert_allclose(field.centers()[0], [1.0, 0.0, 0.0], atol=1e-12)
    before = field.evaluate(np.array([1.0, 0.5, 0.0]))
    assert field.evaluate(np.array([1.0, 0.5, 0.0])) == before
    field.reset()
    assert field.tick == 0
    np.testing.assert_allclose(field.centers()[0], [0.0, 0.0, 0.0])


def test_invalid_field_configuration() -> None:
    with pytest.raises(ValueError):
        MetaBallField([])
    with pytest.raises(ValueError):
        MetaBall(center=np.zeros(3), radius=0.0)
    with pytest.raises(ValueError):
        MetaBall(center=np.zeros(2), radius=1.0)


def test_sample_field_falls_back_to_point_evaluation() -> None:
    field = PlaneField()
    assert isinstance(field, ScalarField)
    pts = np.array([[0.0, 0.0, 1.0], [0.0, 0.0, -2.0]])
    np.testing.assert_allclose(sample_field(field, pts), [-1.0, 2.0])


def test_sample_field_rejects_wrong_shape() -> None:
    class BadField(PlaneField):
        def evaluate_many(self, points: np.ndarray) -> np.ndarray:
            return np.zeros(len(points) + 1)

    with pytest.raises(ValueError):
        sample_field(BadField(), np.zeros((4, 3)))


def test_motion_models() -> None:
    np.testing.assert_allclose(StaticMotion().offset(12.0), np.zeros(3))

    osc = OscillatingMotion(amplitude=(0.5, 0.0, 2.0), frequency_hz=0.5)
    np.testing.assert_allclose(osc.offset(0.5), [0.5, 0.0, 2.0], atol=1e-12)

    orbit = OrbitMotion(radius=2.0, period_s=4.0, plane="xy")
    np.testing.assert_allclose(orbit.offset(0.0), [2.0, 0.0, 0.0], atol=1e-12)
    np.testing.assert_allclose(orbit.offset(1.0), [0.0, 2.0, 0.0], atol=1e-12)
    orbit_yz = OrbitMotion(radius=1.0, period_s=4.0, plane="yz")
    np.testing.assert_allclose(orbit_yz.offset(1.0), [0.0, 0.0, 1.0], atol=1e-12)

    with pytest.raises(ValueError):
        OrbitMotion(period_s=0.0)
    with pytest.raises(ValueError):
        OscillatingMotion(frequency_hz=-1.0)

from .paths import BallMotion, OrbitMotion, OscillatingMotion, StaticMotion

__all__ = ["BallMotion", "OrbitMotion", "OscillatingMotion", "StaticMotion"]

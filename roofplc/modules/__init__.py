from roofplc.modules.motion import MotionCommander

__all__ = [
    "MotionCommander",
]

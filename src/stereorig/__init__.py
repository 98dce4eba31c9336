from stereorig.api import InvalidModelError, StereoCameraModel, StereoPose, load_stereo_pose, save_stereo_pose
from stereorig.calib_io import CalibrationFormatError
from stereorig.core.camera_model import CameraModel
from stereorig.core.transform import RigidTransform

__all__ = [
    "CalibrationFormatError",
    "CameraModel",
    "InvalidModelError",
    "RigidTransform",
    "StereoCameraModel",
    "StereoPose",
    "load_stereo_pose",
    "save_stereo_pose",
]

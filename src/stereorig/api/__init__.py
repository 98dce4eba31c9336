from stereorig.api.model_io import StereoPose, load_stereo_pose, save_stereo_pose, stereo_pose_path
from stereorig.api.stereo_camera_model import InvalidModelError, StereoCameraModel

__all__ = [
    "InvalidModelError",
    "StereoCameraModel",
    "StereoPose",
    "load_stereo_pose",
    "save_stereo_pose",
    "stereo_pose_path",
]

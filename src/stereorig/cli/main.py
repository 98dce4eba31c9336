from __future__ import annotations

import argparse
import logging
from pathlib import Path

import numpy as np

from stereorig.api.stereo_camera_model import StereoCameraModel

log = logging.getLogger("stereorig")


def _load(args: argparse.Namespace) -> StereoCameraModel | None:
    model = StereoCameraModel()
    if not model.load(args.directory, args.name, ignore_stereo_transform=args.ignore_stereo_transform):
        log.error('Failed to load stereo calibration "%s" from %s', args.name, args.directory)
        return None
    return model


def _print_info(model: StereoCameraModel) -> None:
    print(f"name: {model.name}")
    print(f"left:  {model.left!r}")
    print(f"right: {model.right!r}")
    print(f"valid: {model.is_valid()}")
    if model.is_valid():
        print(f"baseline: {model.baseline():.6g}")
    transform = model.stereo_transform()
    print(f"stereo_transform: {'none' if transform.is_null() else transform}")
    for label, m in (("essential_matrix", model.E), ("fundamental_matrix", model.F)):
        if m is not None:
            print(f"{label}: {np.array2string(m.reshape(-1), precision=6)}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="stereorig")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug messages.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("directory", type=Path, help="Calibration directory.")
    common.add_argument("name", help="Stereo camera name (files are {name}_left.yaml, {name}_right.yaml, {name}_pose.yaml).")
    common.add_argument(
        "--ignore-stereo-transform",
        action="store_true",
        help="Only read the left/right calibrations; {name}_pose.yaml is not required.",
    )

    sub.add_parser("info", parents=[common], help="Print a summary of a stereo calibration.")

    depth = sub.add_parser("depth", parents=[common], help="Convert disparities (px) to depths (m).")
    depth.add_argument("disparity", type=float, nargs="+")

    disp = sub.add_parser("disparity", parents=[common], help="Convert depths to disparities (px).")
    disp.add_argument("depth", type=float, nargs="+")
    disp.add_argument("--mm", action="store_true", help="Depths are integer millimetres (16-bit depth image convention).")

    scale = sub.add_parser("scale", parents=[common], help="Rescale the intrinsics and save to another directory.")
    scale.add_argument("factor", type=float)
    scale.add_argument("--out", type=Path, required=True)

    args = parser.parse_args(argv)
    if args.cmd == "disparity" and args.mm:
        bad = [z for z in args.depth if not z.is_integer() or z < 0]
        if bad:
            parser.error(f"--mm depths must be non-negative integer millimetres, got {bad}")
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    model = _load(args)
    if model is None:
        return 1

    if args.cmd == "info":
        _print_info(model)
        return 0

    if args.cmd == "depth":
        for d in args.disparity:
            print(f"{d:g} px -> {model.compute_depth(d):.6g} m")
        return 0

    if args.cmd == "disparity":
        for z in args.depth:
            if args.mm:
                value = model.compute_disparity_mm(int(z))
                print(f"{int(z)} mm -> {value:.6g} px")
            else:
                print(f"{z:g} m -> {model.compute_disparity(z):.6g} px")
        return 0

    if args.cmd == "scale":
        model.scale(args.factor)
        args.out.mkdir(parents=True, exist_ok=True)
        if not model.save(args.out, ignore_stereo_transform=args.ignore_stereo_transform):
            log.error("Failed to save scaled calibration to %s", args.out)
            return 1
        print(f"Wrote {args.out}")
        return 0

    raise AssertionError(f"Unhandled cmd: {args.cmd}")


if __name__ == "__main__":
    raise SystemExit(main())

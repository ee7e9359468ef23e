from __future__ import annotations

import argparse
import logging
from pathlib import Path

from lensdistort.api.model_io import load_distortion, save_distortion
from lensdistort.api.registry import available_conventions, create_distortion
from lensdistort.core.distortion import LensDistortion
from lensdistort.core.geometry import Point2D


def _parse_coeffs(text: str) -> list[float]:
    try:
        return [float(v) for v in text.replace(" ", "").split(",") if v]
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid coefficient list {text!r}: {e}") from e


def _add_model_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--model", type=Path, default=None, help="JSON distortion model (overrides --convention/--coeffs).")
    p.add_argument("--convention", type=str, default="brown", choices=available_conventions())
    p.add_argument(
        "--coeffs",
        type=_parse_coeffs,
        default=None,
        help="Comma-separated coefficients laid out as one of the convention's layouts.",
    )
    p.add_argument("--iterations", type=int, default=None, help="Override the undistort iteration bound.")


def _build_model(args: argparse.Namespace) -> LensDistortion:
    if args.model is not None:
        model = load_distortion(args.model)
    else:
        model = create_distortion(args.convention, args.coeffs)
    if args.iterations is not None:
        model.undistort_iterations = args.iterations
    return model


def _format_point(p: Point2D) -> str:
    return f"{p.x:.12g} {p.y:.12g}"


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="lensdistort")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    sub = parser.add_subparsers(dest="cmd", required=True)

    info = sub.add_parser("info", help="Print the convention, active components and coefficients of a model.")
    _add_model_args(info)

    dist = sub.add_parser("distort", help="Map an undistorted normalized point to its distorted position.")
    _add_model_args(dist)
    dist.add_argument("x", type=float)
    dist.add_argument("y", type=float)

    undist = sub.add_parser("undistort", help="Map a distorted normalized point back to its undistorted position.")
    _add_model_args(undist)
    undist.add_argument("x", type=float)
    undist.add_argument("y", type=float)

    conv = sub.add_parser("convert", help="Write a model as a normalized JSON document.")
    _add_model_args(conv)
    conv.add_argument("--out", type=Path, required=True)

    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    try:
        model = _build_model(args)
    except ValueError as e:
        parser.error(str(e))

    if args.cmd == "info":
        components = model.get_distortion_components()
        print(f"convention: {model.get_distortion_convention()}")
        print(f"components: {'|'.join(components.names()) or 'NO_DISTORTION'}")
        print(f"undistort_iterations: {model.undistort_iterations}")
        for name, value in model.as_dict().items():
            print(f"{name}: {value!r}")
        return 0

    if args.cmd == "distort":
        print(_format_point(model.distort(Point2D(args.x, args.y))))
        return 0

    if args.cmd == "undistort":
        print(_format_point(model.undistort(Point2D(args.x, args.y))))
        return 0

    if args.cmd == "convert":
        path = save_distortion(args.out, model)
        print(f"Wrote {path}")
        return 0

    raise AssertionError(f"Unhandled cmd: {args.cmd}")


if __name__ == "__main__":
    raise SystemExit(main())

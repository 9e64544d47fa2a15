# Copyright (c) 2026 Jeroen Visser. All rights reserved.
# Licensed under the MIT License — see LICENSE.
"""
Command-line interface for orbit propagation and pass prediction.

Usage:
    # Passes of a 500 km SSO over Svalbard for one day
    skypass passes --altitude 500 --inclination 97.4

    # Several stations (NAME:LAT:LON[:MIN_EL[:ALT_KM]]), JSON output
    skypass passes --altitude 550 --inclination 53 \\
        --station "Svalbard:78.23:15.39:5" --station "Awarua:-46.53:168.38:10" --json

    # Numerical propagation with J2 and drag, final osculating elements
    skypass propagate --altitude 400 --inclination 51.6 --mode numerical-j2 --drag --orbits 15
"""
import argparse
import json
import logging
import sys
from dataclasses import replace
from datetime import datetime, timedelta, timezone

from skypass.domain.coordinate_frames import as_utc
from skypass.domain.errors import InvalidOrbitError, InvalidStationError
from skypass.domain.numerical_propagation import SpacecraftProperties
from skypass.domain.observation import GroundStation
from skypass.domain.orbital_elements import OrbitalElements
from skypass.domain.orbital_mechanics import OrbitalConstants, orbital_period_s
from skypass.domain.pass_prediction import compute_pass_metrics, predict_passes
from skypass.domain.propagation_result import (
    NumericalPropagation,
    PropagationMode,
    PropagationRequest,
    config_for_mode,
    osculating_elements,
    run_propagation,
    state_at,
)

DEFAULT_STATION = "Svalbard:78.23:15.39:5"

_PERTURBATION_FLAGS = ("j2", "j3_j6", "drag", "srp", "third_body_moon", "third_body_sun")


def parse_station(text: str) -> GroundStation:
    """Parse NAME:LAT:LON[:MIN_EL[:ALT_KM]] into a GroundStation."""
    parts = text.split(":")
    if not 3 <= len(parts) <= 5:
        raise ValueError(f"Station must be NAME:LAT:LON[:MIN_EL[:ALT_KM]], got {text!r}")
    name = parts[0].strip()
    if not name:
        raise ValueError(f"Station name is empty in {text!r}")
    try:
        values = [float(p) for p in parts[1:]]
    except ValueError as e:
        raise ValueError(f"Station {name!r} has a non-numeric field: {e}") from e

    kwargs = {"lat_deg": values[0], "lon_deg": values[1]}
    if len(values) > 2:
        kwargs["min_elevation_deg"] = values[2]
    if len(values) > 3:
        kwargs["alt_km"] = values[3]
    return GroundStation(name=name, **kwargs)


def _parse_epoch(text: str | None) -> datetime:
    if text is None:
        return datetime.now(tz=timezone.utc).replace(microsecond=0)
    return as_utc(datetime.fromisoformat(text))


def _elements_from_args(args: argparse.Namespace) -> OrbitalElements:
    if args.sma is not None:
        sma = args.sma
    elif args.altitude is not None:
        sma = OrbitalConstants.R_EARTH_EQUATORIAL + args.altitude
    else:
        raise ValueError("Specify one of: --altitude or --sma")
    return OrbitalElements(
        semi_major_axis_km=sma,
        eccentricity=args.ecc,
        inclination_deg=args.inclination,
        raan_deg=args.raan,
        arg_perigee_deg=args.argp,
        true_anomaly_deg=args.nu,
    )


def _request_from_args(args: argparse.Namespace, num_orbits: float) -> PropagationRequest:
    mode = PropagationMode(args.mode)
    overrides = {flag: True for flag in _PERTURBATION_FLAGS if getattr(args, flag, False)}
    spacecraft = SpacecraftProperties(
        cd=args.cd, cr=args.cr, area_m2=args.area, mass_kg=args.mass,
    )
    return PropagationRequest(
        elements=_elements_from_args(args),
        epoch=_parse_epoch(args.epoch),
        mode=mode,
        num_orbits=num_orbits,
        step_s=args.step,
        perturbations=config_for_mode(mode, **overrides),
        spacecraft=spacecraft,
        include_secular_j2=not args.no_secular_j2,
    )


def _pass_to_dict(p) -> dict:
    data = {
        "station": p.station_name,
        "station_id": p.station_id,
        "aos": p.aos.isoformat(),
        "los": p.los.isoformat(),
        "tca": p.tca.isoformat(),
        "max_elevation_deg": round(p.max_elevation_deg, 3),
        "aos_azimuth_deg": round(p.aos_azimuth_deg, 3),
        "los_azimuth_deg": round(p.los_azimuth_deg, 3),
        "duration_s": p.duration_s,
        "quality": p.quality.value,
    }
    if p.track:
        data["track"] = [
            {"azimuth_deg": t.azimuth_deg, "elevation_deg": t.elevation_deg,
             "time_offset_s": t.time_offset_s}
            for t in p.track
        ]
    return data


def _elements_to_dict(el: OrbitalElements) -> dict:
    return {
        "semi_major_axis_km": el.semi_major_axis_km,
        "eccentricity": el.eccentricity,
        "inclination_deg": el.inclination_deg,
        "raan_deg": el.raan_deg,
        "arg_perigee_deg": el.arg_perigee_deg,
        "true_anomaly_deg": el.true_anomaly_deg,
    }


def run_passes(args: argparse.Namespace) -> None:
    """Predict passes and print a table (or JSON)."""
    stations = [parse_station(s) for s in (args.station or [DEFAULT_STATION])]
    duration = timedelta(days=args.days)
    request = _request_from_args(args, num_orbits=1.0)
    if request.mode.is_numerical:
        # Integrate over the whole pass window
        period_s = orbital_period_s(request.elements.semi_major_axis_km)
        request = replace(request, num_orbits=duration.total_seconds() / period_s + 1.0)

    result = run_propagation(request)
    passes = predict_passes(
        result, stations,
        duration=duration,
        step=timedelta(seconds=args.step),
        record_track=args.track,
    )
    metrics = compute_pass_metrics(passes, args.days, args.data_rate)

    if args.json:
        print(json.dumps({
            "passes": [_pass_to_dict(p) for p in passes],
            "metrics": {
                "passes_per_day": metrics.passes_per_day,
                "mean_pass_duration_min": metrics.mean_pass_duration_min,
                "max_gap_hours": metrics.max_gap_hours,
                "daily_contact_min": metrics.daily_contact_min,
                "daily_data_mb": metrics.daily_data_mb,
            },
        }, indent=2))
        return

    print(f"{len(passes)} passes over {len(stations)} station(s) in {args.days:g} day(s)")
    for p in passes:
        print(
            f"{p.station_name:<12} AOS {p.aos:%Y-%m-%d %H:%M:%S}  LOS {p.los:%H:%M:%S}  "
            f"max el {p.max_elevation_deg:5.1f}°  az {p.aos_azimuth_deg:5.1f}°→{p.los_azimuth_deg:5.1f}°  "
            f"{p.duration_s / 60.0:5.1f} min  [{p.quality.value}]"
        )
    print(
        f"{metrics.passes_per_day:.1f} passes/day, {metrics.daily_contact_min:.1f} min/day, "
        f"longest gap {metrics.max_gap_hours:.1f} h, {metrics.daily_data_mb:.1f} MB/day"
    )


def run_propagate(args: argparse.Namespace) -> None:
    """Propagate and print the final state and osculating elements."""
    request = _request_from_args(args, num_orbits=args.orbits)
    result = run_propagation(request)
    end = request.epoch + timedelta(seconds=request.span_s)
    if isinstance(result, NumericalPropagation):
        end = result.trajectory.end

    state = state_at(result, end)
    elements = osculating_elements(result, end)

    if args.json:
        summary = {
            "mode": request.mode.value,
            "epoch": request.epoch.isoformat(),
            "end": end.isoformat(),
            "position_eci_km": list(state.position_eci_km),
            "velocity_eci_km_s": list(state.velocity_eci_km_s),
            "elements": _elements_to_dict(elements),
        }
        if isinstance(result, NumericalPropagation):
            summary["samples"] = len(result.trajectory)
            summary["requested_step_s"] = result.trajectory.requested_step_s
            summary["effective_step_s"] = result.effective_step_s
            summary["force_models"] = list(result.trajectory.force_model_names)
        print(json.dumps(summary, indent=2))
        return

    print(f"Mode: {request.mode.value}, {request.num_orbits:g} orbits from {request.epoch.isoformat()}")
    if isinstance(result, NumericalPropagation):
        traj = result.trajectory
        print(f"Force models: {', '.join(traj.force_model_names)}")
        step_note = " (coarsened)" if traj.coarsened else ""
        print(f"Samples: {len(traj)}, step {traj.effective_step_s:.3f} s{step_note}")
    print(f"Final state at {end.isoformat()}:")
    print(f"  r = ({state.position_eci_km[0]:.3f}, {state.position_eci_km[1]:.3f}, "
          f"{state.position_eci_km[2]:.3f}) km  |r| = {state.radius_km:.3f} km")
    print(f"  v = ({state.velocity_eci_km_s[0]:.6f}, {state.velocity_eci_km_s[1]:.6f}, "
          f"{state.velocity_eci_km_s[2]:.6f}) km/s")
    print("Osculating elements:")
    print(f"  a = {elements.semi_major_axis_km:.3f} km, e = {elements.eccentricity:.6f}, "
          f"i = {elements.inclination_deg:.4f}°")
    print(f"  RAAN = {elements.raan_deg:.4f}°, ω = {elements.arg_perigee_deg:.4f}°, "
          f"ν = {elements.true_anomaly_deg:.4f}°")


def _add_orbit_arguments(parser: argparse.ArgumentParser, default_mode: str) -> None:
    orbit = parser.add_argument_group('orbit')
    orbit.add_argument('--altitude', type=float, help="Altitude above the equatorial radius (km)")
    orbit.add_argument('--sma', type=float, help="Semi-major axis (km), overrides --altitude")
    orbit.add_argument('--ecc', type=float, default=0.0, help="Eccentricity (default: 0)")
    orbit.add_argument('--inclination', type=float, default=97.4,
                       help="Inclination in degrees (default: 97.4)")
    orbit.add_argument('--raan', type=float, default=0.0, help="RAAN in degrees (default: 0)")
    orbit.add_argument('--argp', type=float, default=0.0,
                       help="Argument of perigee in degrees (default: 0)")
    orbit.add_argument('--nu', type=float, default=0.0, help="True anomaly in degrees (default: 0)")
    orbit.add_argument('--epoch', help="ISO 8601 epoch, UTC if no offset (default: now)")

    prop = parser.add_argument_group('propagation')
    prop.add_argument('--mode', default=default_mode,
                      choices=[m.value for m in PropagationMode],
                      help=f"Propagator (default: {default_mode})")
    prop.add_argument('--step', type=float, default=30.0, help="Step in seconds (default: 30)")
    prop.add_argument('--no-secular-j2', action='store_true', default=False,
                      help="Pure two-body analytic propagation (keplerian mode)")
    prop.add_argument('--j2', action='store_true', default=False, help="Enable J2")
    prop.add_argument('--j3-j6', dest='j3_j6', action='store_true', default=False,
                      help="Enable J3-J6 zonal harmonics")
    prop.add_argument('--drag', action='store_true', default=False, help="Enable atmospheric drag")
    prop.add_argument('--srp', action='store_true', default=False,
                      help="Enable solar radiation pressure")
    prop.add_argument('--moon', dest='third_body_moon', action='store_true', default=False,
                      help="Enable lunar third-body gravity")
    prop.add_argument('--sun', dest='third_body_sun', action='store_true', default=False,
                      help="Enable solar third-body gravity")

    sc = parser.add_argument_group('spacecraft')
    sc.add_argument('--cd', type=float, default=2.2, help="Drag coefficient (default: 2.2)")
    sc.add_argument('--cr', type=float, default=1.2, help="SRP coefficient (default: 1.2)")
    sc.add_argument('--area', type=float, default=0.01, help="Cross-section in m² (default: 0.01)")
    sc.add_argument('--mass', type=float, default=4.0, help="Mass in kg (default: 4.0)")

    parser.add_argument('--json', action='store_true', default=False, help="Print JSON")
    parser.add_argument('--verbose', '-v', action='store_true', default=False,
                        help="Log progress to stderr")


def main(argv: list[str] | None = None):
    parser = argparse.ArgumentParser(
        description="Orbit propagation and ground-station pass prediction"
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    passes = subparsers.add_parser('passes', help="Predict ground-station passes")
    _add_orbit_arguments(passes, default_mode=PropagationMode.KEPLERIAN.value)
    passes.add_argument(
        '--station', action='append',
        help=f"Ground station NAME:LAT:LON[:MIN_EL[:ALT_KM]], repeatable (default: {DEFAULT_STATION})"
    )
    passes.add_argument('--days', type=float, default=1.0, help="Window length in days (default: 1)")
    passes.add_argument('--track', action='store_true', default=False,
                        help="Record the az/el track of each pass")
    passes.add_argument('--data-rate', type=float, default=9.6,
                        help="Downlink rate in kbps for data volume (default: 9.6)")
    passes.set_defaults(handler=run_passes)

    propagate = subparsers.add_parser('propagate', help="Propagate an orbit")
    _add_orbit_arguments(propagate, default_mode=PropagationMode.NUMERICAL_J2.value)
    propagate.add_argument('--orbits', type=float, default=10.0,
                           help="Number of orbital periods (default: 10)")
    propagate.set_defaults(handler=run_propagate)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        args.handler(args)
    except InvalidStationError as e:
        print(f"Error: Invalid station: {e}", file=sys.stderr)
        sys.exit(1)
    except InvalidOrbitError as e:
        print(f"Error: Invalid orbit: {e}", file=sys.stderr)
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()

# -*- coding: utf-8 -*-
from __future__ import annotations
import argparse, json, sys

import yaml

from .config import ConfigRecord, load_overrides, preset_names, resolve
from .config.layering import ConfigValidationError
from .config.schema import DERIVED_FIELDS
from .utils.dict_merge import deep_update, diff_keys


def _parse_assignment(text: str) -> dict:
    """``a.b=value`` -> ``{"a": {"b": value}}``; values are parsed as YAML."""
    if "=" not in text:
        raise argparse.ArgumentTypeError(f"expected key=value, got {text!r}")
    key, raw = text.split("=", 1)
    try:
        value = yaml.safe_load(raw) if raw.strip() else ""
    except yaml.YAMLError:
        value = raw
    out: dict = {}
    node = out
    parts = [p for p in key.strip().split(".") if p]
    if not parts:
        raise argparse.ArgumentTypeError(f"empty key in {text!r}")
    for part in parts[:-1]:
        node = node.setdefault(part, {})
    node[parts[-1]] = value
    return out


def cmd_presets(args):
    for name in preset_names():
        print(name)
    return 0


def cmd_resolve(args):
    try:
        overrides = load_overrides(*args.config) if args.config else {}
    except (FileNotFoundError, ConfigValidationError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    for assignment in args.set or []:
        overrides = deep_update(overrides, assignment)

    cfg, issues = resolve(preset_name=args.preset, user_overrides=overrides)
    for issue in issues:
        print(f"warning: {issue}", file=sys.stderr)

    data = cfg.model_dump(mode="json", exclude=set(DERIVED_FIELDS) if args.no_derived else None)
    if args.changed_only:
        base = ConfigRecord().model_dump(mode="json")
        data = {k: data[k] for k in diff_keys(base, data) if k in data}
    print(json.dumps(data, ensure_ascii=False, indent=2))
    return 0


def make_parser():
    p = argparse.ArgumentParser(prog="figpolish")
    sub = p.add_subparsers(dest="cmd", required=True)

    pp = sub.add_parser("presets", help="List the available style presets")
    pp.set_defaults(func=cmd_presets)

    pr = sub.add_parser("resolve", help="Print the resolved configuration as JSON")
    pr.add_argument("--preset", default=None, help="style preset applied below the overrides")
    pr.add_argument("--config", nargs="+", default=None, metavar="FILE",
                    help="YAML/JSON override files, later files win")
    pr.add_argument("--set", action="append", type=_parse_assignment, metavar="KEY=VALUE",
                    help="single override, e.g. --set legend_location=none")
    pr.add_argument("--changed-only", dest="changed_only", action="store_true",
                    help="print only fields that differ from the defaults")
    pr.add_argument("--no-derived", dest="no_derived", action="store_true",
                    help="omit derived fields such as active_palette")
    pr.set_defaults(func=cmd_resolve)

    return p


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    parser = make_parser()
    ns = parser.parse_args(argv)
    return ns.func(ns)


if __name__ == "__main__":
    raise SystemExit(main())

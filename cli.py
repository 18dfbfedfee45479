import argparse
import json
import logging
import shutil
import time
from typing import Optional

import requests
import yaml

from config import YamlConfig
from errors import ValidationError
from rest_api import ReadinessAPI
from seed_sample_data import seed
from settings_schema import EngineSettings, load_settings, validate_settings


def backup_db(db_path: str, backup_path: str) -> None:
    shutil.copy(db_path, backup_path)


def restore_db(backup_path: str, db_path: str) -> None:
    shutil.copy(backup_path, db_path)


def benchmark(url: str, runs: int = 10) -> None:
    times: list[float] = []
    for _ in range(runs):
        t0 = time.time()
        requests.get(f"{url}/health", timeout=5)
        times.append(time.time() - t0)
    avg = sum(times) / len(times)
    print(f"Average /health response time over {runs} runs: {avg:.4f}s")


def configure(yaml_path: str, assignments: list[str], forget: bool = False) -> None:
    """Apply ``key=value`` changes to the settings file and print the result.

    Values are parsed as YAML scalars; an empty value removes the key.
    """
    cfg = YamlConfig(yaml_path)
    if forget:
        cfg.forget_secrets()
    changes = {}
    for item in assignments:
        key, sep, value = item.partition("=")
        key = key.strip()
        if not sep or key not in EngineSettings.model_fields:
            raise ValidationError(f"unknown setting assignment: {item!r}")
        changes[key] = yaml.safe_load(value)
    if changes:
        validate_settings({**cfg.load(apply_env=False), **changes})
        cfg.update(**changes)
    print(json.dumps(YamlConfig.masked(cfg.load(apply_env=False)), indent=2, sort_keys=True))


def show_readiness(api: ReadinessAPI, user_id: str, date: Optional[str]) -> None:
    print(json.dumps(api.readiness.today(user_id, date).to_dict(), indent=2))


def show_acwr(api: ReadinessAPI, user_id: str) -> None:
    latest = api.load_service.latest_acwr(user_id)
    if latest is None:
        print(f"No load data for {user_id}")
        return
    print(
        f"{latest['date']}: acute {latest['acute_7d']:.1f}, "
        f"chronic {latest['chronic_28d']:.1f}, ACWR {latest['acwr']:.2f} "
        f"({latest['risk_zone'] or 'n/a'})"
    )


def show_prs(api: ReadinessAPI, user_id: str, exercise: Optional[str]) -> None:
    for record in api.pr_service.best_records(user_id, exercise):
        print(f"{record.exercise:<20} {record.type:<9} {record.value:>8.2f}  {record.achieved_at}")


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Readiness engine utilities")
    parser.add_argument("--yaml", default="settings.yaml")
    parser.add_argument("--db", default=None)
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser("demo")

    rdy = sub.add_parser("readiness")
    rdy.add_argument("--user", required=True)
    rdy.add_argument("--date", default=None)

    acwr = sub.add_parser("acwr")
    acwr.add_argument("--user", required=True)

    prs = sub.add_parser("prs")
    prs.add_argument("--user", required=True)
    prs.add_argument("--exercise", default=None)

    bkp = sub.add_parser("backup")
    bkp.add_argument("--out", default="backup.db")

    rst = sub.add_parser("restore")
    rst.add_argument("--in", dest="src", default="backup.db")

    conf = sub.add_parser("config")
    conf.add_argument("--set", action="append", default=[], metavar="KEY=VALUE")
    conf.add_argument("--forget-secrets", action="store_true")

    bench = sub.add_parser("benchmark")
    bench.add_argument("--url", default="http://localhost:8000")
    bench.add_argument("--runs", type=int, default=10)

    args = parser.parse_args(argv)

    if args.cmd == "config":
        configure(args.yaml, args.set, args.forget_secrets)
        return

    settings = load_settings(args.yaml)
    if args.db:
        settings = settings.model_copy(update={"db_path": args.db})
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.cmd == "backup":
        backup_db(settings.db_path, args.out)
    elif args.cmd == "restore":
        restore_db(args.src, settings.db_path)
    elif args.cmd == "benchmark":
        benchmark(args.url, args.runs)
    else:
        api = ReadinessAPI(settings=settings)
        if args.cmd == "demo":
            seed(api)
        elif args.cmd == "readiness":
            show_readiness(api, args.user, args.date)
        elif args.cmd == "acwr":
            show_acwr(api, args.user)
        elif args.cmd == "prs":
            show_prs(api, args.user, args.exercise)


if __name__ == "__main__":
    main()

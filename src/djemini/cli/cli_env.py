from __future__ import annotations

import argparse

from djemini.branding import DJEMINI_BANNER
from djemini.cli.common import out, output_flags, print_kv
from djemini.env import get_env
from djemini.env.paths import AUTH_DIR, DATA_DIR, LOGS_DIR, database_file


def build_env_parser(subparsers: argparse._SubParsersAction) -> None:
    subparsers.add_parser(
        "env",
        parents=[output_flags()],
        help="Show resolved runtime environment",
    )


def handle_env(args: argparse.Namespace) -> int:
    env = get_env()
    data = env.as_dict()
    data["Paths"] = {
        "data_dir": DATA_DIR,
        "auth_dir": AUTH_DIR,
        "logs_dir": LOGS_DIR,
        "database": env.db_path or database_file(),
    }

    out(DJEMINI_BANNER, markup=False, highlight=False)
    out("[bold]Runtime Environment[/bold]")
    out("─" * 50)

    for section, values in data.items():
        print_kv(section, values)

    out()
    return 0

# Rev 0.1.0

# src/fastodo/main.py  (Rev 0.1.0)
"""Headless runner: sign in, load everything, print a per-folder summary.

    fastodo EMAIL PASSWORD [--sign-up]
"""
import asyncio
import sys

from PySide6.QtCore import QCoreApplication

from fastodo.app_context import AppContext
from fastodo.utils.logging_setup import setup_logging
from fastodo.utils.paths import ensure_dirs
from fastodo.viewmodels.progress import folder_progress


def summary_lines(ctx: AppContext) -> list[str]:
    lines = []
    for folder in ctx.tasks.folders:
        p = folder_progress(ctx.tasks.tasks, ctx.notes.notes, folder.id)
        lines.append(f"{folder.name}: {p.completed}/{p.total} tasks done ({p.percent:.0f}%), {p.note_count} notes")
    return lines


async def _run(ctx: AppContext, email: str, password: str, sign_up: bool) -> bool:
    if sign_up and await ctx.session.sign_up(email, password) is None:
        return False
    if await ctx.session.sign_in(email, password) is None:
        return False
    await ctx.refresh()
    return True


def main(argv=None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    sign_up = "--sign-up" in args
    args = [a for a in args if a != "--sign-up"]
    if len(args) != 2:
        print("usage: fastodo EMAIL PASSWORD [--sign-up]", file=sys.stderr)
        return 2

    app = QCoreApplication.instance() or QCoreApplication([])
    app.setApplicationName("fastodo")

    ensure_dirs()
    logfile = setup_logging("fastodo")
    print(f"[logging] Writing to: {logfile}")

    ctx = AppContext.create()
    ctx.notifier.notified.connect(lambda level, message: print(f"[{level}] {message}"))
    try:
        if not asyncio.run(_run(ctx, args[0], args[1], sign_up)):
            return 1
        for line in summary_lines(ctx):
            print(line)
    finally:
        ctx.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())

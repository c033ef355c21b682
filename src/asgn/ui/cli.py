"""
asgn - command-line interface.

File: src/asgn/ui/cli.py

Purpose
- Route ``asgn <command>`` invocations to handlers acting on one course.

Functional requirements
- The set of commands a user may run is fixed by their role: graders get every
  student command plus their own, instructors get every grader command plus
  their own. Anything else is rejected before the handler runs.
- Domain errors are rendered as ``! description`` / ``> advice`` and exit 1.
  Configuration errors propagate to the entrypoint, which maps them to exit 2.
- A pipeline that stops at a fatal rule is a normal outcome, not an error.
"""

from __future__ import annotations

import argparse
import os
import shutil
import sys
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Final

import structlog

from asgn.config.schema import LOG_LEVELS
from asgn.constants import ENV_PREFIX
from asgn.course.assignment import AssignmentSpec
from asgn.course.context import Context
from asgn.course.roles import Role
from asgn.engine.commands import CommandExecutor
from asgn.errors import (
    AsgnError,
    ErrorLog,
    FilePresenceError,
    InvalidAssignmentError,
    StatusFileError,
    UnauthorizedError,
)
from asgn.observability.logging import (
    LoggingConfig,
    config_from_observability,
    context_scope,
    setup_logging,
)
from asgn.scoring.rank import rank
from asgn.scoring.refresh import load_stats, refresh_all_scores, refresh_scores
from asgn.timing.dates import format_date, parse_date_arg
from asgn.timing.grace import available_grace, grant_grace
from asgn.timing.lateness import effective_due_date, versus
from asgn.ui.render import CLIRenderer, create_renderer
from asgn.utils.fs import make_fresh_dir, temp_directory

logger = structlog.get_logger(__name__)

COURSE_ROOT_ENV: Final[str] = f"{ENV_PREFIX}COURSE_ROOT"

STUDENT_COMMANDS: Final[tuple[str, ...]] = ("submit", "summary", "details", "grace")
GRADER_COMMANDS: Final[tuple[str, ...]] = (
    *STUDENT_COMMANDS,
    "copy",
    "copy_all",
    "grade",
    "check",
)
INSTRUCTOR_COMMANDS: Final[tuple[str, ...]] = (
    *GRADER_COMMANDS,
    "add_students",
    "rem_students",
    "add_graders",
    "rem_graders",
    "add_asgns",
    "rem_asgns",
    "list_asgns",
    "list_subs",
    "set_due",
    "set_open",
    "set_close",
    "unset_due",
    "unset_open",
    "unset_close",
    "enable",
    "disable",
    "publish",
    "unpublish",
    "extend",
    "set_grace",
    "grace_total",
    "grace_limit",
    "update_scores",
    "update_all_scores",
    "rank",
)
COMMANDS_BY_ROLE: Final[Mapping[Role, frozenset[str]]] = {
    Role.OTHER: frozenset(),
    Role.STUDENT: frozenset(STUDENT_COMMANDS),
    Role.GRADER: frozenset(GRADER_COMMANDS),
    Role.INSTRUCTOR: frozenset(INSTRUCTOR_COMMANDS),
}


@dataclass(frozen=True, slots=True)
class CLIError(RuntimeError):
    """Typed CLI failure with an explicit process exit code."""

    message: str
    exit_code: int = 2

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True, slots=True)
class Invocation:
    """Everything a command handler needs: parsed args, the course and the output."""

    args: argparse.Namespace
    context: Context
    out: CLIRenderer
    executor: CommandExecutor | None = None


Handler = Callable[[Invocation], int]


def commands_for(role: Role) -> frozenset[str]:
    return COMMANDS_BY_ROLE[role]


def authorize(command: str, role: Role) -> None:
    if command not in commands_for(role):
        raise UnauthorizedError(command, role.value)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse command router for every role's commands."""

    parser = argparse.ArgumentParser(
        prog="asgn",
        description=(
            "asgn - course assignment manager.\n\n"
            "Common workflows:\n"
            "  asgn submit hw1             Submit files from the current directory\n"
            "  asgn summary                Show assignments and submission status\n"
            "  asgn grade hw1 alice        Copy and grade a student's submission\n"
            "  asgn rank hw1 runtime       Rank students by a score metric\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--course-root",
        default=None,
        help=f"Course root directory (default: ${COURSE_ROOT_ENV}).",
    )
    common.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Diagnostic log level (overrides the course file).",
    )
    common.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        default=False,
        help="Echo each build command before running it.",
    )
    common.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable colored output (also respects NO_COLOR env var).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    def add(name: str, handler: Handler, help_text: str) -> argparse.ArgumentParser:
        sub = subparsers.add_parser(
            name,
            parents=[common],
            help=help_text,
            description=help_text,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        sub.set_defaults(handler=handler)
        return sub

    # students --------------------------------------------------------------
    submit = add("submit", _cmd_submit, "Submit the assignment's files from the current directory")
    submit.add_argument("asgn", help="Assignment name.")

    add("summary", _cmd_summary, "List visible assignments with due dates and your status")

    details = add("details", _cmd_details, "Show the properties of one assignment")
    details.add_argument("asgn", help="Assignment name.")
    details.add_argument("--user", default=None, help="Show this member's slot (graders only).")

    grace = add("grace", _cmd_grace, "Spend grace days on an assignment")
    grace.add_argument("asgn", help="Assignment name.")
    grace.add_argument("days", type=int, help="Grace days to apply to this assignment.")

    # graders ---------------------------------------------------------------
    copy = add("copy", _cmd_copy, "Copy a member's submission into the current directory")
    copy.add_argument("asgn", help="Assignment name.")
    copy.add_argument("user", help="Member whose submission is copied.")

    copy_all = add("copy_all", _cmd_copy_all, "Copy every member's submission")
    copy_all.add_argument("asgn", help="Assignment name.")

    grade = add("grade", _cmd_grade, "Copy a submission and run the grade pipeline on it")
    grade.add_argument("asgn", help="Assignment name.")
    grade.add_argument("user", help="Member to grade.")

    check = add("check", _cmd_check, "Re-run the submit pipeline on a scratch copy")
    check.add_argument("asgn", help="Assignment name.")
    check.add_argument("user", help="Member to check.")

    # instructors -----------------------------------------------------------
    for name, handler, help_text in (
        ("add_students", _cmd_add_students, "Add students to the course"),
        ("rem_students", _cmd_rem_students, "Remove students from the course"),
        ("add_graders", _cmd_add_graders, "Add graders to the course"),
        ("rem_graders", _cmd_rem_graders, "Remove graders from the course"),
    ):
        sub = add(name, handler, help_text)
        sub.add_argument("usernames", nargs="+", type=_plain_name, help="User names.")

    add_asgns = add("add_asgns", _cmd_add_asgns, "Add assignments to the manifest")
    add_asgns.add_argument("names", nargs="+", type=_plain_name, help="Assignment names.")
    rem_asgns = add("rem_asgns", _cmd_rem_asgns, "Remove assignments from the manifest")
    rem_asgns.add_argument("names", nargs="+", type=_plain_name, help="Assignment names.")

    add("list_asgns", _cmd_list_asgns, "List every assignment in the manifest")

    list_subs = add("list_subs", _cmd_list_subs, "List submission status per member")
    list_subs.add_argument("--asgn", default=None, help="Only this assignment.")
    list_subs.add_argument("--user", default=None, help="Only this member.")

    for field_name in ("due", "open", "close"):
        setter = add(
            f"set_{field_name}",
            _cmd_set_date,
            f"Set the {field_name} date (yyyy-mm-dd or yyyy-mm-ddThh:mm:ss)",
        )
        setter.add_argument("asgn", help="Assignment name.")
        setter.add_argument("date", help="Date in local time.")
        setter.set_defaults(date_field=f"{field_name}_date")
        unsetter = add(f"unset_{field_name}", _cmd_unset_date, f"Clear the {field_name} date")
        unsetter.add_argument("asgn", help="Assignment name.")
        unsetter.set_defaults(date_field=f"{field_name}_date")

    for name, flag, value, help_text in (
        ("enable", "active", True, "Accept submissions for an assignment"),
        ("disable", "active", False, "Stop accepting submissions for an assignment"),
        ("publish", "visible", True, "Show an assignment to students"),
        ("unpublish", "visible", False, "Hide an assignment from students"),
    ):
        sub = add(name, _cmd_set_flag, help_text)
        sub.add_argument("asgn", help="Assignment name.")
        sub.set_defaults(flag=flag, value=value)

    extend = add("extend", _cmd_extend, "Give a member an extension in days")
    extend.add_argument("asgn", help="Assignment name.")
    extend.add_argument("user", help="Member name.")
    extend.add_argument("days", type=_non_negative_int, help="Extension days.")

    set_grace = add("set_grace", _cmd_set_grace, "Apply grace days on a member's behalf")
    set_grace.add_argument("asgn", help="Assignment name.")
    set_grace.add_argument("user", help="Member name.")
    set_grace.add_argument("days", type=int, help="Grace days.")

    grace_total = add("grace_total", _cmd_grace_total, "Set the course-wide grace budget")
    grace_total.add_argument("days", type=_non_negative_int, help="Total grace days.")
    grace_limit = add("grace_limit", _cmd_grace_limit, "Set the per-assignment grace cap")
    grace_limit.add_argument("days", type=_non_negative_int, help="Maximum per assignment.")

    update = add("update_scores", _cmd_update_scores, "Re-score every member's submission")
    update.add_argument("asgn", help="Assignment name.")
    add("update_all_scores", _cmd_update_all_scores, "Re-score every assignment")

    rank_parser = add("rank", _cmd_rank, "Rank members by one score metric")
    rank_parser.add_argument("asgn", help="Assignment name.")
    rank_parser.add_argument("metric", help="Score rule target to order by.")
    rank_parser.add_argument(
        "--descending",
        action="store_true",
        default=False,
        help="Largest values first.",
    )

    return parser


def run_cli(
    argv: Sequence[str] | None = None,
    *,
    user: str | None = None,
    now: datetime | None = None,
    cwd: Path | None = None,
    environ: Mapping[str, str] | None = None,
    executor: CommandExecutor | None = None,
) -> int:
    """Parse argv, load the course, authorize and route to a handler; return the exit code."""

    parser = build_parser()
    namespace = parser.parse_args(list(argv) if argv is not None else None)
    handler = getattr(namespace, "handler", None)
    if not callable(handler):
        parser.print_help(sys.stderr)
        return 2

    env = os.environ if environ is None else environ
    setup_logging(LoggingConfig(level=namespace.log_level or "WARNING"))
    out = _get_renderer(namespace)

    try:
        context = Context.load(
            _resolve_course_root(namespace, env),
            user=user,
            now=now,
            cwd=cwd,
            cli_overrides={"observability.log_level": namespace.log_level},
            environ=env,
        )
        setup_logging(config_from_observability(context.config.get("observability")))
        with context_scope(
            course=context.course,
            user=context.user,
            assignment=getattr(namespace, "asgn", None),
        ):
            authorize(namespace.command, context.role)
            logger.debug("command_started", command=namespace.command, role=context.role.value)
            return int(handler(Invocation(namespace, context, out, executor)))
    except CLIError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return exc.exit_code
    except AsgnError as exc:
        logger.info("command_failed", command=namespace.command, error=str(exc))
        out.error(exc.render())
        return 1


# ---------------------------------------------------------------------------
# student commands
# ---------------------------------------------------------------------------


def _cmd_submit(inv: Invocation) -> int:
    context = inv.context
    spec = _visible_spec(inv, inv.args.asgn)
    spec.verify_active(context.time)

    sources = [context.cwd / name for name in spec.file_list]
    errors: list[AsgnError] = []
    for source in sources:
        try:
            FilePresenceError.check(source)
        except FilePresenceError as exc:
            errors.append(exc)
    ErrorLog(errors).raise_if_any()

    slot = context.get_slot(spec, context.user)
    _copy_files(context.cwd, spec.file_list, slot.base_path)
    logger.info("submission_copied", files=len(sources))
    inv.out.ok(f"Submitted {len(sources)} file(s) for '{spec.name}'.")

    engine = spec.rule_engine(context, executor=inv.executor, renderer=inv.out)
    outcome = spec.submit_pipeline(engine, slot.base_path)
    if not outcome.ok:
        inv.out.notice("Your files were saved, but the checks above did not complete.")
    inv.out.kv("Status", _status_text(context, spec, context.user))
    return 0


def _cmd_summary(inv: Invocation) -> int:
    context = inv.context
    show_hidden = context.role.at_least(Role.GRADER)
    rows: list[list[str]] = []
    for name in context.manifest:
        entry = context.catalog.get(name)
        if not isinstance(entry, AssignmentSpec):
            if show_hidden:
                rows.append([name, "-", "-", "! unloadable"])
            continue
        if not (entry.visible or show_hidden):
            continue
        try:
            status = _status_text(context, entry, context.user)
        except AsgnError as exc:
            logger.warning("status_unavailable", assignment=name, error=str(exc))
            status = f"! {exc.description}"
        rows.append([name, format_date(entry.due_date), _yes_no(entry.active), status])

    inv.out.table(["assignment", "due", "active", "status"], rows, title=f"Course {context.course}")
    return 0


def _cmd_details(inv: Invocation) -> int:
    context = inv.context
    spec = _visible_spec(inv, inv.args.asgn)
    requested = inv.args.user
    if requested is not None and requested != context.user:
        if not context.role.at_least(Role.GRADER):
            raise UnauthorizedError("details --user", context.role.value)
        context.require_member(requested)
        username: str | None = requested
    else:
        username = context.user if context.role is Role.STUDENT else requested

    rows = [[key, value] for key, value in spec.details(context, username)]
    inv.out.table(["property", "value"], rows, title=f"Assignment {spec.name}")
    return 0


def _cmd_grace(inv: Invocation) -> int:
    context = inv.context
    spec = _visible_spec(inv, inv.args.asgn)
    grant_grace(context, spec, context.user, inv.args.days)
    inv.out.ok(f"{inv.args.days} grace day(s) applied to '{spec.name}'.")
    inv.out.kv("Grace days remaining", available_grace(context, context.user))
    return 0


# ---------------------------------------------------------------------------
# grader commands
# ---------------------------------------------------------------------------


def _cmd_copy(inv: Invocation) -> int:
    spec = inv.context.catalog_get(inv.args.asgn)
    _copy_submission(inv, spec, inv.args.user)
    return 0


def _cmd_copy_all(inv: Invocation) -> int:
    spec = inv.context.catalog_get(inv.args.asgn)
    errors: list[AsgnError] = []
    for member in inv.context.members:
        try:
            _copy_submission(inv, spec, member)
        except AsgnError as exc:
            logger.warning("copy_failed", member=member, error=str(exc))
            errors.append(exc)
    ErrorLog(errors).raise_if_any()
    return 0


def _cmd_grade(inv: Invocation) -> int:
    context = inv.context
    spec = context.catalog_get(inv.args.asgn)
    working_dir = _copy_submission(inv, spec, inv.args.user)
    engine = spec.rule_engine(context, executor=inv.executor, renderer=inv.out)
    spec.grade_pipeline(engine, working_dir)
    return 0


def _cmd_check(inv: Invocation) -> int:
    context = inv.context
    spec = context.catalog_get(inv.args.asgn)
    context.require_member(inv.args.user)
    with temp_directory(prefix=f"check-{spec.name}-") as scratch:
        working_dir = scratch / inv.args.user
        spec.retrieve_sub(working_dir, inv.args.user)
        engine = spec.rule_engine(context, executor=inv.executor, renderer=inv.out)
        spec.submit_pipeline(engine, working_dir)
    return 0


# ---------------------------------------------------------------------------
# instructor commands
# ---------------------------------------------------------------------------


def _cmd_add_students(inv: Invocation) -> int:
    inv.context.add_students(inv.args.usernames)
    inv.out.ok(f"Students: {', '.join(inv.context.students) or '(none)'}")
    return 0


def _cmd_rem_students(inv: Invocation) -> int:
    inv.context.remove_students(inv.args.usernames)
    inv.out.ok(f"Students: {', '.join(inv.context.students) or '(none)'}")
    return 0


def _cmd_add_graders(inv: Invocation) -> int:
    inv.context.add_graders(inv.args.usernames)
    inv.out.ok(f"Graders: {', '.join(inv.context.graders) or '(none)'}")
    return 0


def _cmd_rem_graders(inv: Invocation) -> int:
    inv.context.remove_graders(inv.args.usernames)
    inv.out.ok(f"Graders: {', '.join(inv.context.graders) or '(none)'}")
    return 0


def _cmd_add_asgns(inv: Invocation) -> int:
    inv.context.add_assignments(inv.args.names)
    inv.out.ok(f"Manifest: {', '.join(inv.context.manifest) or '(none)'}")
    return 0


def _cmd_rem_asgns(inv: Invocation) -> int:
    inv.context.remove_assignments(inv.args.names)
    inv.out.ok(f"Manifest: {', '.join(inv.context.manifest) or '(none)'}")
    return 0


def _cmd_list_asgns(inv: Invocation) -> int:
    context = inv.context
    rows: list[list[str]] = []
    for name in context.manifest:
        entry = context.catalog.get(name)
        if isinstance(entry, AssignmentSpec):
            rows.append(
                [
                    name,
                    _yes_no(entry.active),
                    _yes_no(entry.visible),
                    format_date(entry.due_date),
                    ", ".join(entry.file_list),
                ]
            )
        else:
            rows.append([name, "-", "-", "-", "! unloadable"])
    inv.out.table(["assignment", "active", "visible", "due", "files"], rows, title="Assignments")

    errors = context.catalog_errors()
    if len(errors):
        inv.out.blank()
        inv.out.error(errors.render())
    return 0


def _cmd_list_subs(inv: Invocation) -> int:
    context = inv.context
    if inv.args.asgn is not None:
        specs = [context.catalog_get(inv.args.asgn)]
    else:
        specs = context.loaded_assignments()
    if inv.args.user is not None:
        context.require_member(inv.args.user)
        users = [inv.args.user]
    else:
        users = context.members

    rows: list[list[str]] = []
    for spec in specs:
        for username in users:
            try:
                status = context.get_slot(spec, username).status()
            except AsgnError as exc:
                logger.warning("status_unavailable", assignment=spec.name, member=username)
                rows.append([spec.name, username, "-", "-", "-", f"! {exc.description}"])
                continue
            due = None if spec.due_date is None else effective_due_date(status, spec.due_date)
            rows.append(
                [
                    spec.name,
                    username,
                    format_date(status.turn_in_time),
                    str(status.grace_days),
                    str(status.extension_days),
                    versus(status, due, context.time),
                ]
            )
    inv.out.table(
        ["assignment", "user", "turned in", "grace", "extension", "status"],
        rows,
        title="Submissions",
    )
    return 0


def _cmd_set_date(inv: Invocation) -> int:
    spec = inv.context.catalog_get(inv.args.asgn)
    value = parse_date_arg(inv.args.date)
    setattr(spec, inv.args.date_field, value)
    spec.sync()
    inv.out.ok(f"{_field_label(inv.args.date_field)} of '{spec.name}' set to {format_date(value)}.")
    return 0


def _cmd_unset_date(inv: Invocation) -> int:
    spec = inv.context.catalog_get(inv.args.asgn)
    setattr(spec, inv.args.date_field, None)
    spec.sync()
    inv.out.ok(f"{_field_label(inv.args.date_field)} of '{spec.name}' cleared.")
    return 0


def _cmd_set_flag(inv: Invocation) -> int:
    spec = inv.context.catalog_get(inv.args.asgn)
    setattr(spec, inv.args.flag, inv.args.value)
    spec.sync()
    inv.out.ok(f"'{spec.name}': {inv.args.flag} = {_yes_no(inv.args.value)}.")
    return 0


def _cmd_extend(inv: Invocation) -> int:
    context = inv.context
    spec = context.catalog_get(inv.args.asgn)
    context.require_member(inv.args.user)
    context.get_slot(spec, inv.args.user).set_extension(inv.args.days)
    logger.info("extension_granted", member=inv.args.user, days=inv.args.days)
    inv.out.ok(f"{inv.args.user} has a {inv.args.days} day extension on '{spec.name}'.")
    return 0


def _cmd_set_grace(inv: Invocation) -> int:
    context = inv.context
    spec = context.catalog_get(inv.args.asgn)
    context.require_member(inv.args.user)
    grant_grace(context, spec, inv.args.user, inv.args.days)
    inv.out.ok(f"{inv.args.user} has {inv.args.days} grace day(s) on '{spec.name}'.")
    return 0


def _cmd_grace_total(inv: Invocation) -> int:
    inv.context.grace_total = inv.args.days
    inv.context.sync()
    inv.out.ok(f"Course grace budget set to {inv.args.days} day(s).")
    return 0


def _cmd_grace_limit(inv: Invocation) -> int:
    inv.context.grace_limit = inv.args.days
    inv.context.sync()
    inv.out.ok(f"Per-assignment grace limit set to {inv.args.days} day(s).")
    return 0


def _cmd_update_scores(inv: Invocation) -> int:
    spec = inv.context.catalog_get(inv.args.asgn)
    stats = refresh_scores(inv.context, spec, executor=inv.executor, renderer=inv.out)
    inv.out.ok(f"Scores for '{spec.name}' updated ({len(stats)} stat block(s)).")
    return 0


def _cmd_update_all_scores(inv: Invocation) -> int:
    refresh_all_scores(inv.context, executor=inv.executor, renderer=inv.out)
    inv.out.ok("Scores updated for every assignment.")
    return 0


def _cmd_rank(inv: Invocation) -> int:
    context = inv.context
    spec = context.catalog_get(inv.args.asgn)
    table = rank(
        load_stats(spec),
        context.members,
        spec.score,
        inv.args.metric,
        descending=inv.args.descending,
    )
    order = "descending" if inv.args.descending else "ascending"
    inv.out.table(
        table.headers,
        table.text_rows(),
        title=f"'{spec.name}' ranked by {inv.args.metric} ({order})",
    )
    return 0


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------


def _get_renderer(args: argparse.Namespace) -> CLIRenderer:
    return create_renderer(
        no_color=bool(getattr(args, "no_color", False)),
        verbose=bool(getattr(args, "verbose", False)),
    )


def _resolve_course_root(args: argparse.Namespace, environ: Mapping[str, str]) -> Path:
    raw = args.course_root or environ.get(COURSE_ROOT_ENV, "").strip()
    if not raw:
        raise CLIError(f"no course root: pass --course-root or set {COURSE_ROOT_ENV}")
    return Path(raw)


def _visible_spec(inv: Invocation, name: str) -> AssignmentSpec:
    """Look up an assignment; unpublished ones do not exist as far as students can tell."""

    spec = inv.context.catalog_get(name)
    if not spec.visible and not inv.context.role.at_least(Role.GRADER):
        raise InvalidAssignmentError(name)
    return spec


def _status_text(context: Context, spec: AssignmentSpec, username: str) -> str:
    status = context.get_slot(spec, username).status()
    due = None if spec.due_date is None else effective_due_date(status, spec.due_date)
    return versus(status, due, context.time)


def _copy_files(src_dir: Path, names: Sequence[str], dst_dir: Path) -> None:
    for name in names:
        src = src_dir / name
        dst = dst_dir / name
        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy(src, dst)
        except OSError as exc:
            raise StatusFileError(f"Copying file to {dst}", src, str(exc)) from exc


def _copy_submission(inv: Invocation, spec: AssignmentSpec, username: str) -> Path:
    inv.context.require_member(username)
    target = make_fresh_dir(inv.context.cwd, username)
    spec.retrieve_sub(target, username)
    inv.out.ok(f"Copied {username}'s submission of '{spec.name}' to {target}.")
    return target


def _field_label(field_name: str) -> str:
    return field_name.replace("_", " ").capitalize()


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


def _plain_name(value: str) -> str:
    cleaned = value.strip()
    if not cleaned or "/" in cleaned or cleaned in (".", ".."):
        raise argparse.ArgumentTypeError(f"{value!r} is not a plain name")
    return cleaned


def _non_negative_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer") from exc
    if parsed < 0:
        raise argparse.ArgumentTypeError(f"{value!r} must not be negative")
    return parsed


__all__ = [
    "COMMANDS_BY_ROLE",
    "CLIError",
    "Invocation",
    "authorize",
    "build_parser",
    "commands_for",
    "run_cli",
]

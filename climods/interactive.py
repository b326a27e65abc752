from __future__ import annotations

from typing import Callable, List, Optional

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from climods.commands import CommandResult, ViewCommand
from climods.errors import CommandError, ParseError
from climods.model import LessonType
from climods.module import Module
from climods.parser import parse_command
from climods.session import Model
from climods.storage import Storage

console = Console()

MAX_ROWS = 50


def _safe_str(x: object) -> str:
    return "" if x is None else str(x)


def _prompt(msg: str) -> str:
    return console.input(msg)


def execute_line(line: str, model: Model, storage: Storage) -> CommandResult:
    """
    Parse and execute one line. ParseError / CommandError are passed on.
    """
    command = parse_command(line)
    previous = model.get_active_module() if isinstance(command, ViewCommand) else None
    result = command.execute(model, storage)
    # only one module is shown in detail at a time; a failed view changes nothing
    if previous is not None and previous.code != command.module_code:
        previous.clear_focus()
    return result


def run_interactive(model: Model, storage: Storage, read_line: Optional[Callable[[str], str]] = None) -> None:
    """
    Read-eval-print loop until `exit` or end of input.
    """
    read_line = read_line or _prompt

    _print_header(model)
    render_module_list(model.get_filtered_module_list(), model)

    while True:
        try:
            line = read_line("\n[bold]climods>[/] ").strip()
        except EOFError:
            return
        if not line:
            continue

        try:
            result = execute_line(line, model, storage)
        except ParseError as e:
            console.print(f"[red]{escape(e.message)}[/]")
            if e.usage:
                console.print(e.usage, markup=False, highlight=False)
            continue
        except CommandError as e:
            console.print(f"[red]{escape(str(e))}[/]")
            continue

        render_result(result, model)
        if result.should_exit:
            return


def _print_header(model: Model) -> None:
    console.print("\n=== CLIMods ===")
    console.print(
        f"Modules in catalogue: {len(model.modules)} | Your modules: {len(model.user_modules)}"
    )
    console.print("Type 'help' to see all commands.")


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_result(result: CommandResult, model: Model) -> None:
    console.print(result.feedback, markup=False, highlight=False)

    if result.command_word in ("ls", "find"):
        render_module_list(model.get_filtered_module_list(), model)
    elif result.command_word in ("add", "rm"):
        render_user_modules(model)
    elif result.command_word == "view":
        active = model.get_active_module()
        if active is not None:
            render_module_detail(active, result.lesson_types)


def render_module_list(modules: List[Module], model: Model) -> None:
    if not modules:
        console.print("No modules.")
        return

    table = Table(title=f"Modules (showing {min(len(modules), MAX_ROWS)} of {len(modules)})", box=box.SIMPLE)
    table.add_column("Code", style="bold cyan")
    table.add_column("Title")
    table.add_column("MCs", justify="right")
    table.add_column("Department", style="magenta")
    table.add_column("Semesters", style="green")
    table.add_column("Mine", justify="center")

    selected = set(model.user_modules.codes())
    for m in modules[:MAX_ROWS]:
        table.add_row(
            escape(m.code),
            escape(m.title or "(no title)"),
            escape(m.module_credit),
            escape(m.department),
            ", ".join(str(int(s)) for s in m.semesters),
            "[yellow]*[/]" if m.code in selected else "",
        )
    console.print(table)


def render_user_modules(model: Model) -> None:
    user_modules = model.get_filtered_user_module_list()
    if not user_modules:
        console.print("You have no modules yet. Add one with: add <Module Code>")
        return

    table = Table(title="Your modules", box=box.SIMPLE)
    table.add_column("#", justify="right")
    table.add_column("Code", style="bold cyan")
    table.add_column("Title")
    table.add_column("MCs", justify="right")
    for i, um in enumerate(user_modules, start=1):
        table.add_row(str(i), escape(um.code), escape(um.title), escape(um.module.module_credit))
    console.print(table)


def render_module_detail(module: Module, lesson_types: List[LessonType]) -> None:
    console.print(
        Panel(
            f"{escape(_safe_str(module.description))}\n\n"
            f"[bold]Prerequisite:[/] {escape(module.prerequisite or 'None')}\n"
            f"[bold]Preclusion:[/] {escape(module.preclusion or 'None')}",
            title=f"[bold cyan]{escape(module.code)}[/] {escape(module.title)} ({escape(module.module_credit)} MCs)",
            subtitle=escape(module.department),
        )
    )

    wanted = {lt.value for lt in lesson_types}
    for semester in module.timetable_semesters:
        lessons = module.get_lessons(semester)
        selectable = module.get_selectable_lesson_types(semester)

        table = Table(title=semester.label, box=box.SIMPLE)
        table.add_column("Lesson type")
        table.add_column("Group", justify="right")
        table.add_column("Slots")

        for lesson_type, groups in lessons.items():
            if wanted and lesson_type not in wanted:
                continue
            kind = "[green](choose one)[/]" if lesson_type in selectable else "(fixed)"
            label = f"{escape(lesson_type)} {kind}"
            for class_no, slots in groups.items():
                slot_text = "\n".join(escape(f"{s.day} {s.start_time}-{s.end_time} @ {s.venue}") for s in slots)
                table.add_row(label, escape(class_no), slot_text)
                label = ""

        if table.row_count:
            console.print(table)
        else:
            console.print(f"{semester.label}: no matching lessons.")

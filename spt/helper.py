"""
spt helper: rich help rendering for a CommandSpec.

Palette keys
- usage-label, program-name, usage-section, description-section
- group-label, argument-description, option-name, flag-name, metavar
- children-title, children-table, children, children-description
- rule-label, rule, notes-label, notes-dot, note, panel-title

Customization
- Define a mapping named __styles__ in __main__ to override any palette entry.
- When colorful is False, styling is suppressed.
"""
from collections import defaultdict

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.containers import Lines
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .commands import FORMAT_HELP
from .schema import Exclusivity, Kind

_RULES = {
    Exclusivity.AT_MOST_ONE: "at most one of",
    Exclusivity.ALL_OR_NONE: "all or none of",
    Exclusivity.FREE: "any of",
}


def render(spec, /, *, prog="spt", children=(), fancy=False, colorful=False, console=None):
    """
    print the help of `spec` (usage, description, commands, flags, groups).

    `children` lists the subcommands shown in a table (the overview help).
    """
    console = console or Console()
    styles = defaultdict(str, {
        "usage-label": "bold #00E6FF",
        "program-name": "bold #FF4D94",
        "usage-section": "bold #36C5F0",
        "description-section": "italic #A3A3A3",

        "group-label": "bold #FFFFFF",
        "argument-description": "#9CA3AF",

        "option-name": "bold #00E6FF",
        "flag-name": "bold #22C55E",
        "metavar": "bold #FFD600",

        "children-title": "bold #FFFFFF",
        "children-table": "#4B5563",
        "children": "bold #36C5F0",
        "children-description": "#9CA3AF",

        "rule-label": "bold #FF4D94",
        "rule": "#D1D5DB",

        "notes-label": "bold #00E6FF",
        "notes-dot": "#00E6FF dim",
        "note": "#D1D5DB",

        "panel-title": "bold #FF4D94",
    } | getattr(__import__("__main__"), "__styles__", {}))

    def styler(style):
        return styles[style] if colorful else ""

    def text(fragment, style=""):
        if not fragment:
            return Text("")
        if not colorful:
            return Text(str(fragment))
        if isinstance(fragment, Text):
            return fragment
        return Text(str(fragment), style)

    def names(flag):
        style = styler("option-name" if flag.kind.valued else "flag-name")
        shorts = sorted(name for name in flag.names if not name.startswith("--"))
        longs = sorted(name for name in flag.names if name.startswith("--"))
        return Text(" | ").join(text(name, style) for name in shorts + longs)

    def metavar(flag):
        return Text.assemble("<", text(flag.metavar, styler("metavar")), ">")

    width = console.width - 4 * fancy
    renders = []

    # usage: program, command, switches, positionals (wrapped on a hanging indent)
    usage = Text()
    usage.append("usage", styler("usage-label")).append(": ")
    usage.append(text(prog, styler("program-name")))
    if spec.name != prog:
        usage.append(" ").append(text(spec.name, styler("program-name")))
    usage.append(" ")
    offset = len(usage)

    inputs = [Text.assemble("[", text("-h | --help", styler("flag-name")), "]")]
    for flag in spec.flags:
        if flag.positional:
            continue
        if flag.kind.valued:
            inputs.append(Text.assemble("[", names(flag), " ", metavar(flag), "]"))
        else:
            inputs.append(Text.assemble("[", names(flag), "]"))
    inputs.extend(metavar(flag) for flag in spec.cardinals)
    if children:
        inputs.append(text("<COMMAND>", styler("metavar")))

    lines = Lines([inputs.pop(0)])
    for input in inputs:
        if len(lines[-1]) + 1 + len(input) > width - offset:
            lines.append(input)
        else:
            lines[-1].append(Text(" ") + input)
    usage.append(lines.pop(0))
    for line in lines:
        usage.append("\n").append(" " * offset).append(line)
    renders.append(usage.append("\n"))

    if description := spec.descr or spec.about:
        renders.append(text(description, styler("description-section")).append("\n"))

    if children:
        table = Table(
            "name", "help",
            title=text("commands", styler("children-title")),
            width=int(width * (2 / 3)),
            box=ROUNDED,
            style=styler("children-table"),
            header_style=styler("children-title"),
        )
        for child in children:
            label = text(child.name, styler("children"))
            if child.aliases:
                label.append(" (%s)" % ", ".join(child.aliases))
            table.add_row(label, text(child.about or "", styler("children-description")))
        renders.append(table)

    # flags, each with a hanging-indent description
    padding = 2
    indent = 24
    section = Text()
    section.append(text("flags", styler("group-label"))).append(":\n")
    for flag in spec.flags:
        entry = Text(" " * padding)
        entry.append(metavar(flag) if flag.positional else names(flag))
        if flag.kind.valued and not flag.positional:
            entry.append(" ").append(metavar(flag))
        if flag.kind is Kind.COUNTED:
            entry.append("...")
        if descr := text(flag.descr, styler("argument-description")):
            if len(entry) >= indent:
                entry.append("\n").append(" " * indent)
            else:
                entry.append(" " * (indent - len(entry)))
            wrapped = descr.wrap(console, max(width - indent, 20))
            entry.append(wrapped.pop(0))
            for line in wrapped:
                entry.append("\n").append(" " * indent).append(line)
        section.append(entry).append("\n")
    renders.append(section)

    # group rules, as one line each
    if spec.groups:
        rules = Text()
        rules.append(text("rules", styler("group-label"))).append(":\n")
        for group in spec.groups:
            members = ", ".join(spec.flag(name).label for name in group.members)
            rule = "%s %s" % (_RULES[group.exclusivity], members)
            if group.required:
                rule += " (required)"
            if group.conflicts:
                rule += "; not with %s" % ", ".join(group.conflicts)
            rules.append(" " * padding).append(text(group.name, styler("rule-label")))
            rules.append(": ").append(text(rule, styler("rule"))).append("\n")
        renders.append(rules)

    if any(flag.name == "format" for flag in spec.flags):
        dot = text(" • ", styler("notes-dot"))
        notes = Text()
        notes.append(text("notes", styler("notes-label"))).append(":\n")
        for index, segment in enumerate(text(FORMAT_HELP, styler("note")).wrap(console, width - len(dot))):
            notes.append(dot if index == 0 else " " * len(dot)).append(segment).append("\n")
        renders.append(notes)

    renders[-1].rstrip()
    renderable = Group(*renders)

    if fancy:
        renderable = Panel(
            renderable,
            title=Text.assemble("[", " ", f"{prog} {spec.name} HELP".upper() if spec.name != prog else f"{prog} HELP".upper(),
                                " ", "]", style=styler("panel-title")),
            title_align="left",
        )

    console.print(renderable)


__all__ = (
    "render",
)

"""Shell completion scripts rendered from the registered click commands."""

from datetime import datetime
from pathlib import Path

import click

SHELLS = ("bash", "zsh")
MARKER = "# jd CLI completion"
GLOBAL_OPTIONS = ("-v", "--verbose", "-h", "--help", "--version")


def _options(command: click.Command) -> list[click.Option]:
    return [p for p in command.params if isinstance(p, click.Option)]


def _option_words(command: click.Command) -> list[str]:
    words = []
    for option in _options(command):
        words.extend(option.opts)
        words.extend(option.secondary_opts)
    for word in ("-h", "--help"):
        if word not in words:
            words.append(word)
    return words


def _argument_choices(command: click.Command) -> list[str]:
    choices = []
    for param in command.params:
        if isinstance(param, click.Argument) and isinstance(param.type, click.Choice):
            choices.extend(str(c) for c in param.type.choices)
    return choices


def _short_help(command: click.Command) -> str:
    return command.get_short_help_str(limit=80).replace("'", "").replace(":", "")


def render_bash(group: click.Group) -> str:
    """Bash completion script covering every command and option of ``group``."""
    names = sorted(group.commands)
    cases = []
    for name in names:
        command = group.commands[name]
        words = " ".join(_argument_choices(command) + _option_words(command))
        cases.append(
            f"        {name})\n"
            f'            COMPREPLY=( $(compgen -W "{words}" -- "${{cur}}") )\n'
            "            ;;"
        )

    return (
        "# bash completion for jd\n"
        "_jd_completions() {\n"
        "    local cur\n"
        "    COMPREPLY=()\n"
        '    cur="${COMP_WORDS[COMP_CWORD]}"\n'
        "\n"
        "    if [ $COMP_CWORD -eq 1 ]; then\n"
        f'        COMPREPLY=( $(compgen -W "{" ".join(names)} {" ".join(GLOBAL_OPTIONS)}" -- "${{cur}}") )\n'
        "        return 0\n"
        "    fi\n"
        "\n"
        '    case "${COMP_WORDS[1]}" in\n'
        + "\n".join(cases)
        + "\n    esac\n"
        "    return 0\n"
        "}\n"
        "\n"
        "complete -F _jd_completions jd\n"
    )


def _zsh_option_spec(option: click.Option) -> str:
    names = [*option.opts, *option.secondary_opts]
    help_text = (option.help or "").replace("'", "").replace("[", "(").replace("]", ")")
    value = ""
    if not option.is_flag:
        if isinstance(option.type, click.Choice):
            value = f":{option.name}:({' '.join(str(c) for c in option.type.choices)})"
        elif isinstance(option.type, click.Path):
            value = f":{option.name}:_files"
        else:
            value = f":{option.name}:"
    return " ".join(f"'{name}[{help_text}]{value}'" for name in names)


def render_zsh(group: click.Group) -> str:
    """Zsh completion script covering every command and option of ``group``."""
    names = sorted(group.commands)
    descriptions = "\n".join(
        f"        '{name}:{_short_help(group.commands[name])}'" for name in names
    )

    cases = []
    for name in names:
        command = group.commands[name]
        specs = [_zsh_option_spec(option) for option in _options(command)]
        choices = _argument_choices(command)
        if choices:
            specs.append(f"'1:shell:({' '.join(choices)})'")
        specs.append("'(-h --help)'{-h,--help}'[Show help message]'")
        body = " \\\n                ".join(specs)
        cases.append(
            f"            {name})\n"
            f"                _arguments \\\n                {body}\n"
            "                ;;"
        )

    return (
        "#compdef jd\n"
        "\n"
        "_jd() {\n"
        "    local -a commands\n"
        '    local curcontext="$curcontext" state line\n'
        "    typeset -A opt_args\n"
        "\n"
        "    commands=(\n"
        f"{descriptions}\n"
        "    )\n"
        "\n"
        "    _arguments -C \\\n"
        "        '(-v --verbose)'{-v,--verbose}'[Enable verbose output]' \\\n"
        "        '(-h --help)'{-h,--help}'[Show help message]' \\\n"
        "        '--version[Show version]' \\\n"
        "        '1: :->command' \\\n"
        "        '*::arg:->args'\n"
        "\n"
        "    case $state in\n"
        "        command)\n"
        "            _describe 'command' commands\n"
        "            ;;\n"
        "        args)\n"
        "            case $words[1] in\n"
        + "\n".join(cases)
        + "\n            esac\n"
        "            ;;\n"
        "    esac\n"
        "}\n"
        "\n"
        'if [ "$funcstack[1]" = "_jd" ]; then\n'
        '    _jd "$@"\n'
        "else\n"
        "    compdef _jd jd\n"
        "fi\n"
    )


def render(group: click.Group, shell: str) -> str:
    return render_bash(group) if shell == "bash" else render_zsh(group)


def completion_line(shell: str) -> str:
    return f'eval "$(jd completion {shell})"'


def install_completion(shell: str, rc_file: Path, now: datetime | None = None) -> Path | None:
    """Append the completion hook to ``rc_file``.

    Returns the backup path, or None when the hook was already present.
    """
    existing = rc_file.read_text() if rc_file.exists() else ""
    if MARKER in existing or completion_line(shell) in existing:
        return None

    stamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
    backup = rc_file.with_name(f"{rc_file.name}.jd-backup-{stamp}")
    backup.write_text(existing)

    prefix = "" if not existing or existing.endswith("\n") else "\n"
    rc_file.write_text(f"{existing}{prefix}\n{MARKER}\n{completion_line(shell)}\n")
    return backup

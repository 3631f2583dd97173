"""
CLI utilities for command line reconstruction and introspection.
"""

from pathlib import Path

import click

PROGRAM_NAME = "json_schema_model"


def reconstruct_command_line(click_command: click.Command) -> str:
    """
    Reconstruct the command line of the running subcommand from the Click context.

    Used for the "generated by" comment of generated files, so file paths are
    reduced to their names.

    Args:
        click_command: Click command object for introspection

    Returns:
        Reconstructed command line string
    """
    try:
        ctx = click.get_current_context()
        cli_args = ctx.params
    except RuntimeError:
        return PROGRAM_NAME

    cmd_parts = [PROGRAM_NAME, click_command.name or ""]
    if not cli_args:
        return " ".join(part for part in cmd_parts if part)

    arguments = []
    options = []

    for param in click_command.params:
        param_name = param.name
        if param_name not in cli_args:
            continue

        value = cli_args[param_name]
        if value is None or value is False:
            continue

        if isinstance(value, (str, Path)):
            formatted_value = Path(str(value)).name or str(value)
        else:
            formatted_value = str(value)

        if isinstance(param, click.Argument):
            arguments.append(formatted_value)

        elif isinstance(param, click.Option):
            # Skip if it's the default value
            if value == param.default:
                continue

            flag = param.opts[0] if param.opts else f"--{param_name}"
            if param.is_flag:
                options.append(flag)
            else:
                options.extend([flag, formatted_value])

    cmd_parts.extend(arguments)
    cmd_parts.extend(options)

    return " ".join(part for part in cmd_parts if part)

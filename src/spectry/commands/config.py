"""Config commands -- view and modify global configuration.

Provides the ``spectry config`` sub-command group for reading, updating,
and resetting the user's global configuration file
(:class:`~spectry.models.GlobalConfig`): request defaults, output format,
and the persisted UI preferences.
"""

from __future__ import annotations

import typer

from spectry.commands._common import exit_on_error
from spectry.output import get_output, info, success

config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the persisted configuration.

    Example::

        spectry config show
        spectry --json config show
    """
    from spectry.config import get_config_dir, load_global_config

    with exit_on_error():
        config = load_global_config()
    info(f"Config directory: {get_config_dir()}")
    get_output().print_json(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key (dot notation, e.g. 'ui.theme')."),
    value: str = typer.Argument(help="Value to set ('null' clears optional keys)."),
) -> None:
    """Set a configuration value.

    The value is coerced to the existing field's type and the result is
    validated before it is saved.

    Example::

        spectry config set request.timeout 10
        spectry config set ui.theme dark
        spectry config set default_server https://staging.example.com
    """
    from spectry.config import set_config_value

    with exit_on_error():
        set_config_value(key, value)
    success(f"Set {key} = {value}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Reset configuration to defaults.

    Asks for confirmation unless ``--force`` is given.

    Example::

        spectry config reset --force
    """
    from spectry.config import reset_global_config

    if not force:
        confirmed = typer.confirm("Reset all config to defaults?")
        if not confirmed:
            info("Cancelled.")
            raise typer.Exit()

    with exit_on_error():
        reset_global_config()
    success("Configuration reset to defaults.")

"""Built-in CLI sub-commands for spectry.

* :mod:`~spectry.commands.document` -- validate, format and export spec text.
* :mod:`~spectry.commands.inspect` -- examine info, servers, paths, schemas
  and single operations.
* :mod:`~spectry.commands.console` -- synthesize example bodies and send
  requests.
* :mod:`~spectry.commands.config` -- view and modify global settings.

Multi-command groups export a :class:`typer.Typer` sub-application; single
commands export a plain callback registered directly on the root app.
"""

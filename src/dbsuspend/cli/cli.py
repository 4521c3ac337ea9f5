"""CLI application for database provisioning space checks."""

import typer

from dbsuspend.cli.commands import space

app = typer.Typer(
    help="dbsuspend - suspend provisioning on databases running out of space",
    no_args_is_help=True,
)

app.command("run")(space.run)
app.command("report")(space.report)


if __name__ == "__main__":
    app()

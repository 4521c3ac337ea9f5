"""Common CLI options for the CLI."""

import typer

InventoryOpt = typer.Option(
    None,
    "--inventory",
    "-i",
    envvar="DBSUSPEND_INVENTORY",
    help="Inventory file (default: ~/.config/dbsuspend/inventory.json)",
)

ExcludeOpt = typer.Option(
    [],
    "--exclude",
    "-x",
    help="Database to leave out of the pass. This is reusable.",
    show_default=False,
)

ParallelOpt = typer.Option(
    4,
    "--parallel",
    "-n",
    min=1,
    help="Number of databases evaluated in parallel",
)

LocalHostOpt = typer.Option(
    None,
    "--local-host",
    envvar="DBSUSPEND_LOCAL_HOST",
    help="Name of this machine (default: detected hostname)",
)

SshUserOpt = typer.Option(
    None,
    "--ssh-user",
    envvar="DBSUSPEND_SSH_USER",
    help="User for remote volume queries",
)

TimeoutOpt = typer.Option(
    60.0,
    "--timeout",
    min=1.0,
    help="Timeout in seconds for each remote volume query",
)

DryRunOpt = typer.Option(
    False,
    "--dry-run",
    help="Show which databases would change, but don't change anything",
)

ConfirmOpt = typer.Option(
    False,
    "--confirm/--no-confirm",
    help="Ask for confirmation before changing any database",
)

StrictOpt = typer.Option(
    False,
    "--strict",
    help="Exit with code 1 if any database could not be evaluated or changed",
)

VerboseOpt = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Show debug logging",
)

ExportDirOpt = typer.Option(
    None,
    "--export-dir",
    envvar="DBSUSPEND_EXPORT_DIR",
    help="Write the CSV report to this directory",
)

SendReportOpt = typer.Option(
    False,
    "--send-report",
    help="Export the report and mail it to --to",
)

ReportDirOpt = typer.Option(
    None,
    "--report-dir",
    envvar="DBSUSPEND_REPORT_DIR",
    help="Directory for the mailed report",
)

ToOpt = typer.Option(
    [],
    "--to",
    help="Report recipient. This is reusable.",
    show_default=False,
)

FromOpt = typer.Option(
    None,
    "--from",
    envvar="DBSUSPEND_MAIL_FROM",
    help="Report sender address",
)

SmtpServerOpt = typer.Option(
    None,
    "--smtp-server",
    envvar="DBSUSPEND_SMTP_SERVER",
    help="SMTP server used to send the report",
)

SmtpPortOpt = typer.Option(
    25,
    "--smtp-port",
    envvar="DBSUSPEND_SMTP_PORT",
    help="SMTP port",
)

SmtpUserOpt = typer.Option(
    None,
    "--smtp-user",
    envvar="DBSUSPEND_SMTP_USER",
    help="SMTP username",
)

SmtpPasswordOpt = typer.Option(
    None,
    "--smtp-password",
    envvar="DBSUSPEND_SMTP_PASSWORD",
    help="SMTP password",
)

TlsOpt = typer.Option(
    False,
    "--tls",
    help="Use STARTTLS when sending the report",
)

SubjectOpt = typer.Option(
    None,
    "--subject",
    help="Override the report mail subject",
)

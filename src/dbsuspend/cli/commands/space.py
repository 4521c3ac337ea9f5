"""Commands for evaluating database space and provisioning flags."""

from __future__ import annotations

from pathlib import Path

import typer

from dbsuspend.cli.common.context import build_run_context
from dbsuspend.cli.common.exits import die, exit_from_exc
from dbsuspend.cli.common.logs import configure_logging
from dbsuspend.cli.common.options import (
    ConfirmOpt,
    DryRunOpt,
    ExcludeOpt,
    ExportDirOpt,
    FromOpt,
    InventoryOpt,
    LocalHostOpt,
    ParallelOpt,
    ReportDirOpt,
    SendReportOpt,
    SmtpPasswordOpt,
    SmtpPortOpt,
    SmtpServerOpt,
    SmtpUserOpt,
    SshUserOpt,
    StrictOpt,
    SubjectOpt,
    TimeoutOpt,
    TlsOpt,
    ToOpt,
    VerboseOpt,
)
from dbsuspend.cli.common.output import out
from dbsuspend.core.controller import (
    PassResult,
    apply_decisions,
    pending_changes,
    run_pass,
)
from dbsuspend.core.inventory import CatalogError, list_units
from dbsuspend.core.mail import MailError, send_report
from dbsuspend.core.report import ReportError, export_report, read_report
from dbsuspend.core.settings import DEFAULT_SUBJECT, ExportSettings, MailSettings


def _mail_settings_or_exit(
    *,
    report_dir: Path | None,
    to: list[str],
    sender: str | None,
    smtp_server: str | None,
    smtp_port: int,
    smtp_user: str | None,
    smtp_password: str | None,
    tls: bool,
    subject: str | None,
) -> MailSettings:
    """Validate the report-sending options and bundle them."""
    missing = [
        opt
        for opt, value in (
            ("--report-dir", report_dir),
            ("--to", to),
            ("--from", sender),
            ("--smtp-server", smtp_server),
        )
        if not value
    ]
    if missing:
        die(f"--send-report requires {', '.join(missing)}", code=2)
    if bool(smtp_user) != bool(smtp_password):
        die("--smtp-user and --smtp-password must be given together", code=2)

    try:
        return MailSettings(
            smtp_server=smtp_server or "",
            sender=sender or "",
            recipients=tuple(to),
            smtp_port=smtp_port,
            username=smtp_user,
            password=smtp_password,
            use_tls=tls,
            subject=subject or DEFAULT_SUBJECT,
        )
    except ValueError as exc:
        exit_from_exc(exc, message=str(exc), code=2)


def _render(result: PassResult, *, threshold: int, dry_run: bool) -> None:
    """Print the metrics table, the changes and the failures of a pass."""
    out.header("Database space")
    out.kv({"Threshold": f"{threshold}%", "Databases evaluated": len(result.table)})
    if result.table:
        out.metrics_table(result.rows, title="Database space")

    pending = pending_changes(result)
    if dry_run:
        if pending:
            out.decisions_table(pending, title="Planned changes")
        out.warn("Dry-run enabled: no database was changed")
    else:
        if result.applied:
            out.decisions_table(result.applied, title="Applied changes")
            out.success(f"Databases changed: {len(result.applied)}")
        if pending:
            out.decisions_table(pending, title="Changes not applied")
            out.warn(f"{len(pending)} change(s) not applied")
        elif not result.applied:
            out.success("No changes needed")

    if result.failures:
        out.failures_table(result.failures, title="Failures")
        out.warn(f"{len(result.failures)} database(s) could not be processed")


def _emit_report(
    result: PassResult,
    *,
    export: ExportSettings | None,
    mail: MailSettings | None,
    mail_export: ExportSettings | None,
) -> bool:
    """Export and/or mail the report. Returns False if any step failed."""
    ok = True
    if export:
        try:
            path = export_report(result.rows, export)
            out.success(f"Report written to {path}")
        except ReportError as exc:
            out.error(str(exc))
            ok = False

    if mail and mail_export:
        try:
            path = export_report(result.rows, mail_export)
            send_report(path, mail)
            out.success(f"Report sent to {', '.join(mail.recipients)}")
        except (ReportError, MailError) as exc:
            out.error(str(exc))
            ok = False
    return ok


def run(
    threshold: int = typer.Argument(
        ...,
        min=0,
        max=100,
        help="Minimum total free space (percent) for a database to accept new workloads",
    ),
    inventory: Path | None = InventoryOpt,
    exclude: list[str] = ExcludeOpt,
    parallel: int = ParallelOpt,
    local_host: str | None = LocalHostOpt,
    ssh_user: str | None = SshUserOpt,
    timeout: float = TimeoutOpt,
    dry_run: bool = DryRunOpt,
    confirm: bool = ConfirmOpt,
    strict: bool = StrictOpt,
    verbose: bool = VerboseOpt,
    export_dir: Path | None = ExportDirOpt,
    send: bool = SendReportOpt,
    report_dir: Path | None = ReportDirOpt,
    to: list[str] = ToOpt,
    sender: str | None = FromOpt,
    smtp_server: str | None = SmtpServerOpt,
    smtp_port: int = SmtpPortOpt,
    smtp_user: str | None = SmtpUserOpt,
    smtp_password: str | None = SmtpPasswordOpt,
    tls: bool = TlsOpt,
    subject: str | None = SubjectOpt,
):
    """
    Evaluate database space and suspend or resume provisioning.
    """
    configure_logging(verbose)

    mail = None
    if send:
        mail = _mail_settings_or_exit(
            report_dir=report_dir,
            to=to,
            sender=sender,
            smtp_server=smtp_server,
            smtp_port=smtp_port,
            smtp_user=smtp_user,
            smtp_password=smtp_password,
            tls=tls,
            subject=subject,
        )

    appctx = build_run_context(
        inventory, local_host=local_host, ssh_user=ssh_user, timeout=timeout
    )

    try:
        with out.status("Loading databases..."):
            units = list_units(appctx.inventory, exclude)
    except CatalogError as exc:
        exit_from_exc(exc, message=str(exc), code=1)

    if not units:
        out.warn("No databases found")
        raise typer.Exit(0)

    preview = dry_run or confirm
    with out.status(f"Evaluating {len(units)} database(s)..."):
        result = run_pass(
            units,
            threshold,
            appctx.collector,
            appctx.inventory,
            max_parallel=parallel,
            dry_run=preview,
        )

    if confirm and not dry_run:
        planned = pending_changes(result)
        if planned:
            out.decisions_table(planned, title="Planned changes")
            if out.confirm("Apply these changes?"):
                result = apply_decisions(result, appctx.inventory)
            else:
                out.info("Cancelled: no database was changed")

    _render(result, threshold=threshold, dry_run=dry_run)

    reported = _emit_report(
        result,
        export=ExportSettings(export_dir) if export_dir else None,
        mail=mail,
        mail_export=ExportSettings(report_dir) if mail and report_dir else None,
    )

    if strict and (result.failures or not reported):
        raise typer.Exit(1)


def report(
    path: Path = typer.Argument(..., help="Report file written by `dbsuspend run`"),
):
    """
    Show a previously exported report.
    """
    try:
        rows = read_report(path)
    except ReportError as exc:
        exit_from_exc(exc, message=str(exc), code=1)

    if not rows:
        out.warn("Report is empty")
        raise typer.Exit(0)

    out.metrics_table(rows, title=path.name)

"""
Policy Acceptance CLI

Command-line interface over a JSON configuration/snapshot file (the same
shape load_config reads). Read commands answer status questions; accept and
revoke change the local ledger and write the snapshot back.

Usage:
    policy-acceptance status --config acceptance.json
    policy-acceptance required --config acceptance.json --user u-42
    policy-acceptance can-accept --config acceptance.json --user u-1
    policy-acceptance accept --config acceptance.json --policy terms-001 --version 2.1
    policy-acceptance revoke --config acceptance.json --id acceptance-3 --reason "signed in error"
"""

import asyncio
import json
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from typing_extensions import Annotated

from policy_acceptance.acceptance.invariants import validate_company_attestation
from policy_acceptance.acceptance.models import AcceptanceType, CompanyInfo
from policy_acceptance.config import (
    DataSourceType,
    LocalData,
    PolicyAcceptanceConfig,
    dump_config,
    load_config,
)
from policy_acceptance.kernel.errors import AttestationValidationError
from policy_acceptance.kernel.logging import configure_logging
from policy_acceptance.kernel.time import FixedTimeProvider, TimeProvider
from policy_acceptance.orchestrator import AcceptanceOrchestrator, OutcomeStatus

# Configure logging to stderr (avoids polluting stdout for JSON output)
configure_logging(json_output=False, log_level="WARNING")

app = typer.Typer(
    name="policy-acceptance",
    help="Policy Acceptance - Track who accepted which policy version",
    add_completion=False,
)

DEFAULT_CONFIG = Path("acceptance.json")

ConfigOption = Annotated[
    Path,
    typer.Option("--config", help="Configuration/snapshot JSON file"),
]


def get_config(path: Path) -> PolicyAcceptanceConfig:
    """Load the snapshot or exit with an error"""
    if not path.exists():
        typer.echo(f"Error: Config not found: {path}", err=True)
        raise typer.Exit(1)
    try:
        return load_config(path)
    except (ValidationError, json.JSONDecodeError) as e:
        typer.echo(f"Error: Invalid config {path}: {e}", err=True)
        raise typer.Exit(1)


def get_orchestrator(
    config: PolicyAcceptanceConfig, at: Optional[datetime] = None
) -> AcceptanceOrchestrator:
    time_provider: Optional[TimeProvider] = FixedTimeProvider(at) if at else None
    return AcceptanceOrchestrator(config, time_provider=time_provider)


def save_snapshot(
    config: PolicyAcceptanceConfig, orchestrator: AcceptanceOrchestrator, path: Path
) -> None:
    """Write the orchestrator's catalog back into the config file"""
    local = config.data_source.local_data or LocalData()
    config.data_source.local_data = local.model_copy(update={"policies": orchestrator.policies})
    dump_config(config, path)


def require_local(config: PolicyAcceptanceConfig) -> None:
    if config.data_source.type != DataSourceType.LOCAL:
        typer.echo(
            f"Error: Only local snapshots can be changed from the CLI "
            f"(data source is '{config.data_source.type.value}')",
            err=True,
        )
        raise typer.Exit(1)


# Read commands


@app.command()
def status(
    config_path: ConfigOption = DEFAULT_CONFIG,
    user: Annotated[
        Optional[str],
        typer.Option("--user", help="User ID (defaults to the current user)"),
    ] = None,
    at: Annotated[
        Optional[datetime],
        typer.Option("--at", help="Evaluate at this time instead of now (UTC)"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show the acceptance status of every document for a user"""
    config = get_config(config_path)
    orchestrator = get_orchestrator(config, at)
    user_id = user or config.current_user.id

    report = {
        policy.id: orchestrator.get_policy_acceptance_status(policy.id, user_id).value
        for policy in orchestrator.policies
    }

    if json_output:
        typer.echo(json.dumps(report, indent=2))
        return

    if not report:
        typer.echo("No policies")
        return

    typer.echo(f"Policy status for {user_id}:")
    for policy in orchestrator.policies:
        typer.echo(f"  {policy.id} (v{policy.current_version}): {report[policy.id]}")


@app.command()
def required(
    config_path: ConfigOption = DEFAULT_CONFIG,
    user: Annotated[
        Optional[str],
        typer.Option("--user", help="User ID (defaults to the current user)"),
    ] = None,
    at: Annotated[
        Optional[datetime],
        typer.Option("--at", help="Evaluate at this time instead of now (UTC)"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """List documents the user still has to accept"""
    config = get_config(config_path)
    orchestrator = get_orchestrator(config, at)
    user_id = user or config.current_user.id

    policies = orchestrator.get_required_policies(user_id)

    if json_output:
        typer.echo(
            json.dumps(
                [
                    {
                        "id": p.id,
                        "title": p.title,
                        "currentVersion": p.current_version,
                        "status": orchestrator.get_policy_acceptance_status(p.id, user_id).value,
                    }
                    for p in policies
                ],
                indent=2,
            )
        )
        return

    if not policies:
        typer.echo(f"Nothing to accept for {user_id}")
        return

    typer.echo(f"Required policies for {user_id} ({len(policies)}):")
    for policy in policies:
        policy_status = orchestrator.get_policy_acceptance_status(policy.id, user_id)
        typer.echo(f"  {policy.id}: {policy.title} v{policy.current_version} [{policy_status.value}]")


@app.command("can-accept")
def can_accept(
    config_path: ConfigOption = DEFAULT_CONFIG,
    user: Annotated[
        Optional[str],
        typer.Option("--user", help="User ID (defaults to the current user)"),
    ] = None,
    company: Annotated[
        Optional[str],
        typer.Option("--company", help="Company ID (defaults to the user's company)"),
    ] = None,
) -> None:
    """Check whether a user may accept on behalf of a company"""
    config = get_config(config_path)
    orchestrator = get_orchestrator(config)
    user_id = user or config.current_user.id

    if orchestrator.can_user_accept_for_company(user_id, company):
        typer.echo(f"✓ {user_id} can accept for the company")
    else:
        typer.echo(f"✗ {user_id} cannot accept for the company")
        raise typer.Exit(1)


# Write commands


@app.command()
def accept(
    policy: Annotated[str, typer.Option("--policy", help="Policy ID")],
    version: Annotated[str, typer.Option("--version", help="Version being accepted")],
    config_path: ConfigOption = DEFAULT_CONFIG,
    acceptance_type: Annotated[
        AcceptanceType,
        typer.Option("--type", help="individual or company"),
    ] = AcceptanceType.INDIVIDUAL,
    company_name: Annotated[Optional[str], typer.Option("--company-name")] = None,
    acceptor_name: Annotated[Optional[str], typer.Option("--acceptor-name")] = None,
    acceptor_title: Annotated[Optional[str], typer.Option("--acceptor-title")] = None,
    acceptor_email: Annotated[Optional[str], typer.Option("--acceptor-email")] = None,
    confirm_authority: Annotated[
        bool,
        typer.Option(
            "--confirm-authority",
            help="Confirm you have authority to bind the company",
        ),
    ] = False,
) -> None:
    """Accept a policy version as the current user"""
    config = get_config(config_path)
    require_local(config)

    company_info = None
    if acceptance_type == AcceptanceType.COMPANY:
        company_info = CompanyInfo(
            company_name=company_name or "",
            acceptor_name=acceptor_name or config.current_user.name,
            acceptor_title=acceptor_title or "",
            acceptor_email=acceptor_email or config.current_user.email,
            acceptor_user_id=config.current_user.id,
            signature_method="typed",
        )
    try:
        validate_company_attestation(acceptance_type, company_info, confirm_authority)
    except AttestationValidationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    orchestrator = get_orchestrator(config)

    async def run() -> OutcomeStatus:
        outcome = await orchestrator.accept_policy(policy, version, acceptance_type, company_info)
        await orchestrator.aclose()
        if outcome.status == OutcomeStatus.FAILED:
            typer.echo(f"Error: {outcome.error}", err=True)
        elif outcome.committed and outcome.acceptance is not None:
            typer.echo(f"✓ Accepted {policy} v{version}: {outcome.acceptance.id}")
        return outcome.status

    result = asyncio.run(run())
    if result != OutcomeStatus.COMMITTED:
        raise typer.Exit(1)

    save_snapshot(config, orchestrator, config_path)


@app.command()
def revoke(
    acceptance_id: Annotated[str, typer.Option("--id", help="Acceptance ID")],
    config_path: ConfigOption = DEFAULT_CONFIG,
    reason: Annotated[
        Optional[str],
        typer.Option("--reason", help="Why the acceptance is revoked"),
    ] = None,
    revoked_by: Annotated[
        Optional[str],
        typer.Option("--by", help="Revoking user ID (defaults to the current user)"),
    ] = None,
) -> None:
    """Revoke an acceptance record in the local ledger"""
    config = get_config(config_path)
    require_local(config)
    orchestrator = get_orchestrator(config)

    revoked = asyncio.run(orchestrator.revoke_acceptance(acceptance_id, revoked_by, reason))
    if revoked is None:
        typer.echo(f"Error: {orchestrator.error}", err=True)
        raise typer.Exit(1)

    save_snapshot(config, orchestrator, config_path)
    typer.echo(f"✓ Revoked acceptance: {revoked.id}")
    typer.echo(f"  Policy: {revoked.policy_id} v{revoked.version}")
    if revoked.revoked_reason:
        typer.echo(f"  Reason: {revoked.revoked_reason}")


def main() -> None:
    """Main entry point"""
    app()


if __name__ == "__main__":
    main()

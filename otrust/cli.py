"""
Command-line interface for the OTRUST distributed truth protocol.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

import click
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console

from otrust import __version__
from otrust.client.application.credential_store import CredentialStore
from otrust.client.client import OtrustClient
from otrust.common import validators
from otrust.common.config import CLAIM_TYPES, LOG_LEVELS, PROOF_ACTIONS, SORT_FIELDS, Config
from otrust.common.exceptions import (
    MissingKeyPairError,
    NotLoggedInError,
    OtrustError,
    ValidationError,
)
from otrust.common.models import ClaimData, ClaimListFilter, ProofData, Semantic
from otrust.display import (
    claims_to_csv,
    render_blockchain_stats,
    render_claim,
    render_claim_created,
    render_claim_list,
    render_config,
    render_health,
    render_lookup_failure,
    render_proof_added,
    render_public_key,
    render_search,
    render_semantic,
    render_system_stats,
    render_user,
    render_user_summary,
    render_verification,
)

logger = logging.getLogger(__name__)


class CommandError(click.ClickException):
    """Click exception carrying the category of the underlying error."""

    def __init__(self, error: OtrustError) -> None:
        super().__init__(f"{error.label}: {error.message}")
        self.exit_code = error.exit_code
        self.category = error.category


class OtrustGroup(click.Group):
    """Command group turning client errors into distinct exit codes."""

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except OtrustError as err:
            raise CommandError(err) from err
        except PydanticValidationError as err:
            raise CommandError(ValidationError(str(err))) from err


@dataclass
class CliState:
    client: OtrustClient
    console: Console


pass_state = click.make_pass_decorator(CliState)


def _prompt_value(validate: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """Adapt a validator for click.prompt so bad input re-prompts."""

    def convert(value: Any) -> Any:
        try:
            return validate(value)
        except ValidationError as err:
            raise click.BadParameter(err.message) from err

    return convert


def _require_login(client: OtrustClient, message: str) -> None:
    config = client.credentials.config
    if not config.is_logged_in:
        raise NotLoggedInError(message)
    if not config.has_key_pair:
        raise MissingKeyPairError


@click.group(cls=OtrustGroup)
@click.version_option(__version__, prog_name="otrust-cli")
@click.option(
    "--server",
    default=None,
    help="Server URL for this invocation (default: from config file)",
)
@click.option(
    "--config-dir",
    default=None,
    type=click.Path(file_okay=False, path_type=Path),
    help="Directory holding config.json (default: OTRUST_CONFIG_DIR or ~/.otrust)",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(sorted(LOG_LEVELS)),
    help="Log level (default: from OTRUST_LOG_LEVEL env or warn)",
)
@click.pass_context
def cli(
    ctx: click.Context,
    server: str | None,
    config_dir: Path | None,
    log_level: str | None,
) -> None:
    """Command line interface for the OTRUST distributed truth protocol"""
    config = Config(config_dir)
    credentials = CredentialStore(config)
    credentials.load()
    client = OtrustClient(
        config=config,
        credentials=credentials,
        server_url=server,
        log_level=log_level or config.LOG_LEVEL,
    )
    ctx.obj = CliState(client=client, console=Console(highlight=False, soft_wrap=True))


@cli.command()
@click.option("-s", "--server", default=None, help="Set the OTRUST server URL")
@click.option("-p", "--print", "print_", is_flag=True, help="Print current configuration")
@pass_state
def config(state: CliState, server: str | None, print_: bool) -> None:  # noqa: FBT001
    """Manage CLI configuration"""
    if server:
        state.client.set_config(server=server)
        state.console.print(f"[green]Server URL updated:[/green] {server}")
    if print_ or not server:
        render_config(state.console, state.client.get_config())


@cli.command()
@click.option("-f", "--force", is_flag=True, help="Force regeneration of keys")
@click.option(
    "--private-key",
    "private_key_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Import an existing PEM private key instead of generating one",
)
@click.option(
    "--public-key",
    "public_key_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="PEM public key matching --private-key",
)
@pass_state
def init(
    state: CliState,
    force: bool,  # noqa: FBT001
    private_key_path: Path | None,
    public_key_path: Path | None,
) -> None:
    """Initialize a new key pair"""
    client, console = state.client, state.console
    if private_key_path is None and public_key_path is not None:
        msg = "--public-key requires --private-key"
        raise ValidationError(msg, "publicKey")

    if client.credentials.config.has_key_pair and not force:
        console.print("[yellow]Key pair already exists.[/yellow] Use --force to regenerate")
        return

    if private_key_path is not None:
        info = client.load_key_pair(
            private_key_path.read_text(),
            public_key_path.read_text() if public_key_path else None,
        )
        console.print("[green]Key pair imported and saved[/green]")
    else:
        with console.status("Generating key pair..."):
            info = client.init(force=force)
        console.print("[green]Key pair generated and saved[/green]")
    render_public_key(console, info)


@cli.command()
@pass_state
def register(state: CliState) -> None:
    """Register a new account with the OTRUST server"""
    with state.console.status("Registering account..."):
        data = state.client.register()
    state.console.print("[green]Account registered successfully[/green]")
    user = data.get("user") or {}
    state.console.print("[green]You are now logged in as:[/green]")
    render_user_summary(state.console, user)


@cli.command()
@pass_state
def login(state: CliState) -> None:
    """Login to the OTRUST server"""
    with state.console.status("Logging in..."):
        data = state.client.login()
    state.console.print("[green]Login successful[/green]")
    state.console.print("[green]You are logged in as:[/green]")
    render_user_summary(state.console, data.get("user") or {})


@cli.command()
@pass_state
def logout(state: CliState) -> None:
    """Logout from the OTRUST server"""
    if not state.client.logout():
        state.console.print("[yellow]You are not logged in[/yellow]")
        return
    state.console.print("[green]Logged out successfully[/green]")


@cli.command()
@click.option("-n", "--name", default=None, help="Set display name")
@click.option("-e", "--email", default=None, help="Set email address")
@pass_state
def profile(state: CliState, name: str | None, email: str | None) -> None:
    """Update user profile"""
    with state.console.status("Updating profile..."):
        data = state.client.update_profile(display_name=name, email=email)
    user = data.get("user") or {}
    state.console.print("[green]Profile updated successfully[/green]")
    render_user_summary(state.console, {"displayName": "Not set", **user})


def _collect_claim(
    claim: str | None,
    evidence: str | None,
    claim_type: str | None,
    subject: str | None,
    predicate: str | None,
    obj: str | None,
    *,
    interactive: bool,
) -> dict[str, Any]:
    """Validate claim options, prompting for whatever is missing."""
    values = {
        "claim": claim,
        "evidence": evidence,
        "type": claim_type,
        "subject": subject,
        "predicate": predicate,
        "object": obj,
    }
    if interactive or any(v is None for v in values.values()):
        values["claim"] = click.prompt(
            "Enter your claim text",
            default=claim,
            value_proc=_prompt_value(validators.validate_claim_text),
        )
        values["evidence"] = click.prompt(
            "Enter evidence URLs (comma-separated)",
            default=evidence,
            value_proc=_prompt_value(validators.parse_evidence),
        )
        values["type"] = click.prompt(
            "Select claim type",
            default=claim_type,
            type=click.Choice(CLAIM_TYPES),
        )
        for field, current in (
            ("subject", subject),
            ("predicate", predicate),
            ("object", obj),
        ):
            values[field] = click.prompt(
                f"Enter semantic {field}",
                default=current,
                value_proc=_prompt_value(
                    lambda v, f=field: validators.validate_non_empty(v, f)
                ),
            )

    return {
        "claim": validators.validate_claim_text(values["claim"]),
        "evidence": validators.parse_evidence(values["evidence"]),
        "type": validators.validate_claim_type(values["type"]),
        "semantic": {
            field: validators.validate_non_empty(values[field], field)
            for field in ("subject", "predicate", "object")
        },
    }


@cli.command("claim:create")
@click.option("-i", "--interactive", is_flag=True, help="Use interactive mode")
@click.option("-c", "--claim", default=None, help="Claim text")
@click.option("-e", "--evidence", default=None, help="Evidence URLs (comma-separated)")
@click.option(
    "-t",
    "--type",
    "claim_type",
    default=None,
    help=f"Claim type ({', '.join(CLAIM_TYPES)})",
)
@click.option("-s", "--subject", default=None, help="Semantic subject")
@click.option("-p", "--predicate", default=None, help="Semantic predicate")
@click.option("-o", "--object", "obj", default=None, help="Semantic object")
@click.option("--parent-id", default=None, help="ID of the claim this one refines")
@pass_state
def claim_create(  # noqa: PLR0913
    state: CliState,
    interactive: bool,  # noqa: FBT001
    claim: str | None,
    evidence: str | None,
    claim_type: str | None,
    subject: str | None,
    predicate: str | None,
    obj: str | None,
    parent_id: str | None,
) -> None:
    """Create a new claim"""
    _require_login(state.client, "You must be logged in to create a claim")
    values = _collect_claim(
        claim, evidence, claim_type, subject, predicate, obj, interactive=interactive
    )
    claim_data = ClaimData(
        claim=values["claim"],
        evidence=values["evidence"],
        type=values["type"],
        semantic=Semantic(**values["semantic"]),
        parent_id=parent_id,
    )
    with state.console.status("Creating claim..."):
        data = state.client.create_claim(claim_data)
    state.console.print("[green]Claim created successfully[/green]")
    render_claim_created(state.console, data)


@cli.command("proof:add")
@click.option("-i", "--interactive", is_flag=True, help="Use interactive mode")
@click.option("-c", "--claim-id", default=None, help="Claim ID")
@click.option(
    "-a",
    "--action",
    default=None,
    help=f"Action ({', '.join(PROOF_ACTIONS)})",
)
@click.option("-r", "--reason", default=None, help="Reason for your action")
@click.option("--confidence", default=None, help="Confidence level (0.0 to 1.0)")
@pass_state
def proof_add(  # noqa: PLR0913
    state: CliState,
    interactive: bool,  # noqa: FBT001
    claim_id: str | None,
    action: str | None,
    reason: str | None,
    confidence: str | None,
) -> None:
    """Add a proof to a claim"""
    client = state.client
    _require_login(client, "You must be logged in to add a proof")
    level: Any = confidence if confidence is not None else client.settings.DEFAULT_CONFIDENCE

    if interactive or not claim_id or not action:
        claim_id = click.prompt(
            "Enter claim ID",
            default=claim_id,
            value_proc=_prompt_value(
                lambda v: validators.validate_non_empty(v, "claim ID")
            ),
        )
        action = click.prompt(
            "Select action", default=action, type=click.Choice(PROOF_ACTIONS)
        )
        reason = (
            click.prompt(
                "Enter reason for your action (optional)",
                default=reason or "",
                show_default=False,
            )
            or None
        )
        level = click.prompt(
            "Enter confidence level (0.0 to 1.0)",
            default=str(level),
            value_proc=_prompt_value(validators.validate_confidence),
        )

    proof = ProofData(
        claim_id=validators.validate_non_empty(claim_id, "claim ID"),
        action=validators.validate_proof_action(action),
        reason=reason,
        confidence=validators.validate_confidence(level),
    )
    with state.console.status("Adding proof..."):
        data = client.add_proof(proof)
    state.console.print("[green]Proof added successfully[/green]")
    render_proof_added(state.console, data)


@cli.command("claim:get")
@click.argument("claim_ids", nargs=-1, required=True, metavar="ID...")
@pass_state
def claim_get(state: CliState, claim_ids: tuple[str, ...]) -> None:
    """Get details for one or more claims"""
    client, console = state.client, state.console
    if len(claim_ids) == 1:
        with console.status("Fetching claim..."):
            data = client.get_claim(claim_ids[0])
        console.print("[green]Claim details:[/green]")
        render_claim(console, data)
        return

    with console.status(f"Fetching {len(claim_ids)} claims..."):
        lookups = client.get_claims(claim_ids)
    failed = 0
    for lookup in lookups:
        if lookup.ok and lookup.data is not None:
            console.print(f"\n[bold]Claim {lookup.claim_id}[/bold]")
            render_claim(console, lookup.data)
        else:
            failed += 1
            render_lookup_failure(console, lookup)
    if failed:
        raise click.ClickException(f"{failed} of {len(lookups)} claims could not be fetched")


@cli.command("claim:list")
@click.option("-p", "--page", default="1", help="Page number")
@click.option("-l", "--limit", default="10", help="Results per page")
@click.option("-t", "--type", "claim_type", default=None, help="Filter by claim type")
@click.option("-s", "--subject", default=None, help="Filter by semantic subject")
@click.option("-P", "--predicate", default=None, help="Filter by semantic predicate")
@click.option("-o", "--object", "obj", default=None, help="Filter by semantic object")
@click.option("-u", "--user", default=None, help="Filter by user public key")
@click.option("-v", "--verified", default=None, help="Filter by verification status")
@click.option(
    "--sort",
    default="newest",
    help=f"Sort by field ({', '.join(SORT_FIELDS)})",
)
@click.option("--csv", "as_csv", is_flag=True, help="Output in CSV format")
@pass_state
def claim_list(  # noqa: PLR0913
    state: CliState,
    page: str,
    limit: str,
    claim_type: str | None,
    subject: str | None,
    predicate: str | None,
    obj: str | None,
    user: str | None,
    verified: str | None,
    sort: str,
    as_csv: bool,  # noqa: FBT001
) -> None:
    """List claims with optional filtering"""
    filters = ClaimListFilter(
        page=validators.validate_positive_int(page, "page"),
        limit=validators.validate_positive_int(limit, "limit"),
        type=claim_type,
        subject=subject,
        predicate=predicate,
        object=obj,
        public_key=user,
        verified=validators.parse_bool(verified, "verified"),
        sort=validators.validate_sort(sort),
    )
    with state.console.status("Fetching claims..."):
        data = state.client.list_claims(filters)

    if as_csv:
        click.echo(claims_to_csv(data.get("claims") or []))
        return
    meta = data.get("meta") or {}
    state.console.print(f"[green]Found {meta.get('total', 0)} claims[/green]")
    render_claim_list(state.console, data)


@cli.command()
@click.argument("query")
@click.option("-l", "--limit", default="10", help="Maximum results")
@pass_state
def search(state: CliState, query: str, limit: str) -> None:
    """Search for claims"""
    with state.console.status(f'Searching for "{query}"...'):
        data = state.client.search(query, validators.validate_positive_int(limit, "limit"))
    state.console.print(
        f"[green]Found {data.get('count', 0)} results "
        f"({data.get('searchType', 'text')} search)[/green]"
    )
    render_search(state.console, data)


@cli.command()
@click.argument("subject")
@click.argument("predicate")
@pass_state
def semantic(state: CliState, subject: str, predicate: str) -> None:
    """Perform a semantic query"""
    with state.console.status("Querying semantic data..."):
        data = state.client.semantic_query(subject, predicate)
    state.console.print("[green]Semantic query results[/green]")
    render_semantic(state.console, subject, predicate, data)


@cli.command()
@click.argument("claim_id", metavar="ID")
@pass_state
def verify(state: CliState, claim_id: str) -> None:
    """Verify a claim against the blockchain"""
    with state.console.status("Verifying claim..."):
        data = state.client.verify(claim_id)
    render_verification(state.console, data)


@cli.command("user:info")
@click.argument("public_key", required=False)
@pass_state
def user_info(state: CliState, public_key: str | None) -> None:
    """Get information about a user (defaults to current user)"""
    with state.console.status("Fetching user information..."):
        data = state.client.get_user_info(public_key)
    state.console.print("[green]User information:[/green]")
    render_user(state.console, data)


@cli.command("blockchain:stats")
@pass_state
def blockchain_stats(state: CliState) -> None:
    """Get blockchain statistics"""
    with state.console.status("Fetching blockchain statistics..."):
        data = state.client.get_blockchain_stats()
    state.console.print("[green]Blockchain statistics:[/green]")
    render_blockchain_stats(state.console, data)


@cli.command()
@pass_state
def stats(state: CliState) -> None:
    """Get system statistics"""
    with state.console.status("Fetching system statistics..."):
        data = state.client.get_system_stats()
    state.console.print("[green]System statistics:[/green]")
    render_system_stats(state.console, data)


@cli.command()
@pass_state
def health(state: CliState) -> None:
    """Check server health"""
    with state.console.status("Checking server health..."):
        data = state.client.get_health()
    if not render_health(state.console, data):
        click.get_current_context().exit(1)


if __name__ == "__main__":
    cli()

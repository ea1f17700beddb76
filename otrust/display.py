"""
Console rendering of server responses.
"""

from __future__ import annotations

import csv
import io
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from rich.markup import escape
from rich.table import Table
from rich.text import Text

if TYPE_CHECKING:
    from collections.abc import Iterable

    from rich.console import Console

    from otrust.client.domain.entities import ClaimLookup, ConfigSummary, PublicKeyInfo

CSV_FIELDS = ["id", "claim", "type", "publicKey", "timestamp", "credibilityScore"]


def short(value: Any, length: int = 12) -> str:
    """Cut identifiers and keys to a readable prefix."""
    text = "" if value is None else str(value)
    if len(text) <= length:
        return text
    return text[:length] + "..."


def truncate(value: Any, width: int) -> str:
    text = "" if value is None else str(value)
    if len(text) <= width:
        return text
    return text[: width - 3] + "..."


def score(value: Any, digits: int = 1) -> str:
    if value is None or isinstance(value, bool):
        return "-"
    try:
        return f"{float(value):.{digits}f}"
    except (TypeError, ValueError):
        return str(value)


def yes_no(value: Any) -> str:
    return "Yes" if value else "No"


def _to_datetime(value: Any) -> datetime | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed
    return None


def format_time(value: Any) -> str:
    """Local date and time for millisecond epochs or ISO strings."""
    parsed = _to_datetime(value)
    if parsed is None:
        return "-" if value is None else str(value)
    return parsed.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def format_date(value: Any) -> str:
    parsed = _to_datetime(value)
    if parsed is None:
        return "-" if value is None else str(value)
    return parsed.astimezone().strftime("%Y-%m-%d")


def iso_timestamp(value: Any) -> str:
    """UTC ISO 8601 with milliseconds, e.g. 2024-01-01T00:00:00.000Z."""
    parsed = _to_datetime(value)
    if parsed is None:
        return "" if value is None else str(value)
    parsed = parsed.astimezone(timezone.utc)
    return parsed.strftime("%Y-%m-%dT%H:%M:%S.") + f"{parsed.microsecond // 1000:03d}Z"


def format_uptime(seconds: Any) -> str:
    try:
        total = int(float(seconds))
    except (TypeError, ValueError):
        return "-"
    return f"{total // 3600} hours, {(total % 3600) // 60} minutes"


def _table(*headers: str, title: str | None = None) -> Table:
    table = Table(title=title)
    for header in headers:
        table.add_column(header)
    return table


def _row(table: Table, *cells: Any) -> None:
    table.add_row(*(Text(str(c)) for c in cells))


def _field(console: Console, label: str, value: Any) -> None:
    console.print(f"{label}: {escape(str(value))}")


def _heading(console: Console, text: str) -> None:
    console.print(f"\n[green]{text}[/green]")


def render_config(console: Console, summary: ConfigSummary) -> None:
    console.print("[cyan]Current configuration:[/cyan]")
    _field(console, "Server URL", summary.server)
    _field(
        console,
        "Public key",
        "Configured" if summary.has_key_pair else "Not configured",
    )
    _field(
        console,
        "Authentication",
        "Logged in" if summary.is_logged_in else "Not logged in",
    )


def render_public_key(console: Console, info: PublicKeyInfo) -> None:
    console.print("[green]Public key:[/green]")
    console.print(info.public_key, markup=False)


def render_user_summary(console: Console, user: dict[str, Any]) -> None:
    _field(console, "Public key", user.get("publicKey", "-"))
    if user.get("displayName"):
        _field(console, "Display name", user["displayName"])
    if "score" in user:
        _field(console, "Score", user["score"])


def render_claim_created(console: Console, data: dict[str, Any]) -> None:
    console.print(f"[green]Claim ID:[/green] {escape(str(data.get('id')))}")
    _field(console, "Blockchain Status", data.get("blockchainStatus", "-"))
    conflicts = data.get("conflicts") or []
    if conflicts:
        console.print(
            "\n[yellow]Warning:[/yellow] Potential conflicting claims found:"
        )
        for conflict in conflicts:
            text = escape(truncate(conflict.get("claim", ""), 53))
            console.print(f"- {escape(str(conflict.get('id')))}: {text}")


def render_proof_added(console: Console, data: dict[str, Any]) -> None:
    console.print(f"[green]Claim ID:[/green] {escape(str(data.get('claimId')))}")
    _field(console, "Blockchain Status", data.get("blockchainStatus", "-"))
    credibility = data.get("credibility") or {}
    console.print("[cyan]Credibility:[/cyan]")
    _field(console, "Score", score(credibility.get("score"), 2))
    _field(console, "Confirmations", credibility.get("confirmations", 0))
    _field(console, "Disputes", credibility.get("disputes", 0))


def render_claim(console: Console, data: dict[str, Any]) -> None:
    """Full detail view of one claim as returned by GET /api/claim/:id."""
    claim = data.get("claim") or {}
    credibility = data.get("credibility") or {}

    _heading(console, "Claim Information:")
    _field(console, "ID", claim.get("id", "-"))
    _field(console, "Type", claim.get("type", "-"))
    _field(console, "Created", format_time(claim.get("timestamp")))
    _field(console, "Credibility Score", score(credibility.get("score"), 2))

    _heading(console, "Claim Content:")
    console.print(claim.get("claim", ""), markup=False)

    semantic = claim.get("semantic") or {}
    _heading(console, "Semantic Structure:")
    console.print(
        " ".join(
            str(semantic.get(k, "")) for k in ("subject", "predicate", "object")
        ),
        markup=False,
    )

    _heading(console, "Evidence:")
    for i, url in enumerate(claim.get("evidence") or [], start=1):
        console.print(f"{i}. {url}", markup=False)

    _heading(console, "Proofs:")
    proofs = claim.get("proofChain") or []
    if proofs:
        table = _table("Action", "User", "Timestamp", "Reason")
        for proof in proofs:
            _row(
                table,
                proof.get("action", "-"),
                short(proof.get("publicKey")),
                format_time(proof.get("timestamp")),
                proof.get("reason") or "-",
            )
        console.print(table)
    else:
        console.print("No proofs yet")

    _heading(console, "Blockchain Verification:")
    verification = data.get("blockchainVerification")
    if verification:
        console.print("Status: Verified on blockchain")
        _field(console, "Block Hash", verification.get("blockHash"))
        _field(console, "Block Index", verification.get("blockIndex"))
        _field(console, "Timestamp", verification.get("timestamp"))
    else:
        console.print("Status: Not verified on blockchain yet")

    related = data.get("relatedClaims") or []
    if related:
        _heading(console, "Related Claims:")
        for item in related:
            text = escape(truncate(item.get("claim", ""), 53))
            console.print(f"- {escape(str(item.get('id')))}: {text}")


def render_lookup_failure(console: Console, lookup: ClaimLookup) -> None:
    error = lookup.error
    label = getattr(error, "label", "Error")
    console.print(
        f"[red]{escape(label)}:[/red] claim {escape(lookup.claim_id)}: "
        f"{escape(str(error))}"
    )


def claims_to_csv(claims: Iterable[dict[str, Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.DictWriter(
        buffer,
        fieldnames=CSV_FIELDS,
        extrasaction="ignore",
        quoting=csv.QUOTE_NONNUMERIC,
        lineterminator="\n",
    )
    writer.writeheader()
    for claim in claims:
        row = {field: claim.get(field) for field in CSV_FIELDS}
        row["timestamp"] = iso_timestamp(claim.get("timestamp"))
        writer.writerow(row)
    return buffer.getvalue().rstrip("\n")


def render_claim_list(console: Console, data: dict[str, Any]) -> None:
    claims = data.get("claims") or []
    meta = data.get("meta") or {}

    table = _table("ID", "Claim", "Type", "User", "Date", "Score")
    for claim in claims:
        _row(
            table,
            short(claim.get("id")),
            truncate(claim.get("claim"), 37),
            claim.get("type", "-"),
            short(claim.get("publicKey")),
            format_date(claim.get("timestamp")),
            score(claim.get("credibilityScore")),
        )
    console.print(table)

    page = meta.get("page", 1)
    console.print(
        f"[cyan]Page {page} of {meta.get('totalPages', 1)} "
        f"({meta.get('total', len(claims))} total claims)[/cyan]"
    )
    if meta.get("hasNext") or meta.get("hasPrev"):
        limit = meta.get("limit", len(claims))
        console.print("\n[yellow]Navigation:[/yellow]")
        if meta.get("hasPrev"):
            console.print(
                f"Previous page: otrust-cli claim:list --page {page - 1} --limit {limit}"
            )
        if meta.get("hasNext"):
            console.print(
                f"Next page: otrust-cli claim:list --page {page + 1} --limit {limit}"
            )


def render_search(console: Console, data: dict[str, Any]) -> None:
    results = data.get("results") or []
    if not data.get("count", len(results)):
        console.print("[yellow]No results found[/yellow]")
        return

    table = _table("ID", "Claim", "Subject - Predicate - Object", "Score")
    for result in results:
        semantic = result.get("semantic") or {}
        triple = " - ".join(
            str(semantic.get(k, "")) for k in ("subject", "predicate", "object")
        )
        _row(
            table,
            short(result.get("id")),
            truncate(result.get("claim"), 37),
            truncate(triple, 33),
            score(result.get("credibilityScore")),
        )
    console.print(table)


def render_semantic(
    console: Console, subject: str, predicate: str, data: dict[str, Any]
) -> None:
    console.print(f"[green]Subject: {escape(subject)}[/green]")
    console.print(f"[green]Predicate: {escape(predicate)}[/green]")
    if data.get("hasConsensus"):
        console.print(
            f"\n[cyan]Consensus value:[/cyan] {escape(str(data.get('consensusValue')))}"
        )
    else:
        console.print("\n[yellow]No consensus. Multiple values found:[/yellow]")

    table = _table("Object", "Credibility", "Confirmations", "Disputes", "Claim ID")
    for obj in data.get("objects") or []:
        _row(
            table,
            truncate(obj.get("object"), 27),
            score(obj.get("credibility"), 2),
            obj.get("confirmations", 0),
            obj.get("disputes", 0),
            short(obj.get("claimId"), 17),
        )
    console.print(table)


def render_verification(console: Console, data: dict[str, Any]) -> None:
    if data.get("verified"):
        console.print("[green]Claim is verified on blockchain[/green]")
        console.print("[green]Verification details:[/green]")
        _field(console, "Block Hash", data.get("blockHash"))
        _field(console, "Block Index", data.get("blockIndex"))
        _field(console, "Timestamp", data.get("timestamp"))
        _field(console, "Hash Match", yes_no(data.get("hashMatch")))
        _field(console, "Blockchain Valid", yes_no(data.get("blockchainValid")))
    else:
        console.print("[yellow]Claim is not verified on blockchain[/yellow]")
        console.print(f"[yellow]Message:[/yellow] {escape(str(data.get('message', '-')))}")


def render_user(console: Console, user: dict[str, Any]) -> None:
    _heading(console, "User Details:")
    _field(console, "Public Key", user.get("publicKey", "-"))
    _field(console, "Display Name", user.get("displayName") or "-")
    _field(console, "Score", user.get("score", "-"))
    _field(console, "Created", format_time(user.get("created_at")))
    _field(console, "Last Active", format_time(user.get("lastActive")))

    stats = user.get("stats") or {}
    _heading(console, "Activity Stats:")
    _field(console, "Claims Created", stats.get("claimsCount", 0))
    _field(console, "Claims Confirmed by Others", stats.get("confirmedByOthers", 0))
    _field(console, "Claims Disputed by Others", stats.get("disputedByOthers", 0))

    recent = user.get("recentClaims") or []
    if recent:
        _heading(console, "Recent Claims:")
        table = _table("ID", "Claim", "Date", "Score")
        for claim in recent:
            _row(
                table,
                short(claim.get("id")),
                truncate(claim.get("claim"), 47),
                format_date(claim.get("timestamp")),
                score(claim.get("credibilityScore")),
            )
        console.print(table)


def render_blockchain_stats(console: Console, stats: dict[str, Any]) -> None:
    _heading(console, "Blockchain Status:")
    _field(console, "Blocks", stats.get("blocks", 0))
    _field(console, "Total Transactions", stats.get("totalTransactions", 0))
    _field(console, "Pending Transactions", stats.get("pendingTransactions", 0))
    _field(console, "Difficulty", stats.get("difficulty", "-"))
    _field(console, "Chain Valid", yes_no(stats.get("isValid")))

    latest = stats.get("latestBlock") or {}
    if latest:
        _heading(console, "Latest Block:")
        _field(console, "Index", latest.get("index"))
        _field(console, "Hash", latest.get("hash"))
        _field(console, "Transactions", latest.get("transactions"))
        _field(console, "Timestamp", latest.get("timestamp"))


def render_system_stats(console: Console, data: dict[str, Any]) -> None:
    stats = data.get("stats") or {}
    _heading(console, "System Stats:")
    _field(console, "Total Claims", stats.get("claims", 0))
    _field(console, "Total Users", stats.get("users", 0))
    _field(console, "Blockchain Verified Claims", stats.get("blockchainVerifiedClaims", 0))
    _field(console, "Total Proofs", stats.get("proofs", 0))
    _field(console, "Conflicting Claims", stats.get("conflicts", 0))

    chain = data.get("blockchain") or {}
    _heading(console, "Blockchain Stats:")
    _field(console, "Blocks", chain.get("blocks", 0))
    _field(console, "Transactions", chain.get("transactions", 0))
    _field(console, "Pending Transactions", chain.get("pendingTransactions", 0))

    _heading(console, "Top Claims by Credibility:")
    claims_table = _table("ID", "Claim", "Score", "User")
    for claim in data.get("topClaims") or []:
        _row(
            claims_table,
            short(claim.get("id")),
            truncate(claim.get("claim"), 47),
            score(claim.get("credibilityScore")),
            short(claim.get("publicKey")),
        )
    console.print(claims_table)

    _heading(console, "Top Users by Reputation:")
    users_table = _table("Public Key", "Display Name", "Score")
    for user in data.get("topUsers") or []:
        _row(
            users_table,
            short(user.get("publicKey"), 17),
            user.get("displayName") or "-",
            score(user.get("score")),
        )
    console.print(users_table)


def render_health(console: Console, health: dict[str, Any]) -> bool:
    """Print health details; returns whether the server reports ok."""
    if health.get("status") != "ok":
        console.print("[yellow]Server is reporting issues[/yellow]")
        console.print(f"[yellow]Status:[/yellow] {escape(str(health.get('status')))}")
        return False

    chain = health.get("blockchain") or {}
    console.print("[green]Server is healthy[/green]")
    _heading(console, "Health Information:")
    _field(console, "Version", health.get("version", "-"))
    _field(console, "Database", health.get("db", "-"))
    _field(console, "Blockchain Blocks", chain.get("blocks", "-"))
    _field(console, "Blockchain Valid", yes_no(chain.get("isValid")))
    _field(console, "Uptime", format_uptime(health.get("uptime")))
    _field(console, "Environment", health.get("environment", "-"))
    return True

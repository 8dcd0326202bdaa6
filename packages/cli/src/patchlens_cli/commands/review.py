"""review command: run AI review on a pull request."""

from __future__ import annotations

import click
from rich.console import Console

from patchlens_core.gh.pull_request import get_pull_requests, get_repo
from patchlens_core.providers.registry import PROVIDERS, get_provider, resolve_api_key
from patchlens_core.reviewer import run_review

console = Console()


@click.command("review")
@click.option("--repo", required=True, help="GitHub repository in owner/name format.")
@click.option(
    "--pr",
    "pr_number",
    type=int,
    default=None,
    help="Pull request number. Omit to list open PRs interactively.",
)
@click.option(
    "--provider",
    type=click.Choice(sorted(PROVIDERS)),
    default=None,
    help="AI provider. Overrides config file.",
)
@click.option("--model", default=None, help="Model name. Defaults to the provider's default model.")
@click.option("--persona", default=None, help="Reviewer persona, e.g. security-expert.")
@click.option(
    "--line-target",
    type=click.Choice(["original", "modified"]),
    default=None,
    help="Which side of the diff patch comments are anchored to.",
)
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompts.")
@click.option(
    "--shadow",
    "-s",
    is_flag=True,
    help="Dry-run mode: print review comments without posting to GitHub.",
)
@click.pass_context
def review_cmd(
    ctx,
    repo: str,
    pr_number: int | None,
    provider: str | None,
    model: str | None,
    persona: str | None,
    line_target: str | None,
    yes: bool,
    shadow: bool,
):
    """Review a pull request and post line-anchored comments.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub token (or use the gh CLI)
      <PROVIDER>_API_KEY   Key for the chosen provider, e.g. OPENAI_API_KEY
    """
    from patchlens_core.config import load_config
    from patchlens_cli.auth import resolve_github_token

    config_path = ctx.obj.get("config_path", ".patchlens.yml") if ctx.obj else ".patchlens.yml"
    config = load_config(
        config_path,
        cli_overrides={"provider": provider, "model": model, "persona": persona, "line_target": line_target},
    )

    token = resolve_github_token()
    if not token:
        raise click.UsageError(
            "No GitHub token found. Set GITHUB_TOKEN or run `gh auth login` first.\n"
            "Create a token at https://github.com/settings/tokens"
        )
    config["github_token"] = token

    try:
        provider_config = get_provider(config["provider"])
    except ValueError as e:
        raise click.UsageError(str(e))
    if not resolve_api_key(provider_config.name):
        raise click.UsageError(f"{provider_config.api_key_env} environment variable is not set.")

    this_repo = get_repo(repo, token=token)

    if pr_number is None:
        prs = list(get_pull_requests(this_repo))
        if not prs:
            console.print("[yellow]No open pull requests found.[/yellow]")
            return
        console.print("\nOpen pull requests:")
        for pr in prs:
            console.print(f"  [bold]#{pr.number}[/bold]  {pr.title}")
        pr_number = click.prompt("\nEnter the pull request number", type=int)

    try:
        run_review(
            repo=repo,
            pr_number=pr_number,
            config=config,
            auto_confirm=yes,
            shadow=shadow,
            repo_obj=this_repo,
        )
    except ValueError as e:
        raise click.ClickException(str(e))

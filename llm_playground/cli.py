"""Command-line interface for the prompt playground."""

import asyncio
import json
from typing import Annotated

import typer

from .config.loader import load_config, load_config_file
from .llm import CompletionParams, PromptDispatcher, default_registry

app = typer.Typer(
    name="llm-playground",
    help="Run templated prompts against OpenAI, Anthropic and OpenRouter models.",
    add_completion=False,
)


def parse_variables(pairs: list[str] | None) -> dict[str, str] | None:
    """Parse name=value pairs from --var options."""
    if not pairs:
        return None

    variables = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep:
            typer.echo(f"Error: Invalid variable '{pair}'. Use name=value", err=True)
            raise typer.Exit(1)
        variables[name] = value
    return variables


@app.command()
def run(
    model: Annotated[str, typer.Argument(help="Model identifier, e.g. gpt-4o")],
    prompt: Annotated[str, typer.Argument(help="Prompt text, may contain {{variables}}")],
    variables: Annotated[
        list[str],
        typer.Option("--var", "-v", help="Template variable as name=value (repeatable)"),
    ] = None,
    system: Annotated[
        str,
        typer.Option("--system", help="Optional system message"),
    ] = None,
    temperature: Annotated[
        float,
        typer.Option("--temperature", "-t", help="Sampling temperature"),
    ] = None,
    max_tokens: Annotated[
        int,
        typer.Option("--max-tokens", help="Maximum tokens to generate"),
    ] = None,
    seed: Annotated[
        int,
        typer.Option("--seed", help="Seed for reproducible sampling"),
    ] = None,
    stream: Annotated[
        bool,
        typer.Option("--stream", help="Print tokens as they arrive"),
    ] = False,
    profile: Annotated[
        str,
        typer.Option("--profile", "-p", help="Configuration profile"),
    ] = None,
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: text or json"),
    ] = "text",
):
    """
    Run a prompt against a model.

    Examples:

        # Plain prompt
        llm-playground run gpt-4o "Explain recursion in one sentence"

        # Templated prompt
        llm-playground run claude-3-haiku-20240307 "Hello {{name}}" --var name=Ada

        # OpenRouter model, streamed
        llm-playground run mistralai/mistral-7b-instruct "Tell me a joke" --stream
    """
    if output_format not in ("text", "json"):
        typer.echo("Error: Format must be one of: text, json", err=True)
        raise typer.Exit(1)

    content: str | list[dict[str, str]] = prompt
    if system:
        content = [
            {"role": "system", "content": system},
            {"role": "user", "content": prompt},
        ]

    extra = CompletionParams(temperature=temperature, max_tokens=max_tokens, seed=seed)

    asyncio.run(_run_async(
        model=model,
        content=content,
        extra=extra,
        variables=parse_variables(variables),
        stream=stream,
        profile=profile,
        output_format=output_format,
    ))


async def _run_async(
    model: str,
    content: str | list[dict[str, str]],
    extra: CompletionParams,
    variables: dict[str, str] | None,
    stream: bool,
    profile: str | None,
    output_format: str,
):
    """Async implementation of run."""
    config = load_config(profile=profile)

    async with PromptDispatcher(config) as dispatcher:
        result = await dispatcher.run(content, extra, variables, model, stream=stream)

        if stream:
            async for chunk in result:
                if chunk.choices and chunk.choices[0].delta.content:
                    typer.echo(chunk.choices[0].delta.content, nl=False)
            typer.echo()
            return

    if output_format == "json":
        typer.echo(result.model_dump_json(indent=2, exclude_none=True))
        return

    message = result.choices[0].message if result.choices else None
    typer.echo(message.content if message and message.content else "")
    if message and message.tool_calls:
        for call in message.tool_calls:
            typer.echo(f"[tool call] {call.function.name}({call.function.arguments})")
    if result.usage:
        typer.echo(
            f"\nTokens: prompt={result.usage.prompt_tokens} "
            f"completion={result.usage.completion_tokens}",
            err=True,
        )


@app.command()
def models(
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: text or json"),
    ] = "text",
):
    """List catalogued models and the provider each is routed to."""
    registry = default_registry()

    if output_format == "json":
        typer.echo(json.dumps([m.model_dump() for m in registry.models], indent=2))
        return

    typer.echo("Available models:\n")
    for descriptor in registry.models:
        kind = registry.resolve_provider(descriptor.id)
        typer.echo(f"  {descriptor.id}")
        typer.echo(f"    Name: {descriptor.name or 'N/A'} | Provider: {kind.value}")


@app.command()
def profiles():
    """List available configuration profiles."""
    config_file = load_config_file()

    typer.echo("Available profiles:\n")
    for name, profile in config_file.profiles.items():
        configured = [
            provider
            for provider in ("openai", "openrouter", "anthropic")
            if getattr(profile, provider).api_key
        ]

        typer.echo(f"  {name}")
        typer.echo(f"    Credentials: {', '.join(configured) or 'none'}")
        typer.echo(f"    Retries: {profile.max_retries} | Timeout: {profile.timeout or 'SDK default'}")
        typer.echo()


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()

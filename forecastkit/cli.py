"""Command line interface for forecastkit"""

import asyncio
import logging
from typing import Optional

import click
from pydantic import ValidationError

from forecastkit.config import Settings
from forecastkit.errors import NetworkError
from forecastkit.models import WeatherRecord
from forecastkit.providers import ProviderType
from forecastkit.service import WeatherService
from forecastkit.transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration"""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )
    logging.getLogger().setLevel(level)


def _die(message: str, verbose: bool = False, exc: Optional[Exception] = None) -> None:
    """Exit with a user-friendly error message"""
    if exc is not None:
        logger.error(message, exc_info=verbose)
    else:
        logger.error(message)
    raise click.ClickException(message)


def _format_record(record: WeatherRecord) -> str:
    return "\n".join(
        [
            f"{record.location} ({record.provider})",
            f"  Conditions:  {record.description}",
            f"  Temperature: {record.temperature_text} (feels like {record.feels_like_text})",
            f"  Humidity:    {record.humidity_text}",
            f"  Wind:        {record.wind_speed_text}",
        ]
    )


async def _fetch(
    settings: Settings,
    transport: Optional[Transport],
    location: str,
    provider: ProviderType,
) -> WeatherRecord:
    if transport is not None:
        service = WeatherService.from_settings(settings, transport)
        return await service.fetch_weather(location, provider)
    async with HttpxTransport(timeout=settings.http_timeout_s) as owned:
        service = WeatherService.from_settings(settings, owned)
        return await service.fetch_weather(location, provider)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.pass_context
def cli(ctx, verbose: bool):
    """forecastkit - current weather from Open-Meteo or WeatherAPI.com"""
    ctx.ensure_object(dict)
    setup_logging(verbose)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("location", type=str)
@click.option(
    "--provider",
    type=click.Choice([p.value for p in ProviderType], case_sensitive=False),
    default=ProviderType.OPEN_METEO.value,
    show_default=True,
    help="Weather provider to query.",
)
@click.option("--json", "as_json", is_flag=True, help="Print the record as JSON")
@click.pass_context
def current(ctx, location: str, provider: str, as_json: bool):
    """Show current conditions for LOCATION."""
    verbose = ctx.obj.get("verbose", False)
    try:
        settings = ctx.obj.get("settings") or Settings()
    except ValidationError as e:
        _die(f"Invalid configuration: {e}", verbose=verbose, exc=e)

    try:
        record = asyncio.run(
            _fetch(settings, ctx.obj.get("transport"), location, ProviderType(provider.lower()))
        )
    except NetworkError as e:
        _die(e.description, verbose=verbose, exc=e)

    if as_json:
        click.echo(record.model_dump_json(by_alias=True))
    else:
        click.echo(_format_record(record))


@cli.command()
@click.pass_context
def providers(ctx):
    """List the providers usable with the current configuration."""
    settings = ctx.obj.get("settings") or Settings()
    for provider in ProviderType:
        configured = provider is not ProviderType.WEATHER_API or bool(settings.weather_api_key)
        status = "ready" if configured else "missing FORECASTKIT_WEATHER_API_KEY"
        click.echo(f"{provider.value:<12} {provider.display_name:<16} {status}")


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == "__main__":
    main()

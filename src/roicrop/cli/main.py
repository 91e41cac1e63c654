"""roicrop CLI - crop regions of interest at source resolution.

Command-line interface for cropping display-space regions from an image and
for replaying recorded pointer-event sessions through the selection engine.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from roicrop import __version__
from roicrop.config import Settings, settings
from roicrop.utils.logging import configure_logging, get_logger

if TYPE_CHECKING:
    from roicrop.cli.runners import CropRunResult

app = typer.Typer(
    name="roicrop",
    help="roicrop: select regions over a displayed image and crop the source",
    add_completion=False,
)


# =============================================================================
# Commands
# =============================================================================


@app.command()
def version(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show version information."""
    if json_output:
        typer.echo(json.dumps({"version": __version__}))
    else:
        typer.echo(f"roicrop {__version__}")


@app.command()
def crop(  # noqa: PLR0913
    image_path: Annotated[
        Path,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="Path to the source image (.png, .jpg, .tiff, ...)",
        ),
    ],
    region: Annotated[
        list[str],
        typer.Option(
            "--region",
            "-r",
            help="Display-space rectangle x,y,width,height (repeatable)",
        ),
    ],
    out_dir: Annotated[
        Path, typer.Option("--out-dir", "-o", help="Directory for crop files")
    ] = Path("crops"),
    display_width: Annotated[
        int | None,
        typer.Option("--display-width", help="Width the image is displayed at"),
    ] = None,
    mask_preview: Annotated[
        Path | None,
        typer.Option("--mask-preview", help="Also save the dimmed display preview"),
    ] = None,
    max_crop_dimension: Annotated[
        int | None,
        typer.Option(
            "--max-crop-dimension",
            help=(
                "Largest crop side in source pixels (default 10000, or the "
                "MAX_CROP_DIMENSION setting). Larger regions are skipped "
                "and counted as rejected; 0 disables the limit"
            ),
        ),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity (-v, -vv)"
        ),
    ] = 0,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Crop display-space rectangles from an image at source resolution.

    Regions whose crop would exceed --max-crop-dimension pixels on a side
    are skipped with a warning.
    """
    from roicrop.cli.runners import parse_region, run_crop  # noqa: PLC0415

    _configure_logging(verbose)
    logger = get_logger(__name__)

    try:
        rects = [parse_region(value) for value in region]
        result = run_crop(
            image_path=image_path,
            regions=rects,
            out_dir=out_dir,
            config=_settings_for(display_width, max_crop_dimension),
            mask_preview=mask_preview,
        )
    except Exception as e:
        logger.exception("Crop failed")
        _echo_error(e, json_output)
        raise typer.Exit(1) from None

    _echo_result(result, json_output)
    raise typer.Exit(0 if result.saved else 1)


@app.command()
def replay(  # noqa: PLR0913
    image_path: Annotated[
        Path,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="Path to the source image",
        ),
    ],
    events_path: Annotated[
        Path,
        typer.Argument(
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            help="JSON array of recorded pointer events",
        ),
    ],
    out_dir: Annotated[
        Path, typer.Option("--out-dir", "-o", help="Directory for crop files")
    ] = Path("crops"),
    display_width: Annotated[
        int | None,
        typer.Option("--display-width", help="Width the image is displayed at"),
    ] = None,
    mask_preview: Annotated[
        Path | None,
        typer.Option("--mask-preview", help="Also save the dimmed display preview"),
    ] = None,
    max_crop_dimension: Annotated[
        int | None,
        typer.Option(
            "--max-crop-dimension",
            help=(
                "Largest crop side in source pixels (default 10000, or the "
                "MAX_CROP_DIMENSION setting). Larger regions are skipped "
                "and counted as rejected; 0 disables the limit"
            ),
        ),
    ] = None,
    verbose: Annotated[
        int, typer.Option("--verbose", "-v", count=True, help="Increase verbosity")
    ] = 0,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Replay recorded pointer events and write the resulting crops."""
    from roicrop.cli.runners import run_replay  # noqa: PLC0415

    _configure_logging(verbose)
    logger = get_logger(__name__)

    try:
        result = run_replay(
            image_path=image_path,
            events_path=events_path,
            out_dir=out_dir,
            config=_settings_for(display_width, max_crop_dimension),
            mask_preview=mask_preview,
        )
    except Exception as e:
        logger.exception("Replay failed")
        _echo_error(e, json_output)
        raise typer.Exit(1) from None

    _echo_result(result, json_output)
    raise typer.Exit(0)


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """roicrop: select regions over a displayed image and crop the source."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def _configure_logging(verbose: int) -> None:
    """Configure logging based on verbosity level."""
    if verbose == 0:
        level = "WARNING"
    elif verbose == 1:
        level = "INFO"
    else:  # verbose >= 2
        level = "DEBUG"

    configure_logging(level=level)


def _settings_for(
    display_width: int | None, max_crop_dimension: int | None = None
) -> Settings:
    overrides: dict[str, int] = {}
    if display_width is not None:
        overrides["DISPLAY_WIDTH"] = display_width
    if max_crop_dimension is not None:
        overrides["MAX_CROP_DIMENSION"] = max_crop_dimension
    if not overrides:
        return settings
    return settings.model_copy(update=overrides)


def _echo_error(error: Exception, json_output: bool) -> None:
    if json_output:
        typer.echo(json.dumps({"error": str(error)}))
    else:
        typer.echo(f"Error: {error}", err=True)


def _echo_result(result: CropRunResult, json_output: bool) -> None:
    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return
    for saved in result.saved:
        typer.echo(f"#{saved.ordinal} {saved.region_id} -> {saved.path}")
    if result.rejected:
        typer.echo(f"Rejected (no crop written): {result.rejected}")
    if result.mask_preview is not None:
        typer.echo(f"Mask preview saved to {result.mask_preview}")


if __name__ == "__main__":  # pragma: no cover
    app()

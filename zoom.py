import logging
import sys
from argparse import ArgumentParser
from dataclasses import dataclass
from pathlib import Path

from mandelview import (
    ClickAction,
    ConfigurationError,
    RenderError,
    RenderOrchestrator,
    RenderSettings,
    Viewport,
)
from mandelview.persistence import DEFAULT_FRAME_PATH, PngFrameStore
from mandelview.renderer import IMAGE_HEIGHT, IMAGE_WIDTH, MAX_ITERATIONS
from mandelview.viewport import DEFAULT_CENTER, DEFAULT_EXTENT, ZOOM_FACTOR

logger = logging.getLogger("mandelview.cli")


@dataclass
class RunConfig:
    settings: RenderSettings
    viewport: Viewport
    output: Path
    clicks: tuple[tuple[int, int], ...]
    interactive: bool


def build_parser():
    parser = ArgumentParser(description='Render the Mandelbrot set and zoom in by clicking.')

    parser.add_argument('--width', type=int,
                        dest='width', help='image width in pixels',
                        metavar='WIDTH', default=IMAGE_WIDTH)

    parser.add_argument('--height', type=int,
                        dest='height', help='image height in pixels',
                        metavar='HEIGHT', default=IMAGE_HEIGHT)

    parser.add_argument('--max-iterations', type=int,
                        dest='max_iterations', help='iteration bound; points that reach it are drawn black',
                        metavar='MAX_ITERATIONS', default=MAX_ITERATIONS)

    parser.add_argument('--zoom-factor', type=float,
                        dest='zoom_factor', help='how much a primary click narrows the view',
                        metavar='ZOOM_FACTOR', default=ZOOM_FACTOR)

    parser.add_argument('--center-x', type=float,
                        dest='center_x', help='real part of the initial view center',
                        metavar='CENTER_X', default=DEFAULT_CENTER[0])

    parser.add_argument('--center-y', type=float,
                        dest='center_y', help='imaginary part of the initial view center',
                        metavar='CENTER_Y', default=DEFAULT_CENTER[1])

    parser.add_argument('--extent', type=float,
                        dest='extent', help='span of the complex plane covered by the image',
                        metavar='EXTENT', default=DEFAULT_EXTENT)

    parser.add_argument('--workers', type=int,
                        dest='workers', help='number of row producer threads (default: CPU count)',
                        metavar='WORKERS', default=None)

    parser.add_argument('--aggregator-shards', type=int,
                        dest='aggregator_shards', help='number of framebuffer writer threads, each owning its own rows',
                        metavar='SHARDS', default=1)

    parser.add_argument('--channel-capacity', type=int,
                        dest='channel_capacity', help='pixel results buffered per writer before producers block',
                        metavar='CAPACITY', default=1024)

    parser.add_argument('--output', type=str,
                        dest='output', help='PNG file that receives each finished frame',
                        metavar='OUTPUT', default=str(DEFAULT_FRAME_PATH))

    parser.add_argument('--click', type=int, nargs=2, action='append',
                        dest='clicks', metavar=('X', 'Y'),
                        help='zoom in at pixel X Y after the first frame. May be repeated.')

    parser.add_argument('--interactive', action='store_true',
                        help='open a window; left click zooms in, right click resets the view')

    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Enable debug logging.')

    return parser


def resolve_run_config(opt, parser: ArgumentParser) -> RunConfig:
    settings_kwargs = dict(
        width=opt.width,
        height=opt.height,
        max_iterations=opt.max_iterations,
        zoom_factor=opt.zoom_factor,
        aggregator_shards=opt.aggregator_shards,
        channel_capacity=opt.channel_capacity,
    )
    if opt.workers is not None:
        settings_kwargs["workers"] = opt.workers
    settings = RenderSettings(**settings_kwargs)

    try:
        settings.validate()
        viewport = Viewport(center_x=opt.center_x, center_y=opt.center_y, extent=opt.extent)
    except ConfigurationError as exc:
        parser.error(str(exc))

    clicks = tuple((x, y) for x, y in (opt.clicks or []))
    for x, y in clicks:
        if not (0 <= x < settings.width and 0 <= y < settings.height):
            parser.error(f"--click {x} {y} lies outside the {settings.width}x{settings.height} image.")

    output = Path(opt.output).expanduser()
    if output.exists() and output.is_dir():
        parser.error("--output must point to a file, not a directory.")
    if output.suffix.lower() != ".png":
        output = output.with_suffix(".png")

    return RunConfig(
        settings=settings,
        viewport=viewport,
        output=output.resolve(),
        clicks=clicks,
        interactive=bool(opt.interactive),
    )


def main(argv=None):
    parser = build_parser()
    opt = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if opt.verbose else logging.INFO,
        format="%(asctime)s %(threadName)s %(levelname)s %(name)s: %(message)s",
    )

    config = resolve_run_config(opt, parser)
    store = PngFrameStore(config.output)
    orchestrator = RenderOrchestrator(config.settings, persist=store.persist, viewport=config.viewport)

    try:
        orchestrator.render()
        for x, y in config.clicks:
            orchestrator.handle_click(x, y, ClickAction.ZOOM_IN)
    except RenderError as exc:
        logger.error("Render failed: %s", exc)
        return 1

    viewport = orchestrator.viewport
    print(f"center=({viewport.center_x:.17g}, {viewport.center_y:.17g}) extent={viewport.extent:.17g} -> {config.output}")

    if config.interactive:
        from mandelview.display import FrameViewer

        viewer = FrameViewer(orchestrator, store)
        viewer.display()
        viewer.show()

    return 0


if __name__ == '__main__':
    sys.exit(main())

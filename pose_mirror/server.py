import argparse
import asyncio
import logging
import sys

from . import config
from .camera import CameraSource
from .coordinator import RenderCoordinator
from .detectors import DETECTOR_NAMES, get_detector
from .display import Display
from .errors import AcquisitionError
from .mode import ModeController
from .pipeline import MirrorPipeline, load_detector
from .pose_synth import PoseSmoother
from .render import AvatarRenderer, MonitorOverlayRenderer
from .scheduler import TickScheduler
from .tracker import SubjectTracker

logger = logging.getLogger(__name__)


def smoothing_alpha(value):
    alpha = float(value)
    if not 0.0 < alpha <= 1.0:
        raise argparse.ArgumentTypeError(f"smoothing alpha must be in (0, 1], got {value}")
    return alpha


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(description='Pose Mirror: webcam avatar driven by object detection')
    parser.add_argument('--detector',
                        choices=DETECTOR_NAMES,
                        default=config.DETECTOR,
                        help=f'Type of detector to use (default: {config.DETECTOR})')
    parser.add_argument('--camera', type=int, default=config.CAM_INDEX,
                        help='Camera index')
    parser.add_argument('--width', type=int, default=config.CAPTURE_WIDTH)
    parser.add_argument('--height', type=int, default=config.CAPTURE_HEIGHT)
    parser.add_argument('--interval', type=float, default=config.TICK_INTERVAL_S,
                        help='Seconds between detection ticks')
    parser.add_argument('--headless', action='store_true', default=not config.ENABLE_DISPLAY,
                        help='Do not open any window')
    parser.add_argument('--allow-overlap', action='store_true', default=not config.SINGLE_FLIGHT,
                        help='Start ticks even while a detection is still pending')
    parser.add_argument('--reset-baseline', action='store_true', default=config.RESET_BASELINE_ON_LOSS,
                        help='Forget the last subject position when the subject is lost')
    parser.add_argument('--smoothing', type=smoothing_alpha, default=config.POSE_SMOOTHING_ALPHA,
                        metavar='ALPHA', help='Low-pass the pose with this EMA alpha')
    parser.add_argument('--log-level', default=config.LOG_LEVEL)
    return parser.parse_args(argv)


def build_coordinator(args) -> RenderCoordinator:
    smoother = PoseSmoother(alpha=args.smoothing) if args.smoothing else None
    return RenderCoordinator(
        mode_controller=ModeController(),
        tracker=SubjectTracker(reset_baseline_on_loss=args.reset_baseline),
        overlay_renderer=MonitorOverlayRenderer(),
        avatar_renderer=AvatarRenderer(config.AVATAR_WIDTH, config.AVATAR_HEIGHT),
        smoother=smoother,
    )


async def run(args):
    detector = get_detector(args.detector)
    if detector is None:
        raise ValueError(f"Unknown detector '{args.detector}'")

    logger.info(f"[Server] Using detector: {detector.name()}")

    display = None
    try:
        # Camera first: failing to acquire it is fatal
        with CameraSource(args.camera, args.width, args.height) as camera:
            detector, model_ready = await load_detector(detector)

            pipeline = MirrorPipeline(camera, detector, build_coordinator(args), model_ready)
            scheduler = TickScheduler(pipeline.tick, args.interval, single_flight=not args.allow_overlap)
            display = Display(pipeline, enable_display=not args.headless)

            scheduler.start()
            try:
                await display.run()
            finally:
                await scheduler.stop()
                detector.close()
    finally:
        if display is not None:
            display.cleanup()


def main(argv=None) -> int:
    args = parse_arguments(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("[Server] Shutting down...")
    except AcquisitionError as e:
        logger.error(f"[Server] {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

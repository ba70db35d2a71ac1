"""
Сборка диптиха из командной строки, без окна.

Примеры::

    diptych-compose left.jpg right.jpg -o out/diptych.png
    diptych-compose left.jpg right.jpg -o out.jpg --aspect 16:9 \\
                    --frame-color white --frame-thickness 24 \\
                    --scale-a 0.8 --offset-a -120 0
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from diptych.config import load_settings
from diptych.main import setup_logging
from diptych.models.diptych_model import DiptychRequest, PanelTransform, parse_aspect_ratio
from diptych.models.errors import DiptychError
from diptych.services.diptych_composer import DiptychComposer
from diptych.services.image_service import ImageService
from diptych.services.panel_renderer import RESAMPLE_FILTERS, PanelRenderer

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="diptych-compose",
        description="Собрать два изображения в один диптих",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    # ── Required ─────────────────────────────────────────────────────
    parser.add_argument("image_a", help="Левое изображение")
    parser.add_argument("image_b", help="Правое изображение")
    parser.add_argument("-o", "--output", required=True, help="Путь для сохранения (PNG, JPEG, WebP…)")

    # ── Canvas / frame ───────────────────────────────────────────────
    parser.add_argument("--aspect", type=str, default=None, help='Соотношение сторон, например "4:3" или 1.5')
    parser.add_argument("--height", type=float, default=None, help="Высота итогового изображения, px")
    frame = parser.add_mutually_exclusive_group()
    frame.add_argument("--frame-color", type=str, default=None, help="Цвет рамки (имя или #RRGGBB)")
    frame.add_argument("--no-frame", action="store_true", help="Без рамки, даже если она задана в настройках")
    parser.add_argument("--frame-thickness", type=float, default=None, help="Толщина рамки, px")
    parser.add_argument("--resample", choices=sorted(RESAMPLE_FILTERS), default=None, help="Фильтр передискретизации")

    # ── Per-panel transforms ─────────────────────────────────────────
    for side in ("a", "b"):
        parser.add_argument(f"--scale-{side}", type=float, default=1.0, help=f"Масштаб панели {side.upper()} (0.5–3.0)")
        parser.add_argument(
            f"--offset-{side}", type=float, nargs=2, default=(0.0, 0.0), metavar=("X", "Y"),
            help=f"Сдвиг изображения в панели {side.upper()}, px",
        )

    parser.add_argument("-c", "--config", type=str, default=None, help="YAML с настройками по умолчанию")
    parser.add_argument("-v", "--verbose", action="store_true", help="Подробное логирование (DEBUG)")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = load_settings(args.config).with_overrides(
            aspect_ratio=args.aspect,
            output_height=args.height,
            frame_color=args.frame_color,
            frame_thickness=args.frame_thickness,
            resample=args.resample,
        )
    except DiptychError as exc:
        logger.error("Invalid settings: %s", exc)
        return 1

    frame_color = None if args.no_frame else settings.frame_color
    service = ImageService()
    try:
        image_a = service.load_image(args.image_a)
        image_b = service.load_image(args.image_b)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("%s", exc)
        return 1

    request = DiptychRequest(
        image_a=image_a,
        image_b=image_b,
        transform_a=PanelTransform(scale=args.scale_a, offset=tuple(args.offset_a)),
        transform_b=PanelTransform(scale=args.scale_b, offset=tuple(args.offset_b)),
        aspect_ratio=parse_aspect_ratio(settings.aspect_ratio),
        frame_color=frame_color,
        frame_thickness=float(settings.frame_thickness),
        output_height=float(settings.output_height),
    )
    composer = DiptychComposer(PanelRenderer(resample=settings.resample))
    try:
        result = composer.compose(request)
    except DiptychError as exc:
        logger.error("Compose failed: %s", exc)
        return 1

    if result.frame_dropped:
        logger.warning("Frame did not fit and was omitted")

    background = frame_color if frame_color is not None else "white"
    try:
        path = service.save_image(result.image, args.output, background=background)
    except (OSError, ValueError) as exc:
        logger.error("Could not save %s: %s", args.output, exc)
        return 1

    w, h = result.size
    logger.info("✅ Diptych %d×%d saved to %s", w, h, path)
    return 0


if __name__ == "__main__":
    sys.exit(main())

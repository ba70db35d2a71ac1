"""Сборка диптиха: геометрия холста, рамка и размещение двух панелей.

Принципы:
- SRP: `compute_layout` считает только геометрию, `DiptychComposer` только собирает холст.
- Чистая функция: одинаковый запрос даёт попиксельно одинаковый результат,
  исходные изображения не изменяются и не сохраняются после вызова.
- Слишком толстая рамка не ошибка: холст собирается без рамки, выставляется `frame_dropped`.
"""
from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

from PIL import Image

from diptych.models.diptych_model import (
    Color,
    DiptychLayout,
    DiptychRequest,
    DiptychResult,
    PanelRect,
    to_rgba,
)
from diptych.models.errors import DiptychError, InvalidDimensionsError, MissingInputError
from diptych.services.panel_renderer import PanelRenderer

logger = logging.getLogger(__name__)


def _is_positive(value: float) -> bool:
    # rejects NaN and inf as well as non-positive values
    return math.isfinite(value) and value > 0


def compute_layout(
    output_height: float,
    aspect_ratio: float,
    frame_thickness: float = 0.0,
    frame_color: Optional[Color] = None,
) -> DiptychLayout:
    """Считает размер холста и прямоугольники панелей.

    Без рамки каждая панель занимает ровно половину холста. С рамкой толщины `t`
    по горизонтали три полосы (левая, между панелями, правая), по вертикали две.
    Если рамка не помещается, используется раскладка без рамки.

    Raises:
        InvalidDimensionsError: если высота или соотношение сторон не положительны.
    """
    if not _is_positive(output_height):
        raise InvalidDimensionsError(f"Высота холста должна быть положительной: {output_height}")
    if not _is_positive(aspect_ratio):
        raise InvalidDimensionsError(f"Соотношение сторон должно быть положительным: {aspect_ratio}")
    total_width = output_height * aspect_ratio
    if not _is_positive(total_width):
        raise InvalidDimensionsError(f"Ширина холста должна быть положительной: {total_width}")
    return _layout(total_width, output_height, frame_thickness, frame_color)


def _layout(total_width: float, output_height: float, frame_thickness: float, frame_color: Optional[Color]) -> DiptychLayout:
    t = max(0.0, frame_thickness) if math.isfinite(frame_thickness) else 0.0
    requested = t > 0 and frame_color is not None

    if requested:
        content_w = (total_width - 3 * t) / 2
        content_h = output_height - 2 * t
        feasible = (
            3 * t < total_width
            and 2 * t < output_height
            and content_w > 0
            and content_h > 0
        )
        if feasible:
            panel_a = PanelRect(t, t, content_w, content_h)
            panel_b = PanelRect(t + content_w + t, t, content_w, content_h)
            width_px, height_px = panel_a.pixel_size
            if width_px > 0 and height_px > 0:
                return DiptychLayout(
                    total_width=total_width,
                    output_height=output_height,
                    thickness=t,
                    framed=True,
                    panel_a=panel_a,
                    panel_b=panel_b,
                )
        logger.warning(
            "Frame thickness %.1f is too large for a %.1fx%.1f canvas, drawing without frame",
            t, total_width, output_height,
        )

    half = total_width / 2
    return DiptychLayout(
        total_width=total_width,
        output_height=output_height,
        thickness=0.0,
        framed=False,
        panel_a=PanelRect(0.0, 0.0, half, output_height),
        panel_b=PanelRect(half, 0.0, half, output_height),
        frame_dropped=requested,
    )


class DiptychComposer:
    """Собирает диптих из двух изображений.

    Parameters:
        renderer: Отрисовщик панелей; один и тот же фильтр применяется к обеим панелям.
    """
    def __init__(self, renderer: Optional[PanelRenderer] = None) -> None:
        self.renderer = renderer or PanelRenderer()

    def compose(self, request: DiptychRequest) -> DiptychResult:
        """Собирает итоговое изображение размера (output_height * aspect_ratio, output_height).

        Проверки выполняются по порядку: высота, соотношение сторон,
        наличие обоих изображений, ширина холста.

        Returns:
            `DiptychResult` с холстом RGBA и использованной геометрией.

        Raises:
            InvalidDimensionsError: некорректные размеры холста или панелей.
            MissingInputError: нет одного из изображений или панель не отрисовалась.
        """
        if not _is_positive(request.output_height):
            raise InvalidDimensionsError(f"Высота холста должна быть положительной: {request.output_height}")
        if not _is_positive(request.aspect_ratio):
            raise InvalidDimensionsError(f"Соотношение сторон должно быть положительным: {request.aspect_ratio}")
        if request.image_a is None or request.image_b is None:
            missing = [name for name, img in (("A", request.image_a), ("B", request.image_b)) if img is None]
            raise MissingInputError(f"Не выбрано изображение для панели: {', '.join(missing)}")

        layout = compute_layout(
            request.output_height,
            request.aspect_ratio,
            request.frame_thickness,
            request.frame_color,
        )
        canvas_w, canvas_h = layout.canvas_size
        rect_a, rect_b = layout.pixel_rects()
        for left, top, right, bottom in (rect_a, rect_b):
            if right <= left or bottom <= top:
                raise InvalidDimensionsError(
                    f"Холст {canvas_w} × {canvas_h} слишком мал для двух панелей"
                )

        logger.debug(
            "Composing %dx%d diptych (framed=%s, t=%.1f): A=%s B=%s",
            canvas_w, canvas_h, layout.framed, layout.thickness, rect_a, rect_b,
        )

        try:
            panel_a = self.renderer.render(request.image_a, request.transform_a, _size(rect_a))
            panel_b = self.renderer.render(request.image_b, request.transform_b, _size(rect_b))
        except DiptychError as exc:
            raise MissingInputError(f"Не удалось отрисовать панель: {exc}") from exc

        background = to_rgba(request.frame_color) if layout.framed else (0, 0, 0, 0)
        canvas = Image.new("RGBA", (canvas_w, canvas_h), background)
        canvas.alpha_composite(panel_a, dest=rect_a[:2])
        canvas.alpha_composite(panel_b, dest=rect_b[:2])

        return DiptychResult(image=canvas, layout=layout)


def _size(rect: Tuple[int, int, int, int]) -> Tuple[int, int]:
    left, top, right, bottom = rect
    return right - left, bottom - top

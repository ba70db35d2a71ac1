"""Отрисовка одного изображения в панель фиксированного размера.

Принципы:
- SRP: только масштаб, сдвиг и обрезка по границам панели.
- Без состояния: экземпляр хранит лишь выбранный фильтр передискретизации,
  поэтому его можно безопасно вызывать из разных потоков.
"""
from __future__ import annotations

import logging
from typing import Optional, Tuple

from PIL import Image

from diptych.models.diptych_model import PanelTransform, SourceImage
from diptych.models.errors import InvalidDimensionsError, NoImageError

logger = logging.getLogger(__name__)

RESAMPLE_FILTERS = {
    "nearest": Image.Resampling.NEAREST,
    "bilinear": Image.Resampling.BILINEAR,
    "bicubic": Image.Resampling.BICUBIC,
}

TRANSPARENT = (0, 0, 0, 0)


class PanelRenderer:
    def __init__(self, resample: str = "bilinear") -> None:
        if resample not in RESAMPLE_FILTERS:
            raise ValueError(
                f"Неизвестный фильтр передискретизации {resample!r}. "
                f"Доступны: {sorted(RESAMPLE_FILTERS)}"
            )
        self.resample = resample
        self._filter = RESAMPLE_FILTERS[resample]

    def render(
        self,
        image: Optional[SourceImage],
        transform: PanelTransform,
        panel_size: Tuple[int, int],
    ) -> Image.Image:
        """Рисует изображение в прозрачную панель размера `panel_size`.

        Левый верхний угол масштабированного изображения ставится в
        `transform.offset`, правый нижний в `offset + (w * scale, h * scale)`.
        Всё, что выходит за панель, обрезается; непокрытая часть панели
        остаётся прозрачной.

        Args:
            image: Исходное изображение (только чтение).
            transform: Масштаб и сдвиг; масштаб дополнительно ограничивается [0.5, 3.0].
            panel_size: (ширина, высота) панели в пикселях; дробная часть отбрасывается, обе не меньше 1.

        Returns:
            Новое изображение RGBA ровно размера `panel_size`.

        Raises:
            NoImageError: если изображение не передано.
            InvalidDimensionsError: если панель уже одного пикселя.
        """
        if image is None:
            raise NoImageError("Нет изображения для панели")
        panel_w, panel_h = int(panel_size[0]), int(panel_size[1])
        if panel_w < 1 or panel_h < 1:
            raise InvalidDimensionsError(
                f"Размер панели должен быть не меньше 1 пикселя: {panel_size[0]} × {panel_size[1]}"
            )

        safe = transform.clamped()
        if safe.scale != transform.scale:
            logger.debug("Clamped panel scale %.3f -> %.3f", transform.scale, safe.scale)

        scale = safe.scale
        ox, oy = safe.offset
        source = image.pil_image if image.pil_image.mode == "RGBA" else image.pil_image.convert("RGBA")

        # inverse mapping: panel pixel (x, y) samples source at ((x - ox) / s, (y - oy) / s)
        inv = 1.0 / scale
        panel = source.transform(
            (panel_w, panel_h),
            Image.Transform.AFFINE,
            (inv, 0.0, -ox * inv, 0.0, inv, -oy * inv),
            resample=self._filter,
            fillcolor=TRANSPARENT,
        )
        logger.debug(
            "Rendered %dx%d source into %dx%d panel (scale=%.3f, offset=(%.1f, %.1f))",
            image.width, image.height, panel_w, panel_h, scale, ox, oy,
        )
        return panel

"""Модели данных диптиха: исходные изображения, трансформации панелей, запрос и результат.

Принципы:
- SRP: только структуры данных и простые чистые операции над ними, без отрисовки.
- Чистый код: неизменяемость (`frozen=True`) для предсказуемости; движок не хранит состояние.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple, Union

from PIL import Image, ImageColor

MIN_SCALE = 0.5
MAX_SCALE = 3.0

Offset = Tuple[float, float]
Color = Union[str, Tuple[int, int, int], Tuple[int, int, int, int]]


def clamp_scale(scale: float) -> float:
    """Ограничивает масштаб диапазоном [MIN_SCALE, MAX_SCALE]."""
    return max(MIN_SCALE, min(MAX_SCALE, float(scale)))


@dataclass(frozen=True)
class SourceImage:
    """Неизменяемое декодированное изображение-источник.

    Fields:
        pil_image: Изображение PIL (движок только читает его).
        width: Ширина, px.
        height: Высота, px.
        mode: Режим PIL, например "RGBA".
        path: Путь к исходному файлу, если изображение загружено с диска.
        size_bytes: Размер файла, если доступен.
    """
    pil_image: Image.Image
    width: int
    height: int
    mode: str
    path: Optional[Path] = None
    size_bytes: Optional[int] = None

    @classmethod
    def from_pil(cls, image: Image.Image, path: Optional[Path] = None, size_bytes: Optional[int] = None) -> "SourceImage":
        """Упаковывает уже декодированное изображение PIL."""
        width, height = image.size
        return cls(
            pil_image=image,
            width=width,
            height=height,
            mode=image.mode,
            path=path,
            size_bytes=size_bytes,
        )


@dataclass(frozen=True)
class PanelTransform:
    """Зафиксированное положение изображения внутри панели.

    Fields:
        scale: Равномерный масштаб изображения, после фиксации лежит в [0.5, 3.0].
        offset: Левый верхний угол масштабированного изображения относительно
            левого верхнего угла панели, в пикселях панели. Не ограничен:
            панель обрезает всё, что выходит за её границы.
    """
    scale: float = 1.0
    offset: Offset = (0.0, 0.0)

    def clamped(self) -> "PanelTransform":
        """Копия с масштабом, ограниченным допустимым диапазоном."""
        return replace(self, scale=clamp_scale(self.scale))

    def translated(self, dx: float, dy: float) -> "PanelTransform":
        ox, oy = self.offset
        return replace(self, offset=(ox + dx, oy + dy))

    def zoomed(self, factor: float) -> "PanelTransform":
        """Умножает масштаб на `factor` и сразу ограничивает результат."""
        return replace(self, scale=clamp_scale(self.scale * factor))

    @staticmethod
    def reset() -> "PanelTransform":
        return PanelTransform()


@dataclass
class TransformInProgress:
    """Трансформация во время жеста: зафиксированная база плюс текущая дельта.

    Живой предпросмотр использует `live()`, по окончании жеста `commit()`
    сворачивает дельту в новую базу и ограничивает масштаб.
    """
    committed: PanelTransform = field(default_factory=PanelTransform)
    drag_offset: Offset = (0.0, 0.0)
    magnification: float = 1.0

    def drag(self, dx: float, dy: float) -> None:
        """Задаёт текущее смещение жеста (накопленное с его начала)."""
        self.drag_offset = (float(dx), float(dy))

    def magnify(self, factor: float) -> None:
        """Задаёт текущее увеличение жеста (накопленное с его начала)."""
        if factor <= 0:
            raise ValueError(f"Коэффициент увеличения должен быть положительным: {factor}")
        self.magnification = float(factor)

    def live(self) -> PanelTransform:
        """База, объединённая с дельтой, без ограничения масштаба."""
        ox, oy = self.committed.offset
        dx, dy = self.drag_offset
        return PanelTransform(
            scale=self.committed.scale * self.magnification,
            offset=(ox + dx, oy + dy),
        )

    def commit(self) -> PanelTransform:
        """Сворачивает дельту в базу и возвращает новую зафиксированную трансформацию."""
        self.committed = self.live().clamped()
        self.drag_offset = (0.0, 0.0)
        self.magnification = 1.0
        return self.committed

    def reset(self) -> PanelTransform:
        self.committed = PanelTransform.reset()
        self.drag_offset = (0.0, 0.0)
        self.magnification = 1.0
        return self.committed

    @property
    def active(self) -> bool:
        return self.drag_offset != (0.0, 0.0) or self.magnification != 1.0


class AspectRatioOption(Enum):
    """Соотношения сторон, доступные в интерфейсе."""
    SQUARE = "1:1"
    STANDARD = "4:3"
    WIDE = "16:9"
    PHOTO = "3:2"

    @property
    def ratio(self) -> float:
        return parse_aspect_ratio(self.value)

    @classmethod
    def labels(cls) -> Tuple[str, ...]:
        return tuple(option.value for option in cls)


def parse_aspect_ratio(value: Union[str, float, int]) -> float:
    """Разбирает соотношение сторон: "16:9", "1.5" или число.

    Raises:
        ValueError: если строку нельзя разобрать или соотношение не положительное.
    """
    if isinstance(value, (int, float)):
        ratio = float(value)
    else:
        text = str(value).strip()
        try:
            if ":" in text:
                w_text, h_text = text.split(":", 1)
                width, height = float(w_text), float(h_text)
                if height == 0:
                    raise ValueError(f"Нулевая высота в соотношении: {text}")
                ratio = width / height
            else:
                ratio = float(text)
        except ValueError as exc:
            raise ValueError(f"Некорректное соотношение сторон: {value!r}") from exc
    if not ratio > 0:
        raise ValueError(f"Соотношение сторон должно быть положительным: {value!r}")
    return ratio


@dataclass(frozen=True)
class DiptychRequest:
    """Входные данные одной операции сборки диптиха.

    Fields:
        image_a / image_b: Левое и правое изображения (None — изображение не выбрано).
        transform_a / transform_b: Положение каждого изображения в своей панели.
        aspect_ratio: Ширина к высоте итогового холста.
        frame_color: Цвет рамки в формате PIL; None — без рамки.
        frame_thickness: Толщина рамки и промежутка, px; 0 — без рамки.
        output_height: Высота холста, px.
    """
    image_a: Optional[SourceImage]
    image_b: Optional[SourceImage]
    transform_a: PanelTransform = field(default_factory=PanelTransform)
    transform_b: PanelTransform = field(default_factory=PanelTransform)
    aspect_ratio: float = 1.0
    frame_color: Optional[Color] = None
    frame_thickness: float = 0.0
    output_height: float = 1200.0


@dataclass(frozen=True)
class PanelRect:
    """Прямоугольник панели на холсте (дробные координаты)."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def to_pixels(self) -> Tuple[int, int, int, int]:
        """Целочисленный прямоугольник (left, top, right, bottom).

        Края округляются вверх от половины, поэтому соседние панели
        с общим краем стыкуются без зазора и наложения.
        """
        return (
            _round_half_up(self.x),
            _round_half_up(self.y),
            _round_half_up(self.right),
            _round_half_up(self.bottom),
        )

    @property
    def pixel_size(self) -> Tuple[int, int]:
        return _round_half_up(self.width), _round_half_up(self.height)


@dataclass(frozen=True)
class DiptychLayout:
    """Геометрия холста и двух панелей.

    Fields:
        total_width / output_height: Размер холста.
        thickness: Применённая толщина рамки (0, если рамки нет).
        framed: Рисуется ли фон-рамка.
        panel_a / panel_b: Прямоугольники левой и правой панели.
        frame_dropped: Рамка была запрошена, но не поместилась.
    """
    total_width: float
    output_height: float
    thickness: float
    framed: bool
    panel_a: PanelRect
    panel_b: PanelRect
    frame_dropped: bool = False

    def pixel_rects(self) -> Tuple[Tuple[int, int, int, int], Tuple[int, int, int, int]]:
        """Целочисленные прямоугольники панелей A и B на холсте.

        Без рамки края округляются, и панели делят холст без зазора.
        С рамкой размер содержимого округляется один раз и общий для обеих
        панелей; округляются только начала, а полосы рамки могут отличаться
        на пиксель.
        """
        if not self.framed:
            return self.panel_a.to_pixels(), self.panel_b.to_pixels()
        canvas_w, canvas_h = self.canvas_size
        width, height = self.panel_a.pixel_size
        rects = []
        for rect in (self.panel_a, self.panel_b):
            left = min(_round_half_up(rect.x), canvas_w - width)
            top = min(_round_half_up(rect.y), canvas_h - height)
            rects.append((left, top, left + width, top + height))
        return rects[0], rects[1]

    @property
    def canvas_size(self) -> Tuple[int, int]:
        return _round_half_up(self.total_width), _round_half_up(self.output_height)


@dataclass(frozen=True)
class DiptychResult:
    """Результат сборки: готовое изображение и использованная геометрия."""
    image: Image.Image
    layout: DiptychLayout

    @property
    def frame_dropped(self) -> bool:
        return self.layout.frame_dropped

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size


def to_rgba(color: Color) -> Tuple[int, int, int, int]:
    """Приводит цвет PIL (имя, HEX, RGB или RGBA) к кортежу RGBA.

    Raises:
        ValueError: если цвет не распознан.
    """
    if isinstance(color, str):
        return ImageColor.getcolor(color, "RGBA")
    if len(color) == 3:
        r, g, b = color
        return int(r), int(g), int(b), 255
    if len(color) == 4:
        r, g, b, a = color
        return int(r), int(g), int(b), int(a)
    raise ValueError(f"Некорректный цвет: {color!r}")


def _round_half_up(value: float) -> int:
    # int(x + 0.5) for non-negative canvas coordinates; avoids banker's rounding
    return int(value + 0.5) if value >= 0 else -int(-value + 0.5)

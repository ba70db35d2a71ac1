"""Контроллер приложения: оркестрация UI, трансформаций панелей и сборки диптиха.

SOLID:
- SRP: класс управляет связями между UI и сервисами (без геометрии и отрисовки).
- DIP: зависит от сервисов как от ролей; движок сборки вызывается как чистая функция.
Clean Code:
- Любое зафиксированное изменение входных данных ведёт к пересборке `_recompose`.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from tkinter import filedialog, TclError
from typing import List, Optional

import customtkinter as ctk
from PIL import Image

from diptych.config import DiptychSettings
from diptych.models.diptych_model import (
    DiptychRequest,
    PanelTransform,
    SourceImage,
    parse_aspect_ratio,
)
from diptych.models.errors import DiptychError
from diptych.services.diptych_composer import DiptychComposer, compute_layout
from diptych.services.image_service import ImageService
from diptych.services.panel_renderer import PanelRenderer
from diptych.ui.panel_editor import PanelEditor
from diptych.ui.preview_bar import PreviewBar
from diptych.ui.sidebar import Sidebar

logger = logging.getLogger(__name__)

IMAGE_FILETYPES = (
    ("Images", "*.png *.jpg *.jpeg *.bmp *.gif *.tiff *.webp"),
    ("All files", "*.*"),
)


@dataclass
class AppController:
    """Связывает элементы UI с прикладной логикой.

    Ответственности:
    - Инициализация и бинд событий (UI -> контроллер).
    - Загрузка изображений через `ImageService`; неудачная загрузка = изображения нет.
    - Хранение зафиксированных трансформаций и пересборка диптиха при их изменении.
    - Сохранение результата.
    """
    editors: List[PanelEditor]
    sidebar: Sidebar
    preview: PreviewBar
    window: ctk.CTk
    settings: DiptychSettings = field(default_factory=DiptychSettings)

    _image_service: ImageService = field(default_factory=ImageService)
    _composer: Optional[DiptychComposer] = None
    _images: List[Optional[SourceImage]] = field(default_factory=lambda: [None, None])
    _transforms: List[PanelTransform] = field(default_factory=lambda: [PanelTransform(), PanelTransform()])
    _aspect_label: str = "1:1"
    _result_image: Optional[Image.Image] = None

    def __post_init__(self) -> None:
        if self._composer is None:
            self._composer = DiptychComposer(PanelRenderer(resample=self.settings.resample))
        self._aspect_label = self.settings.aspect_ratio

    def bind_events(self) -> None:
        """Регистрирует обработчики событий между UI-компонентами.

        Сохраняет слабую связность: компоненты UI ничего не знают друг о друге,
        общаются через контроллер.
        """
        for index, editor in enumerate(self.editors):
            editor.on_transform_commit = lambda t, i=index: self._handle_transform_commit(i, t)

        self.sidebar.on_open_image = self._handle_open_image
        self.sidebar.on_aspect_change = self._handle_aspect_change
        self.sidebar.on_frame_change = self._handle_frame_change
        self.sidebar.on_reset_panels = self._handle_reset_panels
        self.sidebar.on_save = self._handle_save

        # initial sync from settings
        self.sidebar.set_aspect_value(self._aspect_label)
        self.sidebar.set_frame_values(
            enabled=self.settings.frame_color is not None and self.settings.frame_thickness > 0,
            color=self.settings.frame_color,
            thickness=float(self.settings.frame_thickness),
        )
        self._recompose()

    # ---- Handlers ----
    def _handle_open_image(self, index: int) -> None:
        try:
            file_path = filedialog.askopenfilename(title="Выберите изображение", filetypes=IMAGE_FILETYPES)
        except TclError:
            # Silent fail if dialog cannot open
            return

        if not file_path:
            return

        try:
            image = self._image_service.load_image(file_path)
        except (FileNotFoundError, ValueError) as exc:
            logger.warning("Could not load %s: %s", file_path, exc)
            self.sidebar.set_status(str(exc))
            image = None

        # a new image always starts from the default transform
        self._images[index] = image
        self._transforms[index] = PanelTransform.reset()
        self.editors[index].set_image(image)
        self.sidebar.set_image_info(index, image)
        self._recompose()

    def _handle_transform_commit(self, index: int, transform: PanelTransform) -> None:
        self._transforms[index] = transform
        self._recompose()

    def _handle_aspect_change(self, label: str) -> None:
        self._aspect_label = label
        self._recompose()

    def _handle_frame_change(self) -> None:
        self._recompose()

    def _handle_reset_panels(self) -> None:
        for index, editor in enumerate(self.editors):
            self._transforms[index] = PanelTransform.reset()
            editor.set_transform(self._transforms[index])
        self._recompose()

    def _handle_save(self) -> None:
        if self._result_image is None:
            self.sidebar.set_status("Нечего сохранять: выберите оба изображения")
            return
        try:
            file_path = filedialog.asksaveasfilename(
                title="Сохранить диптих",
                defaultextension=".png",
                filetypes=(("PNG", "*.png"), ("JPEG", "*.jpg *.jpeg"), ("WebP", "*.webp")),
            )
        except TclError:
            return
        if not file_path:
            return

        color, _thickness = self.sidebar.get_frame_params()
        try:
            path = self._image_service.save_image(self._result_image, file_path, background=color or "white")
        except (OSError, ValueError) as exc:
            logger.error("Could not save %s: %s", file_path, exc)
            self.sidebar.set_status(f"Не удалось сохранить: {exc}")
            return
        self.sidebar.set_status(f"Сохранено: {path.name}")

    # ---- Helpers ----
    def _recompose(self) -> None:
        """Пересобирает диптих из текущих зафиксированных значений.

        Ошибки сборки не фатальны для окна: предпросмотр остаётся пустым.
        """
        color, thickness = self.sidebar.get_frame_params()
        ratio = parse_aspect_ratio(self._aspect_label)
        height = float(self.settings.output_height)

        layout = compute_layout(height, ratio, thickness, color)
        for editor, rect in zip(self.editors, layout.pixel_rects()):
            left, top, right, bottom = rect
            editor.set_panel_size((max(1, right - left), max(1, bottom - top)))

        request = DiptychRequest(
            image_a=self._images[0],
            image_b=self._images[1],
            transform_a=self._transforms[0],
            transform_b=self._transforms[1],
            aspect_ratio=ratio,
            frame_color=color,
            frame_thickness=thickness,
            output_height=height,
        )
        try:
            result = self._composer.compose(request)
        except DiptychError as exc:
            logger.debug("No diptych: %s", exc)
            self._result_image = None
            self.preview.set_image(None)
            self.sidebar.set_save_enabled(False)
            return

        self._result_image = result.image
        note = "рамка не помещается" if result.frame_dropped else ""
        self.preview.set_image(result.image, note=note)
        self.sidebar.set_save_enabled(True)

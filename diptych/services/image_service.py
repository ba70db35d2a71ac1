"""Загрузка исходных изображений с диска и сохранение готового диптиха.

Принципы:
- SRP: класс отвечает только за ввод-вывод файлов и базовое извлечение свойств.
- OCP: новые источники (стрим, URL) можно добавить отдельными методами.
- LSP/ISP: возвращает `SourceImage` с предсказуемыми полями; интерфейс узкий и конкретный.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from diptych.models.diptych_model import Color, SourceImage, to_rgba

logger = logging.getLogger(__name__)

# форматы без альфа-канала: перед сохранением изображение сводится на фон
_OPAQUE_FORMATS = {".jpg", ".jpeg", ".bmp"}


class ImageService:
    def load_image(self, file_path: str | Path) -> SourceImage:
        """Загружает изображение с диска и возвращает его вместе с метаданными.

        Ориентация из EXIF применяется сразу, чтобы фото с телефона
        не оказалось повёрнутым в панели.

        Args:
            file_path: Путь до файла изображения.

        Returns:
            `SourceImage` c `PIL.Image.Image` (в режиме RGBA), размерами, режимом и размером файла.

        Raises:
            FileNotFoundError: если путь не существует или не указывает на файл.
            ValueError: если файл не распознан как изображение.
        """
        path = Path(file_path)
        if not path.exists() or not path.is_file():
            raise FileNotFoundError(f"Файл не найден: {path}")

        try:
            with Image.open(path) as opened:
                pil_image = ImageOps.exif_transpose(opened).convert("RGBA")
        except UnidentifiedImageError as exc:
            raise ValueError(f"Файл не является изображением: {path}") from exc

        try:
            size_bytes: Optional[int] = path.stat().st_size
        except OSError:
            size_bytes = None

        logger.info("Loaded %s (%dx%d)", path.name, pil_image.width, pil_image.height)
        return SourceImage.from_pil(pil_image, path=path, size_bytes=size_bytes)

    def save_image(self, image: Image.Image, file_path: str | Path, background: Color = "white") -> Path:
        """Сохраняет готовый диптих.

        PNG/WebP/TIFF сохраняются с прозрачностью. Для JPEG и BMP изображение
        сводится на `background`, поскольку альфа-канал они не поддерживают.

        Returns:
            Путь к записанному файлу.

        Raises:
            ValueError: если расширение не поддерживается PIL.
            OSError: если файл не удалось записать.
        """
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        out = image
        if path.suffix.lower() in _OPAQUE_FORMATS and image.mode in ("RGBA", "LA", "P"):
            rgba = image.convert("RGBA")
            flat = Image.new("RGBA", rgba.size, to_rgba(background))
            flat.alpha_composite(rgba)
            out = flat.convert("RGB")

        if path.suffix.lower() in (".jpg", ".jpeg"):
            out.save(path, quality=95)
        else:
            out.save(path)
        logger.info("Saved diptych to %s (%dx%d)", path, out.width, out.height)
        return path

"""Настройки по умолчанию для окна и командной строки.

Файл YAML содержит либо секцию `diptych:`, либо те же ключи на верхнем уровне::

    diptych:
      output_height: 1200
      aspect_ratio: "4:3"      # в кавычках, иначе YAML 1.1 прочитает 4:3 как число
      frame_color: "#000000"   # null — без рамки
      frame_thickness: 20
      resample: bilinear

Композиции в файл не сохраняются: это только значения по умолчанию.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from diptych.models.diptych_model import Color, parse_aspect_ratio, to_rgba
from diptych.models.errors import SettingsError
from diptych.services.panel_renderer import RESAMPLE_FILTERS

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("diptych.yaml")


@dataclass(frozen=True)
class DiptychSettings:
    output_height: float = 1200.0
    aspect_ratio: str = "1:1"
    frame_color: Optional[Color] = "#000000"
    frame_thickness: float = 0.0
    max_frame_thickness: float = 50.0
    resample: str = "bilinear"

    @property
    def ratio(self) -> float:
        return parse_aspect_ratio(self.aspect_ratio)

    def with_overrides(self, **overrides: Any) -> "DiptychSettings":
        """Копия с заменёнными значениями; `None` в overrides означает «не менять»."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return validate_settings(replace(self, **changes))


def validate_settings(settings: DiptychSettings) -> DiptychSettings:
    """Проверяет значения настроек.

    Raises:
        SettingsError: при первом некорректном значении.
    """
    try:
        parse_aspect_ratio(settings.aspect_ratio)
    except ValueError as exc:
        raise SettingsError(str(exc)) from exc
    if not _number("output_height", settings.output_height) > 0:
        raise SettingsError(f"output_height должен быть положительным: {settings.output_height}")
    for name in ("frame_thickness", "max_frame_thickness"):
        if _number(name, getattr(settings, name)) < 0:
            raise SettingsError(f"{name} не может быть отрицательным: {getattr(settings, name)}")
    if settings.frame_color is not None:
        try:
            to_rgba(settings.frame_color)
        except (ValueError, TypeError) as exc:
            raise SettingsError(f"Некорректный цвет рамки: {settings.frame_color!r}") from exc
    if settings.resample not in RESAMPLE_FILTERS:
        raise SettingsError(
            f"Неизвестный фильтр {settings.resample!r}. Доступны: {sorted(RESAMPLE_FILTERS)}"
        )
    return settings


def _number(name: str, value: Any) -> float:
    if isinstance(value, bool):
        raise SettingsError(f"{name} должен быть числом: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise SettingsError(f"{name} должен быть числом: {value!r}") from exc


def load_settings(config_path: Optional[str | Path] = None) -> DiptychSettings:
    """Читает настройки из YAML и накладывает их на значения по умолчанию.

    Отсутствующий файл не ошибка: возвращаются значения по умолчанию.

    Raises:
        SettingsError: если YAML не разбирается, содержит неизвестные ключи
            или некорректные значения.
    """
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH
    if not path.exists():
        logger.debug("Settings file %s not found, using defaults", path)
        return DiptychSettings()

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise SettingsError(f"Не удалось разобрать {path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise SettingsError(f"Ожидался словарь настроек в {path}")
    section = raw.get("diptych", raw)
    if not isinstance(section, dict):
        raise SettingsError(f"Секция 'diptych' в {path} должна быть словарём")

    known = {f.name for f in fields(DiptychSettings)}
    unknown = sorted(set(section) - known)
    if unknown:
        raise SettingsError(f"Неизвестные ключи в {path}: {', '.join(unknown)}")

    values = dict(section)
    if isinstance(values.get("frame_color"), list):
        values["frame_color"] = tuple(values["frame_color"])
    if "aspect_ratio" in values:
        ratio = values["aspect_ratio"]
        # unquoted 4:3 is a YAML 1.1 sexagesimal int (243)
        if not isinstance(ratio, (str, float)):
            raise SettingsError(
                f"aspect_ratio в {path} должен быть строкой вида \"4:3\" (в кавычках) "
                f"или дробным числом: {ratio!r}"
            )
        values["aspect_ratio"] = str(ratio)

    settings = validate_settings(replace(DiptychSettings(), **values))
    logger.info("Loaded settings from %s", path)
    return settings

"""Ошибки сборки диптиха.

Все ошибки терминальны для одного вызова `compose`; повторов внутри движка нет.
"""
from __future__ import annotations


class DiptychError(ValueError):
    """Базовая ошибка движка диптиха."""


class InvalidDimensionsError(DiptychError):
    """Высота, соотношение сторон или размер панели не положительны (или не конечны)."""


class MissingInputError(DiptychError):
    """Не выбрано одно из изображений или не удалось отрисовать панель."""


class NoImageError(DiptychError):
    """Панели не передано изображение."""


class SettingsError(DiptychError):
    """Некорректный файл настроек."""

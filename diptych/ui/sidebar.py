"""Боковая панель: выбор изображений, информация о них, параметры холста и рамки.

Принципы:
- SRP: управляет только UI параметров, не содержит логики сборки.
- ISP: выдаёт параметры через компактные методы `get_*`, события через `on_*`.
"""
from __future__ import annotations

from typing import Callable, Optional, Sequence, Tuple

import customtkinter as ctk
from tkinter import colorchooser

from diptych.models.diptych_model import SourceImage, to_rgba


def _rgba_to_hex(rgba: Tuple[int, int, int, int]) -> str:
    """Преобразует RGBA в HEX (без альфа)."""
    r, g, b, _a = rgba
    return f"#{r:02X}{g:02X}{b:02X}"


class Sidebar(ctk.CTkFrame):
    """Панель инструментов с блоками: изображения, холст, рамка, сохранение."""
    def __init__(
        self,
        master: ctk.CTk,
        aspect_labels: Sequence[str],
        max_frame_thickness: float = 50.0,
        **kwargs,
    ) -> None:
        super().__init__(master, width=280, **kwargs)

        self.grid_columnconfigure(0, weight=1)

        # Callbacks
        self.on_open_image: Optional[Callable[[int], None]] = None  # 0 — левое, 1 — правое
        self.on_aspect_change: Optional[Callable[[str], None]] = None
        self.on_frame_change: Optional[Callable[[], None]] = None
        self.on_reset_panels: Optional[Callable[[], None]] = None
        self.on_save: Optional[Callable[[], None]] = None

        # Изображения
        self._images_title = ctk.CTkLabel(self, text="Изображения", font=ctk.CTkFont(size=16, weight="bold"))
        self._images_title.grid(row=0, column=0, padx=8, pady=(8, 4), sticky="w")

        self._open_btns = []
        self._info_vals = []
        for idx, label in enumerate(("Изображение 1…", "Изображение 2…")):
            btn = ctk.CTkButton(self, text=label, command=lambda i=idx: self._emit_open_image(i))
            btn.grid(row=1 + idx * 2, column=0, padx=8, pady=(0, 2), sticky="ew")
            info_val = ctk.StringVar(value="—")
            info = ctk.CTkLabel(self, textvariable=info_val, wraplength=250, anchor="w", justify="left")
            info.grid(row=2 + idx * 2, column=0, padx=8, pady=(0, 8), sticky="ew")
            self._open_btns.append(btn)
            self._info_vals.append(info_val)

        self._reset_btn = ctk.CTkButton(self, text="Сбросить положение", command=self._emit_reset_panels)
        self._reset_btn.grid(row=5, column=0, padx=8, pady=(0, 12), sticky="ew")

        # Холст
        self._canvas_title = ctk.CTkLabel(self, text="Соотношение сторон", font=ctk.CTkFont(size=16, weight="bold"))
        self._canvas_title.grid(row=6, column=0, padx=8, pady=(8, 4), sticky="w")

        self._aspect_buttons = ctk.CTkSegmentedButton(self, values=list(aspect_labels), command=self._emit_aspect_change)
        self._aspect_buttons.set(aspect_labels[0])
        self._aspect_buttons.grid(row=7, column=0, padx=8, pady=(0, 12), sticky="ew")

        # Рамка
        self._frame_title = ctk.CTkLabel(self, text="Рамка", font=ctk.CTkFont(size=16, weight="bold"))
        self._frame_title.grid(row=8, column=0, padx=8, pady=(8, 4), sticky="w")

        self._frame_enabled = ctk.BooleanVar(value=False)
        self._frame_switch = ctk.CTkSwitch(
            self, text="Показывать рамку", variable=self._frame_enabled, command=self._emit_frame_change
        )
        self._frame_switch.grid(row=9, column=0, padx=8, pady=(0, 6), sticky="w")

        self._frame_color: Tuple[int, int, int, int] = (0, 0, 0, 255)
        self._color_btn = ctk.CTkButton(self, text="Цвет рамки…", command=self._pick_color)
        self._color_btn.grid(row=10, column=0, padx=8, pady=(0, 6), sticky="ew")
        self._color_val = ctk.StringVar(value=_rgba_to_hex(self._frame_color))
        self._color_label = ctk.CTkLabel(self, textvariable=self._color_val, anchor="w")
        self._color_label.grid(row=11, column=0, padx=8, pady=(0, 6), sticky="w")

        self._thickness_label = ctk.CTkLabel(self, text="Толщина, px:")
        self._thickness_label.grid(row=12, column=0, padx=8, pady=(0, 2), sticky="w")
        steps = max(1, int(max_frame_thickness))
        self._thickness_slider = ctk.CTkSlider(
            self, from_=0, to=max_frame_thickness, number_of_steps=steps, command=self._on_thickness_change
        )
        self._thickness_slider.set(0)
        self._thickness_slider.grid(row=13, column=0, padx=8, pady=(0, 2), sticky="ew")
        self._thickness_val = ctk.StringVar(value="0")
        self._thickness_value = ctk.CTkLabel(self, textvariable=self._thickness_val, width=48, anchor="w")
        self._thickness_value.grid(row=14, column=0, padx=8, pady=(0, 12), sticky="w")

        # filler
        self.grid_rowconfigure(99, weight=1)

        self._save_btn = ctk.CTkButton(self, text="Сохранить диптих…", command=self._emit_save)
        self._save_btn.grid(row=100, column=0, padx=8, pady=(8, 4), sticky="ew")
        self._status_val = ctk.StringVar(value="")
        self._status = ctk.CTkLabel(self, textvariable=self._status_val, wraplength=250, anchor="w", justify="left")
        self._status.grid(row=101, column=0, padx=8, pady=(0, 8), sticky="ew")

    # ---- Public API ----
    def set_image_info(self, index: int, image: Optional[SourceImage]) -> None:
        """Отображает метаданные выбранного изображения (или прочерк)."""
        if image is None:
            self._info_vals[index].set("—")
            return
        name = image.path.name if image.path is not None else "без имени"
        self._info_vals[index].set(
            f"{name}\n{image.width} × {image.height} px, {self._format_size(image.size_bytes)}"
        )

    def set_aspect_value(self, label: str) -> None:
        self._aspect_buttons.set(label)

    def set_frame_values(self, enabled: bool, color: Optional[object], thickness: float) -> None:
        """Синхронизирует элементы рамки со значениями из настроек."""
        self._frame_enabled.set(enabled)
        if color is not None:
            self._frame_color = to_rgba(color)
            self._color_val.set(_rgba_to_hex(self._frame_color))
        self._thickness_slider.set(thickness)
        self._thickness_val.set(f"{int(round(thickness))}")

    def set_status(self, text: str) -> None:
        self._status_val.set(text)

    def set_save_enabled(self, enabled: bool) -> None:
        self._save_btn.configure(state="normal" if enabled else "disabled")

    def get_frame_params(self) -> Tuple[Optional[Tuple[int, int, int, int]], float]:
        """Цвет рамки (None, если выключена) и толщина в пикселях."""
        color = self._frame_color if self._frame_enabled.get() else None
        return color, float(int(round(self._thickness_slider.get())))

    # ---- Events ----
    def _emit_open_image(self, index: int) -> None:
        if self.on_open_image:
            self.on_open_image(index)

    def _emit_aspect_change(self, value: str) -> None:
        if self.on_aspect_change:
            self.on_aspect_change(value)

    def _emit_frame_change(self) -> None:
        if self.on_frame_change:
            self.on_frame_change()

    def _emit_reset_panels(self) -> None:
        if self.on_reset_panels:
            self.on_reset_panels()

    def _emit_save(self) -> None:
        if self.on_save:
            self.on_save()

    def _on_thickness_change(self, value: float) -> None:
        self._thickness_val.set(f"{int(round(value))}")
        self._emit_frame_change()

    def _pick_color(self) -> None:
        rgb, _hex = colorchooser.askcolor(color=_rgba_to_hex(self._frame_color), title="Цвет рамки")
        if rgb is None:
            return
        r, g, b = (int(c) for c in rgb)
        self._frame_color = (r, g, b, 255)
        self._color_val.set(_rgba_to_hex(self._frame_color))
        self._emit_frame_change()

    # ---- Helpers ----
    def _format_size(self, size_bytes: Optional[int]) -> str:
        if size_bytes is None:
            return "—"
        thresholds = [("Б", 1024), ("КБ", 1024**2), ("МБ", 1024**3), ("ГБ", 1024**4)]
        for label, limit in thresholds:
            if size_bytes < limit:
                if label == "Б":
                    return f"{size_bytes} {label}"
                value = size_bytes / (limit // 1024)
                return f"{value:.1f} {label}"
        value = size_bytes / (1024**4)
        return f"{value:.1f} ГБ"

"""Виджет одной панели диптиха: панорамирование и масштабирование изображения.

Принципы:
- SRP: отвечает только за представление панели и жесты пользователя.
- Состояние жеста живёт в `TransformInProgress`; наружу уходит только
  зафиксированная `PanelTransform` (через `on_transform_commit`).
- Координаты: сдвиг хранится в пикселях итоговой панели, на экране панель
  показана в масштабе `_display_factor`.
"""
from __future__ import annotations

from typing import Callable, Optional, Tuple

import customtkinter as ctk
import tkinter as tk
from PIL import Image, ImageTk

from diptych.models.diptych_model import PanelTransform, SourceImage, TransformInProgress, clamp_scale
from diptych.services.panel_renderer import PanelRenderer

WHEEL_FACTOR = 1.1


class PanelEditor(ctk.CTkFrame):
    """Интерактивная панель: перетаскивание — сдвиг, колесо — масштаб, двойной щелчок — сброс."""
    def __init__(self, master: ctk.CTk | tk.Misc, title: str, renderer: Optional[PanelRenderer] = None, **kwargs) -> None:
        super().__init__(master, **kwargs)
        self.grid_rowconfigure(1, weight=1)
        self.grid_columnconfigure(0, weight=1)

        self._title = ctk.CTkLabel(self, text=title, font=ctk.CTkFont(size=14, weight="bold"))
        self._title.grid(row=0, column=0, padx=8, pady=(6, 2), sticky="w")

        self._canvas = tk.Canvas(self, highlightthickness=0, bg=self._get_canvas_bg())
        self._canvas.grid(row=1, column=0, sticky="nsew", padx=6, pady=(0, 6))

        self._renderer = renderer or PanelRenderer()
        self._image: Optional[SourceImage] = None
        self._tk_image: Optional[ImageTk.PhotoImage] = None
        self._gesture = TransformInProgress()

        # size of the panel in output pixels; the canvas shows it scaled to fit
        self._panel_size: Tuple[int, int] = (600, 1200)
        self._display_factor: float = 1.0
        self._panel_top_left: Tuple[int, int] = (0, 0)

        # panning state
        self._is_panning: bool = False
        self._pan_start_canvas_xy: Optional[Tuple[int, int]] = None

        self.on_transform_commit: Optional[Callable[[PanelTransform], None]] = None

        self._canvas.bind("<Configure>", self._on_canvas_resize)

        # Mouse wheel zoom (cross-platform)
        self._canvas.bind("<MouseWheel>", self._on_mouse_wheel)      # Windows/macOS
        self._canvas.bind("<Button-4>", self._on_mouse_wheel_linux)  # Linux scroll up
        self._canvas.bind("<Button-5>", self._on_mouse_wheel_linux)  # Linux scroll down

        # Panning with left mouse drag
        self._canvas.bind("<ButtonPress-1>", self._on_pan_start)
        self._canvas.bind("<B1-Motion>", self._on_pan_move)
        self._canvas.bind("<ButtonRelease-1>", self._on_pan_end)

        self._canvas.bind("<Double-Button-1>", self._on_reset)

    # ---- Public API ----
    def set_image(self, image: Optional[SourceImage]) -> None:
        """Устанавливает изображение (None — панель пуста) и сбрасывает трансформацию."""
        self._image = image
        self._gesture.reset()
        self._render()

    def set_transform(self, transform: PanelTransform) -> None:
        """Синхронизирует зафиксированную трансформацию, заданную извне (например, сброс)."""
        self._gesture.reset()
        self._gesture.committed = transform
        self._render()

    def set_panel_size(self, panel_size: Tuple[int, int]) -> None:
        """Задаёт размер панели в пикселях итогового изображения."""
        if panel_size == self._panel_size:
            return
        self._panel_size = panel_size
        self._render()

    # ---- Internals ----
    def _on_canvas_resize(self, _event: tk.Event) -> None:
        self._render()

    def _render(self) -> None:
        self._canvas.delete("all")
        self._compute_display_factor()
        panel_w, panel_h = self._panel_size
        disp_w = max(1, int(round(panel_w * self._display_factor)))
        disp_h = max(1, int(round(panel_h * self._display_factor)))
        ox, oy = self._panel_top_left

        if self._image is None:
            self._canvas.create_rectangle(ox, oy, ox + disp_w, oy + disp_h, outline="gray", dash=(4, 2))
            self._canvas.create_text(ox + disp_w // 2, oy + disp_h // 2, text="Выберите изображение", fill="gray")
            return

        panel = self._renderer.render(self._image, self._gesture.live(), self._panel_size)
        preview = panel.resize((disp_w, disp_h), Image.Resampling.BILINEAR)
        self._tk_image = ImageTk.PhotoImage(preview)
        self._canvas.create_image(ox, oy, image=self._tk_image, anchor="nw")
        self._canvas.create_rectangle(ox, oy, ox + disp_w, oy + disp_h, outline="gray")

    def _compute_display_factor(self) -> None:
        canvas_w = max(1, int(self._canvas.winfo_width()))
        canvas_h = max(1, int(self._canvas.winfo_height()))
        panel_w, panel_h = self._panel_size
        if panel_w <= 0 or panel_h <= 0:
            self._display_factor = 1.0
            self._panel_top_left = (0, 0)
            return
        self._display_factor = min(canvas_w / panel_w, canvas_h / panel_h)
        disp_w = int(round(panel_w * self._display_factor))
        disp_h = int(round(panel_h * self._display_factor))
        self._panel_top_left = ((canvas_w - disp_w) // 2, (canvas_h - disp_h) // 2)

    def _canvas_to_panel(self, cx: int, cy: int) -> Tuple[float, float]:
        ox, oy = self._panel_top_left
        return (cx - ox) / self._display_factor, (cy - oy) / self._display_factor

    def _commit(self) -> None:
        transform = self._gesture.commit()
        self._render()
        if self.on_transform_commit:
            self.on_transform_commit(transform)

    def _get_canvas_bg(self) -> str:
        return "#1f1f1f" if ctk.get_appearance_mode().lower() == "dark" else "#f2f2f2"

    # ---- Mouse wheel zoom ----
    def _on_mouse_wheel(self, event: tk.Event) -> None:
        if self._image is None or event.delta == 0:
            return
        factor = WHEEL_FACTOR if event.delta > 0 else 1.0 / WHEEL_FACTOR
        self._zoom_at_point(event.x, event.y, factor)

    def _on_mouse_wheel_linux(self, event: tk.Event) -> None:
        # On X11, Button-4 is up, Button-5 is down
        if self._image is None:
            return
        factor = WHEEL_FACTOR if getattr(event, "num", None) == 4 else 1.0 / WHEEL_FACTOR
        self._zoom_at_point(event.x, event.y, factor)

    def _zoom_at_point(self, cx: int, cy: int, factor: float) -> None:
        # each wheel step is a complete gesture: keep the image point under the cursor fixed
        if self._is_panning:
            return
        base = self._gesture.committed
        old_scale = base.scale
        new_scale = clamp_scale(old_scale * factor)
        if abs(new_scale - old_scale) < 1e-6:
            return

        px, py = self._canvas_to_panel(cx, cy)
        ox, oy = base.offset
        ix = (px - ox) / old_scale
        iy = (py - oy) / old_scale

        self._gesture.magnify(new_scale / old_scale)
        self._gesture.drag((px - ix * new_scale) - ox, (py - iy * new_scale) - oy)
        self._commit()

    # ---- Panning ----
    def _on_pan_start(self, event: tk.Event) -> None:
        if self._image is None:
            return
        self._canvas.focus_set()
        self._is_panning = True
        self._pan_start_canvas_xy = (event.x, event.y)

    def _on_pan_move(self, event: tk.Event) -> None:
        if not self._is_panning or self._pan_start_canvas_xy is None:
            return
        sx, sy = self._pan_start_canvas_xy
        self._gesture.drag((event.x - sx) / self._display_factor, (event.y - sy) / self._display_factor)
        self._render()

    def _on_pan_end(self, _event: tk.Event) -> None:
        if not self._is_panning:
            return
        self._is_panning = False
        self._pan_start_canvas_xy = None
        self._commit()

    def _on_reset(self, _event: tk.Event) -> None:
        if self._image is None:
            return
        self._gesture.reset()
        self._render()
        if self.on_transform_commit:
            self.on_transform_commit(self._gesture.committed)

from __future__ import annotations

from typing import Optional

import customtkinter as ctk
import tkinter as tk
from PIL import Image, ImageTk


class PreviewBar(ctk.CTkFrame):
    """Нижняя полоса с уменьшенной копией готового диптиха."""
    def __init__(self, master: ctk.CTk, height: int = 180, **kwargs) -> None:
        super().__init__(master, height=height, **kwargs)

        self.grid_rowconfigure(1, weight=1)
        self.grid_columnconfigure(0, weight=1)

        self._title_val = ctk.StringVar(value="Диптих")
        self._title = ctk.CTkLabel(self, textvariable=self._title_val, anchor="w")
        self._title.grid(row=0, column=0, padx=10, pady=(6, 2), sticky="w")

        self._canvas = tk.Canvas(self, height=height - 40, highlightthickness=0, bg=self._get_canvas_bg())
        self._canvas.grid(row=1, column=0, padx=10, pady=(0, 8), sticky="nsew")
        self._canvas.bind("<Configure>", lambda _e: self._render())

        self._image: Optional[Image.Image] = None
        self._tk_image: Optional[ImageTk.PhotoImage] = None

    # public API (sync from controller)
    def set_image(self, image: Optional[Image.Image], note: str = "") -> None:
        """Показывает диптих (None — пустой предпросмотр)."""
        self._image = image
        if image is None:
            self._title_val.set("Диптих — выберите оба изображения" if not note else f"Диптих — {note}")
        else:
            w, h = image.size
            self._title_val.set(f"Диптих {w} × {h} px" + (f" — {note}" if note else ""))
        self._render()

    # helpers
    def _render(self) -> None:
        self._canvas.delete("all")
        canvas_w = max(1, int(self._canvas.winfo_width()))
        canvas_h = max(1, int(self._canvas.winfo_height()))
        if self._image is None:
            self._canvas.create_text(canvas_w // 2, canvas_h // 2, text="Нет изображения", fill="gray")
            return
        thumb = self._image.copy()
        thumb.thumbnail((canvas_w, canvas_h), Image.Resampling.LANCZOS)
        self._tk_image = ImageTk.PhotoImage(thumb)
        x = (canvas_w - thumb.width) // 2
        y = (canvas_h - thumb.height) // 2
        self._canvas.create_image(x, y, image=self._tk_image, anchor="nw")
        self._canvas.create_rectangle(x, y, x + thumb.width, y + thumb.height, outline="gray")

    def _get_canvas_bg(self) -> str:
        return "#1f1f1f" if ctk.get_appearance_mode().lower() == "dark" else "#f2f2f2"

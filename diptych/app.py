from __future__ import annotations

from typing import Optional

import customtkinter as ctk

from diptych.config import DiptychSettings
from diptych.controllers.app_controller import AppController
from diptych.models.diptych_model import AspectRatioOption
from diptych.services.panel_renderer import PanelRenderer
from diptych.ui.panel_editor import PanelEditor
from diptych.ui.preview_bar import PreviewBar
from diptych.ui.sidebar import Sidebar


class DiptychApp(ctk.CTk):
    def __init__(self, settings: Optional[DiptychSettings] = None) -> None:
        super().__init__()
        ctk.set_appearance_mode("system")
        ctk.set_default_color_theme("blue")

        settings = settings or DiptychSettings()
        self.title("Diptych")
        self.minsize(900, 640)

        # root layout: two panel editors, right sidebar, preview below
        self.grid_columnconfigure(0, weight=1)
        self.grid_columnconfigure(1, weight=1)
        self.grid_rowconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=0)

        renderer = PanelRenderer(resample=settings.resample)
        self._editors = [
            PanelEditor(self, title="Изображение 1", renderer=renderer),
            PanelEditor(self, title="Изображение 2", renderer=renderer),
        ]
        self._editors[0].grid(row=0, column=0, sticky="nsew", padx=(12, 3), pady=(12, 6))
        self._editors[1].grid(row=0, column=1, sticky="nsew", padx=(3, 6), pady=(12, 6))

        labels = list(AspectRatioOption.labels())
        if settings.aspect_ratio not in labels:
            labels.append(settings.aspect_ratio)
        self._sidebar = Sidebar(self, aspect_labels=labels, max_frame_thickness=settings.max_frame_thickness)
        self._sidebar.grid(row=0, column=2, rowspan=2, sticky="ns", padx=(6, 12), pady=12)

        self._preview = PreviewBar(self)
        self._preview.grid(row=1, column=0, columnspan=2, sticky="ew", padx=(12, 6), pady=(0, 12))

        self._controller = AppController(
            editors=self._editors,
            sidebar=self._sidebar,
            preview=self._preview,
            window=self,
            settings=settings,
        )
        self._controller.bind_events()

"""Точка входа в приложение."""
from __future__ import annotations

import argparse
import logging


def setup_logging(verbose: bool = False) -> None:
    """Настраивает логирование для окна и командной строки."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s │ %(name)-34s │ %(levelname)-5s │ %(message)s",
        datefmt="%H:%M:%S",
    )
    # PIL logs every plugin it probes at DEBUG
    logging.getLogger("PIL").setLevel(logging.WARNING)


def main() -> None:
    """Создаёт и запускает главное окно приложения."""
    parser = argparse.ArgumentParser(description="Diptych — два фото в одном кадре")
    parser.add_argument("-c", "--config", type=str, default=None, help="Путь к YAML с настройками по умолчанию")
    parser.add_argument("-v", "--verbose", action="store_true", help="Подробное логирование (DEBUG)")
    args = parser.parse_args()
    setup_logging(args.verbose)

    # customtkinter is imported lazily so the CLI never needs a display
    from diptych.app import DiptychApp
    from diptych.config import load_settings

    app = DiptychApp(settings=load_settings(args.config))
    app.mainloop()


if __name__ == "__main__":
    main()

"""Entry point for Hoard."""

import logging

from hoard.app import HoardApp
from hoard.engine.save import SAVE_DIR


def main() -> None:
    # Log to a file so records never paint over the terminal UI
    SAVE_DIR.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=SAVE_DIR / "hoard.log",
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = HoardApp()
    app.run()


if __name__ == "__main__":
    main()

import logging
import sys

from PyQt5.QtWidgets import QApplication

from formstamp.config import MarkupSettings
from formstamp.ui.windows import MainWindow


def main():
    """
    Run the markup viewer.
    An optional PDF path may be passed as the first argument.
    """
    settings = MarkupSettings.from_env()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = QApplication(sys.argv)

    file_path = None
    if len(sys.argv) > 1:
        file_path = sys.argv[1]

    window = MainWindow(file_path, settings)
    window.showMaximized()
    sys.exit(app.exec_())


if __name__ == '__main__':
    main()

#!/usr/bin/env python3
"""Custom Tile Overlay

This example demonstrates:
- Adding an XYZ tile overlay above the base map and below the data layers
- Replacing and clearing the overlay URL at runtime
- Reporting tile load failures through on_error
"""

import logging
import sys

from PySide6 import QtWidgets

from telemetrymap import DisplayConfig
from telemetrymap.widget import TelemetryMapWidget

OVERLAYS = {
    "None": "",
    "OpenSeaMap": "https://tiles.openseamap.org/seamark/{z}/{x}/{y}.png",
    "Broken URL": "https://invalid.example/{z}/{x}/{y}.png",
}


def main():
    """Run the tile overlay example."""
    logging.basicConfig(level=logging.INFO)
    app = QtWidgets.QApplication(sys.argv)

    win = QtWidgets.QWidget()
    layout = QtWidgets.QVBoxLayout(win)

    map_widget = TelemetryMapWidget(config=DisplayConfig(zoom_level=9))
    map_widget.set_records(
        [{"coordinate": [4.3, 51.9], "mac_address": "ship-1"}]
    )
    layout.addWidget(map_widget)

    status = QtWidgets.QLabel("")
    map_widget.on_error(lambda err: status.setText(f"Error: {err}"))

    pick = QtWidgets.QComboBox()
    pick.addItems(list(OVERLAYS))
    pick.currentTextChanged.connect(
        lambda name: map_widget.update_config(tile_url=OVERLAYS[name])
    )
    layout.addWidget(pick)
    layout.addWidget(status)

    win.setWindowTitle("Custom Tile Overlay")
    win.resize(1024, 768)
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""Quick Start Example

This example shows the most basic usage of telemetrymap:
- Creating a map widget
- Feeding it a batch of device samples
- Switching between markers and heatmap from the map's select box
"""

import sys

from PySide6 import QtWidgets

from telemetrymap import DisplayConfig
from telemetrymap.widget import TelemetryMapWidget


def main():
    """Run the quick start example."""
    app = QtWidgets.QApplication(sys.argv)

    map_widget = TelemetryMapWidget(config=DisplayConfig(zoom_level=12))

    # Records are (lon, lat); only the first sample per device is shown
    map_widget.set_records(
        [
            {"coordinate": [4.8952, 52.3702], "mac_address": "aa:aa"},
            {"coordinate": [4.9041, 52.3676], "mac_address": "bb:bb"},
            {"coordinate": [4.9100, 52.3600], "mac_address": "aa:aa"},  # ignored
        ]
    )

    map_widget.resize(1024, 768)
    map_widget.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""Heatmap Styling

This example demonstrates:
- Starting in heatmap mode from panel options
- Changing heat radius / blur / opacity live (updated in place, no flicker)
- Using a matplotlib colormap as the heat gradient
"""

import sys

import numpy as np
from PySide6 import QtWidgets
from PySide6.QtCore import Qt

from telemetrymap import ConfigStore, Dataset
from telemetrymap.widget import TelemetryMapWidget


def main():
    """Run the heatmap styling example."""
    app = QtWidgets.QApplication(sys.argv)

    store = ConfigStore.from_options(
        {
            "markersLayer": False,
            "heatmapLayer": True,
            "zoom_level": 10,
            "heat_radius": "15",
            "heat_blur": "20",
            "heat_opacity": "0.8",
            "heat_colormap": "inferno",
        }
    )

    rng = np.random.default_rng(3)
    n = 2000
    dataset = Dataset.from_arrays(
        lon=2.35 + rng.normal(0, 0.08, n),
        lat=48.86 + rng.normal(0, 0.05, n),
        entity_ids=[f"dev{i}" for i in range(n)],
    )

    win = QtWidgets.QWidget()
    layout = QtWidgets.QVBoxLayout(win)
    map_widget = TelemetryMapWidget(store=store, dataset=dataset)
    layout.addWidget(map_widget)

    opacity = QtWidgets.QSlider(Qt.Horizontal)
    opacity.setRange(0, 100)
    opacity.setValue(80)
    opacity.valueChanged.connect(lambda v: store.update(heat_opacity=v / 100.0))
    layout.addWidget(opacity)

    win.setWindowTitle("Heatmap Styling")
    win.resize(1024, 768)
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()

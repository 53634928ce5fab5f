import logging
import sys

import numpy as np

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import (
    QApplication,
    QCheckBox,
    QComboBox,
    QFormLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QPushButton,
    QSlider,
    QSpinBox,
    QSplitter,
    QVBoxLayout,
    QWidget,
)

from telemetrymap import ConfigStore, Dataset, DisplayConfig
from telemetrymap.widget import TelemetryMapWidget


def make_batch(rng, n_devices=60, n_samples=600, lon0=4.90, lat0=52.37):
    """
    Random-walk telemetry for n_devices, interleaved in arrival order.
    Records look like what a telemetry backend returns:
    {"coordinate": [lon, lat], "mac_address": "...", "rssi": ...}
    """
    macs = [
        ":".join(f"{b:02x}" for b in rng.integers(0, 256, size=6)) for _ in range(n_devices)
    ]
    start = np.column_stack(
        [lon0 + rng.normal(0, 0.05, n_devices), lat0 + rng.normal(0, 0.03, n_devices)]
    )
    pos = start.copy()
    records = []
    for _ in range(n_samples):
        i = int(rng.integers(0, n_devices))
        pos[i] += rng.normal(0, 0.002, size=2)
        records.append(
            {
                "coordinate": [float(pos[i, 0]), float(pos[i, 1])],
                "mac_address": macs[i],
                "rssi": int(rng.integers(-90, -40)),
            }
        )
    return records


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    app = QApplication(sys.argv)

    if len(sys.argv) > 1:
        store = ConfigStore.from_json_file(sys.argv[1])
    else:
        store = ConfigStore(DisplayConfig(zoom_level=11))

    rng = np.random.default_rng(7)

    win = QMainWindow()
    win.setWindowTitle("telemetrymap demo: markers / heatmap")
    splitter = QSplitter(Qt.Horizontal)
    win.setCentralWidget(splitter)

    # --- Left: map ---
    m = TelemetryMapWidget(store=store)
    m.set_records(make_batch(rng))
    splitter.addWidget(m)

    # --- Right: controls (everything goes through the config store) ---
    right = QWidget()
    rlayout = QVBoxLayout(right)
    form = QFormLayout()
    rlayout.addLayout(form)

    mode = QComboBox()
    mode.addItem("Markers", "markers")
    mode.addItem("Heat Map", "heatmap")
    mode.setCurrentIndex(0 if store.config.markers_enabled else 1)
    mode.currentIndexChanged.connect(lambda _i: m.select_mode(mode.currentData()))
    form.addRow("Mode", mode)

    zoom = QSpinBox()
    zoom.setRange(1, 19)
    zoom.setValue(int(store.config.zoom_level))
    zoom.valueChanged.connect(lambda v: store.update(zoom_level=float(v)))
    form.addRow("Zoom", zoom)

    marker_radius = QSlider(Qt.Horizontal)
    marker_radius.setRange(1, 20)
    marker_radius.setValue(int(store.config.marker_radius))
    marker_radius.valueChanged.connect(lambda v: store.update(marker_radius=float(v)))
    form.addRow("Marker radius", marker_radius)

    heat_radius = QSlider(Qt.Horizontal)
    heat_radius.setRange(1, 50)
    heat_radius.setValue(store.config.heat_radius)
    heat_radius.valueChanged.connect(lambda v: store.update(heat_radius=v))
    form.addRow("Heat radius", heat_radius)

    heat_blur = QSlider(Qt.Horizontal)
    heat_blur.setRange(1, 50)
    heat_blur.setValue(store.config.heat_blur)
    heat_blur.valueChanged.connect(lambda v: store.update(heat_blur=v))
    form.addRow("Heat blur", heat_blur)

    heat_opacity = QSlider(Qt.Horizontal)
    heat_opacity.setRange(0, 100)
    heat_opacity.setValue(int(store.config.heat_opacity * 100))
    heat_opacity.valueChanged.connect(lambda v: store.update(heat_opacity=v / 100.0))
    form.addRow("Heat opacity", heat_opacity)

    cmap = QComboBox()
    for name in ["", "viridis", "magma", "inferno", "plasma", "turbo"]:
        cmap.addItem(name or "(default)", name)
    cmap.currentIndexChanged.connect(lambda _i: store.update(heat_colormap=cmap.currentData()))
    form.addRow("Heat colormap", cmap)

    tile_url = QLineEdit(store.config.tile_url)
    tile_url.setPlaceholderText("https://.../{z}/{x}/{y}.png")
    tile_url.editingFinished.connect(lambda: store.update(tile_url=tile_url.text().strip()))
    form.addRow("Overlay tiles", tile_url)

    info = QLabel()
    info.setWordWrap(True)

    def show_info(*_args):
        reg = m.engine.registry
        info.setText(
            f"Samples: {len(m.dataset)}   Devices: {len(m.engine.state.points)}\n"
            "Layers: " + ", ".join(f"{r.value}={h}" for r, h in reg.items())
        )

    # Keep the side combo in sync with the in-map selector
    def on_config(config):
        mode.blockSignals(True)
        mode.setCurrentIndex(0 if config.markers_enabled else 1)
        mode.blockSignals(False)
        show_info()

    m.configChanged.connect(on_config)
    m.on_error(lambda err: info.setText(f"Map error: {err}"))

    new_batch = QPushButton("New batch")
    new_batch.clicked.connect(lambda: (m.set_records(make_batch(rng)), show_info()))
    rlayout.addWidget(new_batch)

    live = QCheckBox("Stream a new batch every 3 s")
    timer = QTimer(win)
    timer.setInterval(3000)
    timer.timeout.connect(new_batch.click)
    live.toggled.connect(lambda on: timer.start() if on else timer.stop())
    rlayout.addWidget(live)

    rlayout.addWidget(info)
    rlayout.addStretch(1)
    show_info()

    splitter.addWidget(right)
    splitter.setSizes([950, 350])

    win.resize(1300, 800)
    win.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()

import os
from typing import Optional

from PyQt6.QtCore import Qt, QSettings
from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import QDockWidget, QFileDialog, QMainWindow, QMenuBar, QStyle

from chartcore.candle_data import CandlePoint, CandleSeries, compute_ma
from chartcore.style import ChartStyle

from .charts.interactive_chart import InteractiveChart
from .error_dock import ErrorDock
from .mock_data import mock_daily_series

MA_PERIODS = (7, 30, 90)


class MainWindow(QMainWindow):
    def __init__(self, series: Optional[CandleSeries] = None) -> None:
        super().__init__()
        self.setWindowTitle('Interactive Chart')
        self.resize(1200, 760)

        self._settings = QSettings('InteractiveChart', 'InteractiveChart')
        self._dark_mode = self._settings.value('darkMode', True, type=bool)
        self._show_average = False

        self.series = series if series is not None else mock_daily_series()
        self.error_dock = ErrorDock()
        self.chart = InteractiveChart(
            self.series,
            style=self._current_style(),
            on_tap=self._on_candle_tapped,
            on_candle_resize=self._on_candle_resized,
            error_sink=self.error_dock,
        )
        self.setCentralWidget(self.chart)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, self.error_dock)
        self.error_dock.hide()
        self._set_dock_icons()

        self._menu_bar = QMenuBar()
        self.setMenuBar(self._menu_bar)
        self._setup_menu()
        self._restore_layout()

    def _current_style(self) -> ChartStyle:
        return ChartStyle.dark() if self._dark_mode else ChartStyle.light()

    def _set_dock_icons(self) -> None:
        try:
            style = self.style()
            self.error_dock.setWindowIcon(style.standardIcon(QStyle.StandardPixmap.SP_MessageBoxCritical))
        except Exception:
            pass

    def closeEvent(self, event) -> None:
        self._save_layout()
        super().closeEvent(event)

    def _setup_menu(self) -> None:
        file_menu = self._menu_bar.addMenu('File')
        view_menu = self._menu_bar.addMenu('View')
        window_menu = self._menu_bar.addMenu('Window')

        export_action = QAction('Export Chart as PNG...', self)
        export_action.triggered.connect(self._export_chart_png)
        file_menu.addAction(export_action)

        self.dark_action = QAction('Dark Mode', self)
        self.dark_action.setCheckable(True)
        self.dark_action.setChecked(self._dark_mode)
        self.dark_action.toggled.connect(self.set_dark_mode)
        view_menu.addAction(self.dark_action)

        self.average_action = QAction('Moving Averages', self)
        self.average_action.setCheckable(True)
        self.average_action.setChecked(self._show_average)
        self.average_action.toggled.connect(self.set_show_average)
        view_menu.addAction(self.average_action)

        dock_action = QAction(self.error_dock.windowTitle(), self)
        dock_action.setCheckable(True)
        dock_action.setChecked(not self.error_dock.isHidden())
        dock_action.triggered.connect(lambda checked: self._toggle_dock(self.error_dock, checked))
        self.error_dock.visibilityChanged.connect(dock_action.setChecked)
        window_menu.addAction(dock_action)

    def _toggle_dock(self, dock: QDockWidget, visible: bool) -> None:
        if visible:
            dock.show()
            dock.raise_()
        else:
            dock.hide()

    def set_dark_mode(self, enabled: bool) -> None:
        self._dark_mode = bool(enabled)
        self.chart.set_style(self._current_style())

    def set_show_average(self, enabled: bool) -> None:
        self._show_average = bool(enabled)
        if self._show_average:
            columns = [compute_ma(self.series, period) for period in MA_PERIODS]
            self.series.set_trends([list(row) for row in zip(*columns)])
        else:
            self.series.clear_trends()
        self.chart.refresh(force=True)

    def _on_candle_tapped(self, candle: CandlePoint) -> None:
        self.statusBar().showMessage(f'Selected {candle}', 5000)

    def _on_candle_resized(self, width: float) -> None:
        self.statusBar().showMessage(f'Each candle is {width:.2f}px wide', 2000)

    def _export_chart_png(self) -> None:
        default_path = os.path.join(os.path.expanduser('~'), 'interactive_chart.png')
        path, _ = QFileDialog.getSaveFileName(
            self,
            'Export Chart as PNG',
            default_path,
            'PNG Image (*.png)',
        )
        if not path:
            return
        if not path.lower().endswith('.png'):
            path = f'{path}.png'
        if not self.chart.grab().save(path, 'PNG'):
            self.error_dock.append_error(f'Could not write {path}')
            self.error_dock.show()

    def _save_layout(self) -> None:
        self._settings.setValue('geometry', self.saveGeometry())
        self._settings.setValue('windowState', self.saveState())
        self._settings.setValue('darkMode', self._dark_mode)

    def _restore_layout(self) -> None:
        geometry = self._settings.value('geometry')
        window_state = self._settings.value('windowState')
        if geometry is not None:
            self.restoreGeometry(geometry)
        if window_state is not None:
            self.restoreState(window_state)

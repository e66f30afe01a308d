from __future__ import annotations

import sys
from pathlib import Path
from typing import Callable, Optional

from PyQt5 import QtCore, QtGui, QtWidgets
from qfluentwidgets import (
    FluentIcon,
    FluentWindow,
    InfoBar,
    LineEdit,
    NavigationItemPosition,
    PlainTextEdit,
    PrimaryPushButton,
    PushButton,
    ScrollArea,
    SpinBox,
    setTheme,
    setThemeColor,
    Theme,
)

from graphblast.graph import NodeGraph
from graphblast.gui.result_tables import HitsTable, QueriesTable
from graphblast.gui.theme import (
    BASE_FONT_SIZE,
    CONTROL_HEIGHT,
    DEFAULT_BROWSE_DIR,
    FONT_CANDIDATES,
    HERO_FONT_SIZE,
    ICON_SIZE,
    PANEL_PADDING,
    WIDGET_FONT_SIZE,
    WINDOW_HEIGHT,
    WINDOW_WIDTH,
)
from graphblast.pipeline import SEARCH_STAGE, SearchPipeline, StageKind, StageResult
from graphblast.session import SearchSession, SessionEvent
from graphblast.settings import SearchSettings
from graphblast.state import WorkflowState
from graphblast.workspace import SearchWorkspace

TICK = "✔"


# -----------------------------
# Workers
# -----------------------------


class StageWorker(QtCore.QThread):
    """Runs one blocking pipeline stage off the GUI thread."""

    log = QtCore.pyqtSignal(str)
    done = QtCore.pyqtSignal(object)
    failed = QtCore.pyqtSignal(str)

    def __init__(self, stage: Callable[[], StageResult], parent: Optional[QtCore.QObject] = None):
        super().__init__(parent)
        self.stage = stage

    def run(self) -> None:
        try:
            result = self.stage()
            if result.cmd:
                self.log.emit(f"Command: {result.cmd}")
            self.done.emit(result)
        except Exception as exc:  # pragma: no cover
            self.failed.emit(str(exc))


class BuildDatabaseWorker(StageWorker):
    def __init__(self, pipeline: SearchPipeline, parent: Optional[QtCore.QObject] = None):
        super().__init__(pipeline.build_database, parent)


class BlastSearchWorker(StageWorker):
    def __init__(self, pipeline: SearchPipeline, parameters: str, parent: Optional[QtCore.QObject] = None):
        super().__init__(lambda: pipeline.run_search(parameters), parent)


class SessionBridge(QtCore.QObject):
    """Re-emits session events on the GUI thread; sessions notify from whichever thread mutated them."""

    changed = QtCore.pyqtSignal(object)

    def __call__(self, event: SessionEvent) -> None:
        self.changed.emit(event)


# -----------------------------
# UI widgets
# -----------------------------


class LogConsole(QtWidgets.QTextEdit):
    def __init__(self, parent: Optional[QtWidgets.QWidget] = None):
        super().__init__(parent)
        self.setReadOnly(True)
        self.setMinimumHeight(140)
        font = QtGui.QFont()
        font.setPointSize(WIDGET_FONT_SIZE)
        self.setFont(font)

    def write(self, msg: str) -> None:
        self.append(msg)
        self.verticalScrollBar().setValue(self.verticalScrollBar().maximum())


class EnterQueryDialog(QtWidgets.QDialog):
    """Name plus pasted sequence for one query; OK stays disabled until both are filled."""

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None):
        super().__init__(parent)
        self.setWindowTitle("Enter BLAST query")
        self.resize(int(WINDOW_WIDTH * 0.4), int(WINDOW_HEIGHT * 0.4))

        layout = QtWidgets.QFormLayout(self)
        self.name_edit = LineEdit(self)
        self.name_edit.setPlaceholderText("query name")
        self.seq_edit = PlainTextEdit(self)
        self.seq_edit.setPlaceholderText("nucleotide sequence")
        layout.addRow("Name", self.name_edit)
        layout.addRow("Sequence", self.seq_edit)

        buttons = QtWidgets.QDialogButtonBox(
            QtWidgets.QDialogButtonBox.Ok | QtWidgets.QDialogButtonBox.Cancel, parent=self
        )
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        layout.addRow(buttons)
        self.ok_btn = buttons.button(QtWidgets.QDialogButtonBox.Ok)
        self.name_edit.textChanged.connect(self._update_ok)
        self.seq_edit.textChanged.connect(self._update_ok)
        self._update_ok()

    def name(self) -> str:
        return self.name_edit.text().strip()

    def sequence(self) -> str:
        # pasted sequences often carry line breaks
        return "".join(self.seq_edit.toPlainText().split())

    def _update_ok(self) -> None:
        self.ok_btn.setEnabled(bool(self.name()) and bool(self.sequence()))


class BlastSearchPage(QtWidgets.QWidget):
    """
    Four-step search: open graph nodes, build the database, add queries, run blastn.
    Controls are enabled from the session's workflow state.
    """

    def __init__(self, settings: SearchSettings, parent: Optional[QtWidgets.QWidget] = None):
        super().__init__(parent)
        self.setObjectName("blastSearchPage")
        self.settings = settings
        self.session: Optional[SearchSession] = None
        self.pipeline: Optional[SearchPipeline] = None
        self.worker: Optional[StageWorker] = None
        self.bridge = SessionBridge(self)
        self.bridge.changed.connect(self._on_session_event)

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(PANEL_PADDING, PANEL_PADDING, PANEL_PADDING, PANEL_PADDING)
        layout.setSpacing(PANEL_PADDING)

        graph_row = QtWidgets.QHBoxLayout()
        graph_row.addWidget(QtWidgets.QLabel("Graph nodes FASTA"))
        self.graph_edit = LineEdit(self)
        self.graph_edit.setReadOnly(True)
        graph_row.addWidget(self.graph_edit, 1)
        self.graph_btn = PrimaryPushButton("Open", self, icon=FluentIcon.FOLDER)
        self.graph_btn.clicked.connect(self._browse_graph)
        graph_row.addWidget(self.graph_btn)
        layout.addLayout(graph_row)

        self.step1_label = self._step_label("Step 1: build the BLAST database")
        layout.addWidget(self.step1_label)
        step1_row = QtWidgets.QHBoxLayout()
        self.build_btn = PrimaryPushButton("Build BLAST database", self, icon=FluentIcon.LIBRARY)
        self.build_btn.clicked.connect(self.build_database)
        step1_row.addWidget(self.build_btn)
        step1_row.addWidget(QtWidgets.QLabel("Allowed time (s)"))
        self.timeout_spin = SpinBox(self)
        self.timeout_spin.setRange(1, 86400)
        self.timeout_spin.setValue(settings.timeout_seconds)
        step1_row.addWidget(self.timeout_spin)
        step1_row.addStretch(1)
        layout.addLayout(step1_row)

        self.step2_label = self._step_label("Step 2: load queries")
        layout.addWidget(self.step2_label)
        step2_row = QtWidgets.QHBoxLayout()
        self.load_btn = PushButton("Load queries from FASTA", self, icon=FluentIcon.DOCUMENT)
        self.load_btn.clicked.connect(self._load_queries)
        self.enter_btn = PushButton("Enter query", self, icon=FluentIcon.EDIT)
        self.enter_btn.clicked.connect(self._enter_query)
        self.clear_btn = PushButton("Clear queries", self, icon=FluentIcon.DELETE)
        self.clear_btn.clicked.connect(self._clear_queries)
        step2_row.addWidget(self.load_btn)
        step2_row.addWidget(self.enter_btn)
        step2_row.addWidget(self.clear_btn)
        step2_row.addStretch(1)
        layout.addLayout(step2_row)
        self.queries_table = QueriesTable(self)
        layout.addWidget(self.queries_table, 1)

        self.step3_label = self._step_label("Step 3: run the BLAST search")
        layout.addWidget(self.step3_label)
        step3_row = QtWidgets.QHBoxLayout()
        step3_row.addWidget(QtWidgets.QLabel("Parameters"))
        self.params_edit = LineEdit(self)
        self.params_edit.setPlaceholderText("extra blastn arguments, e.g. -evalue 0.01")
        self.params_edit.setText(settings.blast_parameters)
        step3_row.addWidget(self.params_edit, 1)
        self.search_btn = PrimaryPushButton("Run BLAST search", self, icon=FluentIcon.SEARCH)
        self.search_btn.clicked.connect(self.run_search)
        step3_row.addWidget(self.search_btn)
        self.cancel_btn = PushButton("Cancel", self, icon=FluentIcon.CLOSE)
        self.cancel_btn.clicked.connect(self._cancel)
        step3_row.addWidget(self.cancel_btn)
        layout.addLayout(step3_row)

        self.hits_label = self._step_label("BLAST hits")
        layout.addWidget(self.hits_label)
        self.hits_table = HitsTable(self)
        layout.addWidget(self.hits_table, 2)

        self.log = LogConsole(self)
        layout.addWidget(self.log)

        self._apply_state()

    def _step_label(self, text: str) -> QtWidgets.QLabel:
        label = QtWidgets.QLabel(text)
        font = label.font()
        font.setPointSize(HERO_FONT_SIZE)
        label.setFont(font)
        label.setProperty("baseText", text)
        return label

    # -- session wiring ------------------------------------------------------

    def open_graph(self, path: Path) -> None:
        try:
            graph = NodeGraph.from_fasta(path)
        except (OSError, ValueError) as exc:
            InfoBar.error("Failed to read graph", str(exc), parent=self)
            return
        if self.session is not None:
            self.session.unsubscribe(self.bridge)
            self.session.close()
        self.session = SearchSession(graph, SearchWorkspace(self.settings.temp_dir))
        self.session.subscribe(self.bridge)
        self.pipeline = SearchPipeline(self.session, self.settings, say=self.log.write)
        self.graph_edit.setText(str(path))
        self.log.write(f"Loaded {len(graph):,} nodes from {path}")
        self._refresh_tables()
        self._apply_state()

    def _on_session_event(self, event: SessionEvent) -> None:
        if event in (SessionEvent.QUERIES_CHANGED, SessionEvent.HITS_CHANGED):
            self._refresh_tables()
        self._apply_state()

    def _refresh_tables(self) -> None:
        if self.session is None:
            self.queries_table.show_queries([])
            self.hits_table.show_hits([])
            return
        self.queries_table.show_queries(self.session.queries())
        self.hits_table.show_hits(self.session.hits())

    def _apply_state(self) -> None:
        state = self.session.state if self.session else None
        running = self.worker is not None and self.worker.isRunning()
        step = state.value if state else 0
        has_session = self.session is not None

        self.graph_btn.setEnabled(not running)
        self.build_btn.setEnabled(has_session and not running)
        self.timeout_spin.setEnabled(not running)
        self.load_btn.setEnabled(step >= WorkflowState.DATABASE_READY.value and not running)
        self.enter_btn.setEnabled(step >= WorkflowState.DATABASE_READY.value and not running)
        self.clear_btn.setEnabled(step >= WorkflowState.QUERIES_LOADED.value and not running)
        self.params_edit.setEnabled(step >= WorkflowState.QUERIES_LOADED.value and not running)
        self.search_btn.setEnabled(step >= WorkflowState.QUERIES_LOADED.value and not running)
        self.cancel_btn.setEnabled(running)
        self.hits_table.setEnabled(step == WorkflowState.RESULTS_AVAILABLE.value)

        for label, done_at in (
            (self.step1_label, WorkflowState.DATABASE_READY.value),
            (self.step2_label, WorkflowState.QUERIES_LOADED.value),
            (self.step3_label, WorkflowState.RESULTS_AVAILABLE.value),
        ):
            base = label.property("baseText")
            label.setText(f"{base}  {TICK}" if step >= done_at else base)

    # -- actions -------------------------------------------------------------

    def _browse_graph(self) -> None:
        start = self.settings.remembered_path or DEFAULT_BROWSE_DIR
        path, _ = QtWidgets.QFileDialog.getOpenFileName(
            self,
            "Open graph nodes FASTA",
            directory=str(start) if start else "",
            filter="FASTA (*.fa *.fasta *.fna);;All (*)",
        )
        if path:
            self.settings.remember_directory(Path(path))
            self.open_graph(Path(path))

    def _load_queries(self) -> None:
        if self.session is None:
            return
        start = self.settings.remembered_path or DEFAULT_BROWSE_DIR
        path, _ = QtWidgets.QFileDialog.getOpenFileName(
            self,
            "Load queries FASTA",
            directory=str(start) if start else "",
            filter="FASTA (*.fa *.fasta *.fna *.fq *.fastq);;All (*)",
        )
        if not path:
            return
        try:
            added = self.session.load_queries_from_fasta(Path(path))
        except (OSError, ValueError) as exc:
            InfoBar.error("Failed to read queries", str(exc), parent=self)
            return
        self.settings.remember_directory(Path(path))
        self.log.write(f"Loaded {len(added):,} queries from {path}")

    def _enter_query(self) -> None:
        if self.session is None:
            return
        dialog = EnterQueryDialog(self)
        if dialog.exec_() != QtWidgets.QDialog.Accepted:
            return
        query = self.session.add_query(dialog.name(), dialog.sequence())
        self.log.write(f"Added query {query.name} ({query.length:,} bp)")

    def _clear_queries(self) -> None:
        if self.session is not None:
            self.session.clear_queries()

    def _cancel(self) -> None:
        if self.pipeline is not None and self.pipeline.cancel():
            self.log.write("Cancelling...")

    def build_database(self) -> None:
        if self.pipeline is None:
            return
        self.settings.timeout_seconds = self.timeout_spin.value()
        self._start_worker(BuildDatabaseWorker(self.pipeline), "Building BLAST database...")

    def run_search(self) -> None:
        if self.pipeline is None:
            return
        self.settings.timeout_seconds = self.timeout_spin.value()
        self._start_worker(
            BlastSearchWorker(self.pipeline, self.params_edit.text()), "Running BLAST search..."
        )

    def _start_worker(self, worker: StageWorker, message: str) -> None:
        if self.worker and self.worker.isRunning():
            InfoBar.info("Running", "A BLAST process is already running.", parent=self)
            return
        self.worker = worker
        worker.log.connect(self.log.write)
        worker.done.connect(self._stage_done)
        worker.failed.connect(lambda err: InfoBar.error("BLAST failed", err, parent=self))
        worker.finished.connect(self._apply_state)
        self.log.write(message)
        worker.start()
        self._apply_state()

    def _stage_done(self, result: StageResult) -> None:
        if result.kind is StageKind.SUCCESS:
            InfoBar.success("Done", result.message, parent=self)
        elif result.kind is StageKind.NO_HITS:
            InfoBar.info("No hits", result.message, parent=self)
        else:
            InfoBar.warning("Error", result.message, duration=8000, parent=self)
        if result.ok and result.stage == SEARCH_STAGE:
            self.params_edit.setText(self.settings.blast_parameters)


# -----------------------------
# Main window
# -----------------------------


class GraphBlastWindow(FluentWindow):
    def __init__(self, nodes_fasta: Optional[Path] = None, settings: Optional[SearchSettings] = None):
        super().__init__()
        base_font = apply_theme(self)
        self.settings = settings or SearchSettings()
        self.setWindowTitle("GraphBlast")
        self.resize(WINDOW_WIDTH, WINDOW_HEIGHT)

        self.search_widget = BlastSearchPage(self.settings)
        self.search_page = self._wrap_page(self.search_widget)
        self._apply_font_and_size(self.search_widget, base_font)
        self.addSubInterface(
            self.search_page,
            FluentIcon.SEARCH,
            "BLAST search",
            position=NavigationItemPosition.TOP,
        )
        self.stackedWidget.setCurrentWidget(self.search_page)
        if nodes_fasta is not None:
            self.search_widget.open_graph(Path(nodes_fasta))

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:  # type: ignore[override]
        page = self.search_widget
        if page.pipeline is not None:
            page.pipeline.cancel()
        if page.worker is not None:
            page.worker.wait()
        if page.session is not None:
            page.session.close()
        super().closeEvent(event)

    def _apply_font_and_size(self, widget: QtWidgets.QWidget, font: QtGui.QFont) -> None:
        """Ensure controls inherit scaled font and reasonable heights."""
        for child in widget.findChildren(QtWidgets.QWidget):
            if isinstance(child, QtWidgets.QLabel) and child.property("baseText"):
                continue
            child.setFont(font)
            if isinstance(child, QtWidgets.QAbstractButton):
                child.setMinimumHeight(CONTROL_HEIGHT)
                icon_dim = min(ICON_SIZE, max(16, CONTROL_HEIGHT - 8))
                child.setIconSize(QtCore.QSize(icon_dim, icon_dim))
            elif isinstance(child, (LineEdit, SpinBox)):
                child.setMinimumHeight(CONTROL_HEIGHT)

    def _wrap_page(self, widget: QtWidgets.QWidget) -> ScrollArea:
        """Wrap page with a scroll area so full-screen/resize keeps layout intact."""
        area = ScrollArea(self)
        area.setWidgetResizable(True)
        area.setWidget(widget)
        area.setObjectName(widget.objectName() or "page")
        return area


def apply_theme(window: FluentWindow) -> QtGui.QFont:
    setTheme(Theme.LIGHT)
    setThemeColor(QtGui.QColor("#0f766e"))
    available = {f.lower() for f in QtGui.QFontDatabase().families()}
    chosen = next((c for c in FONT_CANDIDATES if c.lower() in available), "Segoe UI")
    base_font = QtGui.QFont(chosen, BASE_FONT_SIZE)
    app = QtWidgets.QApplication.instance()
    if app:
        app.setFont(base_font)
    return base_font


def launch(nodes_fasta: Optional[Path] = None) -> None:
    app = QtWidgets.QApplication.instance()
    if app is None:
        QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_EnableHighDpiScaling, True)
        QtWidgets.QApplication.setAttribute(QtCore.Qt.AA_UseHighDpiPixmaps, True)
        app = QtWidgets.QApplication(sys.argv)
    window = GraphBlastWindow(nodes_fasta)
    window.show()
    sys.exit(app.exec_())


if __name__ == "__main__":  # pragma: no cover
    launch()

from __future__ import annotations

from typing import List, Sequence

from PyQt5 import QtCore, QtWidgets

from graphblast.gui.theme import WIDGET_FONT_SIZE
from graphblast.hits import HIT_TABLE_HEADERS, Hit
from graphblast.queries import QUERY_TABLE_HEADERS, Query


class _ReadOnlyTable(QtWidgets.QTableWidget):
    """Stretching, non-editable table filled from rows of strings."""

    right_aligned: Sequence[int] = ()

    def __init__(self, headers: List[str], parent: QtWidgets.QWidget | None = None):
        super().__init__(parent)
        self.setColumnCount(len(headers))
        self.setHorizontalHeaderLabels(headers)
        self.horizontalHeader().setSectionResizeMode(QtWidgets.QHeaderView.Stretch)
        self.verticalHeader().setVisible(False)
        self.setEditTriggers(QtWidgets.QAbstractItemView.NoEditTriggers)
        self.setAlternatingRowColors(True)
        font = self.font()
        font.setPointSize(WIDGET_FONT_SIZE)
        self.setFont(font)

    def set_rows(self, rows: List[List[str]]) -> None:
        self.setRowCount(len(rows))
        for row, values in enumerate(rows):
            for col, val in enumerate(values):
                item = QtWidgets.QTableWidgetItem(str(val))
                if col in self.right_aligned:
                    item.setTextAlignment(QtCore.Qt.AlignRight | QtCore.Qt.AlignVCenter)
                self.setItem(row, col, item)


class QueriesTable(_ReadOnlyTable):
    right_aligned = (1, 2)

    def __init__(self, parent: QtWidgets.QWidget | None = None):
        super().__init__(QUERY_TABLE_HEADERS, parent)

    def show_queries(self, queries: List[Query]) -> None:
        self.set_rows([q.table_row() for q in queries])


class HitsTable(_ReadOnlyTable):
    right_aligned = (0, 1, 2, 3, 5, 6)

    def __init__(self, parent: QtWidgets.QWidget | None = None):
        super().__init__(HIT_TABLE_HEADERS, parent)

    def show_hits(self, hits: List[Hit]) -> None:
        self.set_rows([h.table_row() for h in hits])

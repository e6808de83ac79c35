from typing import List, Optional

from rich.console import Console
from rich.table import Table

from ecsweep.sweep import ConfigurationResult


class ReportAggregator:
    """Collects one row per configuration, in sweep order, and renders them."""

    def __init__(self, show_read_quorum: bool = False):
        self.show_read_quorum = show_read_quorum
        self.rows: List[ConfigurationResult] = []

    def add(self, result: ConfigurationResult):
        self.rows.append(result)

    def extend(self, results):
        for result in results:
            self.add(result)

    def build_table(self) -> Table:
        table = Table(show_header=True)
        table.add_column("Data Shards", justify="right")
        table.add_column("Parity Shards", justify="right")
        table.add_column("Storage Usage Ratio", justify="right")
        if self.show_read_quorum:
            table.add_column("Read Quorum", justify="right")

        for row in self.rows:
            cells = [str(row.data_shards), str(row.parity_shards), row.display_ratio]
            if self.show_read_quorum:
                cells.append("" if row.read_quorum is None else str(row.read_quorum))
            table.add_row(*cells)
        return table

    def render(self, console: Optional[Console] = None):
        console = console or Console()
        console.print(self.build_table())

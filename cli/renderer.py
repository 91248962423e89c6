"""
Slab Reader Renderer
====================
Formats order book query results as aligned ASCII tables.

Features:
  - L2 levels, raw orders and key/value summaries
  - Auto-column-width with configurable max
  - Modes: table, raw
  - Errors rendered with a classification prefix
"""

import sys
from typing import Any, Dict, Iterable, List, Optional, TextIO

from critbit.keys import price_from_key, sequence_from_key
from critbit.queries import PriceLevel
from slab.node import LeafNode

LEVEL_COLUMNS = ["price", "quantity"]
ORDER_COLUMNS = ["price", "sequence", "quantity", "callback_info"]


class Renderer:
    """ASCII renderer for levels, orders and summaries."""

    def __init__(self, output: TextIO = None):
        self.output = output or sys.stdout
        self.mode: str = "table"        # table, raw
        self.show_headers: bool = True
        self.max_col_width: int = 66

    # ─── Public API ─────────────────────────────────────────────────

    def render_levels(self, levels: Iterable[PriceLevel]) -> int:
        rows = [{"price": lvl.price, "quantity": lvl.quantity} for lvl in levels]
        return self.render_rows(rows, LEVEL_COLUMNS)

    def render_orders(self, leaves: Iterable[LeafNode]) -> int:
        rows = [self._order_row(leaf) for leaf in leaves]
        return self.render_rows(rows, ORDER_COLUMNS)

    def render_summary(self, values: Dict[str, Any]):
        """Render key: value pairs, keys right-aligned."""
        width = max((len(k) for k in values), default=0)
        for key, value in values.items():
            self._print(f"{key:>{width}}: {self._format_value(value)}")

    def render_rows(self, rows: List[Dict[str, Any]], column_names: List[str]) -> int:
        """Render rows. Returns number of rows rendered."""
        if self.mode == "raw":
            count = self._render_raw(rows, column_names)
        else:
            count = self._render_table(rows, column_names)
        self._print(f"\n{count} row(s)")
        return count

    def render_message(self, message: str):
        if message:
            self._print(message)

    def render_error(self, error: Exception):
        """Render an error with classification prefix."""
        prefix = self._classify_error(type(error).__name__)
        self._print(f"{prefix}: {error}")

    # ─── Table Mode ─────────────────────────────────────────────────

    def _render_table(self, rows: List[Dict[str, Any]], headers: List[str]) -> int:
        widths = self._calculate_widths(headers, rows)

        if self.show_headers:
            self._print_table_separator(widths, headers)
            self._print_table_row(widths, headers, {h: h for h in headers})
            self._print_table_separator(widths, headers)

        for vals in rows:
            self._print_table_row(widths, headers, vals)

        if self.show_headers and rows:
            self._print_table_separator(widths, headers)

        return len(rows)

    def _calculate_widths(self, headers: List[str], rows: List[Dict]) -> Dict[str, int]:
        widths = {h: min(len(h), self.max_col_width) for h in headers}
        for row in rows:
            for h in headers:
                val = self._format_value(row.get(h))
                widths[h] = max(widths[h], min(len(val), self.max_col_width))
        return widths

    def _print_table_separator(self, widths: Dict[str, int], headers: List[str]):
        """Print +----+------+ separator line."""
        parts = ["+"]
        for h in headers:
            parts.append("-" * (widths[h] + 2) + "+")
        self._print("".join(parts))

    def _print_table_row(self, widths: Dict[str, int], headers: List[str], vals: Dict):
        parts = ["|"]
        for h in headers:
            raw_val = vals.get(h)
            val_str = self._format_value(raw_val)
            if len(val_str) > self.max_col_width:
                val_str = val_str[:self.max_col_width - 3] + "..."
            w = widths[h]
            # Right-align numbers, left-align everything else
            if isinstance(raw_val, int):
                parts.append(f" {val_str:>{w}} |")
            else:
                parts.append(f" {val_str:<{w}} |")
        self._print("".join(parts))

    # ─── Raw Mode ───────────────────────────────────────────────────

    def _render_raw(self, rows: List[Dict[str, Any]], headers: List[str]) -> int:
        """Values separated by pipes, no formatting."""
        if self.show_headers:
            self._print("|".join(headers))
        for vals in rows:
            self._print("|".join(self._format_value(vals.get(h)) for h in headers))
        return len(rows)

    # ─── Helpers ────────────────────────────────────────────────────

    def _order_row(self, leaf: LeafNode) -> Dict[str, Any]:
        return {
            "price": price_from_key(leaf.key),
            "sequence": sequence_from_key(leaf.key),
            "quantity": leaf.asset_quantity,
            "callback_info": leaf.callback_info,
        }

    def _format_value(self, value) -> str:
        if value is None:
            return "-"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (bytes, bytearray)):
            return value.hex()
        return str(value)

    def _classify_error(self, error_type: str) -> str:
        """Map error class name to user-friendly prefix."""
        mapping = {
            "StructuralCorruptionError": "CorruptSlab",
            "UninitializedSlotError": "CorruptSlab",
            "UnrecognizedNodeTagError": "CorruptSlab",
            "BufferUnderrunError": "TruncatedData",
            "FileNotFoundError": "IOError",
            "OSError": "IOError",
            "ValueError": "InvalidInput",
            "KeyboardInterrupt": "Interrupted",
        }
        return mapping.get(error_type, f"Error[{error_type}]")

    def _print(self, text: str):
        print(text, file=self.output)

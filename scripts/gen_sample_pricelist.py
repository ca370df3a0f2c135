#!/usr/bin/env python3
"""Sample price list generator for manual and performance testing.

Generates synthetic extracted rows the way the extraction service returns
them: column names drift between suppliers ("Pattern" vs "Model", "Net Rate"
vs "Dealer Rate"), some lists carry a serial number column, prices come as
formatted text ("₹1,234.00") or plain numbers.

Output format is chosen from the file suffix:
- .json  list of row objects (same shape as the structured export)
- .csv / .xlsx  one header row + data rows
- .txt   paste format: brand, model, type, dp, mrp per line
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

BRANDS = ["MRF", "CEAT", "Apollo", "JK Tyre", "Bridgestone", "Michelin"]
PATTERNS = ["CZAR", "ZLX", "Milaze", "Alnac", "Ecopia", "Energy XM2", "Wanderer", "Amazer"]
TYPES = ["Tubeless", "Tube Type", "Radial", "Bias"]

# 列名ゆらぎのバリエーション (brand, model, type, dp, mrp)
HEADER_STYLES: dict[str, tuple[str, str, str, str, str]] = {
    "canonical": ("brand", "model", "type", "dp", "mrp"),
    "title": ("Brand", "Model", "Type", "DP", "MRP"),
    "supplier_a": ("Brand", "Pattern", "Category", "Dealer Rate", "List Price"),
    "supplier_b": ("BRAND", "Item Description", "TYPE", "Net Rate", "MRP (Rs)"),
}


def generate_rows(
    rows: int,
    style: str = "title",
    seed: int = 42,
    serial_column: bool = False,
    formatted_prices: bool = False,
) -> list[dict[str, Any]]:
    """Generate synthetic extracted rows.

    Args:
        rows: Number of rows
        style: One of HEADER_STYLES
        seed: Random seed for reproducible data
        serial_column: Prepend a "Sr No" column
        formatted_prices: Render prices as "₹1,234.00" text instead of numbers
    """
    rng = np.random.default_rng(seed)
    brand_col, model_col, type_col, dp_col, mrp_col = HEADER_STYLES[style]

    mrp = np.round(rng.uniform(1500, 25000, rows), 0)
    dp = np.round(mrp * rng.uniform(0.78, 0.92, rows), 0)
    sizes = rng.choice(["145/80 R12", "165/80 R14", "185/65 R15", "205/55 R16", "215/60 R17"], rows)

    result: list[dict[str, Any]] = []
    for i in range(rows):
        row: dict[str, Any] = {}
        if serial_column:
            row["Sr No"] = i + 1
        row[brand_col] = str(rng.choice(BRANDS))
        row[model_col] = f"{rng.choice(PATTERNS)} {sizes[i]}"
        row[type_col] = str(rng.choice(TYPES))
        if formatted_prices:
            row[dp_col] = f"₹{dp[i]:,.2f}"
            row[mrp_col] = f"₹{mrp[i]:,.2f}"
        else:
            row[dp_col] = float(dp[i])
            row[mrp_col] = float(mrp[i])
        result.append(row)
    return result


def write_rows(rows: list[dict[str, Any]], output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    suffix = output.suffix.lower()
    if suffix == ".json":
        output.write_text(json.dumps(rows, indent=2, ensure_ascii=False), encoding="utf-8")
    elif suffix == ".csv":
        pd.DataFrame(rows).to_csv(output, index=False)
    elif suffix == ".xlsx":
        pd.DataFrame(rows).to_excel(output, index=False, engine="openpyxl")
    elif suffix == ".txt":
        lines = []
        for row in rows:
            values = [v for k, v in row.items() if k != "Sr No"]
            # 貼り付け形式ではカンマ区切りなので価格は数値のまま
            lines.append(",".join(str(v).replace(",", "") for v in values))
        output.write_text("\n".join(lines) + "\n", encoding="utf-8")
    else:
        raise ValueError(f"unsupported output type '{suffix}'")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic price list rows",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # 200 rows in supplier A's column naming, with a serial column
  %(prog)s samples/supplier_a.json --rows 200 --style supplier_a --serial

  # Paste-format text file
  %(prog)s samples/paste.txt --rows 20
        """,
    )
    parser.add_argument("output", type=Path, help="Output file (.json, .csv, .xlsx or .txt)")
    parser.add_argument("--rows", type=int, default=100, help="Number of rows (default: 100)")
    parser.add_argument("--style", choices=sorted(HEADER_STYLES), default="title", help="Column naming")
    parser.add_argument("--serial", action="store_true", help="Add a 'Sr No' column")
    parser.add_argument("--formatted-prices", action="store_true", help="Render prices as currency text")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1

    rows = generate_rows(
        args.rows,
        style=args.style,
        seed=args.seed,
        serial_column=args.serial,
        formatted_prices=args.formatted_prices,
    )
    try:
        write_rows(rows, args.output)
    except (ValueError, OSError) as e:
        print(f"Error writing {args.output}: {e}", file=sys.stderr)
        return 1
    print(f"Created {args.output} ({len(rows)} rows, style={args.style})")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

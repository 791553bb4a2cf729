#!/usr/bin/env python3
"""
Results Viewer - Readable display of file profiles and compiled charts
"""

import json
import sys
from pathlib import Path


def print_header(text: str, char: str = "="):
    """Print a formatted header."""
    print(f"\n{char * 80}")
    print(f"  {text}")
    print(f"{char * 80}")


def print_column(name: str, column: dict):
    kind = column.get("kind", "unknown")
    if kind == "numeric":
        detail = (
            f"min {column.get('min')}  max {column.get('max')}  "
            f"mean {column.get('mean')}  median {column.get('median')}  std {column.get('std_dev')}"
        )
    elif kind == "categorical":
        examples = ", ".join(column.get("example_values") or [])
        detail = f"{column.get('unique_count')} distinct, e.g. {examples}"
    else:
        detail = "no values"
    print(f"   {name:25s} [{kind:11s}] {detail}")


def print_file_analysis(result: dict):
    """Print the profile and charts for a single file."""
    file_path = result.get("file_path", "Unknown")

    print(f"\n{'─' * 80}")
    print(f"📊 FILE: {file_path}")
    print(f"{'─' * 80}")

    if result.get("status") == "error":
        print(f"❌ Status: FAILED")
        print(f"Error: {result.get('error', 'Unknown error')}")
        return

    profile = result.get("profile", {})
    print(f"✅ Rows: {profile.get('row_count', 0)}")

    columns = profile.get("columns", {})
    if columns:
        print(f"\n📋 Columns ({len(columns)}):")
        for name in profile.get("column_names", []):
            print_column(name, columns.get(name, {}))

    charts = result.get("charts", [])
    if charts:
        print(f"\n📈 Charts ({len(charts)}):")
        for chart in charts:
            if "error" in chart:
                print(f"   ⚠️ {chart['error']}")
                continue
            series = ", ".join(chart.get("seriesKeys", [])) or "-"
            print(f"   {chart.get('title', 'Chart')}: {chart.get('type')} of {chart.get('xKey')} by {series}"
                  f" ({len(chart.get('data', []))} points)")


def main():
    """Main viewer."""
    results_file = Path(sys.argv[1] if len(sys.argv) > 1 else "analysis_results.json")

    if not results_file.exists():
        print(f"❌ Error: {results_file} not found!")
        print("   Please run analyze_files.py first.")
        return 1

    with open(results_file) as f:
        data = json.load(f)

    results = data.get("results", [])
    successful = [r for r in results if r.get("status") == "success"]

    print_header("📊 TABULAR FILE ANALYSIS RESULTS", "█")
    print(f"\n📈 Summary:")
    print(f"   Total Files: {len(results)}")
    print(f"   ✅ Successful: {len(successful)}")
    print(f"   ❌ Failed: {len(results) - len(successful)}")

    print_header("DETAILED FILE ANALYSIS")
    for result in results:
        print_file_analysis(result)

    print(f"\n{'=' * 80}")
    print(f"  ✨ Analysis Complete - {len(successful)}/{len(results)} files processed successfully")
    print(f"{'=' * 80}\n")

    return 0


if __name__ == "__main__":
    sys.exit(main())
